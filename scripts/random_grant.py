#!/usr/bin/env python3
"""Draw one random NSF award and print it with its publications."""

import argparse
import logging
import sys
from pathlib import Path

# Ensure project root is on sys.path
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from grantdip.core.config import ExplorerConfig, load_config
from grantdip.core.explorer import GrantReport, random_grant_report
from grantdip.registry.models import SampleRequest

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("random_grant")

DEFAULT_CONFIG = PROJECT_ROOT / "configs" / "nsf.yaml"


def non_negative_int(value: str) -> int:
    """argparse type for amounts; 0 means no minimum."""
    try:
        amount = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not an integer: {value!r}")
    if amount < 0:
        raise argparse.ArgumentTypeError(f"must not be negative: {amount}")
    return amount


# ── Output ───────────────────────────────────────────────────────────


def format_report(report: GrantReport) -> str:
    award = report.award
    lines = [
        f"Award      : {award.id}",
        f"Title      : {award.title}",
        f"Awardee    : {award.awardee_name or 'Unknown'}"
        f" ({award.awardee_city or '?'}, {award.awardee_state_code or '?'})",
        f"PI         : {award.pd_pi_name or 'Unknown'}",
        f"Amount     : ${award.estimated_total_amt or '?'}",
        f"Period     : {award.start_date or '?'} to {award.exp_date or '?'}",
    ]
    if report.summary:
        lines += ["", "In plain language:", report.summary]
    if report.outcomes_report:
        lines += ["", "Outcomes:", report.outcomes_report]
    if report.outcomes_summary:
        lines += ["", "What came of it:", report.outcomes_summary]
    if report.publications:
        lines += ["", f"Publications ({len(report.publications)}):"]
        for i, pub in enumerate(report.publications, 1):
            entry = f"  {i}. {pub.title}"
            if pub.authors:
                entry += f" | {pub.authors}"
            if pub.year:
                entry += f" ({pub.year})"
            if pub.doi:
                entry += f" {pub.doi}"
            lines.append(entry)
    return "\n".join(lines)


# ── CLI ──────────────────────────────────────────────────────────────


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Show one random NSF award")
    parser.add_argument(
        "--config",
        default=str(DEFAULT_CONFIG) if DEFAULT_CONFIG.exists() else None,
        help="Path to a config YAML file",
    )
    parser.add_argument("--min-amount", type=non_negative_int, default=None, help="Minimum award amount (USD)")
    parser.add_argument(
        "--status",
        choices=("any", "active", "completed"),
        default="any",
        help="Restrict to active or completed awards",
    )
    parser.add_argument("--summarize", action="store_true", help="Add plain-language summaries")
    parser.add_argument("--json", action="store_true", help="Print the report as JSON")
    return parser


def main(argv=None):
    args = build_parser().parse_args(argv)

    config = load_config(args.config) if args.config else ExplorerConfig()
    request = SampleRequest(min_amount=args.min_amount or None, status=args.status)

    report = random_grant_report(request, config, summarize=args.summarize)
    if report is None:
        logger.error("No award found")
        sys.exit(1)

    if args.json:
        print(report.model_dump_json(indent=2))
    else:
        print(format_report(report))


if __name__ == "__main__":
    main()
