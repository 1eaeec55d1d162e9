"""Run an awakening Monte Carlo batch from the command line."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from awakening_core import (
    MonteCarloSummary,
    ResourceLimits,
    format_number,
    load_house_rules,
    make_config,
    roman,
    run_monte_carlo,
)
from awakening_core.simulation import default_process_count


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("--start", type=int, default=0, help="Starting awakening level.")
    parser.add_argument("--target", type=int, default=9, help="Target awakening level.")
    parser.add_argument(
        "--restoration-from", type=int, default=6, help="Use restoration from this level (0 = never)."
    )
    parser.add_argument("--valks10-from", type=int, default=1)
    parser.add_argument("--valks50-from", type=int, default=3)
    parser.add_argument("--valks100-from", type=int, default=5)
    parser.add_argument("--hepta", action="store_true", help="Use the Hepta path for VII -> VIII.")
    parser.add_argument("--okta", action="store_true", help="Use the Okta path for VIII -> IX.")
    parser.add_argument("--runs", type=int, default=10_000)
    parser.add_argument("--seed", type=int, default=42)
    parser.add_argument("--max-crystals", type=int, default=None)
    parser.add_argument("--max-scrolls", type=int, default=None)
    parser.add_argument("--max-exquisite", type=int, default=None)
    parser.add_argument(
        "--processes",
        type=int,
        default=1,
        help="Worker processes (0 = one per CPU).",
    )
    parser.add_argument("--rules", type=Path, default=None, help="Optional house-rule JSON file.")
    parser.add_argument("-v", "--verbose", action="store_true")
    return parser.parse_args(argv)


def print_summary(summary: MonteCarloSummary) -> None:
    print(f"Runs: {summary.num_simulations:,}  target: +{roman(summary.target_level)}")
    print(f"Success rate: {summary.success_rate * 100:.2f}%")
    print(f"Cost per success: {format_number(summary.expected_cost_per_success)}")
    print()
    print(f"{'Resource':<12} {'Average':>10} {'P50':>10} {'P90':>10} {'P99':>10} {'Worst':>10}")
    print("-" * 67)
    for name, stats in (
        ("Silver", summary.silver),
        ("Crystals", summary.crystals),
        ("Scrolls", summary.scrolls),
        ("Exquisite", summary.exquisite),
        ("Attempts", summary.attempts),
        ("Level drops", summary.level_drops),
        ("Anvil pity", summary.anvil_triggers),
    ):
        print(
            f"{name:<12} {format_number(stats.average):>10} {format_number(stats.p50):>10} "
            f"{format_number(stats.p90):>10} {format_number(stats.p99):>10} "
            f"{format_number(stats.worst):>10}"
        )
    print(f"\nCompleted in {summary.compute_seconds:.2f}s")


def main(argv: Optional[list[str]] = None) -> int:
    args = parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        config = make_config(
            start_level=args.start,
            target_level=args.target,
            restoration_from=args.restoration_from,
            valks10_from=args.valks10_from,
            valks50_from=args.valks50_from,
            valks100_from=args.valks100_from,
            use_hepta=args.hepta,
            use_okta=args.okta,
        )
        limits = ResourceLimits(
            crystals=args.max_crystals,
            scrolls=args.max_scrolls,
            exquisite=args.max_exquisite,
        )
        table = load_house_rules(args.rules)
    except ValueError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    processes = args.processes if args.processes > 0 else default_process_count(args.runs)
    summary = run_monte_carlo(
        config,
        runs=args.runs,
        seed=args.seed,
        limits=None if limits.is_unlimited() else limits,
        processes=processes,
        table=table,
    )
    print_summary(summary)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
