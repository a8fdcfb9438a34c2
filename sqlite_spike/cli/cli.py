#!/usr/bin/env python3
"""
Command-line interface for the scenario harness.
"""
import argparse
from typing import List, Optional

from sqlite_spike.consts.ScenarioType import ScenarioType


def build_env_parser(description: Optional[str] = None) -> argparse.ArgumentParser:
    """
    Create an ArgumentParser with the common --env option.

    Args:
        description: Optional parser description shown in CLI help.

    Returns:
        argparse.ArgumentParser: parser preconfigured with the --env argument.
    """
    parser = argparse.ArgumentParser(description=description)
    parser.add_argument(
        "--env",
        type=str,
        default=None,
        help=(
            "Environment name for configuration override (e.g., 'dev', 'ci'). "
            "Loads config_<env>.yaml in addition to the base config.yaml."
        ),
    )
    return parser


def build_scenario_parser() -> argparse.ArgumentParser:
    parser = build_env_parser("Measure SQLite file size and schema/insert latency")
    parser.add_argument("--scenario", action="append", default=None,
                        choices=[s.value for s in ScenarioType],
                        help="Scenario to run; repeat to run several (default: scenarios from config)")
    parser.add_argument("--batch-size", action="append", type=int, default=None,
                        help="Bulk insert size for the batch scenario; repeat to sweep (default: batch_sizes from config)")
    parser.add_argument("--base-dir", type=str, default=None,
                        help="Directory for scenario database files (default: base_dir from config, else the temp dir)")
    parser.add_argument("--keep-files", action="store_true",
                        help="Keep database files after each scenario")
    return parser


def validate_scenario_args(parser: argparse.ArgumentParser, args: argparse.Namespace) -> None:
    if args.batch_size and any(n < 0 for n in args.batch_size):
        parser.error("--batch-size must be non-negative")


def parse_scenario_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = build_scenario_parser()
    args = parser.parse_args(argv)
    validate_scenario_args(parser, args)
    return args
