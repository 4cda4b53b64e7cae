# cli.py
import argparse
import json
import sys
from typing import List, Optional

import yaml

from utils.logger import get_logger, log_stage
from pipeline.engine import EngineConfig, run_pipeline


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="netinput",
        description="Classify network identifiers (IP, MAC, hostname) or VINs and print the settled states as JSON.",
    )
    sub = parser.add_subparsers(dest="mode", required=True)

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("values", nargs="*", help="Values to validate")
    common.add_argument("--input-file", help="File with one value per line ('#' comments allowed)")
    common.add_argument("--output", help="Write JSON results here instead of stdout")
    common.add_argument("--log-level", help="Logger level (defaults to the config value, else INFO)")

    network = sub.add_parser("network", parents=[common], help="Validate IPv4/IPv6/MAC/hostname input")
    network.add_argument("--config", help="Path to validator YAML config")
    network.add_argument("--kinds", help="Allowed kinds: 'all' or a comma list (hostname,ipv4,ipv6,mac_address)")
    network.add_argument("--debounce", type=float, help="Seconds of quiet before a lookup")
    network.add_argument("--timeout", type=float, help="Per-lookup timeout in seconds")
    network.add_argument("--no-resolve", action="store_true", help="Classify only, skip DNS lookups")

    sub.add_parser("vin", parents=[common], help="Validate 17-character VINs")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logger = get_logger("cli", args.log_level or "INFO", "cli.log")
    logger.info("CLI invocation | mode=%s values=%d output=%s", args.mode, len(args.values), args.output)

    values = list(args.values)
    if args.input_file:
        try:
            values.extend(EngineConfig.load_inputs(args.input_file, logger))
        except OSError as e:
            parser.error(f"cannot read --input-file: {e}")
    if not values:
        parser.error("no values given (pass them as arguments or via --input-file)")

    overrides = {"log_level": args.log_level}
    config_path = None
    if args.mode == "network":
        config_path = args.config
        overrides.update(
            allowed_kinds=args.kinds,
            debounce=args.debounce,
            lookup_timeout=args.timeout,
            resolve=False if args.no_resolve else None,
        )
    try:
        settings = EngineConfig.load_settings(config_path, logger, **overrides)
    except (FileNotFoundError, ValueError, yaml.YAMLError) as e:
        logger.error("Unable to load settings: %s", e)
        parser.error(str(e))

    with log_stage(logger, "cli_total"):
        results = run_pipeline(values=values, output=args.output, settings=settings, mode=args.mode)

    if not args.output:
        json.dump(results, sys.stdout, indent=2, ensure_ascii=False)
        sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
