"""
Command-line interface for loadscout.

Loads every module path given on the command line, collects the scenarios
their providers declare, and hands them to the configured load-generation
engine. With no engine configured the dry-run engine lists them instead.

Exit codes:
    0  scenarios handed off (or listed with --list)
    1  engine could not be built or failed
    2  usage or configuration error (including no module paths)
    3  no scenarios found
  130  interrupted
"""

import argparse
import logging
import sys
from dataclasses import replace

from . import __version__
from .aggregator import Aggregator
from .config import (
    LOG_LEVELS,
    Settings,
    load_settings,
    normalize_log_level,
    normalize_trace_exporter,
)
from .engine import handoff, resolve_engine, scenario_name
from .errors import ConfigError, EngineError
from .telemetry import TRACE_EXPORTERS, configure_tracing, create_exporter, shutdown_tracing

EXIT_OK = 0
EXIT_ENGINE_ERROR = 1
EXIT_USAGE = 2
EXIT_NO_SCENARIOS = 3
EXIT_INTERRUPTED = 130

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="loadscout",
        description="Discover load-test scenarios in module files and hand them to a load engine",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Collect scenarios from two modules and run them with the default engine
  loadscout scenarios/checkout.py build/payments.cpython-312-x86_64-linux-gnu.so

  # Only list the scenarios that would run
  loadscout --list scenarios/

  # Use a specific engine and export discovery traces to a collector
  loadscout --engine my_engine.adapter:Engine --trace otlp scenarios/checkout.py
        """,
    )

    parser.add_argument(
        "paths",
        nargs="*",
        metavar="PATH",
        help="Module file or package directory to load (default: modules from the config file)",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="YAML config file (default: $LOADSCOUT_CONFIG or ./loadscout.yaml)",
    )
    parser.add_argument(
        "--engine",
        type=str,
        default=None,
        help="Engine as 'package.module:attribute' or an entry point name (default: dry-run)",
    )
    parser.add_argument(
        "--list",
        action="store_true",
        help="Print the discovered scenario names and exit without running them",
    )
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Logging level (default: INFO)",
    )
    parser.add_argument(
        "--trace",
        type=str.lower,
        choices=TRACE_EXPORTERS,
        default=None,
        help="Export discovery traces (default: none)",
    )
    parser.add_argument(
        "--trace-file",
        type=str,
        default=None,
        help="Output file for --trace file (JSON Lines)",
    )
    parser.add_argument(
        "--endpoint",
        type=str,
        default=None,
        help="OTLP HTTP endpoint for --trace otlp (default: http://localhost:4318)",
    )
    parser.add_argument(
        "--service-name",
        type=str,
        default=None,
        help="Service name reported on traces (default: loadscout)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """Return ``settings`` with command-line flags applied on top."""
    changes: dict = {}
    if args.paths:
        changes["modules"] = tuple(args.paths)
    if args.engine:
        changes["engine"] = args.engine
    if args.log_level:
        changes["log_level"] = normalize_log_level(args.log_level)
    if args.trace:
        changes["trace_exporter"] = normalize_trace_exporter(args.trace)
    if args.trace_file:
        changes["trace_file"] = args.trace_file
        if not args.trace and settings.trace_exporter == "none":
            changes["trace_exporter"] = "file"
    if args.endpoint:
        changes["otlp_endpoint"] = args.endpoint
    if args.service_name:
        changes["service_name"] = args.service_name
    return replace(settings, **changes)


def configure_logging(level: str) -> None:
    """Send loadscout diagnostics to stderr at ``level``."""
    logging.basicConfig(format=_LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("loadscout").setLevel(level)


def cmd_run(settings: Settings, list_only: bool = False) -> int:
    """Discover scenarios and hand them off; return the exit code."""
    engine = None
    if not list_only:
        try:
            engine = resolve_engine(settings.engine)
        except EngineError as e:
            print(f"Error: {e}", file=sys.stderr)
            return EXIT_ENGINE_ERROR

    paths = list(settings.modules)
    print(f"Discovering scenarios in {len(paths)} module path(s)...", file=sys.stderr)

    aggregator = Aggregator()
    scenarios = aggregator.aggregate(paths)
    report = aggregator.report

    for result in report.paths:
        status = f"{result.scenario_count} scenario(s)" if result.loaded else "failed to load"
        print(f"   {result.path}: {status}", file=sys.stderr)
    if report.failures:
        print(f"   Skipped {len(report.failures)} failure(s); see log for details", file=sys.stderr)

    if not scenarios:
        print("No scenarios found", file=sys.stderr)
        return EXIT_NO_SCENARIOS

    if list_only:
        for scenario in scenarios:
            print(scenario_name(scenario))
        return EXIT_OK

    print(
        f"Handing {len(scenarios)} scenario(s) to {type(engine).__name__}",
        file=sys.stderr,
    )
    try:
        handoff(scenarios, engine)
    except Exception as e:
        logger.debug("Engine failure", exc_info=True)
        print(f"\nError: {e}", file=sys.stderr)
        return EXIT_ENGINE_ERROR
    return EXIT_OK


def main(argv: list[str] | None = None):
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args(argv)

    try:
        settings = apply_overrides(load_settings(args.config), args)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(EXIT_USAGE)

    configure_logging(settings.log_level)

    if not settings.modules:
        parser.error("no module paths given (pass PATH arguments or set 'modules' in the config)")

    try:
        exporter = create_exporter(
            settings.trace_exporter,
            file=settings.trace_file,
            endpoint=settings.otlp_endpoint,
        )
    except ValueError as e:
        parser.error(str(e))
    configure_tracing(exporter, service_name=settings.service_name)

    try:
        code = cmd_run(settings, list_only=args.list)
    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        code = EXIT_INTERRUPTED
    finally:
        shutdown_tracing()
    sys.exit(code)


if __name__ == "__main__":
    main()
