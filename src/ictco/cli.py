"""
Command-line interface for the immersion cooling TCO calculator.

Usage:
    ictco calculate CONFIG [--exchange-rate RATE] [--json] [--output FILE]
    ictco validate CONFIG
    ictco sensitivity CONFIG [--parameter NAME ...] [--variation PCT]
    ictco server [--port PORT]
"""

import argparse
import json
import logging
import os
import sys


def _load_config(path):
    with open(path) as f:
        return json.load(f)


def _catalog(args):
    """Default catalog, converted when an exchange rate is given."""
    from ictco import default_catalog

    catalog = default_catalog()
    if args.exchange_rate is None:
        return catalog
    config = _load_config(args.config)
    financial = config.get("financial")
    currency = financial.get("currency", "USD") if isinstance(financial, dict) else "USD"
    return catalog.converted(currency, args.exchange_rate)


def cmd_calculate(args):
    """Run a TCO calculation."""
    from ictco import calculate, ConfigurationError, CatalogLookupMissing

    try:
        result = calculate(_load_config(args.config), catalog=_catalog(args))
    except ConfigurationError as exc:
        for error in exc.errors:
            print(f"  {error.field}: {error.message}", file=sys.stderr)
        return 2
    except CatalogLookupMissing as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    if args.output:
        result.save(args.output)
        print(f"Results saved to {args.output}")
    elif args.json:
        print(result.to_json())
    else:
        print(result.summary())

    return 0


def cmd_validate(args):
    """Validate a configuration without calculating."""
    from ictco import validate

    report = validate(_load_config(args.config))
    print(report.summary())
    return 0 if report.valid else 1


def cmd_sensitivity(args):
    """Run one-at-a-time sensitivity analysis."""
    from ictco import ConfigurationError
    from ictco.sensitivity import (
        DEFAULT_PARAMETERS,
        SensitivityParameter,
        run_sensitivity_analysis,
    )

    names = args.parameter or DEFAULT_PARAMETERS
    parameters = [
        SensitivityParameter(name, variation_percent=args.variation, steps=args.steps)
        for name in names
    ]
    try:
        result = run_sensitivity_analysis(_load_config(args.config), parameters)
    except ConfigurationError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2

    print(result.summary())
    return 0


def cmd_server(args):
    """Start web server."""
    try:
        import uvicorn
        uvicorn.run(
            "main:app",
            app_dir=os.path.join(os.path.dirname(__file__), "..", "..", "web", "backend"),
            host="0.0.0.0",
            port=args.port,
            reload=args.reload,
        )
    except ImportError:
        print("Web dependencies not installed. Run: pip install immersion-tco[web]")
        return 1
    return 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog="ictco",
        description="Immersion vs air cooling total cost of ownership calculator",
    )
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase log verbosity (-v info, -vv debug)")
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # calculate
    p_calculate = subparsers.add_parser("calculate", help="Run a TCO calculation")
    p_calculate.add_argument("config", help="Configuration JSON file")
    p_calculate.add_argument("--exchange-rate", type=float,
                             help="Units of the configured currency per USD")
    p_calculate.add_argument("--json", action="store_true", help="Print JSON instead of text")
    p_calculate.add_argument("-o", "--output", help="Output JSON file")

    # validate
    p_validate = subparsers.add_parser("validate", help="Validate a configuration")
    p_validate.add_argument("config", help="Configuration JSON file")

    # sensitivity
    p_sensitivity = subparsers.add_parser("sensitivity", help="Run sensitivity analysis")
    p_sensitivity.add_argument("config", help="Configuration JSON file")
    p_sensitivity.add_argument("-p", "--parameter", action="append",
                               help="Dotted parameter path, repeatable")
    p_sensitivity.add_argument("--variation", type=float, default=20.0,
                               help="Variation in percent")
    p_sensitivity.add_argument("--steps", type=int, default=5)

    # server
    p_server = subparsers.add_parser("server", help="Start web server")
    p_server.add_argument("-p", "--port", type=int, default=8000)
    p_server.add_argument("--reload", action="store_true")

    return parser


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    commands = {
        "calculate": cmd_calculate,
        "validate": cmd_validate,
        "sensitivity": cmd_sensitivity,
        "server": cmd_server,
    }
    if args.command not in commands:
        parser.print_help()
        sys.exit(0)
    sys.exit(commands[args.command](args))


if __name__ == "__main__":
    main()
