from __future__ import annotations

import argparse
import asyncio
import sys

from rich.console import Console

from chail.config import ConfigError, RequestSpec, SweepConfig, TlsPolicy
from chail.loadgen.observer import NULL_OBSERVER
from chail.loadgen.runner import run_targets
from chail.report.console import ConsoleReporter, ConsoleTraceObserver, configure_logging
from chail.request import build_request_spec, load_ca_cert, parse_form_field, read_data


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chail",
        description="Probe HTTP endpoints with a growing number of concurrent clients",
    )
    parser.add_argument("urls", nargs="*", metavar="url", help="Target URL")
    parser.add_argument("--clients", type=int, default=1, help="Number of clients")
    parser.add_argument(
        "--iterations",
        type=int,
        default=1,
        help="Number of successive requests for every client",
    )
    parser.add_argument(
        "--gradient",
        type=float,
        default=1.1,
        help="Accepted gradient of expected linear function",
    )
    parser.add_argument(
        "--connect-timeout",
        type=float,
        default=1.0,
        help="Maximum time in seconds allowed for a request, e.g. 0.5 (no unit suffix)",
    )
    parser.add_argument("-k", "--insecure", action="store_true", help="TLS connections without certs")
    parser.add_argument("--cacert", help="CA certificate file (PEM)")
    parser.add_argument("-X", "--command", default="GET", help="Request command to use (GET, POST)")
    parser.add_argument("-H", "--header", action="append", default=[], help="Custom http header line")
    parser.add_argument("-d", "--data", help="Post data; filenames are prefixed with @")
    parser.add_argument(
        "-F",
        "--form",
        action="append",
        default=[],
        help="Multipart POST data; filenames are prefixed with @, e.g. <name>=@<path/to/file>;type=<content-type>",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Trace requests and responses")
    parser.add_argument("--no-color", action="store_true", help="No color output")
    return parser


def _build_config(args: argparse.Namespace) -> SweepConfig:
    ca_cert = load_ca_cert(args.cacert) if args.cacert else None
    config = SweepConfig(
        max_clients=args.clients,
        repeats=args.iterations,
        accepted_gradient=args.gradient,
        timeout_sec=args.connect_timeout,
        tls=TlsPolicy(insecure=args.insecure, ca_cert=ca_cert),
        verbose=args.verbose,
    )
    config.validate()
    return config


def _build_specs(args: argparse.Namespace) -> list[RequestSpec]:
    data = read_data(args.data) if args.data else None
    form = [parse_form_field(arg) for arg in args.form]
    return [
        build_request_spec(url, method=args.command, headers=args.header, data=data, form=form)
        for url in args.urls
    ]


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    console = Console(no_color=args.no_color, highlight=False)
    err_console = Console(stderr=True, no_color=args.no_color, highlight=False)
    if not args.urls:
        err_console.print("Missing URL!", style="red")
        parser.print_usage(sys.stderr)
        return 1
    try:
        config = _build_config(args)
        specs = _build_specs(args)
    except (ConfigError, ValueError, OSError) as exc:
        err_console.print(str(exc), style="red", markup=False)
        return 1

    configure_logging(args.verbose, err_console)
    reporter = ConsoleReporter(console)
    observer = ConsoleTraceObserver(console) if config.verbose else NULL_OBSERVER

    try:
        histories = asyncio.run(
            run_targets(config, specs, on_target=reporter.target, on_level=reporter.level, observer=observer)
        )
    except ConfigError as exc:
        err_console.print(str(exc), style="red", markup=False)
        return 1
    for history in histories.values():
        reporter.summary(history, config.accepted_gradient)
    return 0


if __name__ == "__main__":
    sys.exit(main())
