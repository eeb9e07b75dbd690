from __future__ import annotations

import logging
import math

import httpx
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table
from rich.text import Text

from chail.analysis import GradientReading, Severity, SweepHistory, error_onset, latency_knee
from chail.loadgen.runner import LevelReport
from chail.metrics import ProbeResult

SEVERITY_STYLES: dict[Severity, str] = {
    Severity.CRITICAL: "bold red",
    Severity.SEVERE: "red",
    Severity.MODERATE: "yellow",
    Severity.IMPROVING: "green",
    Severity.NORMAL: "",
}

TRACE_STYLE = "bright_black"


def configure_logging(verbose: bool, console: Console | None = None) -> None:
    handler = RichHandler(
        console=console or Console(stderr=True),
        show_time=False,
        show_path=False,
    )
    logging.basicConfig(
        level=logging.INFO if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )


def _ms(seconds: float) -> str:
    if math.isnan(seconds):
        return "n/a"
    return f"{seconds * 1000.0:.2f}"


def format_result(result: ProbeResult) -> Text:
    return Text(
        f"{result.client_count}: avg={_ms(result.avg_time_total)} ms, "
        f"ttfb={_ms(result.avg_time_to_first_byte)} ms, "
        f"err={result.error_rate * 100.0:.1f}"
    )


def format_reading(reading: GradientReading) -> Text:
    text = Text(f", grad({-reading.distance})=")
    text.append(f"{reading.ratio:.2f}", style=SEVERITY_STYLES[reading.severity])
    return text


def format_codes(result: ProbeResult) -> Text:
    codes = " ".join(f"{code}x{count}" for code, count in result.response_codes.items())
    return Text(f" [{codes}]", style=TRACE_STYLE)


class ConsoleReporter:
    def __init__(self, console: Console) -> None:
        self.console = console

    def target(self, url: str) -> None:
        self.console.print(f"Connecting to {url}...", style="cyan", markup=False)

    def level(self, report: LevelReport) -> None:
        line = format_result(report.result)
        for reading in (report.step, report.decade):
            if reading is not None:
                line.append_text(format_reading(reading))
        line.append_text(format_codes(report.result))
        self.console.print(line)

    def summary(self, history: SweepHistory, accepted_gradient: float) -> None:
        levels = history.to_frame()
        table = Table(title=history.url)
        table.add_column("clients", justify="right")
        table.add_column("avg ms", justify="right")
        table.add_column("ttfb ms", justify="right")
        table.add_column("p95 ms", justify="right")
        table.add_column("err %", justify="right")
        for row in levels.itertuples(index=False):
            table.add_row(
                str(row.clients),
                f"{row.avg_total_ms:.2f}",
                f"{row.avg_ttfb_ms:.2f}",
                f"{row.p95_total_ms:.2f}",
                f"{row.error_rate * 100.0:.1f}",
            )
        self.console.print(table)
        onset = error_onset(levels)
        if onset is not None:
            self.console.print(f"errors from {onset} clients", style="red")
        knee = latency_knee(levels, accepted_gradient)
        if knee is not None:
            self.console.print(f"latency knee at {knee} clients", style="yellow")


class ConsoleTraceObserver:
    """Prints outgoing requests and incoming responses, curl style."""

    def __init__(self, console: Console) -> None:
        self.console = console

    def on_request(self, request: httpx.Request) -> None:
        path = request.url.raw_path.decode("ascii", errors="replace")
        self._trace(f"> {request.method} {path} HTTP/1.1")
        self._trace(f"> Host: {request.url.netloc.decode('ascii', errors='replace')}")
        for key, value in request.headers.multi_items():
            if key.lower() != "host":
                self._trace(f"> {key}: {value}")
        self._trace(">")

    def on_response(self, response: httpx.Response, body: bytes) -> None:
        self._trace(f"< {response.http_version} {response.status_code} {response.reason_phrase}")
        for key, value in response.headers.multi_items():
            self._trace(f"< {key}: {value}")
        self._trace("<")
        self._trace(body.decode(response.encoding or "utf-8", errors="replace"))

    def _trace(self, message: str) -> None:
        self.console.print(message, style=TRACE_STYLE, markup=False, highlight=False)
