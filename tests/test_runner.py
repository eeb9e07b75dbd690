from __future__ import annotations

import asyncio

import httpx
import pytest

from chail.analysis import Severity, SweepHistory
from chail.config import ConfigError, SweepConfig
from chail.loadgen.runner import LevelReport, run_sweep, run_targets
from helpers import TARGET, mock_client, spec, status_handler


def _sweep(handler, config: SweepConfig) -> tuple[list[LevelReport], SweepHistory]:
    reports: list[LevelReport] = []

    async def scenario():
        async with mock_client(handler, max_clients=config.max_clients) as client:
            return await run_sweep(client, spec(), config, on_level=reports.append)

    history = asyncio.run(scenario())
    return reports, history


def test_latency_jump_is_critical() -> None:
    calls = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        # levels 1 and 2 with two repeats issue six requests
        await asyncio.sleep(0.01 if calls <= 6 else 0.2)
        return httpx.Response(200)

    reports, history = _sweep(handler, SweepConfig(max_clients=3, repeats=2, accepted_gradient=1.1))
    assert len(history) == 3
    assert [history[i].client_count for i in (1, 2, 3)] == [1, 2, 3]
    assert all(result.error_rate == 0.0 for result in history)
    assert reports[0].step is None
    third = reports[2].step
    assert third is not None
    assert third.distance == 1
    assert third.ratio > 10
    assert third.severity is Severity.CRITICAL
    assert all(report.decade is None for report in reports)


def test_decade_comparison_starts_after_ten_levels() -> None:
    reports, history = _sweep(status_handler(200, delay_sec=0.001), SweepConfig(max_clients=12))
    assert len(history) == 12
    assert [r.decade is not None for r in reports] == [False] * 10 + [True, True]
    assert reports[10].decade.distance == 10
    assert reports[10].decade.threshold == pytest.approx(11.0)
    assert reports[11].decade.distance == 10


def test_failing_levels_do_not_stop_the_sweep() -> None:
    reports, history = _sweep(status_handler(500), SweepConfig(max_clients=4, repeats=2))
    assert len(history) == 4
    assert [r.result.client_count for r in reports] == [1, 2, 3, 4]
    assert all(r.result.error_rate == 1.0 for r in reports)
    assert all(r.step is None for r in reports)


def test_targets_get_fresh_histories() -> None:
    seen_targets: list[str] = []
    hosts: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        hosts.append(request.url.host)
        return httpx.Response(200)

    specs = [spec("http://one.test/"), spec("http://two.test/")]
    histories = asyncio.run(
        run_targets(
            SweepConfig(max_clients=2),
            specs,
            on_target=seen_targets.append,
            transport=httpx.MockTransport(handler),
        )
    )
    assert seen_targets == ["http://one.test/", "http://two.test/"]
    assert [len(h) for h in histories.values()] == [2, 2]
    assert hosts == ["one.test"] * 3 + ["two.test"] * 3


@pytest.mark.parametrize(
    "config",
    [
        SweepConfig(max_clients=0),
        SweepConfig(repeats=0),
        SweepConfig(accepted_gradient=0.0),
        SweepConfig(timeout_sec=0.0),
    ],
)
def test_invalid_config_is_rejected_before_any_request(config: SweepConfig) -> None:
    calls: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        calls.append(request)
        return httpx.Response(200)

    with pytest.raises(ConfigError):
        asyncio.run(run_targets(config, [spec(TARGET)], transport=httpx.MockTransport(handler)))
    assert calls == []
