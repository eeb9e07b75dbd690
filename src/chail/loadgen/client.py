from __future__ import annotations

import logging
import ssl
import time

import httpx

from chail.config import ConfigError, RequestSpec, SweepConfig, TlsPolicy
from chail.loadgen.observer import NULL_OBSERVER, RequestObserver
from chail.metrics import RequestSample

logger = logging.getLogger(__name__)


def build_client(
    config: SweepConfig,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    limits = httpx.Limits(
        max_connections=config.max_clients,
        max_keepalive_connections=config.max_clients,
    )
    return httpx.AsyncClient(
        timeout=httpx.Timeout(config.timeout_sec),
        limits=limits,
        verify=tls_verify(config.tls),
        transport=transport,
    )


def tls_verify(tls: TlsPolicy) -> ssl.SSLContext | bool:
    if tls.insecure:
        return False
    if tls.ca_cert is None:
        return True
    try:
        return ssl.create_default_context(cadata=tls.ca_cert)
    except (ssl.SSLError, ValueError) as exc:
        msg = f"Invalid CA certificate: {exc}"
        raise ConfigError(msg) from exc


async def execute_request(
    client: httpx.AsyncClient,
    spec: RequestSpec,
    observer: RequestObserver = NULL_OBSERVER,
) -> RequestSample:
    request = client.build_request(
        spec.method,
        spec.url,
        headers=list(spec.headers),
        content=spec.body or None,
    )
    observer.on_request(request)
    start = time.perf_counter()
    try:
        response = await client.send(request, stream=True)
    except httpx.TimeoutException as exc:
        logger.warning("timeout fetching %s: %r", spec.url, exc)
        return RequestSample.unanswered()
    except httpx.HTTPError as exc:
        logger.warning("fetching %s failed: %r", spec.url, exc)
        return RequestSample.unanswered()
    time_to_first_byte = time.perf_counter() - start
    try:
        body = await response.aread()
    except (httpx.HTTPError, httpx.StreamError) as exc:
        logger.warning("reading %s failed: %r", spec.url, exc)
        return RequestSample(
            response_code=response.status_code,
            time_to_first_byte=time_to_first_byte,
        )
    finally:
        await response.aclose()
    time_total = time.perf_counter() - start
    observer.on_response(response, body)
    return RequestSample(
        response_code=response.status_code,
        time_to_first_byte=time_to_first_byte,
        time_total=time_total,
    )
