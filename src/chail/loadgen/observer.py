from __future__ import annotations

from typing import Protocol

import httpx


class RequestObserver(Protocol):
    def on_request(self, request: httpx.Request) -> None:
        ...

    def on_response(self, response: httpx.Response, body: bytes) -> None:
        ...


class NullObserver:
    def on_request(self, request: httpx.Request) -> None:
        pass

    def on_response(self, response: httpx.Response, body: bytes) -> None:
        pass


NULL_OBSERVER = NullObserver()
