from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import httpx

from chail.config import RequestSpec

METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE", "HEAD", "OPTIONS")
DEFAULT_FILE_TYPE = "application/octet-stream"


@dataclass(frozen=True, slots=True)
class FormField:
    name: str
    value: str = ""
    path: str | None = None
    content_type: str = DEFAULT_FILE_TYPE

    @property
    def is_file(self) -> bool:
        return self.path is not None


def parse_method(value: str) -> str:
    method = value.strip().upper()
    if method not in METHODS:
        msg = f"invalid method string {value!r}"
        raise ValueError(msg)
    return method


def parse_property(text: str) -> tuple[str, str]:
    return _split_terms(text, "=")


def parse_header(line: str) -> tuple[str, str]:
    key, value = _split_terms(line, ":")
    if not key:
        msg = f"invalid header string {line!r}"
        raise ValueError(msg)
    return _canonical_header_key(key), value


def read_data(arg: str) -> bytes:
    if arg.startswith("@"):
        return Path(arg[1:]).read_bytes()
    return arg.encode()


def parse_form_field(arg: str) -> FormField:
    """Parse ``name=value`` or ``name=@path/to/file;type=content/type``."""
    head, _, options = arg.partition(";")
    name, value = parse_property(head)
    if not name:
        msg = f"invalid multi part form data string {arg!r}"
        raise ValueError(msg)
    if not value.startswith("@"):
        return FormField(name=name, value=value)
    content_type = DEFAULT_FILE_TYPE
    if options:
        key, override = parse_property(options)
        if key.lower() != "type":
            msg = f"invalid file type in multi part form data string {arg!r}"
            raise ValueError(msg)
        content_type = override
    return FormField(name=name, path=value[1:], content_type=content_type)


def load_ca_cert(path: str) -> str:
    return Path(path).read_text()


def check_url(url: str) -> None:
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as exc:
        msg = f"invalid URL {url!r}: {exc}"
        raise ValueError(msg) from exc
    if parsed.scheme not in ("http", "https") or not parsed.host:
        msg = f"invalid URL {url!r}: expected an http or https URL with a host"
        raise ValueError(msg)
    if parsed.port is not None and not 1 <= parsed.port <= 65535:
        msg = f"invalid URL {url!r}: port must be 1-65535"
        raise ValueError(msg)


def build_request_spec(
    url: str,
    method: str = "GET",
    headers: Iterable[str] = (),
    data: bytes | None = None,
    form: Iterable[FormField] = (),
) -> RequestSpec:
    check_url(url)
    header_pairs = [parse_header(line) for line in headers]
    fields = list(form)
    if data and fields:
        msg = "Can not use data and multi part form data in a request!"
        raise ValueError(msg)
    body = data or b""
    if fields:
        content_type, body = _encode_multipart(url, fields)
        header_pairs.append(("Content-Type", content_type))
    if body:
        method = "POST"
    return RequestSpec(
        url=url,
        method=parse_method(method),
        headers=tuple(header_pairs),
        body=body,
    )


def _encode_multipart(url: str, fields: list[FormField]) -> tuple[str, bytes]:
    # plain values are sent as parts without a filename, so value-only forms stay multipart
    parts: list[tuple[str, tuple]] = []
    for item in fields:
        if item.is_file:
            content = Path(item.path).read_bytes()
            parts.append((item.name, (item.path, content, item.content_type)))
        else:
            parts.append((item.name, (None, item.value.encode())))
    request = httpx.Request("POST", url, files=parts)
    body = request.read()
    return request.headers["Content-Type"], body


def _split_terms(text: str, sep: str) -> tuple[str, str]:
    key, found, value = text.partition(sep)
    if not found:
        return "", ""
    return key.strip(), value.strip()


def _canonical_header_key(key: str) -> str:
    return "-".join(part.capitalize() for part in key.split("-"))
