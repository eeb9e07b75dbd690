from __future__ import annotations

from chail.request.builder import (
    FormField,
    build_request_spec,
    check_url,
    load_ca_cert,
    parse_form_field,
    parse_header,
    parse_method,
    parse_property,
    read_data,
)

__all__ = [
    "FormField",
    "build_request_spec",
    "check_url",
    "load_ca_cert",
    "parse_form_field",
    "parse_header",
    "parse_method",
    "parse_property",
    "read_data",
]
