"""HTTP response values and JSON helpers."""

from __future__ import annotations

import dataclasses
import json
import uuid
from dataclasses import dataclass, field
from pathlib import PurePath
from typing import Any


@dataclass
class Response:
    """A complete HTTP response."""

    status: int
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json.loads(self.body)


def _encode(obj: Any) -> Any:
    if isinstance(obj, uuid.UUID):
        return str(obj)
    if isinstance(obj, PurePath):
        return str(obj)
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    if isinstance(obj, (set, frozenset, tuple)):
        return list(obj)
    raise TypeError(f"cannot serialize {type(obj).__name__}")


def to_json_bytes(value: Any) -> bytes:
    """Serialize a value to compact JSON bytes."""
    return json.dumps(value, separators=(",", ":"), default=_encode).encode("utf-8")


def json_response(value: Any, status: int = 200) -> Response:
    """Build a JSON response with the given status."""
    return Response(
        status=int(status),
        headers={"content-type": "application/json"},
        body=to_json_bytes(value),
    )


def error_response(status: int, message: str) -> Response:
    """Build a JSON error response of the form {"error": message}."""
    return json_response({"error": message}, status)