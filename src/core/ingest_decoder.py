"""
Decoding of inbound sensor datagrams into Measurement records.

Malformed input is expected on this path: every failure is reported as a
DecodeError, whatever the byte sequence.
"""
from typing import Union

from pydantic import ValidationError

from core.models.measurement import Measurement


class DecodeError(Exception):
    """Raised when a payload is not a valid measurement record."""

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


def _summarize(error: ValidationError) -> str:
    parts = []
    for err in error.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)


def decode(payload: Union[bytes, bytearray, memoryview]) -> Measurement:
    """
    Parse a raw payload into a validated Measurement.

    Raises:
        DecodeError: empty, non UTF-8, structurally invalid or incomplete payload.
            The underlying exception is chained as __cause__.
    """
    if isinstance(payload, str):
        raise TypeError("decode() expects bytes, not str")

    data = bytes(payload)
    if not data:
        raise DecodeError("empty payload")

    try:
        text = data.decode("utf-8")
    except UnicodeDecodeError as e:
        raise DecodeError(f"payload is not valid UTF-8 ({e.reason} at byte {e.start})") from e

    try:
        return Measurement.model_validate_json(text)
    except ValidationError as e:
        raise DecodeError(_summarize(e)) from e
