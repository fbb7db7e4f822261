from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from starlette.requests import ClientDisconnect, Request

from checkoutrelay.core.errors import IncompleteBody, MissingSignatureHeader

SIGNATURE_HEADER = "Stripe-Signature"


@dataclass(frozen=True)
class RawBody:
    body: bytes
    signature: str
    content_length: Optional[int]


def _declared_length(request: Request) -> Optional[int]:
    raw = request.headers.get("content-length")
    if raw is None:
        return None
    try:
        value = int(raw)
    except ValueError as e:
        raise IncompleteBody(f"Invalid Content-Length header: {raw!r}") from e
    if value < 0:
        raise IncompleteBody(f"Invalid Content-Length header: {raw!r}")
    return value


async def capture_raw_body(request: Request) -> RawBody:
    """
    Exact request bytes, before any JSON parsing (signature is over raw bytes).

    Header check comes first so an unsigned request is rejected without buffering.
    """
    signature = request.headers.get(SIGNATURE_HEADER)
    if not signature:
        raise MissingSignatureHeader()

    declared = _declared_length(request)

    buf = bytearray()
    try:
        async for chunk in request.stream():
            buf.extend(chunk)
    except ClientDisconnect as e:
        raise IncompleteBody(f"Client disconnected after {len(buf)} bytes") from e

    if declared is not None and len(buf) != declared:
        raise IncompleteBody(f"Body length {len(buf)} does not match Content-Length {declared}")

    return RawBody(body=bytes(buf), signature=signature, content_length=declared)
