from __future__ import annotations

import asyncio
from typing import Any

import requests

from checkoutrelay.core.errors import PermanentSinkError, TransientSinkError

RETRYABLE_STATUS_CODES = {408, 429, 500, 502, 503, 504}


def post_json(
    sink: str,
    url: str,
    payload: dict[str, Any],
    *,
    headers: dict[str, str] | None = None,
    timeout: float = 10,
) -> str:
    """
    JSON POST 후 응답 body(text)를 반환한다.
    실패는 재시도 가능 여부에 따라 Transient/Permanent로 나눠서 던진다.
    """
    try:
        resp = requests.post(url, json=payload, headers=headers, timeout=timeout)
    except (requests.ConnectionError, requests.Timeout) as e:
        raise TransientSinkError(sink, f"{type(e).__name__}: {e}") from e
    except requests.RequestException as e:
        raise PermanentSinkError(sink, f"{type(e).__name__}: {e}") from e

    if resp.status_code in RETRYABLE_STATUS_CODES or resp.status_code >= 500:
        raise TransientSinkError(sink, f"HTTP {resp.status_code} {resp.text[:200]}")
    if resp.status_code >= 400:
        raise PermanentSinkError(sink, f"HTTP {resp.status_code} {resp.text[:200]}")

    return (resp.text or "").strip()


async def post_json_async(
    sink: str,
    url: str,
    payload: dict[str, Any],
    *,
    headers: dict[str, str] | None = None,
    timeout: float = 10,
) -> str:
    # requests is blocking; keep it off the event loop
    return await asyncio.to_thread(post_json, sink, url, payload, headers=headers, timeout=timeout)
