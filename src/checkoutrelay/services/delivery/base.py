from __future__ import annotations

from typing import Protocol

from checkoutrelay.services.records import NormalizedRecord


class DownstreamSink(Protocol):
    """
    deliver(record)은 성공하면 그냥 리턴, 실패하면 SinkError를 던진다.
    - TransientSinkError: 네트워크/timeout/429/5xx (재시도 대상)
    - PermanentSinkError: 그 외 4xx, 설정 누락 (즉시 실패)

    Must be safe to call more than once with the same record.
    """

    name: str

    def accepts(self, kind: str) -> bool: ...

    async def deliver(self, record: NormalizedRecord) -> None: ...
