"""Helpers for streaming adapter tests.

``FakeStreamingAdapter`` replays a scripted list of native chunks. Each chunk
is either a :class:`ResponseDelta` (passed through ``translate_chunk``), a
plain string (content fragment), a float (the native stream pauses for that
many seconds) or an exception instance, which is raised from the native
iterator at that position.
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncIterator, List, Optional, Sequence

from aicall.base.cancellation import CancellationToken
from aicall.base.models import CallRequest
from aicall.base.streaming import BaseStreamingAdapter, ResponseDelta


class FakeStreamingAdapter(BaseStreamingAdapter):
    def __init__(
        self,
        chunks: Sequence[Any],
        *,
        delay: float = 0.0,
        hang: bool = False,
        cumulative: bool = False,
    ) -> None:
        super().__init__(provider_name="fake")
        self.chunks = list(chunks)
        self.delay = delay
        self.hang = hang
        self.cumulative_text = cumulative
        self.produced: List[Any] = []
        self.closed = False

    async def open_stream(self, request: CallRequest, cancellation: CancellationToken) -> AsyncIterator[Any]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Any]:
        try:
            for chunk in self.chunks:
                if self.delay:
                    await asyncio.sleep(self.delay)
                if isinstance(chunk, float):
                    await asyncio.sleep(chunk)
                    continue
                if isinstance(chunk, BaseException):
                    raise chunk
                self.produced.append(chunk)
                yield chunk
            if self.hang:
                await asyncio.Event().wait()
        finally:
            self.closed = True

    def translate_chunk(self, chunk: Any, request: CallRequest) -> Optional[ResponseDelta]:
        if isinstance(chunk, ResponseDelta):
            return chunk
        return ResponseDelta(provider=request.provider, model=request.model, content=str(chunk))


def text_delta(text: str = "", **fields: Any) -> ResponseDelta:
    return ResponseDelta(provider="fake", model="fake-1", content=text, **fields)


__all__ = ["FakeStreamingAdapter", "text_delta"]
