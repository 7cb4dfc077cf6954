"""Client for the AssemblyAI Universal Streaming (v3) websocket.

The relay only talks to the ``RecognitionStream`` protocol, so tests and other
providers can plug in through a ``StreamFactory``.
"""

from __future__ import annotations

import json
import logging
from typing import AsyncIterator, Awaitable, Callable, Optional, Protocol
from urllib.parse import urlencode

import aiohttp

from ..config import Settings
from ..errors import UpstreamStreamError

_log = logging.getLogger("app.session")


class RecognitionStream(Protocol):
    async def send_audio(self, chunk: bytes) -> None: ...

    async def terminate(self) -> None: ...

    def messages(self) -> AsyncIterator[str]: ...

    async def close(self) -> None: ...


StreamFactory = Callable[[Settings], Awaitable[RecognitionStream]]


def streaming_url(settings: Settings) -> str:
    query = urlencode({
        "sample_rate": int(settings.sample_rate),
        "format_turns": "true" if settings.format_turns else "false",
    })
    return f"{settings.streaming_url}?{query}"


class AssemblyAIStream:
    def __init__(self, session: aiohttp.ClientSession, ws: aiohttp.ClientWebSocketResponse) -> None:
        self._session = session
        self._ws = ws

    @classmethod
    async def connect(cls, settings: Settings) -> "AssemblyAIStream":
        if not settings.assemblyai_api_key:
            raise UpstreamStreamError("AUDIONOTES_ASSEMBLYAI_API_KEY is not set")
        session = aiohttp.ClientSession()
        try:
            ws = await session.ws_connect(
                streaming_url(settings),
                headers={"Authorization": settings.assemblyai_api_key},
            )
        except (aiohttp.ClientError, OSError) as e:
            await session.close()
            raise UpstreamStreamError(f"connect failed: {e}") from e
        _log.info("connected to AssemblyAI Universal Streaming v3")
        return cls(session, ws)

    @property
    def closed(self) -> bool:
        return self._ws.closed

    async def send_audio(self, chunk: bytes) -> None:
        if not self._ws.closed:
            await self._ws.send_bytes(chunk)

    async def terminate(self) -> None:
        """Ask the provider to flush remaining turns and send Termination."""
        if not self._ws.closed:
            await self._ws.send_str(json.dumps({"type": "Terminate"}))

    async def messages(self) -> AsyncIterator[str]:
        async for msg in self._ws:
            if msg.type == aiohttp.WSMsgType.TEXT:
                yield msg.data
            elif msg.type == aiohttp.WSMsgType.BINARY:
                yield msg.data.decode("utf-8", errors="replace")
            elif msg.type == aiohttp.WSMsgType.ERROR:
                raise UpstreamStreamError(str(self._ws.exception()))
        code: Optional[int] = self._ws.close_code
        _log.info(f"AssemblyAI websocket closed: {code}")

    async def close(self) -> None:
        try:
            await self._ws.close()
        finally:
            await self._session.close()


async def open_assemblyai_stream(settings: Settings) -> RecognitionStream:
    return await AssemblyAIStream.connect(settings)
