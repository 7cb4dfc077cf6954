"""Per-connection loop between a client websocket and the recognition stream.

Two tasks run per connection:

- the audio forwarder reads client frames and sends them upstream; it never
  waits on transcript or summary work
- the event consumer reads provider messages one at a time, applies them to
  the session's state machine and sends the resulting notifications

Only the consumer mutates session state, so no two events are ever applied
concurrently. When the client goes away the forwarder stops, the provider is
asked to terminate, the consumer gets a grace period to drain, and the
session is removed from the store.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Optional

from fastapi import WebSocket
from starlette.concurrency import run_in_threadpool
from starlette.websockets import WebSocketDisconnect, WebSocketState

from ..config import Settings
from ..errors import UpstreamStreamError
from ..logging import SessionLogAdapter, session_logger
from ..models.live import ErrorNotice, Notification, SessionEnd, SessionStart
from ..models.summary import SummaryResponse
from .sessions import SessionStore
from .streaming import RecognitionStream, StreamFactory
from .summarizer import SummaryOptions, summarize
from .turns import TranscriptSession

_log = logging.getLogger("app.session")

INIT_FAILED_MESSAGE = "Failed to initialize transcription service"


async def send_notification(websocket: WebSocket, note: Notification) -> bool:
    """Send one notification; a client that already left is not an error."""
    if websocket.client_state != WebSocketState.CONNECTED:
        return False
    try:
        await websocket.send_json(note.model_dump(by_alias=True, exclude_none=True))
        return True
    except (WebSocketDisconnect, RuntimeError) as e:
        _log.debug(f"notification not delivered: {e}")
        return False


async def _with_summary(note: SessionEnd, options: Optional[SummaryOptions]) -> SessionEnd:
    if options is None or not note.full_transcript:
        return note
    result = await run_in_threadpool(summarize, note.full_transcript, options)
    return note.model_copy(update={"summary": SummaryResponse(**result.to_dict())})


class LiveRelay:
    def __init__(
        self,
        websocket: WebSocket,
        store: SessionStore,
        stream_factory: StreamFactory,
        settings: Settings,
        summary_options: Optional[SummaryOptions] = None,
    ) -> None:
        self.websocket = websocket
        self.store = store
        self.stream_factory = stream_factory
        self.settings = settings
        self.summary_options = summary_options if settings.summarize_on_session_end else None
        self.session: Optional[TranscriptSession] = None
        self.stream: Optional[RecognitionStream] = None
        self.log: Optional[SessionLogAdapter] = None

    async def run(self) -> None:
        await self.websocket.accept()
        self.session = self.store.create()
        self.log = session_logger(self.session)
        self.log.info("client connected")
        try:
            self.stream = await self.stream_factory(self.settings)
        except Exception as e:
            self.log.warning(f"failed to open recognition stream: {e}")
            await send_notification(self.websocket, ErrorNotice(message=INIT_FAILED_MESSAGE))
            await self.websocket.close()
            self.store.remove(self.session)
            return

        consumer = asyncio.create_task(self._consume_events())
        try:
            await self._forward_audio()
        finally:
            await self._shutdown(consumer)

    async def _forward_audio(self) -> None:
        assert self.stream is not None
        while True:
            message = await self.websocket.receive()
            if message["type"] == "websocket.disconnect":
                self.log.info("client disconnected")
                return
            chunk = message.get("bytes")
            if chunk:
                try:
                    await self.stream.send_audio(chunk)
                except Exception as e:
                    self.log.warning(f"error sending audio upstream: {e}")
                continue
            if message.get("text"):
                await self._handle_control(message["text"])

    async def _handle_control(self, raw: str) -> None:
        assert self.stream is not None
        try:
            payload = json.loads(raw)
        except ValueError:
            self.log.warning("ignoring non-JSON text frame from client")
            return
        if isinstance(payload, dict) and str(payload.get("type", "")).lower() == "terminate":
            self.log.info("client requested termination")
            try:
                await self.stream.terminate()
            except Exception as e:
                self.log.warning(f"error requesting upstream termination: {e}")

    async def _deliver(self, note: Notification) -> None:
        assert self.session is not None
        if isinstance(note, SessionStart):
            self.store.rekey(self.session)
        if isinstance(note, SessionEnd):
            note = await _with_summary(note, self.summary_options)
        await send_notification(self.websocket, note)

    async def _consume_events(self) -> None:
        assert self.session is not None and self.stream is not None
        try:
            async for raw in self.stream.messages():
                for note in self.session.handle_message(raw):
                    await self._deliver(note)
        except UpstreamStreamError as e:
            await send_notification(self.websocket, self.session.fail(str(e)))
        except Exception as e:
            self.log.exception("recognition stream failed")
            await send_notification(self.websocket, self.session.fail(str(e)))
        finally:
            end = self.session.close()
            if end is not None:
                await self._deliver(end)

    async def _shutdown(self, consumer: "asyncio.Task[None]") -> None:
        assert self.session is not None and self.stream is not None
        try:
            await self.stream.terminate()
        except Exception as e:
            self.log.warning(f"error requesting upstream termination: {e}")
        try:
            await asyncio.wait_for(asyncio.shield(consumer), timeout=self.settings.shutdown_grace_s)
        except asyncio.TimeoutError:
            self.log.warning("upstream did not terminate in time")
        finally:
            try:
                await self.stream.close()
            except Exception as e:
                self.log.warning(f"error closing upstream: {e}")
            if not consumer.done():
                consumer.cancel()
                try:
                    await consumer
                except asyncio.CancelledError:
                    pass
            self.store.remove(self.session)
            self.log.info("session removed")


async def relay_session(
    websocket: WebSocket,
    store: SessionStore,
    stream_factory: StreamFactory,
    settings: Settings,
    summary_options: Optional[SummaryOptions] = None,
) -> None:
    await LiveRelay(websocket, store, stream_factory, settings, summary_options).run()
