"""Streaming relay between the caller and a chat completion service."""

from __future__ import annotations

import logging
import threading
from enum import Enum

from chatbridge.core.conversation import ConversationStore, Message
from chatbridge.core.errors import (
    CompletionRequestError,
    CompletionStreamError,
    SessionActiveError,
    StreamCancelledError,
)
from chatbridge.core.pipe import PipeReader, PipeWriter, pipe
from chatbridge.llm.base import BaseCompletionClient, CompletionStream

logger = logging.getLogger(__name__)


class RelayState(Enum):
    """Whether the relay has a reply streaming."""

    IDLE = "idle"
    STREAMING = "streaming"


class StreamSession:
    """State for one in-flight assistant reply."""

    def __init__(
        self,
        turn: Message,
        subscription: CompletionStream,
        writer: PipeWriter,
        cancel: threading.Event,
    ):
        self.turn = turn
        self.subscription = subscription
        self.writer = writer
        self.cancel = cancel
        self.thread: threading.Thread | None = None


class StreamingRelay:
    """Sends user messages upstream and streams the replies back.

    Every reply is exposed as a PipeReader and, fragment by fragment, also
    appended to the relay's conversation store so the next request carries
    the full history. Only one reply streams at a time.
    """

    def __init__(self, client: BaseCompletionClient, system_prompt: str | None = None):
        """
        Initialize the relay.

        Args:
            client: Completion service client.
            system_prompt: Optional instruction placed first in the transcript.
        """
        self._client = client
        self._store = ConversationStore()
        self._state = RelayState.IDLE
        self._state_lock = threading.Lock()
        self._session: StreamSession | None = None

        if system_prompt:
            self._store.append_system(system_prompt)

    @property
    def model(self) -> str:
        return self._client.model

    @property
    def store(self) -> ConversationStore:
        return self._store

    @property
    def state(self) -> RelayState:
        return self._state

    def send(self, message: str, cancel: threading.Event | None = None) -> PipeReader:
        """
        Send a user message and start streaming the reply.

        Returns as soon as the request is established, before any reply
        text arrives.

        Args:
            message: User text, recorded verbatim.
            cancel: Optional event; setting it aborts the request or the
                reply stream.

        Returns:
            Reader yielding the reply as UTF-8 bytes.

        Raises:
            SessionActiveError: If a previous reply is still streaming.
            StreamCancelledError: If cancel was set before the request opened.
            CompletionRequestError: If the request could not be established.
        """
        with self._state_lock:
            if self._state is RelayState.STREAMING:
                raise SessionActiveError("chatbridge: a reply is still streaming")
            self._state = RelayState.STREAMING

        logger.debug("chatbridge: sending message %r", message)
        try:
            self._store.append_user(message)
            if cancel is not None and cancel.is_set():
                raise StreamCancelledError("chatbridge: request cancelled before it was sent")
            try:
                subscription = self._client.open_stream(self._store.snapshot())
            except Exception as exc:
                raise CompletionRequestError(
                    f"chatbridge: failed to request chat completion: {exc}"
                ) from exc
        except BaseException:
            self._set_idle()
            raise

        reader, writer = pipe()
        session = StreamSession(
            turn=self._store.begin_assistant_turn(),
            subscription=subscription,
            writer=writer,
            cancel=cancel if cancel is not None else threading.Event(),
        )
        session.thread = threading.Thread(
            target=self._drain, args=(session,), name="chatbridge-drain", daemon=True
        )
        self._session = session
        session.thread.start()
        logger.info("chatbridge: streaming reply from %s", self.model)
        return reader

    def _drain(self, session: StreamSession) -> None:
        """Copy upstream fragments into the pipe and the assistant turn."""
        error: BaseException | None = None
        try:
            for fragment in session.subscription:
                if session.cancel.is_set():
                    error = StreamCancelledError("chatbridge: reply stream cancelled")
                    break
                if not fragment:
                    continue
                try:
                    session.writer.write(fragment.encode("utf-8"))
                except BrokenPipeError:
                    logger.debug("chatbridge: reader closed, abandoning reply stream")
                    return
                self._store.append_to(session.turn, fragment)
        except Exception as exc:
            logger.warning("chatbridge: %s failed mid-stream: %s", self.model, exc)
            error = CompletionStreamError(
                f"chatbridge: {self.model} failed to respond to chat completion: {exc}"
            )
            error.__cause__ = exc
        finally:
            try:
                session.subscription.close()
            except Exception as exc:
                logger.warning("chatbridge: failed to release completion stream: %s", exc)
            finally:
                self._store.finalize(session.turn)
                self._set_idle()
                session.writer.close(error)
        logger.debug("chatbridge: reply stream finished")

    def _set_idle(self) -> None:
        with self._state_lock:
            self._state = RelayState.IDLE

    def cancel(self) -> None:
        """Ask the active reply stream to stop. No-op when idle."""
        session = self._session
        if session is not None and self._state is RelayState.STREAMING:
            session.cancel.set()

    def wait(self, timeout: float | None = None) -> bool:
        """
        Wait for the active reply stream's background thread to finish.

        Returns:
            True if no stream is running afterwards.
        """
        session = self._session
        if session is None or session.thread is None:
            return True
        session.thread.join(timeout)
        return not session.thread.is_alive()

    def messages(self) -> str:
        """Render the conversation transcript."""
        return self._store.render()
