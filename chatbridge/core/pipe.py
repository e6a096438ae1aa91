"""Synchronous in-memory byte pipe connecting a producer thread to a reader."""

from __future__ import annotations

import io
import threading


class _PipeState:
    """State shared by both ends of a pipe."""

    def __init__(self):
        self.cond = threading.Condition()
        self.pending: bytes | None = None  # the one write in flight
        self.offset = 0
        self.writer_closed = False
        self.reader_closed = False
        self.error: BaseException | None = None


class PipeReader(io.RawIOBase):
    """Readable end of a pipe.

    Reads block until the writer supplies data, closes, or closes with an
    error. After the writer closes cleanly, reads return b"". After it
    closes with an error, every further read raises that error.
    """

    def __init__(self, state: _PipeState):
        super().__init__()
        self._state = state

    def readable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed pipe")
        view = memoryview(buffer).cast("B")
        if len(view) == 0:
            return 0

        state = self._state
        with state.cond:
            while state.pending is None and not state.writer_closed:
                state.cond.wait()

            if state.pending is not None:
                end = min(state.offset + len(view), len(state.pending))
                count = end - state.offset
                view[:count] = state.pending[state.offset:end]
                state.offset = end
                if state.offset == len(state.pending):
                    state.pending = None
                    state.offset = 0
                    state.cond.notify_all()
                return count

            if state.error is not None:
                raise state.error
            return 0

    def close(self) -> None:
        """Abandon the stream; a blocked or later write fails with BrokenPipeError."""
        if not self.closed:
            state = self._state
            with state.cond:
                state.reader_closed = True
                state.cond.notify_all()
        super().close()


class PipeWriter:
    """Writable end of a pipe. Meant to be driven by a single thread."""

    def __init__(self, state: _PipeState):
        self._state = state

    @property
    def closed(self) -> bool:
        return self._state.writer_closed

    def write(self, data: bytes) -> int:
        """
        Hand data to the reader.

        Blocks until the reader has consumed all of it.

        Args:
            data: Bytes to deliver.

        Returns:
            Number of bytes written.

        Raises:
            BrokenPipeError: If the reader end is closed.
            ValueError: If this end was already closed.
        """
        data = bytes(data)
        state = self._state
        with state.cond:
            if state.writer_closed:
                raise ValueError("write to closed pipe")
            if state.reader_closed:
                raise BrokenPipeError("pipe reader closed")
            if not data:
                return 0

            state.pending = data
            state.offset = 0
            state.cond.notify_all()

            while state.pending is not None and not state.reader_closed:
                state.cond.wait()

            if state.pending is not None:
                state.pending = None
                state.offset = 0
                raise BrokenPipeError("pipe reader closed")
            return len(data)

    def close(self, error: BaseException | None = None) -> None:
        """
        Signal end-of-data.

        Args:
            error: If given, readers get this raised instead of b"".
        """
        state = self._state
        with state.cond:
            if state.writer_closed:
                return
            state.writer_closed = True
            state.error = error
            state.cond.notify_all()


def pipe() -> tuple[PipeReader, PipeWriter]:
    """Create a connected (reader, writer) pair."""
    state = _PipeState()
    return PipeReader(state), PipeWriter(state)
