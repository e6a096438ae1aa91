"""Line-oriented batch mode: one message per input line, replies to stdout."""

import logging
from collections.abc import Iterator
from typing import BinaryIO, TextIO

from chatbridge.core.errors import ChatBridgeError
from chatbridge.core.relay import StreamingRelay

logger = logging.getLogger(__name__)

EXIT_OK = 0
EXIT_CHAT_FAILURE = 1
EXIT_INPUT_FAILURE = 2

COPY_BUFFER_SIZE = 4096


class InputReadError(Exception):
    """Reading the next input line failed."""


def _read_lines(source: TextIO) -> Iterator[str]:
    """Yield input lines without their line terminator."""
    while True:
        try:
            line = source.readline()
        except (OSError, UnicodeDecodeError) as exc:
            raise InputReadError(str(exc)) from exc
        if not line:
            return
        yield line.rstrip("\r\n")


def run_batch(relay: StreamingRelay, source: TextIO, sink: BinaryIO) -> int:
    """
    Relay every input line and copy each reply to the sink.

    Args:
        relay: Relay holding the conversation.
        source: Text stream of user messages, one per line.
        sink: Binary stream receiving reply bytes as they arrive.

    Returns:
        Process exit status.
    """
    try:
        for line in _read_lines(source):
            try:
                reader = relay.send(line)
            except ChatBridgeError as exc:
                logger.error("failed to chat: %s", exc)
                return EXIT_CHAT_FAILURE

            try:
                with reader:
                    while chunk := reader.read(COPY_BUFFER_SIZE):
                        sink.write(chunk)
                        sink.flush()
            except ChatBridgeError as exc:
                logger.error("failed to chat: %s", exc)
                return EXIT_CHAT_FAILURE
            except BrokenPipeError:
                # Consumer stopped reading, e.g. piped into head
                logger.debug("output closed by consumer, stopping")
                return EXIT_OK
            except OSError as exc:
                logger.error("failed to write reply: %s", exc)
                return EXIT_CHAT_FAILURE
    except InputReadError as exc:
        logger.error("failed to read input: %s", exc)
        return EXIT_INPUT_FAILURE

    return EXIT_OK
