"""Unit tests for chatbridge.frontends.interactive."""

import io
from unittest.mock import MagicMock, patch

from rich.console import Console

from chatbridge.core.config import UIConfig
from chatbridge.core.errors import CompletionStreamError
from chatbridge.core.relay import StreamingRelay
from chatbridge.frontends.interactive import InteractiveSession


def _make_session(relay, inputs=None, **ui_kwargs):
    """Session writing to an in-memory console, with scripted input."""
    console = Console(file=io.StringIO(), width=120)
    if inputs is not None:
        console.input = MagicMock(side_effect=inputs)
    return InteractiveSession(relay, UIConfig(**ui_kwargs), console=console)


def _drain(session):
    polls = 0
    while session.poll():
        polls += 1
    return polls


class TestSubmitAndPoll:
    def test_reply_fed_into_transcript(self, make_client, make_stream):
        relay = StreamingRelay(make_client([make_stream(["Hel", "lo", "!"])]))
        session = _make_session(relay)

        assert session.submit("hello") is True
        assert session.input_enabled is False
        _drain(session)

        assert session.turns == [("You", "hello"), ("Assistant", "Hello!")]
        assert session.input_enabled is True
        assert session.last_error is None

    def test_reads_at_most_buffer_size(self, make_client, make_stream):
        relay = StreamingRelay(make_client([make_stream(["abcdefgh"])]))
        session = _make_session(relay, buffer_size=3)

        session.submit("x")
        assert _drain(session) == 3
        assert session.turns[-1][1] == "abcdefgh"

    def test_multibyte_character_split_across_reads(self, make_client, make_stream):
        relay = StreamingRelay(make_client([make_stream(["日本"])]))
        session = _make_session(relay, buffer_size=2)

        session.submit("x")
        _drain(session)

        assert session.turns[-1][1] == "日本"

    def test_send_failure_sets_error_and_keeps_input(self, make_client):
        relay = StreamingRelay(make_client(error=ConnectionError("refused")))
        session = _make_session(relay)

        assert session.submit("hello") is False
        assert session.input_enabled is True
        assert "refused" in str(session.last_error)
        assert "refused" in session.render_reply().plain

    def test_stream_error_is_transient(self, make_client, make_stream):
        client = make_client(
            [make_stream(["par"], error=RuntimeError("dropped")), make_stream(["ok"])]
        )
        session = _make_session(StreamingRelay(client))

        session.submit("first")
        _drain(session)
        assert isinstance(session.last_error, CompletionStreamError)
        assert session.turns[-1] == ("Assistant", "par")
        assert session.input_enabled is True

        session.submit("second")
        assert session.last_error is None
        _drain(session)
        assert session.turns[-1] == ("Assistant", "ok")

    def test_custom_assistant_label(self, make_client, make_stream):
        relay = StreamingRelay(make_client([make_stream(["hi"])]))
        session = _make_session(relay, assistant_label="Bot")
        session.submit("x")
        _drain(session)
        assert session.render_reply().plain == "Bot: hi"

    def test_poll_without_reply(self, make_client):
        session = _make_session(StreamingRelay(make_client()))
        assert session.poll() is False

    def test_abort_cancels_relay(self):
        relay = MagicMock()
        session = _make_session(relay)
        session.submit("x")
        session.abort()
        relay.cancel.assert_called_once()
        relay.send.return_value.close.assert_called_once()
        assert session.input_enabled is True


class TestRun:
    def test_conversation_then_quit(self, make_client, make_stream):
        client = make_client([make_stream(["Hello!"])])
        session = _make_session(StreamingRelay(client), inputs=["hello", "/quit"])

        session.run()

        output = session.console.file.getvalue()
        assert "Hello!" in output
        assert "Session ended." in output
        assert client.requests == [[("user", "hello")]]

    def test_blank_input_ignored(self, make_client):
        client = make_client()
        session = _make_session(StreamingRelay(client), inputs=["   ", "/exit"])
        session.run()
        assert client.requests == []

    def test_transcript_command(self, make_client, make_stream):
        client = make_client([make_stream(["Hi"])])
        session = _make_session(StreamingRelay(client), inputs=["hello", "/transcript", "/quit"])

        session.run()

        output = session.console.file.getvalue()
        # rich expands the transcript's tabs
        assert "user:" in output
        assert "assistant:" in output

    def test_eof_ends_session(self, make_client):
        session = _make_session(StreamingRelay(make_client()), inputs=EOFError())
        session.run()
        assert "Session ended." in session.console.file.getvalue()

    def test_send_error_does_not_end_session(self, make_client, make_stream):
        client = make_client(error=ConnectionError("refused"))
        session = _make_session(StreamingRelay(client), inputs=["hello", "again", "/quit"])

        session.run()

        assert len(client.requests) == 2
        assert "Error:" in session.console.file.getvalue()

    def test_interrupt_while_streaming_aborts_reply(self, make_client, make_stream):
        client = make_client([make_stream(["a"])])
        session = _make_session(StreamingRelay(client), inputs=["hello", "/quit"])

        with patch.object(session, "_stream_reply", side_effect=KeyboardInterrupt):
            session.run()

        assert session.input_enabled is True
        assert "Reply interrupted." in session.console.file.getvalue()

    def test_interrupt_while_request_opens_keeps_session(self):
        relay = MagicMock()
        relay.model = "mock-model"
        relay.send.side_effect = KeyboardInterrupt
        session = _make_session(relay, inputs=["hello", "/quit"])

        session.run()

        output = session.console.file.getvalue()
        assert session.input_enabled is True
        assert "Reply interrupted." in output
        assert "Session ended." in output
        relay.send.assert_called_once_with("hello")
