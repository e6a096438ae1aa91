"""Interactive terminal chat with a live-updating reply view."""

from __future__ import annotations

import codecs
import logging

from rich.console import Console
from rich.live import Live
from rich.text import Text

from chatbridge.core.config import UIConfig
from chatbridge.core.errors import ChatBridgeError
from chatbridge.core.pipe import PipeReader
from chatbridge.core.relay import StreamingRelay

logger = logging.getLogger(__name__)

QUIT_COMMANDS = ("/quit", "/exit")
TRANSCRIPT_COMMAND = "/transcript"


class InteractiveSession:
    """Terminal chat loop.

    Input is disabled while a reply streams. Each poll reads at most
    ``buffer_size`` bytes from the reply stream and feeds them into the
    transcript view; end-of-data completes the turn.
    """

    def __init__(self, relay: StreamingRelay, config: UIConfig, console: Console | None = None):
        self.relay = relay
        self.config = config
        self.console = console or Console()
        self.turns: list[tuple[str, str]] = []
        self.last_error: Exception | None = None
        self.input_enabled = True
        self._reader: PipeReader | None = None
        self._decoder: codecs.IncrementalDecoder | None = None

    def submit(self, text: str) -> bool:
        """
        Send a message and open its reply stream.

        Returns:
            True if the reply is now streaming.
        """
        self.last_error = None
        self.turns.append(("You", text))
        try:
            self._reader = self.relay.send(text)
        except ChatBridgeError as exc:
            logger.debug("send failed: %s", exc)
            self.last_error = exc
            return False

        self.turns.append((self.config.assistant_label, ""))
        # Multi-byte characters can be split across reads
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self.input_enabled = False
        return True

    def poll(self) -> bool:
        """
        Read the next chunk of the active reply.

        Returns:
            True while the reply is still streaming.
        """
        if self._reader is None:
            return False

        try:
            chunk = self._reader.read(self.config.buffer_size)
        except ChatBridgeError as exc:
            self.last_error = exc
            self._finish_turn()
            return False

        if not chunk:
            self._append_reply(self._decoder.decode(b"", final=True))
            self._finish_turn()
            return False

        self._append_reply(self._decoder.decode(chunk))
        return True

    def _append_reply(self, text: str) -> None:
        if text:
            label, reply = self.turns[-1]
            self.turns[-1] = (label, reply + text)

    def _finish_turn(self) -> None:
        if self._reader is not None:
            self._reader.close()
        self._reader = None
        self._decoder = None
        self.input_enabled = True

    def abort(self) -> None:
        """Stop the active reply and re-enable input."""
        self.relay.cancel()
        self._finish_turn()

    def render_reply(self) -> Text:
        """Build the view of the latest reply plus any pending error."""
        view = Text()
        if self._has_reply():
            label, reply = self.turns[-1]
            view.append(f"{label}: ", style="bold cyan")
            view.append(reply)
        if self.last_error is not None:
            if view.plain:
                view.append("\n")
            view.append(f"Error: {self.last_error}", style="red")
        return view

    def _has_reply(self) -> bool:
        return bool(self.turns) and self.turns[-1][0] == self.config.assistant_label

    def _stream_reply(self) -> None:
        with Live(
            self.render_reply(),
            console=self.console,
            refresh_per_second=1 / self.config.poll_interval,
        ) as live:
            while self.poll():
                live.update(self.render_reply())
            live.update(self.render_reply())

    def run(self) -> None:
        """Run the chat loop until the user quits."""
        self.console.print(f"[cyan]ChatBridge - {self.relay.model}")
        self.console.print(
            f"[dim]Type {TRANSCRIPT_COMMAND} to show the conversation, /quit to exit.[/dim]\n"
        )

        while True:
            try:
                text = self.console.input("[bold yellow]You:[/bold yellow] ")
            except (EOFError, KeyboardInterrupt):
                break

            command = text.strip()
            if not command:
                continue
            if command in QUIT_COMMANDS:
                break
            if command == TRANSCRIPT_COMMAND:
                self.console.print(self.relay.messages(), markup=False, highlight=False)
                continue

            try:
                if not self.submit(text):
                    self.console.print(self.render_reply())
                    continue
                self._stream_reply()
            except KeyboardInterrupt:
                self.abort()
                self.console.print("[yellow]Reply interrupted.")

        self.console.print("\n[blue]Session ended.")
