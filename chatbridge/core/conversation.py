"""Conversation transcript: an append-only log of role-tagged messages."""

import threading
from collections.abc import Iterator
from enum import Enum


class Role(str, Enum):
    """Author of a transcript entry."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message:
    """One transcript entry.

    Content only grows, and stops changing once the turn is finalized.
    Reads and appends are serialized on a per-message lock, so a reader
    always sees a prefix of the final content.
    """

    def __init__(self, role: Role, content: str = ""):
        self.role = role
        self._content = content
        self._finalized = False
        self._lock = threading.Lock()

    @property
    def content(self) -> str:
        with self._lock:
            return self._content

    @property
    def finalized(self) -> bool:
        return self._finalized

    def append(self, fragment: str) -> None:
        with self._lock:
            if self._finalized:
                raise ValueError(f"Cannot append to a finalized {self.role.value} message")
            self._content += fragment

    def finalize(self) -> None:
        with self._lock:
            self._finalized = True

    def __repr__(self) -> str:
        return f"Message(role={self.role.value!r}, content={self.content!r})"


class ConversationStore:
    """Ordered transcript owned by a single relay."""

    def __init__(self):
        self._messages: list[Message] = []
        self._lock = threading.Lock()

    def _append(self, message: Message) -> Message:
        with self._lock:
            self._messages.append(message)
        return message

    def append_user(self, text: str) -> Message:
        """Record a user submission verbatim."""
        return self._append(Message(Role.USER, text))

    def append_system(self, text: str) -> Message:
        """Record a system instruction."""
        return self._append(Message(Role.SYSTEM, text))

    def begin_assistant_turn(self) -> Message:
        """
        Start an empty assistant reply.

        Returns:
            The new message, used as the handle for append_to().
        """
        return self._append(Message(Role.ASSISTANT))

    def append_to(self, handle: Message, fragment: str) -> None:
        """
        Concatenate a fragment onto a message's content.

        Args:
            handle: Message returned by begin_assistant_turn().
            fragment: Text to append.

        Raises:
            ValueError: If the message has been finalized.
        """
        handle.append(fragment)

    def finalize(self, handle: Message) -> None:
        """Freeze a message's content."""
        handle.finalize()

    @property
    def messages(self) -> tuple[Message, ...]:
        with self._lock:
            return tuple(self._messages)

    def snapshot(self) -> list[tuple[str, str]]:
        """Return (role, content) pairs in transcript order."""
        return [(m.role.value, m.content) for m in self.messages]

    def render(self) -> str:
        """
        Render the transcript as text.

        Each message becomes "<role>:\\n\\t<content>\\n". An in-progress
        assistant turn renders whatever content has arrived so far.
        """
        return "".join(f"{m.role.value}:\n\t{m.content}\n" for m in self.messages)

    def __len__(self) -> int:
        with self._lock:
            return len(self._messages)

    def __iter__(self) -> Iterator[Message]:
        return iter(self.messages)
