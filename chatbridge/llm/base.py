"""Abstract base classes for chat completion providers."""

from abc import ABC, abstractmethod
from collections.abc import Iterator, Sequence


class CompletionStream(ABC):
    """An open streaming completion.

    Iterating yields text fragments in the order the service emits them.
    Iteration ends on the service's end-of-data signal; a failure raises
    out of the iterator.
    """

    @abstractmethod
    def __iter__(self) -> Iterator[str]:
        pass

    @abstractmethod
    def close(self) -> None:
        """Release the upstream connection. Safe to call more than once."""
        pass

    def __enter__(self) -> "CompletionStream":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class BaseCompletionClient(ABC):
    """Abstract interface for chat completion providers."""

    model: str

    @abstractmethod
    def open_stream(self, messages: Sequence[tuple[str, str]]) -> CompletionStream:
        """
        Start a streaming completion for a conversation.

        Args:
            messages: (role, content) pairs in transcript order.

        Returns:
            The open stream.

        Raises:
            Exception: Whatever the provider raises when the request
                cannot be established.
        """
        pass
