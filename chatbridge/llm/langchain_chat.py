"""Completion client backed by a LangChain chat model."""

from collections.abc import Iterator, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage

from chatbridge.llm.base import BaseCompletionClient, CompletionStream

_MESSAGE_TYPES = {
    "user": HumanMessage,
    "assistant": AIMessage,
    "system": SystemMessage,
}

_UNSET = object()


def _to_langchain(messages: Sequence[tuple[str, str]]) -> list[BaseMessage]:
    """Convert (role, content) pairs into LangChain messages."""
    converted = []
    for role, content in messages:
        if role not in _MESSAGE_TYPES:
            raise ValueError(f"Unknown message role: {role}")
        converted.append(_MESSAGE_TYPES[role](content=content))
    return converted


def _chunk_text(chunk: BaseMessage) -> str:
    """Extract the text delta from a streamed chunk."""
    content = chunk.content
    if isinstance(content, str):
        return content
    # Content blocks, e.g. [{"type": "text", "text": "..."}]
    parts = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(block.get("text", ""))
    return "".join(parts)


class LangChainCompletionStream(CompletionStream):
    """Wraps the chunk generator returned by BaseChatModel.stream()."""

    def __init__(self, chunks: Iterator[BaseMessage], first=_UNSET):
        self._chunks = chunks
        self._first = first
        self._closed = False

    def __iter__(self) -> Iterator[str]:
        if self._first is not _UNSET:
            first, self._first = self._first, _UNSET
            yield _chunk_text(first)
        for chunk in self._chunks:
            yield _chunk_text(chunk)

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        close = getattr(self._chunks, "close", None)
        if close is not None:
            close()


class LangChainCompletionClient(BaseCompletionClient):
    """Streams chat completions from any LangChain chat model."""

    def __init__(self, chat_model: BaseChatModel, model: str):
        """
        Initialize the client.

        Args:
            chat_model: Configured LangChain chat model.
            model: Model identifier, used in error messages and logs.
        """
        self._chat_model = chat_model
        self.model = model

    def open_stream(self, messages: Sequence[tuple[str, str]]) -> CompletionStream:
        """
        Start a streaming completion.

        The first chunk is pulled before returning, since LangChain only
        contacts the service once the generator is advanced. Connection and
        authentication failures therefore raise here rather than mid-stream.

        Args:
            messages: (role, content) pairs in transcript order.

        Returns:
            Stream of text fragments.
        """
        chunks = self._chat_model.stream(_to_langchain(messages))
        # Blocks until the first token so request errors raise here
        try:
            first = next(chunks)
        except StopIteration:
            return LangChainCompletionStream(iter(()))
        except Exception:
            chunks.close()
            raise
        return LangChainCompletionStream(chunks, first)
