"""Exception types raised by the bridge."""


class ChatBridgeError(Exception):
    """Base class for bridge errors."""


class CompletionRequestError(ChatBridgeError):
    """The completion request could not be established."""


class CompletionStreamError(ChatBridgeError):
    """The completion service failed after the response stream opened."""


class SessionActiveError(ChatBridgeError):
    """A message was sent while a previous reply is still streaming."""


class StreamCancelledError(ChatBridgeError):
    """The reply stream was cancelled before the service finished."""
