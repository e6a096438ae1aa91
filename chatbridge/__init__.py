"""ChatBridge - streaming relay between a terminal and a chat completion service."""

__version__ = "0.1.0"
