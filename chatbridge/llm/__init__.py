"""LLM module - Chat completion providers."""

# Lazy imports to avoid loading langchain on module load
# Use: from chatbridge.llm.base import BaseCompletionClient
# Use: from chatbridge.llm.langchain_chat import LangChainCompletionClient
