"""Provider factories and relay construction."""

import logging
import os

from chatbridge.core.config import BridgeConfig, LLMConfig
from chatbridge.core.relay import StreamingRelay
from chatbridge.llm.base import BaseCompletionClient

logger = logging.getLogger(__name__)


def create_client(config: LLMConfig) -> BaseCompletionClient:
    """
    Factory function to create a completion client.

    Args:
        config: LLM configuration.

    Returns:
        Completion client instance.
    """
    from chatbridge.llm.langchain_chat import LangChainCompletionClient

    if config.provider == "ollama":
        from langchain_ollama import ChatOllama

        chat_model = ChatOllama(
            model=config.model,
            base_url=config.base_url,
            temperature=config.temperature,
            client_kwargs={"timeout": config.request_timeout},
        )
    elif config.provider == "openai":
        from langchain_openai import ChatOpenAI

        api_key = config.api_key or os.environ.get("OPENAI_API_KEY")
        if not api_key:
            raise ValueError("The openai provider needs llm.api_key or OPENAI_API_KEY")
        chat_model = ChatOpenAI(
            model=config.model,
            base_url=config.base_url,
            api_key=api_key,
            temperature=config.temperature,
            timeout=config.request_timeout,
            streaming=True,
        )
    elif config.provider == "fake":
        from langchain_core.language_models.fake_chat_models import FakeListChatModel

        if not config.fake_responses:
            raise ValueError("The fake provider needs at least one entry in llm.fake_responses")
        chat_model = FakeListChatModel(responses=config.fake_responses)
    else:
        raise ValueError(f"Unknown LLM provider: {config.provider}")

    logger.info("using %s provider with model %s", config.provider, config.model)
    return LangChainCompletionClient(chat_model, config.model)


def create_relay(config: BridgeConfig) -> StreamingRelay:
    """Build a relay for the configured provider."""
    return StreamingRelay(create_client(config.llm), system_prompt=config.llm.system_prompt)
