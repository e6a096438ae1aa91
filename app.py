#!/usr/bin/env python3
"""ChatBridge - Entry Point."""

import argparse
import logging
import sys
from dataclasses import replace

from chatbridge.core.bridge import create_relay
from chatbridge.core.config import load_config
from chatbridge.core.log import configure_logging
from chatbridge.frontends.batch import EXIT_CHAT_FAILURE, EXIT_OK, run_batch
from chatbridge.frontends.interactive import InteractiveSession

logger = logging.getLogger(__name__)


def main() -> int:
    """Main entry point for ChatBridge. Returns the process exit status."""
    parser = argparse.ArgumentParser(description="ChatBridge")
    parser.add_argument(
        "--config",
        type=str,
        default="config/default.yaml",
        help="Path to configuration file",
    )
    parser.add_argument(
        "--provider",
        type=str,
        help="Override LLM provider (ollama, openai, fake)",
    )
    parser.add_argument(
        "--model",
        type=str,
        help="Override LLM model",
    )
    parser.add_argument(
        "--interactive",
        action="store_true",
        help="Run the interactive terminal chat instead of batch mode",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Override log level",
    )
    args = parser.parse_args()

    # Load configuration
    config = load_config(args.config)

    # Apply CLI overrides
    if args.provider:
        config = replace(config, llm=replace(config.llm, provider=args.provider))
    if args.model:
        config = replace(config, llm=replace(config.llm, model=args.model))
    if args.interactive:
        config = replace(config, mode="interactive")
    if args.log_level:
        config = replace(config, logging=replace(config.logging, level=args.log_level))

    configure_logging(config.logging.level)

    try:
        relay = create_relay(config)
    except ValueError as exc:
        logger.error("failed to set up the completion client: %s", exc)
        return EXIT_CHAT_FAILURE

    if config.mode == "interactive":
        InteractiveSession(relay, config.ui).run()
        return EXIT_OK

    return run_batch(relay, sys.stdin, sys.stdout.buffer)


if __name__ == "__main__":
    sys.exit(main())
