"""Shared test fixtures for ChatBridge test suite."""

import threading

import pytest

from chatbridge.llm.base import BaseCompletionClient, CompletionStream


class FakeCompletionStream(CompletionStream):
    """Scripted upstream: yields fragments, then ends or raises.

    If ``gate`` is given, nothing is yielded until it is set.
    """

    def __init__(self, fragments, error=None, gate=None):
        self.fragments = list(fragments)
        self.error = error
        self.gate = gate
        self.yielded = 0
        self.close_calls = 0
        self.released = threading.Event()

    def __iter__(self):
        if self.gate is not None:
            self.gate.wait(timeout=5)
        for fragment in self.fragments:
            self.yielded += 1
            yield fragment
        if self.error is not None:
            raise self.error

    def close(self):
        self.close_calls += 1
        self.released.set()


class FakeCompletionClient(BaseCompletionClient):
    """Hands out queued streams and records every request."""

    def __init__(self, streams=(), error=None, model="fake-model"):
        self.streams = list(streams)
        self.error = error
        self.model = model
        self.requests: list[list[tuple[str, str]]] = []

    def open_stream(self, messages):
        self.requests.append(list(messages))
        if self.error is not None:
            raise self.error
        return self.streams.pop(0)


@pytest.fixture
def make_stream():
    """Factory for scripted upstream streams."""
    return FakeCompletionStream


@pytest.fixture
def make_client():
    """Factory for fake completion clients."""
    return FakeCompletionClient


@pytest.fixture
def tmp_config_file(tmp_path):
    """Path for a temporary YAML config file."""
    return tmp_path / "config.yaml"
