"""
Shared fixtures for the voyant tests.

No test touches the network: the OpenAI client is replaced by a scripted
fake (unmatched prompts raise, so callers take their fallback paths),
outbound HTTP raises, and API keys for the search and attractions
providers are removed.
"""

from types import SimpleNamespace
from typing import List, Tuple

import pytest
import requests

from voyant.memory import configure_store
from voyant.shared.config import DEFAULT_CONFIG
from voyant.shared.llm import client as llm_client


class FakeOpenAI:
    """
    Stand-in for the OpenAI client.

    ``add(substring, reply)`` scripts a reply for any prompt containing
    ``substring``; the first matching rule wins. Prompts with no rule raise
    RuntimeError, like an unavailable provider.
    """

    def __init__(self):
        self.rules: List[Tuple[str, str]] = []
        self.prompts: List[str] = []
        self.chat = SimpleNamespace(completions=SimpleNamespace(create=self._create))

    def add(self, substring: str, reply: str) -> "FakeOpenAI":
        self.rules.append((substring, reply))
        return self

    def _create(self, **kwargs):
        prompt = kwargs["messages"][-1]["content"]
        self.prompts.append(prompt)
        for substring, reply in self.rules:
            if substring in prompt:
                message = SimpleNamespace(content=reply)
                return SimpleNamespace(choices=[SimpleNamespace(message=message)])
        raise RuntimeError("LLM unavailable in tests")


@pytest.fixture(autouse=True)
def fake_llm(monkeypatch):
    fake = FakeOpenAI()
    monkeypatch.setattr(llm_client, "get_cached_client", lambda: fake)
    return fake


@pytest.fixture(autouse=True)
def fresh_store():
    """Every test starts with an empty in-memory slot store."""
    store = configure_store(None)
    yield store
    configure_store(None)


@pytest.fixture(autouse=True)
def no_network(monkeypatch):
    def _blocked(*args, **kwargs):
        raise RuntimeError("Network access is disabled in tests")

    monkeypatch.setattr(requests, "get", _blocked)
    monkeypatch.setattr(requests.Session, "request", _blocked)
    monkeypatch.delenv("TAVILY_API_KEY", raising=False)
    monkeypatch.delenv("OPENTRIPMAP_API_KEY", raising=False)


@pytest.fixture(autouse=True)
def default_flags(monkeypatch):
    monkeypatch.setattr(DEFAULT_CONFIG, "search_summary", True)
    monkeypatch.setattr(DEFAULT_CONFIG, "deep_research", True)
