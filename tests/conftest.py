"""
Shared fixtures: a scripted completion client and a recording sleep.
"""

import json

import pytest

from l10n_gpt.errors import TransientTransportTimeout
from l10n_gpt.translate.client import CompletionClient, content_payload


class ScriptedClient(CompletionClient):
    """Completion client that replays canned responses in order.

    Each script item is either a response dict, a string (wrapped as
    message content), or an exception instance to raise.
    """

    def __init__(self, script=None):
        self.script = list(script or [])
        self.requests = []

    @property
    def name(self) -> str:
        return "scripted"

    def complete(self, request):
        self.requests.append(request)
        if not self.script:
            raise AssertionError("ScriptedClient ran out of responses")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        if isinstance(item, str):
            return content_payload(item)
        return item


class RecordingSleep:
    """Stand-in for time.sleep that only records durations."""

    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)

    @property
    def total(self):
        return sum(self.calls)


def batch_answer(*pairs):
    """JSON array answer from (key, value) pairs."""
    return json.dumps([{"key": k, "string_to_translate": v} for k, v in pairs])


@pytest.fixture
def sleep():
    return RecordingSleep()


@pytest.fixture
def timeout():
    return TransientTransportTimeout("timed out")
