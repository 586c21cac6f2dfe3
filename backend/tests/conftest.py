import os
import sys

import pytest


def _ensure_backend_root_on_path() -> None:
    tests_dir = os.path.dirname(__file__)
    backend_root = os.path.abspath(os.path.join(tests_dir, ".."))
    if backend_root not in sys.path:
        sys.path.insert(0, backend_root)


_ensure_backend_root_on_path()


class FakeClient:
    """Stands in for GeminiClient; replays a canned reply or raises."""

    def __init__(self, reply=None, error=None):
        self.reply = reply
        self.error = error
        self.prompts = []

    async def generate_json(self, prompt):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.reply


@pytest.fixture
def fake_client():
    return FakeClient
