from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest


class RecordingCaller:
    """IActionCaller double returning canned responses and recording calls."""

    def __init__(self, responses: dict[str, Any] | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[tuple[str, dict[str, Any] | None]] = []

    async def call(self, action: str, params: dict[str, Any] | None = None) -> Any:
        self.calls.append((action, params))
        response = self.responses[action]
        if isinstance(response, Exception):
            raise response
        return response(params) if callable(response) else response


@pytest.fixture
def make_caller() -> Callable[..., RecordingCaller]:
    return RecordingCaller
