"""Pytest configuration and fixtures."""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from jsonsync.client.models import PageResponse


class FakeClient:
    """Records calls and answers with canned responses instead of HTTP."""

    def __init__(self) -> None:
        self.response = PageResponse(items=[])
        self.item: Any = None
        self.error: Optional[Exception] = None
        self.find_calls: List[Tuple[Dict[str, Any], int, int]] = []
        self.find_one_calls: List[Any] = []
        # When set, the target's is_loading flag is recorded on every call
        self.observed_target: Optional[Dict[str, Any]] = None
        self.loading_at_call: List[Any] = []

    def _observe(self) -> None:
        if self.observed_target is not None:
            self.loading_at_call.append(self.observed_target.get("is_loading"))

    def find(self, query, page=0, page_size=10):
        self.find_calls.append((query, page, page_size))
        self._observe()
        if self.error is not None:
            raise self.error
        return self.response

    def find_one(self, item_id):
        self.find_one_calls.append(item_id)
        self._observe()
        if self.error is not None:
            raise self.error
        return self.item


@pytest.fixture
def client():
    """Fake resource client answering with an empty page."""
    return FakeClient()


@pytest.fixture
def server_url():
    return "http://serverurl.com/"
