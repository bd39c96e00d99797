from typing import Any, Dict, List

import pytest


class FakeOrganizations:
    """Serves canned ListAccounts pages and records the calls."""

    def __init__(self, pages: List[Dict[str, Any]], error: Exception = None) -> None:
        self.pages = list(pages)
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def list_accounts(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.pages.pop(0)


class FakeCostExplorer:
    """Serves canned GetCostAndUsage pages and records the calls."""

    def __init__(self, pages: List[Dict[str, Any]], error: Exception = None) -> None:
        self.pages = list(pages)
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    def get_cost_and_usage(self, **kwargs: Any) -> Dict[str, Any]:
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.pages.pop(0)


@pytest.fixture
def fake_org():
    return FakeOrganizations


@pytest.fixture
def fake_ce():
    return FakeCostExplorer
