# File: tests/conftest.py
import asyncio
import inspect
from typing import Any, Callable, List, Optional

import pytest

from deal_scout.config import LoaderConfig
from deal_scout.presenter import RecordingPresenter
from deal_scout.transport.cancel import CancelToken


def leads_page(ids, has_next: bool = False) -> dict:
    """Build a /api/v4/leads payload with the given lead ids."""
    payload = {
        "_page": 1,
        "_embedded": {"leads": [{"id": i, "name": f"Deal {i}", "created_at": 1700000000} for i in ids]},
        "_links": {"self": {"href": "https://acme.test/api/v4/leads"}},
    }
    if has_next:
        payload["_links"]["next"] = {"href": "https://acme.test/api/v4/leads?page=next"}
    return payload


def tasks_payload(*tasks: dict) -> dict:
    return {"_embedded": {"tasks": list(tasks)}}


class FakeFetcher:
    """
    Stands in for RelayFetcher. *responder(url, token)* returns a payload,
    an exception instance to raise, or an awaitable resolving to either.
    """

    def __init__(self, responder: Callable[[str, Optional[CancelToken]], Any]) -> None:
        self.responder = responder
        self.calls: List[str] = []

    async def fetch(self, url, credential, token=None, timeout=None):
        self.calls.append(url)
        result = self.responder(url, token)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, BaseException):
            raise result
        return result

    def page_calls(self) -> List[str]:
        return [u for u in self.calls if "/api/v4/leads" in u]

    def task_calls(self) -> List[str]:
        return [u for u in self.calls if "/api/v4/tasks" in u]


def page_number(url: str) -> int:
    query = url.split("?", 1)[1]
    params = dict(part.split("=", 1) for part in query.split("&"))
    return int(params["page"])


@pytest.fixture()
def fast_config() -> LoaderConfig:
    """
    Config with every delay set to zero so queue tests run instantly.
    """
    return LoaderConfig(
        relays=["https://relay.test/?url="],
        request_timeout=1.0,
        task_timeout=2.0,
        request_delay=0,
        retry_backoff=0,
        queue_backoff=0,
    )


@pytest.fixture()
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


async def wait_for_event(event: asyncio.Event, timeout: float = 2.0) -> None:
    await asyncio.wait_for(event.wait(), timeout=timeout)
