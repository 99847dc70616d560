# site-service/tests/conftest.py
"""Shared fixtures for Site Service tests.

Provides an in-memory content backend, a virtual clock for the search
debounce and a locale router that records navigation, so listing behavior
can be exercised without a network or wall-clock waits.
"""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from site_service.application.locale import LocaleSignal
from site_service.domain.exceptions import ContentApiError
from site_service.domain.models import ContentKind
from site_service.domain.repositories import IContentSource, ILocaleRouter
from site_service.infrastructure.cache import MemoryPreferenceStore


def make_envelope(
    titles: List[str],
    page: int = 1,
    pages: int = 1,
    total: Optional[int] = None,
    limit: int = 6,
) -> Dict[str, Any]:
    """Build a list response the way the content backend shapes it."""
    data = [
        {"_id": f"oid-{title}", "id": title.lower().replace(" ", "-"), "title": title}
        for title in titles
    ]
    return {
        "status": "success",
        "results": len(data),
        "pagination": {
            "total": total if total is not None else len(data),
            "page": page,
            "pages": pages,
            "limit": limit,
        },
        "data": data,
    }


class FakeContentSource(IContentSource):
    """Scripted content backend.

    Each list call pops the next scripted response: a payload dict, an
    exception to raise, or a future to await first. With nothing scripted
    it answers with ``default``.
    """

    def __init__(self, default: Optional[Dict[str, Any]] = None):
        self.default = default or make_envelope(["Cold Calling"])
        self.responses: List[Any] = []
        self.calls: List[Dict[str, Any]] = []
        self.details: Dict[str, Dict[str, Any]] = {}
        self.category_lists: Dict[ContentKind, List[Dict[str, Any]]] = {}
        self.register_error: Optional[ContentApiError] = None
        self.registered: List[Dict[str, str]] = []

    async def list(self, kind, params):
        self.calls.append({"kind": kind, **params})
        response = self.responses.pop(0) if self.responses else self.default
        if isinstance(response, asyncio.Future):
            response = await response
        if isinstance(response, Exception):
            raise response
        return response

    async def detail(self, kind, item_id, audience):
        if item_id not in self.details:
            raise ContentApiError("Not found", status_code=404)
        return {"status": "success", "data": self.details[item_id]}

    async def categories(self, kind):
        return self.category_lists.get(kind, [])

    async def register(self, name, email, password):
        if self.register_error:
            raise self.register_error
        self.registered.append({"name": name, "email": email, "password": password})
        return {"status": "success"}


class RecordingRouter(ILocaleRouter):
    """Locale router that remembers every navigation."""

    def __init__(self, locale: Optional[str] = None):
        self.locale = locale
        self.pushed: List[str] = []

    def current_locale(self):
        return self.locale

    async def push_locale(self, locale):
        self.locale = locale
        self.pushed.append(locale)


class _Timer:
    def __init__(self, when, callback, args):
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class VirtualClock:
    """Scheduler with manually advanced time (seconds)."""

    def __init__(self):
        self.now = 0.0
        self._timers: List[_Timer] = []

    def call_later(self, delay, callback, *args):
        timer = _Timer(self.now + delay, callback, args)
        self._timers.append(timer)
        return timer

    def advance(self, seconds: float):
        target = self.now + seconds
        while True:
            due = [t for t in self._timers if not t.cancelled and t.when <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.when)
            self._timers.remove(timer)
            self.now = timer.when
            timer.callback(*timer.args)
        self.now = target

    def advance_to(self, when: float):
        self.advance(when - self.now)


@pytest.fixture
def source():
    return FakeContentSource()


@pytest.fixture
def clock():
    return VirtualClock()


@pytest.fixture
def router():
    return RecordingRouter()


@pytest.fixture
def store():
    return MemoryPreferenceStore()


@pytest.fixture
def signal(store, router):
    return LocaleSignal(store=store, router=router, preference_key="locale:test")
