"""
Listing session routes - one live listing controller per WebSocket
"""
from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from pydantic import ValidationError
from typing import Any, Dict, Optional
import asyncio
import json
import logging

from ...application.listing import ListingController
from ...application.locale import LocaleSignal
from ...application.services import ContentService
from ...config import settings
from ...dependencies import get_content_source
from ...domain.models import ContentKind
from ...domain.repositories import IContentSource, ILocaleRouter, IPreferenceStore
from ...infrastructure.cache import MemoryPreferenceStore, RedisCache, get_cache
from ...schemas import SessionCommand

logger = logging.getLogger(__name__)

router = APIRouter(tags=["Sessions"])


class SessionLocaleRouter(ILocaleRouter):
    """Routing layer of a live session; locale changes are pushed to the page"""

    def __init__(self, outbox: asyncio.Queue, locale: Optional[str] = None):
        self.outbox = outbox
        self.locale = locale

    def current_locale(self) -> Optional[str]:
        return self.locale

    async def push_locale(self, locale: str) -> None:
        self.locale = locale
        await self.outbox.put({"type": "locale", "locale": locale})


class CookieFallbackStore(IPreferenceStore):
    """Preference store that falls back to the locale cookie when it has no value"""

    def __init__(self, store: IPreferenceStore, cookie_locale: Optional[str] = None):
        self.store = store
        self.cookie_locale = cookie_locale

    async def get(self, key: str) -> Optional[str]:
        value = await self.store.get(key)
        return value if value is not None else self.cookie_locale

    async def set(self, key: str, value: str) -> bool:
        self.cookie_locale = value
        return await self.store.set(key, value)


class ListingSession:
    """Translates browser messages into listing controller transitions"""

    def __init__(
        self,
        kind: ContentKind,
        source: IContentSource,
        store: IPreferenceStore,
        preference_key: str,
        route_locale: Optional[str] = None,
        cache: Optional[RedisCache] = None,
    ):
        self.kind = kind
        self.source = source
        self.cache = cache
        self.outbox: asyncio.Queue = asyncio.Queue()
        self.router = SessionLocaleRouter(self.outbox, route_locale)
        self.signal = LocaleSignal(
            store=store,
            router=self.router,
            preference_key=preference_key,
            supported=settings.SUPPORTED_LOCALES,
            default=settings.DEFAULT_LOCALE,
        )
        self.categories = []
        self.controller: Optional[ListingController] = None

    async def start(self, browser_language: Optional[str] = None) -> ListingController:
        """Initialize the locale, load categories and issue the first fetch"""
        await self.signal.initialize(browser_language)
        self.categories = await ContentService(self.source, self.cache).categories(self.kind)
        self.controller = ListingController(
            self.kind,
            self.source,
            self.signal,
            page_size=settings.LISTING_PAGE_SIZE,
            search_delay=settings.SEARCH_DEBOUNCE_SECONDS,
            on_page_change=self._on_page_change,
            on_update=self._on_update,
            discard_stale_responses=settings.DISCARD_STALE_RESPONSES,
        )
        self.controller.reload()
        return self.controller

    def _on_page_change(self, page: int):
        self.outbox.put_nowait({"type": "scroll_top", "page": page})

    def _on_update(self, controller: ListingController):
        snapshot = controller.snapshot(self.categories)
        self.outbox.put_nowait({"type": "snapshot", "data": snapshot.model_dump(by_alias=True)})

    async def handle(self, raw: str) -> None:
        """Apply one browser message"""
        try:
            command = SessionCommand(**json.loads(raw))
        except (ValueError, TypeError, ValidationError) as e:
            await self.outbox.put({"type": "error", "detail": f"Malformed message: {e}"})
            return

        try:
            await self._dispatch(command)
        except (ValueError, TypeError) as e:
            await self.outbox.put({"type": "error", "detail": str(e)})

    async def _dispatch(self, command: SessionCommand) -> None:
        controller = self.controller
        value = command.value

        if command.type == "search":
            controller.type_search(str(value or ""))
        elif command.type == "category":
            controller.toggle_category(str(value or ""))
        elif command.type == "level":
            controller.toggle_level(str(value or ""))
        elif command.type == "page":
            controller.go_to(int(value))
        elif command.type == "next":
            controller.next_page()
        elif command.type == "prev":
            controller.prev_page()
        elif command.type == "clear":
            controller.clear_filters()
        elif command.type == "locale":
            await self.signal.set_locale(str(value))
        elif command.type == "toggle_locale":
            await self.signal.toggle()
        elif command.type == "route":
            # Direct navigation to a localized URL
            if not self.signal.is_supported(value):
                raise ValueError(f"Unsupported locale: {value!r}")
            self.router.locale = value
            self.signal.sync_from_router()

    def close(self):
        if self.controller:
            self.controller.close()


async def _pump(websocket: WebSocket, outbox: asyncio.Queue):
    while True:
        message: Dict[str, Any] = await outbox.get()
        await websocket.send_json(message)


@router.websocket("/ws/listings/{kind}")
async def listing_session(
    websocket: WebSocket,
    kind: str,
    source: IContentSource = Depends(get_content_source),
    cache: RedisCache = Depends(get_cache),
):
    """
    Live listing session

    The browser sends filter, paging and locale messages; the server answers
    with state snapshots after every change and settlement, plus
    "scroll_top" on page changes and "locale" when the route changes.
    """
    try:
        content_kind = ContentKind(kind)
    except ValueError:
        await websocket.close(code=1008)
        return

    await websocket.accept()

    visitor = websocket.cookies.get(settings.VISITOR_COOKIE_NAME)
    store = CookieFallbackStore(
        cache if visitor else MemoryPreferenceStore(),
        websocket.cookies.get(settings.LOCALE_COOKIE_NAME),
    )
    route_locale = websocket.query_params.get("locale")
    if route_locale not in settings.SUPPORTED_LOCALES:
        route_locale = None

    session = ListingSession(
        content_kind,
        source,
        store,
        preference_key=f"locale:{visitor or 'anonymous'}",
        route_locale=route_locale,
        cache=cache,
    )
    sender = asyncio.create_task(_pump(websocket, session.outbox))
    logger.info(f"Listing session opened for {content_kind.value}")

    try:
        await session.start(websocket.headers.get("accept-language"))
        while True:
            raw = await websocket.receive_text()
            await session.handle(raw)
    except WebSocketDisconnect:
        logger.info(f"Listing session closed for {content_kind.value}")
    finally:
        session.close()
        sender.cancel()
        try:
            await sender
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.error(f"Listing session sender failed: {e}")
