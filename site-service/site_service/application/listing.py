"""
Filterable listing controller shared by the lessons and articles pages
"""
from typing import Callable, List, Optional, Set
import asyncio
import logging

from ..domain.models import (
    LEVELS,
    ContentKind,
    FilterState,
    PaginationMeta,
    ResultPage,
)
from ..domain.repositories import IContentSource
from ..schemas import (
    ArticleCard,
    Category,
    CourseCard,
    FilterSchema,
    ListEnvelope,
    ListingSnapshot,
    PaginationSchema,
)
from .debounce import Scheduler, SearchCoalescer
from .locale import LocaleSignal

logger = logging.getLogger(__name__)


def card_for(kind: ContentKind, item: dict) -> dict:
    """Render one backend item as a display card"""
    if kind is ContentKind.LESSONS:
        return CourseCard.from_item(item).model_dump(by_alias=True)
    return ArticleCard.from_item(item).model_dump(by_alias=True)


def listing_status(result: ResultPage, loading: bool = False, error: Optional[str] = None) -> str:
    """
    Classify what the listing shows.

    A failed fetch reports "error" even though the previous items stay on
    screen, so the UI can tell it apart from a genuine zero-result search.
    """
    if loading:
        return "loading"
    if error:
        return "error"
    if result.is_empty:
        return "empty"
    return "ok"


class ListingController:
    """
    Owns the filter state, result store and pagination of one listing view.

    Every state transition schedules exactly one ``refresh`` on the running
    event loop and returns the task. Requests already in flight are never
    cancelled: unless ``discard_stale_responses`` is set, whichever response
    settles last wins, even if it belongs to an older request.
    """

    def __init__(
        self,
        kind: ContentKind,
        source: IContentSource,
        locale_signal: LocaleSignal,
        page_size: int = 6,
        filters: Optional[FilterState] = None,
        initial: Optional[ResultPage] = None,
        search_delay: float = 0.5,
        scheduler: Optional[Scheduler] = None,
        on_page_change: Optional[Callable[[int], None]] = None,
        on_update: Optional[Callable[["ListingController"], None]] = None,
        discard_stale_responses: bool = False,
    ):
        if page_size <= 0:
            raise ValueError("page_size must be > 0")
        self.kind = ContentKind(kind)
        self.source = source
        self.locale_signal = locale_signal
        self.page_size = page_size
        self.filters = filters or FilterState()
        self.result = initial or ResultPage(pagination=PaginationMeta(limit=page_size))
        self.loading = False
        self.last_error: Optional[str] = None
        self.on_page_change = on_page_change
        self.on_update = on_update
        self.discard_stale_responses = discard_stale_responses

        self.coalescer = SearchCoalescer(
            self._on_search_committed, delay=search_delay, scheduler=scheduler
        )
        self.coalescer.reset(self.filters.search)
        self._unsubscribe: Optional[Callable[[], None]] = locale_signal.subscribe(
            self._on_locale_changed
        )
        self._issued = 0
        self._in_flight: Set[asyncio.Task] = set()

    # Fetch orchestration
    async def refresh(self) -> bool:
        """
        Fetch the page described by the current filters and locale.

        Returns True when the result store was replaced. Failures are logged
        and leave the previous result in place.
        """
        sequence, params = self._issue()
        return await self._fetch(sequence, params)

    def _issue(self):
        # Parameters are captured when the request is issued, not when it runs
        self._issued += 1
        self.loading = True
        return self._issued, self.filters.to_params(self.page_size, self.locale_signal.locale)

    async def _fetch(self, sequence: int, params: dict) -> bool:
        self._emit()
        try:
            payload = await self.source.list(self.kind, params)
            envelope = ListEnvelope(**payload)
        except Exception as e:
            if self._is_stale(sequence):
                logger.debug(f"Ignoring failure of superseded {self.kind.value} request #{sequence}")
                return False
            logger.error(f"Error fetching {self.kind.value} with {params}: {e}")
            self.last_error = str(e) or e.__class__.__name__
            return False
        else:
            if self._is_stale(sequence):
                logger.debug(f"Discarding superseded {self.kind.value} response #{sequence}")
                return False
            self.result = envelope.to_result_page()
            self.last_error = None
            return True
        finally:
            if not self._is_stale(sequence):
                self.loading = False
            self._emit()

    def _is_stale(self, sequence: int) -> bool:
        return self.discard_stale_responses and sequence != self._issued

    def _trigger(self) -> asyncio.Task:
        sequence, params = self._issue()
        task = asyncio.get_running_loop().create_task(self._fetch(sequence, params))
        self._in_flight.add(task)
        task.add_done_callback(self._in_flight.discard)
        return task

    def reload(self) -> asyncio.Task:
        """Fetch again with unchanged filters (page mount, retry)"""
        return self._trigger()

    async def settle(self) -> None:
        """Wait until every request issued so far has settled"""
        while self._in_flight:
            await asyncio.gather(*list(self._in_flight))

    # Filter transitions
    def _apply(self, filters: FilterState) -> Optional[asyncio.Task]:
        if filters == self.filters:
            return None
        self.filters = filters
        return self._trigger()

    def set_category(self, category: str) -> Optional[asyncio.Task]:
        """Filter by category slug ("" for all); back to page 1"""
        return self._apply(self.filters.with_dimension(category=category or ""))

    def toggle_category(self, category: str) -> Optional[asyncio.Task]:
        """Select a category, or clear it when it is already active"""
        if category and category == self.filters.category:
            category = ""
        return self.set_category(category)

    def set_level(self, level: str) -> Optional[asyncio.Task]:
        """Filter by level ("" for all); back to page 1"""
        level = level or ""
        if level:
            if not self.kind.supports_level:
                raise ValueError(f"{self.kind.value} cannot be filtered by level")
            if level not in LEVELS:
                raise ValueError(f"Unknown level: {level!r}")
        return self._apply(self.filters.with_dimension(level=level))

    def toggle_level(self, level: str) -> Optional[asyncio.Task]:
        """Select a level, or clear it when it is already active"""
        if level and level == self.filters.level:
            level = ""
        return self.set_level(level)

    def type_search(self, text: str) -> None:
        """Feed raw search input; the fetch waits for the debounce"""
        self.coalescer.push(text or "")
        self._emit()

    def _on_search_committed(self, value: str) -> None:
        self._apply(self.filters.with_dimension(search=value))

    def _on_locale_changed(self, locale: str) -> None:
        logger.debug(f"Locale changed to {locale}, refreshing {self.kind.value}")
        self._trigger()

    def clear_filters(self) -> asyncio.Task:
        """Reset every dimension and go back to page 1"""
        self.coalescer.reset("")
        self.filters = self.filters.cleared()
        return self._trigger()

    # Pagination
    @property
    def page(self) -> int:
        return self.filters.page

    @property
    def pages(self) -> int:
        return self.result.pagination.pages

    @property
    def page_numbers(self) -> List[int]:
        return self.result.pagination.page_numbers()

    def _change_page(self, page: int) -> Optional[asyncio.Task]:
        filters = self.filters.with_page(page)
        if self.on_page_change:
            self.on_page_change(page)
        return self._apply(filters)

    def prev_page(self) -> Optional[asyncio.Task]:
        if self.page <= 1:
            return None
        return self._change_page(self.page - 1)

    def next_page(self) -> Optional[asyncio.Task]:
        if self.page >= self.pages:
            return None
        return self._change_page(self.page + 1)

    def go_to(self, page: int) -> Optional[asyncio.Task]:
        """Jump to a page; callers only offer numbers from ``page_numbers``"""
        return self._change_page(page)

    # State
    @property
    def status(self) -> str:
        return listing_status(self.result, self.loading, self.last_error)

    def snapshot(self, categories: Optional[List[Category]] = None) -> ListingSnapshot:
        """Serializable view of the listing for the presentation layer"""
        return ListingSnapshot(
            kind=self.kind.value,
            locale=self.locale_signal.locale,
            status=self.status,
            filters=FilterSchema(
                page=self.filters.page,
                category=self.filters.category,
                level=self.filters.level,
                search=self.filters.search,
            ),
            items=[card_for(self.kind, item) for item in self.result.items],
            pagination=PaginationSchema.from_meta(self.result.pagination),
            page_numbers=self.page_numbers,
            categories=categories or [],
            levels=list(LEVELS) if self.kind.supports_level else [],
            raw_search=self.coalescer.raw,
            loading=self.loading,
            error=self.last_error,
        )

    def _emit(self):
        if self.on_update:
            self.on_update(self)

    def close(self) -> None:
        """Stop reacting to input; requests in flight are left to finish"""
        self.coalescer.cancel()
        if self._unsubscribe:
            self._unsubscribe()
            self._unsubscribe = None
