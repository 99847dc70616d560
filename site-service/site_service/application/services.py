"""
Application services - page data and registration
"""
from typing import List, Optional, Tuple
import logging

from pydantic import ValidationError

from ..config import settings
from ..domain.exceptions import ContentApiError
from ..domain.models import LEVELS, ContentKind, FilterState, audience_for
from ..domain.repositories import IContentSource
from ..infrastructure.cache import RedisCache
from ..schemas import (
    ArticleCard,
    ArticleDetail,
    Category,
    CourseCard,
    CourseDetail,
    DetailEnvelope,
    FilterSchema,
    HomeResponse,
    ListEnvelope,
    ListingPageResponse,
    RegisterRequest,
    RegistrationResult,
    category_from,
)
from .listing import card_for, listing_status

logger = logging.getLogger(__name__)

DEFAULT_REGISTRATION_ERROR = "An error occurred during registration. Please try again."
REGISTRATION_SUCCESS = "Registration successful! You can now log in."


class ContentService:
    """Server-side page data for the landing, listing and detail pages"""

    def __init__(self, source: IContentSource, cache: Optional[RedisCache] = None):
        self.source = source
        self.cache = cache

    async def _fetch_list(
        self,
        kind: ContentKind,
        params: dict
    ) -> Tuple[ListEnvelope, Optional[str]]:
        """Fetch a list envelope, falling back to an empty one on failure"""
        try:
            payload = await self.source.list(kind, params)
            return ListEnvelope(**payload), None
        except (ContentApiError, ValidationError) as e:
            logger.error(f"Error fetching {kind.value} page data: {e}")
            return ListEnvelope.empty(params.get("limit", settings.LISTING_PAGE_SIZE)), str(e)

    async def landing(self, locale: str) -> HomeResponse:
        """Featured lessons and articles for the home page"""
        audience = audience_for(locale).value
        lessons, _ = await self._fetch_list(
            ContentKind.LESSONS,
            {"limit": settings.FEATURED_LESSONS_LIMIT, "audience": audience},
        )
        articles, _ = await self._fetch_list(
            ContentKind.ARTICLES,
            {"limit": settings.FEATURED_ARTICLES_LIMIT, "audience": audience},
        )
        return HomeResponse(
            locale=locale,
            featured_lessons=[CourseCard.from_item(item) for item in lessons.data],
            featured_articles=[ArticleCard.from_item(item) for item in articles.data],
        )

    async def listing_page(
        self,
        kind: ContentKind,
        filters: FilterState,
        locale: str
    ) -> ListingPageResponse:
        """Initial data for a listing page"""
        params = filters.to_params(settings.LISTING_PAGE_SIZE, locale)
        envelope, error = await self._fetch_list(kind, params)
        categories = await self.categories(kind)
        result = envelope.to_result_page()

        return ListingPageResponse(
            kind=kind.value,
            locale=locale,
            status=listing_status(result, error=error),
            filters=FilterSchema(
                page=filters.page,
                category=filters.category,
                level=filters.level,
                search=filters.search,
            ),
            items=[card_for(kind, item) for item in result.items],
            pagination=envelope.pagination,
            page_numbers=result.pagination.page_numbers(),
            categories=categories,
            levels=list(LEVELS) if kind.supports_level else [],
        )

    async def detail(self, kind: ContentKind, item_id: str, locale: str):
        """Detail page data, or None when the item cannot be loaded"""
        try:
            payload = await self.source.detail(kind, item_id, audience_for(locale).value)
            envelope = DetailEnvelope(**payload)
        except (ContentApiError, ValidationError) as e:
            logger.error(f"Error fetching {kind.value} {item_id}: {e}")
            return None

        if not envelope.data:
            return None

        item = envelope.data
        if kind is ContentKind.LESSONS:
            card = CourseCard.from_item(item)
            return CourseDetail(**card.model_dump(), data=item)

        card = ArticleCard.from_item(item)
        return ArticleDetail(
            **card.model_dump(),
            html_content=item.get("htmlContent") if isinstance(item.get("htmlContent"), str) else None,
            data=item,
        )

    async def categories(self, kind: ContentKind) -> List[Category]:
        """Category list, served from cache when possible"""
        raw = None
        if self.cache:
            raw = await self.cache.get_categories(kind)

        if raw is None:
            try:
                raw = await self.source.categories(kind)
            except ContentApiError as e:
                logger.error(f"Error fetching {kind.value} categories: {e}")
                return []
            if self.cache:
                await self.cache.set_categories(kind, raw)

        categories = []
        for entry in raw:
            category = category_from(entry)
            if category is None:
                logger.warning(f"Skipping malformed {kind.value} category: {entry}")
                continue
            categories.append(category)
        return categories


class RegistrationService:
    """Forwards sign-ups and turns failures into one user-facing message"""

    def __init__(self, source: IContentSource):
        self.source = source

    async def register(self, request: RegisterRequest) -> RegistrationResult:
        try:
            await self.source.register(request.name, request.email, request.password)
        except ContentApiError as e:
            logger.error(f"Registration error for {request.email}: {e}")
            if e.no_response:
                status_code = 503
            elif e.status_code >= 400:
                status_code = e.status_code
            else:
                status_code = 502
            return RegistrationResult(
                success=False,
                message=registration_error_message(e),
                status_code=status_code,
            )

        logger.info(f"Registered new account for {request.email}")
        return RegistrationResult(success=True, message=REGISTRATION_SUCCESS, status_code=201)


def registration_error_message(error: ContentApiError) -> str:
    """Classify a failed registration"""
    if error.no_response:
        return "No response from server. Please check your connection."
    if error.server_message:
        return error.server_message
    if error.status_code == 400:
        return "Invalid registration data. Please check your information."
    if error.status_code == 409:
        return "User with this email already exists."
    if error.status_code >= 500:
        return "Server error. Please try again later."
    return DEFAULT_REGISTRATION_ERROR
