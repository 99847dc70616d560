"""
Content routes - landing, listing and detail page data
"""
from fastapi import APIRouter, Depends, HTTPException, Query, status
from typing import List, Union
import logging

from ...application.services import ContentService
from ...dependencies import get_content_service, get_request_locale
from ...domain.models import LEVELS, ContentKind, FilterState
from ...schemas import (
    ArticleDetail,
    Category,
    CourseDetail,
    HomeResponse,
    ListingPageResponse,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["Content"])


@router.get("/home", response_model=HomeResponse)
async def get_home(
    locale: str = Depends(get_request_locale),
    service: ContentService = Depends(get_content_service),
):
    """
    Landing page data

    Featured lessons and articles for the visitor's audience. A failing
    backend yields empty sections rather than an error.
    """
    try:
        return await service.landing(locale)
    except Exception as e:
        logger.error(f"Error building landing page for {locale}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load landing page"
        )


async def _categories(service: ContentService, kind: ContentKind) -> List[Category]:
    try:
        return await service.categories(kind)
    except Exception as e:
        logger.error(f"Error getting {kind.value} categories: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve categories"
        )


@router.get("/lessons/categories", response_model=List[Category])
async def get_lesson_categories(service: ContentService = Depends(get_content_service)):
    """Course categories"""
    return await _categories(service, ContentKind.LESSONS)


@router.get("/articles/categories", response_model=List[Category])
async def get_article_categories(service: ContentService = Depends(get_content_service)):
    """Article categories"""
    return await _categories(service, ContentKind.ARTICLES)


async def _listing(
    service: ContentService,
    kind: ContentKind,
    filters: FilterState,
    locale: str
) -> ListingPageResponse:
    try:
        return await service.listing_page(kind, filters, locale)
    except Exception as e:
        logger.error(f"Error building {kind.value} listing page: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to load listing"
        )


@router.get("/lessons", response_model=ListingPageResponse)
async def list_lessons(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    category: str = Query("", description="Category slug"),
    level: str = Query("", description="Course level"),
    search: str = Query("", description="Free-text search"),
    locale: str = Depends(get_request_locale),
    service: ContentService = Depends(get_content_service),
):
    """
    Lessons listing page data

    Unset filters are not forwarded to the backend. When the backend fails
    the response carries an empty page with status "error".
    """
    if level and level not in LEVELS:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=f"Unknown level: {level}"
        )

    filters = FilterState(page=page, category=category, level=level, search=search)
    return await _listing(service, ContentKind.LESSONS, filters, locale)


@router.get("/articles", response_model=ListingPageResponse)
async def list_articles(
    page: int = Query(1, ge=1, description="Page number (1-indexed)"),
    category: str = Query("", description="Category slug"),
    search: str = Query("", description="Free-text search"),
    locale: str = Depends(get_request_locale),
    service: ContentService = Depends(get_content_service),
):
    """Articles listing page data"""
    filters = FilterState(page=page, category=category, search=search)
    return await _listing(service, ContentKind.ARTICLES, filters, locale)


async def _detail_or_404(
    service: ContentService,
    kind: ContentKind,
    item_id: str,
    locale: str
) -> Union[CourseDetail, ArticleDetail]:
    try:
        item = await service.detail(kind, item_id, locale)
    except Exception as e:
        logger.error(f"Error getting {kind.value} {item_id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to retrieve item"
        )

    if item is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"{kind.value.rstrip('s').capitalize()} not found"
        )
    return item


@router.get("/lessons/{item_id}", response_model=CourseDetail)
async def get_lesson(
    item_id: str,
    locale: str = Depends(get_request_locale),
    service: ContentService = Depends(get_content_service),
):
    """Lesson detail page data"""
    return await _detail_or_404(service, ContentKind.LESSONS, item_id, locale)


@router.get("/articles/{item_id}", response_model=ArticleDetail)
async def get_article(
    item_id: str,
    locale: str = Depends(get_request_locale),
    service: ContentService = Depends(get_content_service),
):
    """Article detail page data"""
    return await _detail_or_404(service, ContentKind.ARTICLES, item_id, locale)
