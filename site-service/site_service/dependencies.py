"""
FastAPI dependencies for Site Service
"""
from fastapi import Depends, Request
from typing import Mapping, Optional

from .config import settings
from .application.services import ContentService, RegistrationService
from .domain.models import locale_from_language
from .domain.repositories import IContentSource
from .infrastructure.cache import RedisCache, get_cache
from .infrastructure.content_client import get_content_client


def resolve_locale(
    query_locale: Optional[str],
    cookies: Mapping[str, str],
    accept_language: Optional[str],
) -> str:
    """
    Locale for a request: explicit query parameter, stored preference
    cookie, then the browser's Accept-Language, then the default.
    """
    supported = settings.SUPPORTED_LOCALES
    if query_locale in supported:
        return query_locale

    saved = cookies.get(settings.LOCALE_COOKIE_NAME)
    if saved in supported:
        return saved

    # "fr-CA,fr;q=0.9,en;q=0.8" -> first entry decides
    first = (accept_language or "").split(",")[0].split(";")[0]
    detected = locale_from_language(first)
    if detected in supported:
        return detected

    return settings.DEFAULT_LOCALE


async def get_request_locale(request: Request) -> str:
    """Resolve the locale of the current request"""
    return resolve_locale(
        request.query_params.get("locale"),
        request.cookies,
        request.headers.get("accept-language"),
    )


async def get_content_source() -> IContentSource:
    """Get content backend dependency"""
    return await get_content_client()


async def get_content_service(
    source: IContentSource = Depends(get_content_source),
    cache: RedisCache = Depends(get_cache),
) -> ContentService:
    """Get content service dependency"""
    return ContentService(source, cache)


async def get_registration_service(
    source: IContentSource = Depends(get_content_source),
) -> RegistrationService:
    """Get registration service dependency"""
    return RegistrationService(source)
