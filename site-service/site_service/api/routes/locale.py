"""
Locale routes - read and change the visitor's language
"""
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from typing import Optional
import uuid

from ...application.locale import LocaleSignal
from ...config import settings
from ...dependencies import get_request_locale
from ...domain.models import audience_for
from ...domain.repositories import ILocaleRouter
from ...infrastructure.cache import RedisCache, get_cache
from ...schemas import LocaleResponse, LocaleUpdate


router = APIRouter(prefix="/api/v1/locale", tags=["Locale"])


class CookieLocaleRouter(ILocaleRouter):
    """Routing layer of a plain HTTP request: query string in, cookie out"""

    def __init__(self, request: Request, response: Response):
        self.request = request
        self.response = response

    def current_locale(self) -> Optional[str]:
        return self.request.query_params.get("locale")

    async def push_locale(self, locale: str) -> None:
        self.response.set_cookie(
            settings.LOCALE_COOKIE_NAME,
            locale,
            max_age=settings.LOCALE_COOKIE_MAX_AGE,
            samesite="lax",
        )


def visitor_id(request: Request, response: Response) -> str:
    """Stable anonymous visitor id, issued on first use"""
    current = request.cookies.get(settings.VISITOR_COOKIE_NAME)
    if current:
        return current
    issued = uuid.uuid4().hex
    response.set_cookie(
        settings.VISITOR_COOKIE_NAME,
        issued,
        max_age=settings.LOCALE_COOKIE_MAX_AGE,
        httponly=True,
        samesite="lax",
    )
    return issued


def _signal(request: Request, response: Response, cache: RedisCache) -> LocaleSignal:
    return LocaleSignal(
        store=cache,
        router=CookieLocaleRouter(request, response),
        preference_key=f"locale:{visitor_id(request, response)}",
        supported=settings.SUPPORTED_LOCALES,
        default=settings.DEFAULT_LOCALE,
    )


def _locale_response(locale: str) -> LocaleResponse:
    return LocaleResponse(
        locale=locale,
        audience=audience_for(locale).value,
        supported=list(settings.SUPPORTED_LOCALES),
    )


@router.get("", response_model=LocaleResponse)
async def get_locale(locale: str = Depends(get_request_locale)):
    """Locale the site would render this request in"""
    return _locale_response(locale)


@router.put("", response_model=LocaleResponse)
async def set_locale(
    body: LocaleUpdate,
    request: Request,
    response: Response,
    cache: RedisCache = Depends(get_cache),
):
    """Store a new language preference"""
    signal = _signal(request, response, cache)
    try:
        await signal.set_locale(body.locale)
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(e)
        )
    return _locale_response(signal.locale)


@router.post("/toggle", response_model=LocaleResponse)
async def toggle_locale(
    request: Request,
    response: Response,
    locale: str = Depends(get_request_locale),
    cache: RedisCache = Depends(get_cache),
):
    """Switch between English and French"""
    signal = _signal(request, response, cache)
    await signal.set_locale(signal.flipped(locale))
    return _locale_response(signal.locale)
