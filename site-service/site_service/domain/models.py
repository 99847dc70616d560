"""
Domain models - Core listing entities
"""
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional
from enum import Enum


class Locale(str, Enum):
    """Supported site languages"""
    EN = "en"
    FR = "fr"


class Audience(str, Enum):
    """Backend content variant selected by locale"""
    ENGLISH = "english"
    FRENCH = "french"


class Level(str, Enum):
    """Course levels offered as filters"""
    BEGINNER = "Beginner"
    INTERMEDIATE = "Intermediate"
    ADVANCED = "Advanced"


class ContentKind(str, Enum):
    """Listing kinds exposed by the site"""
    LESSONS = "lessons"
    ARTICLES = "articles"

    @property
    def supports_level(self) -> bool:
        return self is ContentKind.LESSONS


SUPPORTED_LOCALES = tuple(locale.value for locale in Locale)
LEVELS = tuple(level.value for level in Level)


def audience_for(locale: str) -> Audience:
    """Map a locale to the backend audience tag"""
    return Audience.FRENCH if locale == Locale.FR.value else Audience.ENGLISH


def locale_from_language(language: Optional[str]) -> Optional[str]:
    """
    Match a client-reported language by prefix.

    "fr", "fr-CA" and "FR_be" map to French, anything else non-empty to English.
    """
    if not language:
        return None
    if language.strip().lower().startswith(Locale.FR.value):
        return Locale.FR.value
    return Locale.EN.value


@dataclass(frozen=True)
class FilterState:
    """Active query dimensions of a listing. Empty string means unset."""
    page: int = 1
    category: str = ""
    level: str = ""
    search: str = ""

    def __post_init__(self):
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")

    def with_page(self, page: int) -> "FilterState":
        return replace(self, page=page)

    def with_dimension(self, **changes: str) -> "FilterState":
        """Update category, level or search; always goes back to page 1"""
        return replace(self, page=1, **changes)

    def cleared(self) -> "FilterState":
        return FilterState()

    def to_params(self, limit: int, locale: str) -> Dict[str, Any]:
        """Build outbound query parameters, omitting unset dimensions"""
        params: Dict[str, Any] = {"page": self.page, "limit": limit}
        if self.search:
            params["search"] = self.search
        if self.category:
            params["category"] = self.category
        if self.level:
            params["level"] = self.level
        params["audience"] = audience_for(locale).value
        return params


@dataclass(frozen=True)
class PaginationMeta:
    """Pagination metadata as reported by the backend"""
    total: int = 0
    page: int = 1
    pages: int = 1
    limit: int = 6

    def page_numbers(self) -> List[int]:
        return list(range(1, self.pages + 1))


@dataclass(frozen=True)
class ResultPage:
    """Last successfully fetched page of items"""
    items: List[Dict[str, Any]] = field(default_factory=list)
    pagination: PaginationMeta = field(default_factory=PaginationMeta)

    @property
    def is_empty(self) -> bool:
        return not self.items
