"""
Pydantic schemas for Site Service
"""
from pydantic import BaseModel, EmailStr, Field, validator
from typing import Optional, List, Dict, Any, Literal

from .domain.models import PaginationMeta, ResultPage

PLACEHOLDER_IMAGE = "/images/placeholder.jpg"
NO_DESCRIPTION = "No description available"


# Backend envelopes
class Category(BaseModel):
    """Content category"""
    id: Optional[str] = Field(None, alias="_id")
    name: str = ""
    slug: str = ""

    class Config:
        populate_by_name = True


class PaginationSchema(BaseModel):
    """Pagination block of a list response"""
    total: int = Field(0, ge=0)
    page: int = Field(1, ge=1)
    pages: int = 1
    limit: int = Field(6, gt=0)

    @validator("pages")
    def at_least_one_page(cls, v):
        # An empty result set still renders page 1
        return max(v, 1)

    def to_meta(self) -> PaginationMeta:
        return PaginationMeta(
            total=self.total, page=self.page, pages=self.pages, limit=self.limit
        )

    @classmethod
    def from_meta(cls, meta: PaginationMeta) -> "PaginationSchema":
        return cls(total=meta.total, page=meta.page, pages=meta.pages, limit=meta.limit)


class ListEnvelope(BaseModel):
    """List endpoint response"""
    status: str = "success"
    results: int = 0
    pagination: PaginationSchema = Field(default_factory=PaginationSchema)
    data: List[Dict[str, Any]] = Field(default_factory=list)

    def to_result_page(self) -> ResultPage:
        return ResultPage(items=list(self.data), pagination=self.pagination.to_meta())

    @classmethod
    def empty(cls, limit: int) -> "ListEnvelope":
        return cls(pagination=PaginationSchema(total=0, page=1, pages=1, limit=limit))


class DetailEnvelope(BaseModel):
    """Detail endpoint response"""
    status: str = "success"
    data: Optional[Dict[str, Any]] = None


# Display cards (tolerant of missing or malformed fields)
def _text(value: Any, fallback: str) -> str:
    """Scalar as display text; anything else gets the fallback"""
    if value is None or value == "" or isinstance(value, (dict, list, bool)):
        return fallback
    return str(value)


def _item_id(item: Dict[str, Any]) -> str:
    return _text(item.get("id") or item.get("_id"), "")


def category_from(raw: Any) -> Optional[Category]:
    """Build a category from a backend entry; None when it is not an object"""
    if not isinstance(raw, dict):
        return None
    return Category(
        id=_text(raw.get("_id") or raw.get("id"), "") or None,
        name=_text(raw.get("name"), ""),
        slug=_text(raw.get("slug"), ""),
    )


def _categories(item: Dict[str, Any]) -> List[Category]:
    raw_categories = item.get("categories")
    if not isinstance(raw_categories, list):
        return []
    return [c for c in map(category_from, raw_categories) if c is not None]


class CourseCard(BaseModel):
    """Course as shown in listings"""
    id: str
    title: str
    description: str
    image: str
    level: str
    duration: str
    modules: int
    categories: List[Category] = Field(default_factory=list)

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "CourseCard":
        try:
            modules = max(int(item.get("modules") or 0), 0)
        except (TypeError, ValueError, OverflowError):
            modules = 0
        return cls(
            id=_item_id(item),
            title=_text(item.get("title"), "Untitled Course"),
            description=_text(item.get("description"), NO_DESCRIPTION),
            image=_text(item.get("image"), PLACEHOLDER_IMAGE),
            level=_text(item.get("level"), "Beginner"),
            duration=_text(item.get("duration"), "Self-paced"),
            modules=modules,
            categories=_categories(item),
        )


class ArticleCard(BaseModel):
    """Article as shown in listings"""
    id: str
    title: str
    excerpt: str
    image: str
    author: str
    date: str
    categories: List[Category] = Field(default_factory=list)

    @classmethod
    def from_item(cls, item: Dict[str, Any]) -> "ArticleCard":
        return cls(
            id=_item_id(item),
            title=_text(item.get("title"), "Untitled Article"),
            excerpt=_text(item.get("excerpt"), NO_DESCRIPTION),
            image=_text(item.get("image"), PLACEHOLDER_IMAGE),
            author=_text(item.get("author"), "Anonymous"),
            date=_text(item.get("date"), "No date"),
            categories=_categories(item),
        )


class CourseDetail(CourseCard):
    """Course detail page"""
    data: Dict[str, Any] = Field(default_factory=dict)


class ArticleDetail(ArticleCard):
    """Article detail page"""
    html_content: Optional[str] = None
    data: Dict[str, Any] = Field(default_factory=dict)


# Page responses
class FilterSchema(BaseModel):
    """Active listing filters"""
    page: int = 1
    category: str = ""
    level: str = ""
    search: str = ""


class ListingPageResponse(BaseModel):
    """Listing page data"""
    kind: str
    locale: str
    status: str  # "ok", "empty", "error"
    filters: FilterSchema
    items: List[Dict[str, Any]]
    pagination: PaginationSchema
    page_numbers: List[int]
    categories: List[Category] = Field(default_factory=list)
    levels: List[str] = Field(default_factory=list)


class ListingSnapshot(ListingPageResponse):
    """Listing session state pushed over WebSocket"""
    raw_search: str = ""
    loading: bool = False
    error: Optional[str] = None


class HomeResponse(BaseModel):
    """Landing page data"""
    locale: str
    featured_lessons: List[CourseCard] = Field(default_factory=list)
    featured_articles: List[ArticleCard] = Field(default_factory=list)


# Registration
class RegisterRequest(BaseModel):
    """Sign-up form"""
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    password: str = Field(..., min_length=1)

    @validator("name")
    def name_not_blank(cls, v):
        if not v.strip():
            raise ValueError("Name cannot be blank")
        return v.strip()


class RegistrationResult(BaseModel):
    """Outcome of a sign-up attempt"""
    success: bool
    message: str
    status_code: int = 200


# Locale
class LocaleUpdate(BaseModel):
    """Locale change request"""
    locale: str


class LocaleResponse(BaseModel):
    """Resolved locale"""
    locale: str
    audience: str
    supported: List[str]


# Listing sessions
class SessionCommand(BaseModel):
    """Message sent by the browser over a listing session"""
    type: Literal[
        "search",
        "category",
        "level",
        "page",
        "next",
        "prev",
        "clear",
        "locale",
        "toggle_locale",
        "route",
    ]
    value: Optional[Any] = None


# Message responses
class MessageResponse(BaseModel):
    """Generic message response"""
    message: str
