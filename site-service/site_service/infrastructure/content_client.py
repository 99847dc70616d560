"""
HTTP client for the external content backend
"""
import httpx
from typing import Optional, List, Dict, Any
import logging

from ..config import settings
from ..domain.exceptions import ContentApiError
from ..domain.models import ContentKind
from ..domain.repositories import IContentSource

logger = logging.getLogger(__name__)


class ContentApiClient(IContentSource):
    """HTTP client for the blogs, courses and users endpoints"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = (base_url or settings.CONTENT_API_URL).rstrip("/")
        self.timeout = httpx.Timeout(
            settings.HTTP_TIMEOUT, connect=settings.HTTP_CONNECT_TIMEOUT
        )
        self.transport = transport
        self.client: Optional[httpx.AsyncClient] = None

    async def start(self):
        """Initialize HTTP client"""
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        )
        logger.info(f"Content client initialized for {self.base_url}")

    async def stop(self):
        """Close HTTP client"""
        if self.client:
            await self.client.aclose()
            self.client = None
            logger.info("Content client closed")

    async def _make_request(
        self,
        method: str,
        path: str,
        **kwargs
    ) -> Dict[str, Any]:
        """Make HTTP request to the content backend"""
        if not self.client:
            logger.error("Content client not initialized")
            raise ContentApiError("Content client not initialized")

        try:
            response = await self.client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status_code = e.response.status_code
            logger.error(f"HTTP error {status_code} for {method} {path}: {e}")
            raise ContentApiError(
                f"Content backend returned {status_code}",
                status_code=status_code,
                detail=_error_body(e.response),
            ) from e
        except httpx.HTTPError as e:
            logger.error(f"Request failed for {method} {path}: {e}")
            raise ContentApiError(f"No response from content backend: {e}") from e

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Invalid JSON from {method} {path}: {e}")
            raise ContentApiError(
                "Invalid JSON from content backend",
                status_code=response.status_code,
            ) from e

        if not isinstance(payload, dict):
            logger.error(f"Unexpected payload type from {method} {path}")
            raise ContentApiError(
                "Unexpected payload from content backend",
                status_code=response.status_code,
            )
        return payload

    # Blogs API
    async def get_blogs(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Get a page of articles"""
        return await self._make_request("GET", "/blogs", params=params)

    async def get_blog(self, blog_id: str, audience: str) -> Dict[str, Any]:
        """Get a single article"""
        return await self._make_request(
            "GET", f"/blogs/{blog_id}", params={"audience": audience}
        )

    async def get_blog_categories(self) -> List[Dict[str, Any]]:
        """Get article categories"""
        response = await self._make_request("GET", "/blogs/get/categories")
        return _category_list(response)

    # Courses API
    async def get_courses(self, params: Dict[str, Any]) -> Dict[str, Any]:
        """Get a page of courses"""
        logger.debug(f"Fetching courses with params {params}")
        return await self._make_request("GET", "/courses", params=params)

    async def get_course(self, course_id: str, audience: str) -> Dict[str, Any]:
        """Get a single course"""
        return await self._make_request(
            "GET", f"/courses/{course_id}", params={"audience": audience}
        )

    async def get_course_categories(self) -> List[Dict[str, Any]]:
        """Get course categories"""
        response = await self._make_request("GET", "/courses/get/categories")
        return _category_list(response)

    # Users API
    async def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        """Register a new account"""
        return await self._make_request(
            "POST",
            "/users/register",
            json={"name": name, "email": email, "password": password},
        )

    # IContentSource
    async def list(self, kind: ContentKind, params: Dict[str, Any]) -> Dict[str, Any]:
        if kind is ContentKind.LESSONS:
            return await self.get_courses(params)
        return await self.get_blogs(params)

    async def detail(self, kind: ContentKind, item_id: str, audience: str) -> Dict[str, Any]:
        if kind is ContentKind.LESSONS:
            return await self.get_course(item_id, audience)
        return await self.get_blog(item_id, audience)

    async def categories(self, kind: ContentKind) -> List[Dict[str, Any]]:
        if kind is ContentKind.LESSONS:
            return await self.get_course_categories()
        return await self.get_blog_categories()


def _category_list(response: Dict[str, Any]) -> List[Dict[str, Any]]:
    data = response.get("data")
    if not isinstance(data, list):
        return []
    return [c for c in data if isinstance(c, dict)]


def _error_body(response: httpx.Response) -> Dict[str, Any]:
    try:
        body = response.json()
    except ValueError:
        return {}
    return body if isinstance(body, dict) else {}


# Global content client instance
content_client = ContentApiClient()


async def get_content_client() -> ContentApiClient:
    """Dependency for getting content client instance"""
    return content_client
