"""
Repository interfaces - Define contracts for content access and preferences
"""
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

from .models import ContentKind


class IContentSource(ABC):
    """Content backend interface"""

    @abstractmethod
    async def list(self, kind: ContentKind, params: Dict[str, Any]) -> Dict[str, Any]:
        """Fetch one page of items. Returns the raw list envelope."""
        pass

    @abstractmethod
    async def detail(self, kind: ContentKind, item_id: str, audience: str) -> Dict[str, Any]:
        """Fetch a single item. Returns the raw detail envelope."""
        pass

    @abstractmethod
    async def categories(self, kind: ContentKind) -> List[Dict[str, Any]]:
        """Fetch the category list for a content kind"""
        pass

    @abstractmethod
    async def register(self, name: str, email: str, password: str) -> Dict[str, Any]:
        """Create an account"""
        pass


class IPreferenceStore(ABC):
    """Durable storage for visitor preferences"""

    @abstractmethod
    async def get(self, key: str) -> Optional[str]:
        """Read a stored preference"""
        pass

    @abstractmethod
    async def set(self, key: str, value: str) -> bool:
        """Store a preference"""
        pass


class ILocaleRouter(ABC):
    """Routing layer that carries the locale of rendered content"""

    @abstractmethod
    def current_locale(self) -> Optional[str]:
        """Locale the routing layer currently reports"""
        pass

    @abstractmethod
    async def push_locale(self, locale: str) -> None:
        """Navigate to the same location under another locale"""
        pass
