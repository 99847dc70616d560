"""
Locale signal - single owner of the visitor's current language
"""
from typing import Callable, List, Optional, Sequence
import logging

from ..domain.models import SUPPORTED_LOCALES, Locale, locale_from_language
from ..domain.repositories import ILocaleRouter, IPreferenceStore

logger = logging.getLogger(__name__)

LocaleListener = Callable[[str], None]


class LocaleSignal:
    """
    Current-language state for one visitor session.

    All reads go through ``locale``; all writes go through ``set_locale``,
    which updates memory first and then persists the preference and moves
    the routing layer. Listing controllers subscribe to re-fetch on change.
    """

    def __init__(
        self,
        store: IPreferenceStore,
        router: ILocaleRouter,
        preference_key: str,
        supported: Sequence[str] = SUPPORTED_LOCALES,
        default: str = Locale.EN.value,
    ):
        if len(supported) < 2:
            raise ValueError("At least two locales are required")
        if default not in supported:
            raise ValueError(f"Default locale {default!r} is not supported")
        self.store = store
        self.router = router
        self.preference_key = preference_key
        self.supported = tuple(supported)
        self.default = default
        self._locale = default
        self._initialized = False
        self._listeners: List[LocaleListener] = []

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def initialized(self) -> bool:
        return self._initialized

    def is_supported(self, locale: Optional[str]) -> bool:
        return locale in self.supported

    async def initialize(self, browser_language: Optional[str] = None) -> str:
        """
        Pick the session locale once.

        Priority: stored preference, browser language, router locale, default.
        """
        if self._initialized:
            return self._locale

        saved = await self.store.get(self.preference_key)
        detected = locale_from_language(browser_language)
        routed = self.router.current_locale()

        if self.is_supported(saved):
            chosen = saved
        elif self.is_supported(detected):
            chosen = detected
        elif self.is_supported(routed):
            chosen = routed
        else:
            chosen = self.default

        self._initialized = True
        logger.info(f"Locale initialized to {chosen} for {self.preference_key}")
        await self.set_locale(chosen)
        return chosen

    async def set_locale(self, locale: str) -> None:
        """Change language: memory, then storage and routing"""
        if not self.is_supported(locale):
            raise ValueError(f"Unsupported locale: {locale!r}")

        changed = locale != self._locale
        self._locale = locale
        if changed:
            self._notify()

        if not await self.store.set(self.preference_key, locale):
            logger.warning(f"Locale preference for {self.preference_key} was not persisted")
        await self.router.push_locale(locale)

    def flipped(self, locale: Optional[str] = None) -> str:
        """The other one of the first two supported locales"""
        first, second = self.supported[0], self.supported[1]
        current = self._locale if locale is None else locale
        return second if current == first else first

    async def toggle(self) -> str:
        """Flip between the first two supported locales"""
        new_locale = self.flipped()
        await self.set_locale(new_locale)
        return new_locale

    def sync_from_router(self) -> bool:
        """Adopt an externally changed router locale without persisting it"""
        routed = self.router.current_locale()
        if not self.is_supported(routed) or routed == self._locale:
            return False
        logger.debug(f"Locale resynchronized from router: {routed}")
        self._locale = routed
        self._notify()
        return True

    def subscribe(self, listener: LocaleListener) -> Callable[[], None]:
        """Register a change listener; returns the unsubscribe function"""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self):
        for listener in list(self._listeners):
            listener(self._locale)
