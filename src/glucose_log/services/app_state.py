"""
Application state.

Bundles the entry store and the language preference so that components
receive them explicitly instead of reaching for module globals.
"""

import logging

from glucose_log.domain.entry import GlucoseEntry, Language
from glucose_log.infrastructure.storage.local_storage import LocalStorage
from glucose_log.services.entry_store import EntryStore
from glucose_log.services.preferences import PreferenceStore
from glucose_log.utils.parameters import AppConfig

logger = logging.getLogger(__name__)


class AppState:
    """Shared state for one running instance."""

    def __init__(self, store: EntryStore, preferences: PreferenceStore, timezone: str) -> None:
        """
        Initialize application state.

        Args:
            store: Entry store.
            preferences: Language preference store.
            timezone: Local timezone used for display and input.
        """
        self.store = store
        self.preferences = preferences
        self.timezone = timezone

    @classmethod
    def from_config(cls, config: AppConfig) -> "AppState":
        """
        Build and load state from configuration.

        Args:
            config: Application configuration.

        Returns:
            Loaded application state.
        """
        storage = LocalStorage(config.storage)
        store = EntryStore(storage, config.storage.entries_key)
        preferences = PreferenceStore(
            storage,
            config.storage.language_key,
            default=Language(config.processing.default_language),
        )

        state = cls(store, preferences, config.processing.timezone)
        state.load()
        return state

    def load(self) -> None:
        """Rehydrate entries and preferences from storage."""
        self.store.load()
        self.preferences.load()
        logger.debug(
            f"State loaded: {len(self.store)} entries, language {self.language.value}"
        )

    @property
    def entries(self) -> list[GlucoseEntry]:
        """Read-only snapshot of the current entries."""
        return self.store.entries

    @property
    def language(self) -> Language:
        """Current display language."""
        return self.preferences.language
