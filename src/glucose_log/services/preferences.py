"""Display language preference, persisted in its own storage slot."""

import logging

from glucose_log.domain.entry import Language
from glucose_log.infrastructure.storage.local_storage import LocalStorage
from glucose_log.utils.exceptions import StorageError

logger = logging.getLogger(__name__)


class PreferenceStore:
    """Store for the selected display language."""

    def __init__(
        self, storage: LocalStorage, storage_key: str, default: Language = Language.DANISH
    ) -> None:
        self.storage = storage
        self.storage_key = storage_key
        self.default = Language(default)
        self.language = self.default

    def load(self) -> Language:
        """
        Load the stored language, falling back to the default when the slot is
        empty, unreadable or holds an unknown code.
        """
        try:
            raw = self.storage.get_item(self.storage_key)
        except StorageError as e:
            logger.error(f"Failed to load language preference: {e}")
            raw = None

        try:
            self.language = Language((raw or "").strip())
        except ValueError:
            if raw:
                logger.warning(f"Unknown language code {raw!r}, using {self.default.value}")
            self.language = self.default

        return self.language

    def set_language(self, language: Language | str) -> bool:
        """
        Select and persist a language.

        Args:
            language: Language or its two-letter code.

        Returns:
            True if the preference was written.

        Raises:
            ValueError: If the code is not a supported language.
        """
        self.language = Language(language)

        try:
            self.storage.set_item(self.storage_key, self.language.value)
        except StorageError as e:
            logger.error(f"Failed to save language preference: {e}")
            return False

        return True

    def toggle(self) -> bool:
        """Switch between the two supported languages; True if the choice was written."""
        other = Language.ENGLISH if self.language == Language.DANISH else Language.DANISH
        return self.set_language(other)
