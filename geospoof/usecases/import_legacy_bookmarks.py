from __future__ import annotations

import logging
from dataclasses import dataclass

from ..domain.errors import SpoofErrorKind
from ..domain.ports import BookmarkStorePort, UseCaseError

log = logging.getLogger(__name__)


@dataclass
class ImportLegacyBookmarks:
    """Use case: one-time migration of old-format bookmarks into the store."""

    store: BookmarkStorePort

    def __call__(self) -> int:
        try:
            return int(self.store.import_legacy_bookmarks())
        except Exception as exc:
            log.warning("Legacy bookmark import failed: %s", exc)
            raise UseCaseError(
                SpoofErrorKind.LEGACY_IMPORT_FAILED.value,
                SpoofErrorKind.LEGACY_IMPORT_FAILED.message,
            ) from exc
