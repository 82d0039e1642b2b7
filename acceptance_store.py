import logging
from pathlib import Path
from typing import Dict, List, Optional

from config import Settings
from models import AccessCodeRecord, LoadStatus, StoreDocument, StoreSettings
from store_schema import StoreParseError, dump_document, parse_document

logger = logging.getLogger(__name__)


class AcceptanceStore:
    """
    Persisted mapping of configuration key to accepted access code.

    The in-memory dict is the only source of truth; the record list form
    exists only when writing to disk. Loading never raises: a missing,
    unreadable or corrupt file yields an empty store and the reason is kept
    in ``load_status`` / ``load_error``.
    """

    def __init__(
        self,
        path: Path,
        fallback_path: Optional[Path] = None,
        legacy_path: Optional[Path] = None,
    ):
        self.path = Path(path)
        self.fallback_path = Path(fallback_path) if fallback_path else None
        self.legacy_path = Path(legacy_path) if legacy_path else None
        self.settings = StoreSettings()
        self.load_status = LoadStatus.NOT_FOUND
        self.load_error: Optional[str] = None
        self.fallback_entries = 0
        self._codes: Dict[str, str] = {}
        self._document = StoreDocument()

    @classmethod
    def load(cls, product_folder: str, config: Settings) -> "AcceptanceStore":
        """Load the store for a product from its well-known location."""
        store = cls(
            config.store_path(product_folder),
            fallback_path=config.fallback_path(product_folder),
            legacy_path=config.legacy_store_path(product_folder),
        )
        store.reload()
        return store

    def reload(self) -> LoadStatus:
        """
        Read the store file (or its legacy predecessor) and any fallback records.
        """
        self._codes = {}
        self._document = StoreDocument()
        self.settings = StoreSettings()
        self.load_error = None

        source = self.path
        if not source.exists() and self.legacy_path is not None and self.legacy_path.exists():
            source = self.legacy_path

        if source.exists():
            self.load_status = self._read(source)
        else:
            self.load_status = LoadStatus.NOT_FOUND

        self.fallback_entries = self._merge_fallback()
        return self.load_status

    def _read(self, source: Path) -> LoadStatus:
        try:
            text = source.read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            self.load_error = str(e)
            logger.warning("Could not read acceptance store %s: %s", source, e)
            return LoadStatus.IO_ERROR

        try:
            document, legacy = parse_document(text)
        except StoreParseError as e:
            self.load_error = str(e)
            logger.warning("Ignoring unreadable acceptance store %s: %s", source, e)
            return LoadStatus.PARSE_ERROR

        self._document = document
        self._codes = dict(document.accepted_eulas)
        self.settings = document.settings

        if legacy or source != self.path:
            logger.info("Migrating legacy acceptance store %s (%d records)", source, len(self._codes))
            return LoadStatus.MIGRATED
        return LoadStatus.LOADED

    def _merge_fallback(self) -> int:
        if self.fallback_path is None or not self.fallback_path.exists():
            return 0

        try:
            lines = self.fallback_path.read_text(encoding="utf-8-sig").splitlines()
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read fallback records %s: %s", self.fallback_path, e)
            return 0

        merged = 0
        for line in lines:
            line = line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue
            key, _, code = line.partition("=")
            key, code = key.strip(), code.strip()
            if key and code and key not in self._codes:
                self._codes[key] = code
                merged += 1

        if merged:
            logger.info("Recovered %d record(s) from fallback file %s", merged, self.fallback_path)
        return merged

    def get(self, key: str) -> Optional[str]:
        return self._codes.get(key)

    def set(self, key: str, code: str) -> None:
        self._codes[key] = code

    def remove(self, key: str) -> bool:
        return self._codes.pop(key, None) is not None

    def clear(self) -> None:
        self._codes.clear()

    def keys(self) -> List[str]:
        return list(self._codes)

    def records(self) -> List[AccessCodeRecord]:
        return [AccessCodeRecord(key=key, code=code) for key, code in self._codes.items()]

    def as_dict(self) -> Dict[str, str]:
        return dict(self._codes)

    def __contains__(self, key: object) -> bool:
        return key in self._codes

    def __len__(self) -> int:
        return len(self._codes)

    def save(self) -> bool:
        """
        Write the full record set in the canonical schema.

        Returns False instead of raising when the file cannot be written.
        """
        document = self._document.model_copy(
            update={"accepted_eulas": dict(self._codes), "settings": self.settings}
        )

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(dump_document(document), encoding="utf-8")
        except OSError as e:
            logger.warning("Failed to save acceptance store to %s: %s", self.path, e)
            return False

        self._document = document
        logger.debug("Saved acceptance store to %s", self.path)
        self._discard_fallback()
        return True

    def write_fallback(self, key: str, code: str) -> bool:
        """
        Record a single acceptance as a flat key=code line.

        Used only when save() fails, so the next run still finds the record.
        """
        if self.fallback_path is None:
            return False

        entries: Dict[str, str] = {}
        try:
            if self.fallback_path.exists():
                for line in self.fallback_path.read_text(encoding="utf-8-sig").splitlines():
                    k, sep, v = line.strip().partition("=")
                    if sep and k.strip():
                        entries[k.strip()] = v.strip()
            entries[key] = code

            self.fallback_path.parent.mkdir(parents=True, exist_ok=True)
            self.fallback_path.write_text(
                "".join(f"{k}={v}\n" for k, v in entries.items()), encoding="utf-8"
            )
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Failed to write fallback record to %s: %s", self.fallback_path, e)
            return False

        logger.info("Stored acceptance for %s in fallback file %s", key, self.fallback_path)
        return True

    def _discard_fallback(self) -> None:
        if self.fallback_path is None or not self.fallback_path.exists():
            return
        try:
            self.fallback_path.unlink()
        except OSError as e:
            logger.warning("Could not remove fallback file %s: %s", self.fallback_path, e)
