"""
Draft synchronization to local storage.

This module keeps the in-progress article durable across reloads:
- load(): read the stored draft for the current site (scope-checked)
- save(): merge a full or partial update into the stored draft
- clear(): remove the draft and the editor's side storage
- schedule_autosave(): debounced save, flushed on teardown

Persistence is an optimization, not a correctness requirement: storage
faults are logged and reported as a False/None result, never raised.
"""

import json
import logging
import time
from dataclasses import dataclass, replace
from typing import Any, Callable, Mapping, Optional, Union

from .config import AuthoringConfig
from .debounce import Debouncer
from .image_tracker import UploadedImageTracker
from .models import DRAFT_STORAGE_NAMES, EDITABLE_FIELDS, DraftRecord
from .storage import KeyValueStore, StorageError

logger = logging.getLogger(__name__)

DraftUpdate = Union[DraftRecord, Mapping[str, Any]]

SAVED_MESSAGE = "Draft saved successfully"
NOTHING_TO_SAVE_MESSAGE = "Nothing to save - add some content first"
SAVE_FAILED_MESSAGE = "Draft could not be saved"


@dataclass(frozen=True)
class DraftSaveOutcome:
    """Result of an explicit, user-requested save."""
    saved: bool
    message: str


def _now_ms() -> int:
    return int(time.time() * 1000)


class DraftSyncManager:
    """
    Durable, scoped, debounced persistence of a DraftRecord.

    One manager serves one authoring context (site). The stored record
    carries its siteId; a record for another site is never returned by
    load() and is replaced, not merged, by save().
    """

    def __init__(
        self,
        store: KeyValueStore,
        site_id: str,
        config: Optional[AuthoringConfig] = None,
        image_tracker: Optional[UploadedImageTracker] = None,
        clock: Callable[[], int] = _now_ms,
    ):
        """
        Args:
            store: Local key-value storage backend.
            site_id: Authoring context this manager serves.
            config: Storage keys and autosave debounce window.
            image_tracker: Session image list emptied by clear().
            clock: Returns the current time in epoch milliseconds.
        """
        self.store = store
        self.site_id = site_id
        self.config = config or AuthoringConfig()
        self.image_tracker = image_tracker
        self._clock = clock
        self._autosave = Debouncer(self.config.autosave_debounce_seconds, name="draft-autosave")
        self._pending_update: Optional[DraftUpdate] = None

    @property
    def storage_key(self) -> str:
        return self.config.draft_storage_key

    @property
    def has_pending_autosave(self) -> bool:
        return self._autosave.pending

    def load(self, site_id: Optional[str] = None) -> Optional[DraftRecord]:
        """
        Read the persisted draft for a site.

        Args:
            site_id: Scope to load for. Defaults to this manager's site.

        Returns:
            The stored DraftRecord, or None if absent, malformed, unreadable,
            or recorded for another site.
        """
        site_id = self.site_id if site_id is None else site_id
        data = self._read_stored()
        if data is None:
            return None

        record = DraftRecord.from_storage_dict(data)
        if record.site_id != site_id:
            logger.debug(
                f"Ignoring stored draft for site '{record.site_id}' (current site '{site_id}')"
            )
            return None

        logger.info(f"Loaded draft for site '{site_id}'")
        return record

    def save(self, update: DraftUpdate) -> bool:
        """
        Merge an update into the stored draft and stamp lastUpdated.

        A DraftRecord is a full update; a mapping is partial, and stored
        fields it does not mention are preserved. The write is skipped when
        the merged draft has no title, description, cover image or content.

        Args:
            update: DraftRecord or mapping of snake_case field names.

        Returns:
            True if the draft was written.
        """
        try:
            fields = self._update_fields(update)
        except ValueError as e:
            logger.error(f"Rejected draft update: {e}")
            return False

        target_site = fields.pop("site_id", None) or self.site_id

        base = None
        stored = self._read_stored()
        if stored is not None:
            existing = DraftRecord.from_storage_dict(stored)
            if existing.site_id == target_site:
                base = existing
        if base is None:
            base = DraftRecord(site_id=target_site)

        merged = replace(base, **fields)
        if merged.is_empty:
            logger.debug("Skipping save of empty draft")
            return False

        merged = replace(merged, last_updated=self._clock())
        try:
            payload = json.dumps(merged.to_storage_dict(), ensure_ascii=False)
        except (TypeError, ValueError) as e:
            logger.error(f"Draft could not be serialized: {e}")
            return False

        try:
            self.store.set(self.storage_key, payload)
        except StorageError as e:
            logger.warning(f"Draft could not be saved: {e}")
            return False

        logger.debug(f"Saved draft for site '{target_site}'")
        return True

    def save_now(self, record: DraftRecord) -> DraftSaveOutcome:
        """
        Explicit save (e.g. a "Save Draft" button).

        Supersedes any pending autosave.
        """
        self._autosave.cancel()
        self._pending_update = None
        if record.is_empty:
            return DraftSaveOutcome(saved=False, message=NOTHING_TO_SAVE_MESSAGE)
        if self.save(record):
            return DraftSaveOutcome(saved=True, message=SAVED_MESSAGE)
        return DraftSaveOutcome(saved=False, message=SAVE_FAILED_MESSAGE)

    def clear(self) -> None:
        """
        Delete the draft, the editor's side storage and tracked uploads.

        Also drops any pending autosave. Safe to call repeatedly.
        """
        self._autosave.cancel()
        self._pending_update = None
        for key in (self.storage_key, *self.config.editor_cache_keys):
            try:
                self.store.remove(key)
            except StorageError as e:
                logger.warning(f"Failed to remove '{key}' from storage: {e}")
        if self.image_tracker is not None:
            self.image_tracker.clear()
        logger.info(f"Cleared draft storage for site '{self.site_id}'")

    def schedule_autosave(self, update: DraftUpdate) -> None:
        """
        Save roughly one debounce window after the last call.

        Bursts of calls coalesce into a single save of the latest update.
        Requires a running event loop.
        """
        if self._pending_update is not None:
            logger.debug("Coalescing autosave")
        self._pending_update = update
        self._autosave.schedule(self._run_autosave)

    def flush(self) -> bool:
        """
        Save the pending autosave immediately (unload/teardown path).

        Returns:
            True if a pending update existed and was written.
        """
        if not self._autosave.pending:
            return False
        update = self._pending_update
        self._autosave.cancel()
        self._pending_update = None
        if update is None:
            return False
        return self.save(update)

    def cancel_autosave(self) -> None:
        """Drop a pending autosave without saving."""
        self._autosave.cancel()
        self._pending_update = None

    def _run_autosave(self) -> bool:
        update = self._pending_update
        self._pending_update = None
        if update is None:
            return False
        return self.save(update)

    def _read_stored(self) -> Optional[dict]:
        try:
            raw = self.store.get(self.storage_key)
        except StorageError as e:
            logger.warning(f"Draft storage unavailable: {e}")
            return None
        if raw is None:
            return None
        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Stored draft is malformed and was ignored: {e}")
            return None
        if not isinstance(data, dict):
            logger.warning("Stored draft is not a JSON object and was ignored")
            return None
        return data

    @staticmethod
    def _update_fields(update: DraftUpdate) -> dict:
        if isinstance(update, DraftRecord):
            fields = {name: getattr(update, name) for name in EDITABLE_FIELDS}
            fields["site_id"] = update.site_id
            return fields

        allowed = set(EDITABLE_FIELDS) | {"site_id"}
        # Accept the camelCase storage names as well
        by_storage_name = {v: k for k, v in DRAFT_STORAGE_NAMES.items()}
        fields = {}
        for key, value in update.items():
            name = key if key in allowed else by_storage_name.get(key)
            if name is None or name not in allowed:
                raise ValueError(f"Unknown draft field '{key}'")
            fields[name] = value
        return fields
