"""
Per-thread slot memory.

Keeps the slots (city, dates, traveler profile, consent flags), the last
intent and the last receipts for every conversation thread. State lives in
a process-wide map keyed by thread id. When VOYANT_SLOTS_FILE is set the
store is loaded from and saved to that JSON file on every read and write.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional

from pydantic import BaseModel, Field, ValidationError

from voyant.shared.config import DEFAULT_CONFIG
from voyant.shared.contracts.receipts import Fact, Receipts


logger = logging.getLogger(__name__)


class ThreadState(BaseModel):
    """Everything remembered about one thread."""

    slots: Dict[str, str] = Field(default_factory=dict)
    expected_missing: List[str] = Field(default_factory=list)
    last_intent: Optional[str] = None
    last_receipts: Optional[Receipts] = None


def merge_slots(previous: Dict[str, str], new: Dict[str, object]) -> Dict[str, str]:
    """
    Shallow-merge new slot values over previous ones.

    Only non-empty strings overwrite; None, empty and whitespace-only values
    (and non-string values) never replace what is already remembered.
    """
    merged = dict(previous)
    for key, value in (new or {}).items():
        if isinstance(value, str) and value.strip():
            merged[key] = value
    return merged


class SlotStore:
    """
    Thread-keyed slot store.

    When a path is given every read reloads the file and every write saves
    it, so several processes (or restarts) see the same thread state.
    Last write wins; there is no locking.
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path else None
        self._threads: Dict[str, ThreadState] = {}

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        if self.path is None:
            return
        if not self.path.exists():
            self._threads = {}
            return
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
            self._threads = {
                thread_id: ThreadState.model_validate(data)
                for thread_id, data in raw.items()
            }
        except (OSError, ValueError, ValidationError, AttributeError) as e:
            logger.debug(f"Failed to load slots file {self.path}, starting fresh: {e}")
            self._threads = {}

    def _save(self) -> None:
        if self.path is None:
            return
        data = {
            thread_id: state.model_dump(mode="json")
            for thread_id, state in self._threads.items()
        }
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")
        except OSError as e:
            logger.warning(f"Failed to save slots file {self.path}: {e}")

    def _thread(self, thread_id: str) -> ThreadState:
        self._load()
        return self._threads.setdefault(thread_id, ThreadState())

    # ------------------------------------------------------------------
    # Slots
    # ------------------------------------------------------------------

    def get_slots(self, thread_id: str) -> Dict[str, str]:
        self._load()
        state = self._threads.get(thread_id)
        slots = dict(state.slots) if state else {}
        logger.debug(f"[thread={thread_id}] get_slots -> {slots}")
        return slots

    def update_slots(
        self,
        thread_id: str,
        slots: Dict[str, object],
        expected_missing: Iterable[str] = (),
    ) -> Dict[str, str]:
        state = self._thread(thread_id)
        previous = state.slots
        state.slots = merge_slots(previous, slots)
        state.expected_missing = list(expected_missing)
        logger.debug(
            f"[thread={thread_id}] update_slots | new={slots}, "
            f"prev={previous}, merged={state.slots}"
        )
        self._save()
        return dict(state.slots)

    def clear_keys(self, thread_id: str, keys: Iterable[str]) -> None:
        state = self._thread(thread_id)
        for key in keys:
            state.slots.pop(key, None)
        self._save()

    def get_expected_missing(self, thread_id: str) -> List[str]:
        self._load()
        state = self._threads.get(thread_id)
        return list(state.expected_missing) if state else []

    def clear_thread(self, thread_id: str) -> None:
        self._load()
        self._threads.pop(thread_id, None)
        self._save()

    def clear_all(self) -> None:
        self._threads = {}
        if self.path is not None and self.path.exists():
            try:
                self.path.unlink()
            except OSError as e:
                logger.warning(f"Failed to remove slots file {self.path}: {e}")

    def has_thread(self, thread_id: str) -> bool:
        self._load()
        return thread_id in self._threads

    # ------------------------------------------------------------------
    # Intent and receipts
    # ------------------------------------------------------------------

    def set_last_intent(self, thread_id: str, intent: str) -> None:
        self._thread(thread_id).last_intent = intent
        self._save()

    def get_last_intent(self, thread_id: str) -> Optional[str]:
        self._load()
        state = self._threads.get(thread_id)
        return state.last_intent if state else None

    def set_last_receipts(
        self,
        thread_id: str,
        facts: List[Fact],
        decisions: List[str],
        reply: Optional[str] = None,
    ) -> None:
        self._thread(thread_id).last_receipts = Receipts(
            facts=list(facts), decisions=list(decisions), reply=reply
        )
        self._save()

    def get_last_receipts(self, thread_id: str) -> Optional[Receipts]:
        self._load()
        state = self._threads.get(thread_id)
        return state.last_receipts if state else None


# Process-wide store used by the module-level helpers
_store = SlotStore(DEFAULT_CONFIG.slots_file)


def get_store() -> SlotStore:
    """Return the process-wide slot store."""
    return _store


def configure_store(path: Optional[str] = None) -> SlotStore:
    """Replace the process-wide store (e.g., to enable file persistence)."""
    global _store
    _store = SlotStore(path)
    return _store


def get_thread_slots(thread_id: str) -> Dict[str, str]:
    return _store.get_slots(thread_id)


def update_thread_slots(
    thread_id: str,
    slots: Dict[str, object],
    expected_missing: Iterable[str] = (),
) -> Dict[str, str]:
    return _store.update_slots(thread_id, slots, expected_missing)


def clear_slot_keys(thread_id: str, keys: Iterable[str]) -> None:
    _store.clear_keys(thread_id, keys)


def get_expected_missing(thread_id: str) -> List[str]:
    return _store.get_expected_missing(thread_id)


def clear_thread_slots(thread_id: str) -> None:
    _store.clear_thread(thread_id)


def set_last_intent(thread_id: str, intent: str) -> None:
    _store.set_last_intent(thread_id, intent)


def get_last_intent(thread_id: str) -> Optional[str]:
    return _store.get_last_intent(thread_id)


def set_last_receipts(
    thread_id: str,
    facts: List[Fact],
    decisions: List[str],
    reply: Optional[str] = None,
) -> None:
    _store.set_last_receipts(thread_id, facts, decisions, reply)


def get_last_receipts(thread_id: str) -> Optional[Receipts]:
    return _store.get_last_receipts(thread_id)


def clear_all() -> None:
    _store.clear_all()
