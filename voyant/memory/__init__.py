"""Per-thread slot memory."""

from voyant.memory.slot_memory import (
    SlotStore,
    ThreadState,
    merge_slots,
    get_store,
    configure_store,
    get_thread_slots,
    update_thread_slots,
    clear_slot_keys,
    get_expected_missing,
    clear_thread_slots,
    clear_all,
    set_last_intent,
    get_last_intent,
    set_last_receipts,
    get_last_receipts,
)

__all__ = [
    "SlotStore",
    "ThreadState",
    "merge_slots",
    "get_store",
    "configure_store",
    "get_thread_slots",
    "update_thread_slots",
    "clear_slot_keys",
    "get_expected_missing",
    "clear_thread_slots",
    "clear_all",
    "set_last_intent",
    "get_last_intent",
    "set_last_receipts",
    "get_last_receipts",
]
