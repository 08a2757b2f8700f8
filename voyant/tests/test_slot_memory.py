"""
Tests for per-thread slot memory.

Covers slot merging, consent flag clearing, intent and receipts tracking,
and optional JSON persistence.
"""

import json

from voyant.memory import (
    SlotStore,
    clear_all,
    clear_slot_keys,
    clear_thread_slots,
    get_expected_missing,
    get_last_intent,
    get_last_receipts,
    get_thread_slots,
    merge_slots,
    set_last_intent,
    set_last_receipts,
    update_thread_slots,
)


# ============================================================================
# TestMergeSlots
# ============================================================================


class TestMergeSlots:
    """Tests for merge_slots."""

    def test_new_values_override(self):
        merged = merge_slots({"city": "Paris", "month": "June"}, {"city": "Rome"})
        assert merged == {"city": "Rome", "month": "June"}

    def test_empty_and_non_string_values_ignored(self):
        merged = merge_slots({"city": "Paris"}, {"city": "", "month": None, "dates": 5, "x": "  "})
        assert merged == {"city": "Paris"}

    def test_previous_not_mutated(self):
        previous = {"city": "Paris"}
        merge_slots(previous, {"month": "June"})
        assert previous == {"city": "Paris"}


# ============================================================================
# TestThreadSlots
# ============================================================================


class TestThreadSlots:
    """Tests for the module-level slot helpers."""

    def test_unknown_thread_has_no_slots(self):
        assert get_thread_slots("nobody") == {}
        assert get_expected_missing("nobody") == []
        assert get_last_intent("nobody") is None
        assert get_last_receipts("nobody") is None

    def test_update_merges_and_records_missing(self):
        update_thread_slots("t1", {"city": "Paris"}, ["dates"])
        update_thread_slots("t1", {"month": "June"})

        assert get_thread_slots("t1") == {"city": "Paris", "month": "June"}
        assert get_expected_missing("t1") == []

    def test_expected_missing_kept_until_next_update(self):
        update_thread_slots("t1", {}, ["city", "dates"])
        assert get_expected_missing("t1") == ["city", "dates"]

    def test_returned_slots_are_a_copy(self):
        update_thread_slots("t1", {"city": "Paris"})
        slots = get_thread_slots("t1")
        slots["city"] = "Rome"
        assert get_thread_slots("t1") == {"city": "Paris"}

    def test_empty_string_does_not_clear_a_slot(self):
        update_thread_slots("t1", {"awaiting_search_consent": "true"})
        update_thread_slots("t1", {"awaiting_search_consent": ""})
        assert get_thread_slots("t1")["awaiting_search_consent"] == "true"

    def test_clear_slot_keys_removes_flags(self):
        update_thread_slots(
            "t1",
            {"city": "Paris", "awaiting_search_consent": "true", "pending_search_query": "flights"},
        )
        clear_slot_keys("t1", ["awaiting_search_consent", "pending_search_query"])
        assert get_thread_slots("t1") == {"city": "Paris"}

    def test_threads_are_isolated(self):
        update_thread_slots("a", {"city": "Paris"})
        update_thread_slots("b", {"city": "Tokyo"})
        clear_thread_slots("a")

        assert get_thread_slots("a") == {}
        assert get_thread_slots("b") == {"city": "Tokyo"}

    def test_clear_all(self):
        update_thread_slots("a", {"city": "Paris"})
        set_last_intent("a", "weather")
        clear_all()

        assert get_thread_slots("a") == {}
        assert get_last_intent("a") is None

    def test_last_intent(self):
        set_last_intent("t1", "packing")
        assert get_last_intent("t1") == "packing"

    def test_last_receipts(self):
        set_last_receipts(
            "t1",
            [{"source": "open-meteo.com", "key": "weather_summary", "value": "Sunny", "url": None}],
            ["Routed to weather"],
            "It's sunny.",
        )
        receipts = get_last_receipts("t1")

        assert receipts.reply == "It's sunny."
        assert receipts.facts[0].source == "open-meteo.com"
        assert receipts.decisions == ["Routed to weather"]
        assert receipts.sources == ["open-meteo.com"]


# ============================================================================
# TestPersistence
# ============================================================================


class TestPersistence:
    """Tests for the optional JSON file backing."""

    def test_slots_survive_a_new_store(self, tmp_path):
        path = tmp_path / "slots.json"
        first = SlotStore(str(path))
        first.update_slots("t1", {"city": "Lisbon"}, ["dates"])
        first.set_last_intent("t1", "destinations")

        second = SlotStore(str(path))
        assert second.get_slots("t1") == {"city": "Lisbon"}
        assert second.get_expected_missing("t1") == ["dates"]
        assert second.get_last_intent("t1") == "destinations"

    def test_file_is_json(self, tmp_path):
        path = tmp_path / "slots.json"
        SlotStore(str(path)).update_slots("t1", {"city": "Lisbon"})

        data = json.loads(path.read_text())
        assert data["t1"]["slots"] == {"city": "Lisbon"}

    def test_corrupt_file_starts_fresh(self, tmp_path):
        path = tmp_path / "slots.json"
        path.write_text("{not json")

        store = SlotStore(str(path))
        assert store.get_slots("t1") == {}

    def test_clear_all_removes_file(self, tmp_path):
        path = tmp_path / "slots.json"
        store = SlotStore(str(path))
        store.update_slots("t1", {"city": "Lisbon"})
        store.clear_all()

        assert not path.exists()
        assert store.get_slots("t1") == {}
