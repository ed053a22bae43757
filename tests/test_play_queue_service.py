"""
Play queue service tests.
"""

import json
import random
from collections import Counter

import pytest

from conftest import FlakyStore, make_selection, notification_texts


def _make_service(store, notifications, config, event_bus=None, seed=7, selection=None):
    from services.play_queue_service import PlayQueueService
    from services.queue_persistence_service import QueuePersistenceService

    selection = selection or make_selection(levels=(5,))
    return PlayQueueService(
        QueuePersistenceService(store, config=config),
        notifications,
        event_bus=event_bus,
        preference_provider=lambda: selection,
        rng=random.Random(seed),
    )


def _stored(store):
    ids = json.loads(store.get_item("shodan.play_queue"))
    state = json.loads(store.get_item("shodan.play_state"))
    return ids, state


class TestGenerateQueue:

    def test_permutation_of_filtered_items(self, store, notifications, config, catalog):
        service = _make_service(store, notifications, config)

        state = service.generate_queue(catalog)

        ids = [t.id for t in state.items]
        assert sorted(ids) == [1, 2, 3, 4]
        assert len(set(ids)) == len(ids)
        assert state.cursor == 0
        assert state.is_playing is False
        assert service.current_technique is state.items[0]

    def test_status_notification_cites_count(self, store, notifications, config, catalog):
        service = _make_service(store, notifications, config)

        service.generate_queue(catalog)

        active = notifications.active_notification
        assert active is not None
        assert active.is_error is False
        assert "4" in active.text

    def test_empty_result_reports_error(self, store, notifications, config, catalog):
        service = _make_service(store, notifications, config)

        state = service.generate_queue(catalog, make_selection(levels=(1,)))

        assert state.items == []
        assert state.cursor is None
        assert service.current_technique is None
        assert notifications.active_notification.is_error is True

    def test_explicit_selection_overrides_provider(self, store, notifications, config, catalog):
        service = _make_service(store, notifications, config)

        state = service.generate_queue(catalog, make_selection(levels=(5,), include_unclassified=True))

        assert sorted(t.id for t in state.items) == [1, 2, 3, 4, 9, 10]

    def test_persists_whole_projection(self, store, notifications, config, catalog):
        service = _make_service(store, notifications, config)

        state = service.generate_queue(catalog)

        ids, play_state = _stored(store)
        assert ids == [t.id for t in state.items]
        assert play_state == {"current_index": 0, "is_playing": False}

    def test_publishes_queue_changed(self, store, notifications, config, catalog, event_bus):
        from core.event_bus import EventType

        service = _make_service(store, notifications, config, event_bus=event_bus)
        seen = []
        event_bus.subscribe(EventType.QUEUE_CHANGED, seen.append)

        service.generate_queue(catalog)

        assert len(seen) == 1
        assert len(seen[0].items) == 4

    def test_regeneration_resets_playing(self, store, notifications, config, catalog):
        service = _make_service(store, notifications, config)
        service.generate_queue(catalog)
        service.next_track()
        service.set_playing(True)

        state = service.generate_queue(catalog)

        assert state.cursor == 0
        assert state.is_playing is False

    def test_shuffle_is_uniform(self, store, notifications, config, catalog):
        service = _make_service(store, notifications, config, seed=12345)
        trials = 4000
        positions = {i: Counter() for i in range(4)}

        for _ in range(trials):
            state = service.generate_queue(catalog)
            for position, technique in enumerate(state.items):
                positions[position][technique.id] += 1
            notifications.dismiss_notification()

        expected = trials / 4
        for counter in positions.values():
            assert set(counter) == {1, 2, 3, 4}
            for count in counter.values():
                assert abs(count - expected) < expected * 0.15


class TestNextTrack:

    def test_advances_until_end(self, store, notifications, config, catalog):
        service = _make_service(store, notifications, config)
        state = service.generate_queue(catalog)

        visited = [service.current_technique]
        for _ in range(3):
            visited.append(service.next_track())

        assert visited == state.items
        assert service.cursor == 3

    def test_end_returns_none_and_keeps_cursor(self, store, notifications, config, catalog):
        service = _make_service(store, notifications, config)
        service.generate_queue(catalog)
        for _ in range(3):
            service.next_track()
        last = service.current_technique

        assert service.next_track() is None
        assert service.next_track() is None
        assert service.cursor == 3
        assert service.current_technique is last
        assert service.is_exhausted is True

    def test_empty_queue(self, store, notifications, config):
        service = _make_service(store, notifications, config)

        assert service.next_track() is None
        assert service.cursor is None

    def test_cursor_is_persisted(self, store, notifications, config, catalog):
        service = _make_service(store, notifications, config)
        service.generate_queue(catalog)

        service.next_track()
        service.next_track()

        _, play_state = _stored(store)
        assert play_state["current_index"] == 2


class TestPlayingAndReset:

    def test_set_playing_persisted(self, store, notifications, config, catalog):
        service = _make_service(store, notifications, config)
        service.generate_queue(catalog)

        service.set_playing(True)

        assert service.is_playing is True
        _, play_state = _stored(store)
        assert play_state["is_playing"] is True

    def test_set_playing_ignored_for_empty_queue(self, store, notifications, config):
        service = _make_service(store, notifications, config)

        service.set_playing(True)

        assert service.is_playing is False

    def test_reset_queue(self, store, notifications, config, catalog):
        service = _make_service(store, notifications, config)
        service.generate_queue(catalog)
        service.set_playing(True)

        service.reset_queue()

        assert service.queue == []
        assert service.cursor is None
        assert service.is_playing is False
        ids, play_state = _stored(store)
        assert ids == []
        assert play_state == {"current_index": -1, "is_playing": False}


class TestInitializeQueue:

    def test_empty_catalog_is_precondition_failure(self, store, notifications, config):
        from models.catalog import Catalog

        service = _make_service(store, notifications, config)

        assert service.initialize_queue(Catalog()) is False
        assert service.initialize_queue(None) is False
        assert service.queue == []
        assert notifications.has_notifications is False
        assert store.get_item("shodan.play_queue") is None

    def test_restores_saved_queue_without_playing(self, store, notifications, config, catalog):
        first = _make_service(store, notifications, config, seed=1)
        saved = first.generate_queue(catalog)
        first.next_track()
        first.next_track()
        first.set_playing(True)

        second = _make_service(store, notifications, config, seed=2)
        assert second.initialize_queue(catalog) is True

        assert [t.id for t in second.queue] == [t.id for t in saved.items]
        assert second.cursor == 2
        assert second.is_playing is False

    def test_generates_when_nothing_saved(self, store, notifications, config, catalog):
        service = _make_service(store, notifications, config)

        assert service.initialize_queue(catalog) is True

        assert sorted(t.id for t in service.queue) == [1, 2, 3, 4]
        assert "Queue ready: 4 techniques" in notification_texts(notifications)

    def test_force_regenerate_ignores_saved(self, store, notifications, config, catalog):
        store.set_item("shodan.play_queue", json.dumps([9, 10]))
        store.set_item("shodan.play_state", json.dumps({"current_index": 1, "is_playing": False}))
        service = _make_service(store, notifications, config)

        assert service.initialize_queue(catalog, force_regenerate=True) is True

        assert sorted(t.id for t in service.queue) == [1, 2, 3, 4]
        assert service.cursor == 0

    def test_force_regenerate_with_vacuous_selection(self, store, notifications, config, catalog):
        service = _make_service(store, notifications, config, selection=make_selection(levels=(1,)))

        assert service.initialize_queue(catalog, force_regenerate=True) is False
        assert notifications.active_notification.is_error is True

    def test_drops_unknown_ids(self, store, notifications, config, catalog):
        store.set_item("shodan.play_queue", json.dumps([3, 999, 7, 1]))
        store.set_item("shodan.play_state", json.dumps({"current_index": 1, "is_playing": True}))
        service = _make_service(store, notifications, config)

        assert service.initialize_queue(catalog) is True

        assert [t.id for t in service.queue] == [3, 7, 1]
        assert service.cursor == 1
        assert notifications.has_notifications is False
        ids, _ = _stored(store)
        assert ids == [3, 7, 1]

    @pytest.mark.parametrize("saved_cursor, expected", [(2, 2), (7, 2), (-4, 0)])
    def test_cursor_policy(self, store, notifications, config, catalog, saved_cursor, expected):
        store.set_item("shodan.play_queue", json.dumps([1, 2, 3]))
        store.set_item("shodan.play_state", json.dumps({"current_index": saved_cursor, "is_playing": False}))
        service = _make_service(store, notifications, config)

        service.initialize_queue(catalog)

        assert service.cursor == expected

    def test_bare_cursor_integer_accepted(self, store, notifications, config, catalog):
        store.set_item("shodan.play_queue", json.dumps([1, 2, 3]))
        store.set_item("shodan.play_state", "1")
        service = _make_service(store, notifications, config)

        service.initialize_queue(catalog)

        assert service.cursor == 1

    def test_unresolvable_queue_falls_back_to_generation(self, store, notifications, config, catalog):
        store.set_item("shodan.play_queue", json.dumps([500, 501]))
        service = _make_service(store, notifications, config)

        assert service.initialize_queue(catalog) is True

        assert sorted(t.id for t in service.queue) == [1, 2, 3, 4]
        texts = notification_texts(notifications)
        assert texts[0] == "Saved play queue no longer matches the catalog"
        assert notifications.active_notification.is_error is True

    def test_empty_saved_queue_regenerates_silently(self, store, notifications, config, catalog):
        store.set_item("shodan.play_queue", "[]")
        service = _make_service(store, notifications, config)

        assert service.initialize_queue(catalog) is True
        assert notification_texts(notifications) == ["Queue ready: 4 techniques"]

    def test_saved_queue_without_integer_ids(self, store, notifications, config, catalog):
        store.set_item("shodan.play_queue", json.dumps(["a", "b"]))
        service = _make_service(store, notifications, config)

        assert service.initialize_queue(catalog) is True

        assert notification_texts(notifications)[0] == "Failed to load saved play queue"
        assert notifications.active_notification.is_error is True
        assert sorted(t.id for t in service.queue) == [1, 2, 3, 4]

    def test_malformed_saved_queue(self, store, notifications, config, catalog):
        store.set_item("shodan.play_queue", "{not json")
        service = _make_service(store, notifications, config)

        assert service.initialize_queue(catalog) is True

        assert notification_texts(notifications)[0] == "Failed to load saved play queue"
        assert len(service.queue) == 4


class TestStorageFailures:

    def test_read_failure_falls_back(self, notifications, config, catalog):
        store = FlakyStore()
        store.fail_reads = True
        service = _make_service(store, notifications, config)

        assert service.initialize_queue(catalog) is True

        assert len(service.queue) == 4
        assert notification_texts(notifications)[0] == "Failed to load saved play queue"

    def test_write_failure_keeps_in_memory_state(self, notifications, config, catalog):
        store = FlakyStore()
        store.fail_writes = True
        service = _make_service(store, notifications, config)

        state = service.generate_queue(catalog)
        technique = service.next_track()

        assert len(state.items) == 4
        assert technique is state.items[1]
        assert service.cursor == 1
        texts = notification_texts(notifications)
        assert texts.count("Failed to save play queue") == 2
        assert "Queue ready: 4 techniques" in texts

    def test_partial_write_failure_keeps_previous_projection(self, notifications, config, catalog):
        store = FlakyStore()
        service = _make_service(store, notifications, config)
        service.generate_queue(catalog)
        service.next_track()
        service.next_track()
        saved_ids, saved_state = _stored(store)

        store.fail_keys = {"shodan.play_state"}
        service.generate_queue(catalog)

        assert service.cursor == 0
        ids, state = _stored(store)
        assert ids == saved_ids
        assert state["current_index"] == saved_state["current_index"] == 2
        assert "Failed to save play queue" in notification_texts(notifications)
