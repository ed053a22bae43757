"""
Test Configuration File

Unified setup for Python path, avoiding sys.path.insert in each test file.
Provides the Qt application fixture and shared builders for the service tests.
"""

import os
import sys
from pathlib import Path

import pytest

# Add the src directory to the Python path
src_path = Path(__file__).parent.parent / "src"
if str(src_path) not in sys.path:
    sys.path.insert(0, str(src_path))

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def qapp():
    """
    Create the Qt application for all tests.

    Uses session scope to avoid creating multiple application instances.
    """
    from PyQt6.QtCore import QCoreApplication

    app = QCoreApplication.instance()
    if app is None:
        app = QCoreApplication([])
    yield app


@pytest.fixture
def config(tmp_path):
    """Isolated ConfigService backed by a temporary file."""
    from services.config_service import ConfigService

    ConfigService.reset_instance()
    cfg = ConfigService(str(tmp_path / "config.yaml"))
    cfg.reset()
    yield cfg
    ConfigService.reset_instance()


@pytest.fixture
def store():
    from core.database import DatabaseManager
    from core.key_value_store import SqliteKeyValueStore

    db = DatabaseManager(":memory:")
    yield SqliteKeyValueStore(db)
    db.close()


@pytest.fixture
def timers():
    from core.timers import VirtualTimerFactory

    return VirtualTimerFactory()


@pytest.fixture
def event_bus():
    from core.event_bus import EventBus

    return EventBus()


@pytest.fixture
def notifications(timers, event_bus):
    from services.notification_service import NotificationService

    return NotificationService(timers, event_bus=event_bus)


def make_technique(technique_id, **levels):
    from models.technique import Technique

    return Technique(
        id=technique_id,
        filename=f"technique-{technique_id}.mp3",
        category="nage waza",
        attack="katatedori",
        technique=f"technique {technique_id}",
        levels=levels,
    )


@pytest.fixture
def catalog():
    """
    Ten techniques:
      1-4   aikikai 5
      5-6   aikikai 4 (aikicircle 3)
      7-8   aikicircle 5 only
      9-10  unclassified
    """
    from models.catalog import Catalog

    techniques = (
        [make_technique(i, aikikai=5) for i in range(1, 5)]
        + [make_technique(i, aikikai=4, aikicircle=3) for i in range(5, 7)]
        + [make_technique(i, aikicircle=5) for i in range(7, 9)]
        + [make_technique(i) for i in range(9, 11)]
    )
    return Catalog(version=3, techniques=tuple(techniques))


def make_selection(levels=(5,), source="aikikai", include_unclassified=False):
    from models.preferences import PreferenceSelection

    return PreferenceSelection(
        available_levels=(6, 5, 4, 3, 2, 1),
        available_sources=("aikikai", "aikicircle"),
        selected_levels=frozenset(levels),
        selected_source=source,
        include_unclassified=include_unclassified,
    )


def notification_texts(notifications):
    """Active notification text followed by the backlog, in display order."""
    texts = []
    if notifications.active_notification is not None:
        texts.append(notifications.active_notification.text)
    texts.extend(n.text for n in notifications.backlog)
    return texts


class FlakyStore:
    """In-memory key-value store that can be told to fail."""

    def __init__(self, data=None):
        self.data = dict(data or {})
        self.fail_reads = False
        self.fail_writes = False
        self.fail_keys = set()
        self.writes = []

    def get_item(self, key):
        from core.key_value_store import StorageError

        if self.fail_reads:
            raise StorageError(f"read failed: {key}")
        return self.data.get(key)

    def set_item(self, key, value):
        from core.key_value_store import StorageError

        if self.fail_writes or key in self.fail_keys:
            raise StorageError(f"quota exceeded: {key}")
        self.writes.append(key)
        self.data[key] = value

    def set_items(self, items):
        from core.key_value_store import StorageError

        for key in items:
            if self.fail_writes or key in self.fail_keys:
                raise StorageError(f"quota exceeded: {key}")
        for key, value in items.items():
            self.writes.append(key)
            self.data[key] = value

    def remove_item(self, key):
        self.data.pop(key, None)
