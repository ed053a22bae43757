"""
Notification data models
"""

from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Deque, Optional
import uuid


class NotificationKind(Enum):
    """Notification kind"""
    STATUS = "status"
    ERROR = "error"


class NotificationPersistence(Enum):
    """How long a notification stays on screen"""
    TRANSIENT = "transient"    # Fixed display window
    PERMANENT = "permanent"    # Until replaced or dismissed


@dataclass(frozen=True)
class Notification:
    text: str
    kind: NotificationKind = NotificationKind.STATUS
    persistence: NotificationPersistence = NotificationPersistence.TRANSIENT
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    created_at: datetime = field(default_factory=datetime.now)

    @property
    def is_permanent(self) -> bool:
        return self.persistence is NotificationPersistence.PERMANENT

    @property
    def is_error(self) -> bool:
        return self.kind is NotificationKind.ERROR


@dataclass
class NotificationState:
    """
    Notification slots

    `active` is always the permanent notification, the transient just taken
    from the backlog, or None. The backlog only holds transients.
    """

    active: Optional[Notification] = None
    permanent: Optional[Notification] = None
    backlog: Deque[Notification] = field(default_factory=deque)
    is_transient_showing: bool = False
