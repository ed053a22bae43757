# -*- coding: utf-8 -*-
"""
Protocols Definition Module

Defines the interface protocols (Protocol) for the application's infrastructure services.
Uses Protocol instead of ABC to support structural subtyping checks.

Design Decisions:
- Default to using Protocol + @runtime_checkable
- Runtime checks are performed as one-time assertions during container assembly or testing
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Protocol, runtime_checkable


# =============================================================================
# Event Bus Protocol
# =============================================================================

@runtime_checkable
class IEventBus(Protocol):
    """Event Bus Interface

    Provides a publish-subscribe pattern event system.
    """

    def subscribe(
        self,
        event_type: Enum,
        callback: Callable[[Any], None]
    ) -> str:
        """Subscribe to an event

        Returns:
            Subscription ID, used to unsubscribe
        """
        ...

    def unsubscribe(self, subscription_id: str) -> bool:
        ...

    def publish_sync(self, event_type: Enum, data: Any = None) -> None:
        """Publish an event synchronously"""
        ...


# =============================================================================
# Infrastructure ports
# =============================================================================

# Re-export infrastructure interfaces from core.ports
from core.ports.storage import IKeyValueStore
from core.ports.timer import ITimerFactory, ITimerHandle


# =============================================================================
# Configuration Service Protocol
# =============================================================================

@runtime_checkable
class IConfigService(Protocol):
    """Configuration Service Interface"""

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value (dot-separated key)"""
        ...

    def set(self, key: str, value: Any) -> None:
        """Set a configuration value"""
        ...

    def save(self) -> bool:
        """Persist configuration"""
        ...


__all__ = [
    "IEventBus",
    "IConfigService",
    "IKeyValueStore",
    "ITimerFactory",
    "ITimerHandle",
]
