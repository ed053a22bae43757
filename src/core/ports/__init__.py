# -*- coding: utf-8 -*-
"""
Ports Interfaces Package

Defines the interfaces between the application and external infrastructure (persistent store, timers).

Design Principles:
- Use Protocol to define interfaces, supporting structural subtyping.
- Service layer depends on these interfaces rather than concrete implementations.
- Facilitates replacing with fake/mock during testing.
"""

from core.ports.storage import IKeyValueStore
from core.ports.timer import ITimerFactory, ITimerHandle

__all__ = [
    "IKeyValueStore",
    "ITimerFactory",
    "ITimerHandle",
]
