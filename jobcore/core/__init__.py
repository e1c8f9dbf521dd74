from .store import JobStore
from .base import BaseJobStore, StopDispatcher


__all__ = ["JobStore", "BaseJobStore", "StopDispatcher"]
