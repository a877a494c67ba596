"""
Lookup Queue

Sheet-backed task queue for business-name lookups, and the worker that
drains it one bounded batch at a time.
"""

from .models import QueueTask
from .store import QueueRepository
from .worker import BatchResult, TaskRunner

__all__ = ["QueueTask", "QueueRepository", "TaskRunner", "BatchResult"]
