from __future__ import annotations

from collections import OrderedDict, deque
from typing import Deque, Dict, Iterator, List

from .base import CrawlTask


class Frontier:
    """Pending crawl tasks, FIFO within each domain."""

    def __init__(self) -> None:
        self._pending: Dict[str, Deque[CrawlTask]] = OrderedDict()
        self._size = 0

    def push(self, task: CrawlTask) -> None:
        self._pending.setdefault(task.domain, deque()).append(task)
        self._size += 1

    def pending(self, domain: str) -> int:
        q = self._pending.get(domain)
        return len(q) if q else 0

    def drain(self, domain: str, limit: int) -> List[CrawlTask]:
        """Remove and return up to ``limit`` of the earliest tasks for ``domain``."""
        q = self._pending.get(domain)
        if not q:
            return []
        batch = [q.popleft() for _ in range(min(limit, len(q)))]
        self._size -= len(batch)
        return batch

    def domains(self) -> Iterator[str]:
        return (d for d, q in self._pending.items() if q)

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0
