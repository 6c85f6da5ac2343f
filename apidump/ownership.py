# -*- coding: utf-8 -*-
"""
Allocation and scoped release for decoded values

Allocator API (swappable, default does plain Python allocation):
- allocator.text(raw: bytes) -> str        : Allocate a string field
- allocator.slots(count: int) -> list      : Allocate a sequence of count slots
- allocator.free(obj) -> None              : Release a value from text/slots

TrackingAllocator keeps a live count per value so tests can assert that a
failed decode leaves nothing outstanding and that nothing is released twice.

ReleaseScope is the construct-commit pairing used by every decoder:

    with ReleaseScope(allocator) as scope:
        name = scope.text(raw_name)          # release registered
        desc = scope.text(raw_desc)          # release registered
        record = Alias(type_, name, desc)
        scope.commit()                       # keep everything
    return record

If the block raises before commit(), every registered release runs in
reverse registration order and the exception propagates unchanged. If the
block ends normally without commit(), the releases run as well.
"""

import sys
from contextlib import ExitStack
from typing import Callable, Dict, List

from .errors import DoubleRelease


class Allocator:
    """Default allocator; release is a no-op, Python owns the memory"""

    def text(self, raw: bytes) -> str:
        # surrogateescape keeps every input byte, valid UTF-8 or not
        return raw.decode('utf-8', 'surrogateescape')

    def slots(self, count: int) -> list:
        if count > sys.maxsize:
            raise MemoryError(f"cannot allocate {count} slots")
        return [None] * count

    def free(self, obj):
        pass


class TrackingAllocator(Allocator):
    """
    Allocator that counts live allocations.

    Values are keyed by identity. Interned strings (for example the empty
    string) may be handed out several times; each hand-out needs its own
    release.
    """

    def __init__(self):
        self._live: Dict[int, list] = {}    # id -> [value, count]
        self.allocations = 0
        self.releases = 0

    def _track(self, value):
        entry = self._live.get(id(value))
        if entry is None:
            self._live[id(value)] = [value, 1]
        else:
            entry[1] += 1
        self.allocations += 1
        return value

    def text(self, raw: bytes) -> str:
        return self._track(super().text(raw))

    def slots(self, count: int) -> list:
        return self._track(super().slots(count))

    def free(self, obj):
        entry = self._live.get(id(obj))
        if entry is None:
            raise DoubleRelease(f"release of {obj!r:.60} without a live allocation")
        entry[1] -= 1
        if entry[1] == 0:
            del self._live[id(obj)]
        self.releases += 1

    @property
    def outstanding(self) -> int:
        """Number of allocations not yet released"""
        return sum(count for _, count in self._live.values())

    def is_live(self, obj) -> bool:
        return id(obj) in self._live


def release_all(items: List, allocator: Allocator):
    """Release each record of a sequence in reverse order, then the sequence"""
    for item in reversed(items):
        item.release(allocator)
    allocator.free(items)


class ReleaseScope:
    """
    Scope that releases registered values unless committed.

    Built on contextlib.ExitStack: registrations are stacked callbacks and
    commit() detaches them all, so the release order on failure is always
    last-allocated first.
    """

    def __init__(self, allocator: Allocator):
        self.allocator = allocator
        self._stack = ExitStack()
        self._committed = False

    def __enter__(self) -> 'ReleaseScope':
        self._stack.__enter__()
        return self

    def __exit__(self, exc_type, exc, tb):
        return self._stack.__exit__(exc_type, exc, tb)

    def defer(self, callback: Callable, *args):
        """Register callback(*args) to run if the scope is not committed"""
        if self._committed:
            raise RuntimeError("scope already committed")
        self._stack.callback(callback, *args)

    def text(self, raw: bytes) -> str:
        value = self.allocator.text(raw)
        self.defer(self.allocator.free, value)
        return value

    def slots(self, count: int) -> list:
        items = self.allocator.slots(count)
        self.defer(self.allocator.free, items)
        return items

    def adopt(self, record):
        """Register a built record's own release() and return it"""
        self.defer(record.release, self.allocator)
        return record

    def adopt_all(self, items: List) -> List:
        """Register a built sequence of records (released in reverse)"""
        self.defer(release_all, items, self.allocator)
        return items

    def commit(self):
        """Keep every registered value; nothing will be released"""
        self._stack.pop_all()
        self._committed = True
