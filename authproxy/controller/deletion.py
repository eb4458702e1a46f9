import threading
from collections import OrderedDict
from typing import Hashable


class DeletionTracker:
    """Remembers which resource keys were most recently seen deleted.

    Used to tell a "not found" caused by a deletion this controller already
    processed apart from one caused by read lag. An evicted entry turns a
    later not-found into an UNAVAILABLE retry.

    Safe to share between reconciles of different keys running concurrently.
    """

    def __init__(self, max_entries: int = 0) -> None:
        self._lock = threading.Lock()
        self._values: "OrderedDict[Hashable, bool]" = OrderedDict()
        self.max_entries = max_entries

    def set(self, key: Hashable, deleted: bool) -> None:
        with self._lock:
            self._values[key] = deleted
            self._values.move_to_end(key)
            if self.max_entries:
                while len(self._values) > self.max_entries:
                    self._values.popitem(last=False)

    def get(self, key: Hashable) -> bool:
        with self._lock:
            return self._values.get(key, False)

    def __len__(self) -> int:
        with self._lock:
            return len(self._values)
