import threading
from typing import Set


def base_id(kind: str, page: int, x: float, y: float) -> str:
    return f"{kind}-p{page}x{int(x)}y{int(y)}"


class IdRegistry:
    """IDs handed out on one page.

    Annotations of a page are built concurrently, so the check and the
    insert happen under one lock. IDs are never released.
    """

    def __init__(self):
        self._ids: Set[str] = set()
        self._lock = threading.Lock()

    def assign(self, kind: str, page: int, x: float, y: float) -> str:
        candidate = base = base_id(kind, page, x, y)
        with self._lock:
            n = 1
            while candidate in self._ids:
                candidate = f"{base}-{n}"
                n += 1
            self._ids.add(candidate)
        return candidate

    def __contains__(self, item: str) -> bool:
        with self._lock:
            return item in self._ids

    def __len__(self) -> int:
        with self._lock:
            return len(self._ids)
