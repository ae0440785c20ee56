import threading
from typing import Callable, Optional

ProgressCallback = Callable[[int, int], None]


class ProgressTracker:
    """
    Progress state owned by the caller of a run.
    The counter is lock-protected; callbacks fire inside the lock so the
    reported counts never go backwards even though frames finish out of order.
    """
    def __init__(self, total: int, callback: Optional[ProgressCallback] = None):
        self.total = total
        self.callback = callback
        self.current = 0
        self.lock = threading.Lock()

    def advance(self) -> int:
        with self.lock:
            self.current += 1
            current = self.current
            if self.callback is not None:
                self.callback(current, self.total)
        return current
