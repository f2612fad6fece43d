import threading
from collections import deque
from dataclasses import dataclass, field
from typing import Deque, List, Optional

from dompet.errors import DompetError


@dataclass
class Notification:
    title: str
    description: str = ""
    variant: str = "default"  # default | destructive
    error: Optional[BaseException] = field(default=None, repr=False)

    @property
    def destructive(self) -> bool:
        return self.variant == "destructive"


class Notifier:
    """Collects the user-facing outcome of every store operation"""

    def __init__(self, limit: int = 50):
        self._items: Deque[Notification] = deque(maxlen=limit)
        # failures seen by the current thread, i.e. the current request
        self._local = threading.local()

    def success(self, title: str, description: str = "") -> Notification:
        note = Notification(title=title, description=description)
        self._items.append(note)
        return note

    def failure(self, error: BaseException, title: Optional[str] = None) -> Notification:
        if isinstance(error, DompetError):
            description = error.message or str(error)
            title = title or error.title
        else:
            description = str(error) or error.__class__.__name__
            title = title or "Error"
        note = Notification(title=title, description=description, variant="destructive", error=error)
        self._items.append(note)
        self._local.failure = note
        return note

    def last_failure(self) -> Optional[Notification]:
        """Latest failure raised on the calling thread"""
        return getattr(self._local, "failure", None)

    def reset_failure(self) -> None:
        self._local.failure = None

    @property
    def last(self) -> Optional[Notification]:
        return self._items[-1] if self._items else None

    def all(self) -> List[Notification]:
        return list(self._items)

    def clear(self) -> None:
        self._items.clear()
