import threading
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, Iterator, List, Optional, Set, Tuple

from dompet.errors import MutationInProgressError


class MutationState(Enum):
    PENDING = "pending"
    COMMITTED = "committed"
    FAILED = "failed"


class OptimisticCommand:
    """One local+remote mutation with rollback defined in a single place.

    optimistic=True applies the local change before the remote call and
    reverts it when the remote call raises; commit_local then swaps the
    pending copy for what the remote store returned. optimistic=False only
    touches local state once the remote call has committed.
    """

    def __init__(self, remote: Callable[[], Any], apply_local: Callable[[Any], None],
                 revert_local: Callable[[], None], commit_local: Optional[Callable[[Any], None]] = None,
                 optimistic: bool = True, label: str = "mutation"):
        self.remote = remote
        self.apply_local = apply_local
        self.revert_local = revert_local
        self.commit_local = commit_local
        self.optimistic = optimistic
        self.label = label
        self.state: Optional[MutationState] = None
        self.result: Any = None
        self.error: Optional[BaseException] = None

    def execute(self) -> Any:
        self.state = MutationState.PENDING
        if self.optimistic:
            self.apply_local(None)
        try:
            self.result = self.remote()
        except Exception as e:
            self.error = e
            self.state = MutationState.FAILED
            if self.optimistic:
                print(f"🔄 [STORE] {self.label} failed remotely, rolling back local copy")
                self.revert_local()
            raise

        if self.optimistic:
            if self.commit_local:
                self.commit_local(self.result)
        else:
            self.apply_local(self.result)
        self.state = MutationState.COMMITTED
        return self.result


class CompensatingBatch:
    """Ordered remote writes; a failure undoes the completed ones in reverse.

    Use as a context manager: leaving the block with an exception triggers
    rollback and the exception keeps propagating.
    """

    def __init__(self, label: str = "batch"):
        self.label = label
        self._undo: List[Tuple[Callable[[Any], None], Any]] = []

    def run(self, step: Callable[[], Any], undo: Optional[Callable[[Any], None]] = None) -> Any:
        result = step()
        if undo is not None:
            self._undo.append((undo, result))
        return result

    def rollback(self) -> None:
        while self._undo:
            undo, result = self._undo.pop()
            try:
                undo(result)
            except Exception as e:
                print(f"❌ [STORE] Compensation in {self.label} failed, remote state needs attention: {e}")

    def __enter__(self) -> "CompensatingBatch":
        return self

    def __exit__(self, exc_type, exc, tb) -> bool:
        if exc_type is not None:
            print(f"🔄 [STORE] Undoing {len(self._undo)} remote write(s) of {self.label}")
            self.rollback()
        return False


class MutationGuard:
    """At most one in-flight mutation per entity id; a second one is rejected"""

    def __init__(self):
        self._lock = threading.Lock()
        self._in_flight: Set[str] = set()

    def is_busy(self, key: str) -> bool:
        with self._lock:
            return key in self._in_flight

    @contextmanager
    def hold(self, *keys: Optional[str]) -> Iterator[None]:
        wanted = {str(k) for k in keys if k}
        with self._lock:
            busy = wanted & self._in_flight
            if busy:
                raise MutationInProgressError(
                    f"Another change to {', '.join(sorted(busy))} is still in progress."
                )
            self._in_flight |= wanted
        try:
            yield
        finally:
            with self._lock:
                self._in_flight -= wanted
