import uuid
from typing import Any, Callable, Dict, List, Optional, Set, Tuple

from pymongo.errors import PyMongoError

from dompet.errors import DompetError, NotFoundError, ValidationError
from dompet.stores.notifications import Notifier
from dompet.stores.optimistic import MutationGuard, OptimisticCommand


PENDING_PREFIX = "pending-"


class EntityStore:
    """In-memory mirror of one user's remote collection.

    Mutations go through OptimisticCommand: the local list changes first,
    ids awaiting the remote store sit in ``pending`` and a remote failure
    restores the snapshot. Every public mutation is an operation boundary:
    errors become a notification and the method returns None.
    """

    label = "Item"
    tag = "STORE"

    def __init__(self, user_id: str, repository, notifier: Optional[Notifier] = None,
                 guard: Optional[MutationGuard] = None):
        self.user_id = user_id
        self.repository = repository
        self.notifier = notifier or Notifier()
        self.guard = guard or MutationGuard()
        self.items: List[Dict[str, Any]] = []
        self.pending: Set[str] = set()
        self.loaded = False

    # Loading and lookups

    def load(self) -> List[Dict[str, Any]]:
        try:
            self.items = self.repository.list_by_user(self.user_id)
        except PyMongoError as e:
            print(f"❌ [{self.tag}] Error loading {self.label.lower()}s: {e}")
            self.notifier.failure(e, title=f"Error loading {self.label.lower()}s")
            self.items = []
            return self.items
        self._sort()
        self.loaded = True
        return self.items

    def get(self, item_id: str) -> Optional[Dict[str, Any]]:
        for item in self.items:
            if item.get("_id") == item_id:
                return item
        return None

    def require(self, item_id: str) -> Dict[str, Any]:
        item = self.get(item_id)
        if item is None:
            raise NotFoundError(f"{self.label} not found.")
        return item

    def is_pending(self, item_id: str) -> bool:
        return item_id in self.pending

    # Hooks for subclasses

    def _sort(self) -> None:
        pass

    def _prepare(self, data: Dict[str, Any], existing: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return dict(data)

    def _remote_create(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        return self.repository.create_item(self.user_id, doc)

    def _remote_update(self, item_id: str, doc: Dict[str, Any]) -> Dict[str, Any]:
        if not self.repository.update_owned(item_id, self.user_id, doc):
            raise NotFoundError(f"{self.label} not found or update failed.")
        return doc

    def _remote_delete(self, item_id: str) -> None:
        if not self.repository.delete_owned(item_id, self.user_id):
            raise NotFoundError(f"{self.label} not found or delete failed.")

    # Operation boundary

    def _boundary(self, action: Callable[[], Any], success: Optional[Tuple[str, str]] = None,
                  failure_title: Optional[str] = None) -> Any:
        self.notifier.reset_failure()
        try:
            result = action()
        except (DompetError, PyMongoError) as e:
            print(f"❌ [{self.tag}] {failure_title or 'Operation failed'}: {e}")
            # validation errors carry their own title, e.g. "Transfer Error"
            title = e.title if isinstance(e, ValidationError) else failure_title
            self.notifier.failure(e, title=title)
            return None
        if success:
            self.notifier.success(*success)
        return result

    def _replace_local(self, item_id: str, item: Dict[str, Any]) -> None:
        self.items = [item if i.get("_id") == item_id else i for i in self.items]
        self._sort()

    # Mutations

    def create(self, data: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        def action():
            doc = self._prepare(data)
            temp_id = f"{PENDING_PREFIX}{uuid.uuid4().hex}"
            local = dict(doc, _id=temp_id, user_id=self.user_id)
            snapshot = list(self.items)

            def apply_local(_):
                self.items = [local] + self.items
                self.pending.add(temp_id)
                self._sort()

            def revert_local():
                self.items = snapshot
                self.pending.discard(temp_id)

            def commit_local(saved):
                self.pending.discard(temp_id)
                self._replace_local(temp_id, saved)

            command = OptimisticCommand(
                remote=lambda: self._remote_create(doc),
                apply_local=apply_local,
                revert_local=revert_local,
                commit_local=commit_local,
                label=f"create {self.label.lower()}",
            )
            return command.execute()

        return self._boundary(action, success=("Success", f"{self.label} added."),
                              failure_title=f"Failed to add {self.label.lower()}")

    def update(self, item_id: str, changes: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        def action():
            existing = self.require(item_id)
            merged = dict(existing)
            merged.update({k: v for k, v in changes.items() if k not in ("_id", "user_id")})
            doc = self._prepare(merged, existing)
            local = dict(existing)
            local.update(doc)
            snapshot = list(self.items)

            def apply_local(_):
                self.pending.add(item_id)
                self._replace_local(item_id, local)

            def revert_local():
                self.items = snapshot
                self.pending.discard(item_id)

            def commit_local(_):
                self.pending.discard(item_id)

            with self.guard.hold(item_id):
                OptimisticCommand(
                    remote=lambda: self._remote_update(item_id, doc),
                    apply_local=apply_local,
                    revert_local=revert_local,
                    commit_local=commit_local,
                    label=f"update {self.label.lower()}",
                ).execute()
            return local

        return self._boundary(action, success=("Success", f"{self.label} updated."),
                              failure_title=f"Failed to update {self.label.lower()}")

    def delete(self, item_id: str) -> Optional[bool]:
        def action():
            self.require(item_id)
            snapshot = list(self.items)

            def apply_local(_):
                self.pending.add(item_id)
                self.items = [i for i in self.items if i.get("_id") != item_id]

            def revert_local():
                self.items = snapshot
                self.pending.discard(item_id)

            with self.guard.hold(item_id):
                OptimisticCommand(
                    remote=lambda: self._remote_delete(item_id),
                    apply_local=apply_local,
                    revert_local=revert_local,
                    commit_local=lambda _: self.pending.discard(item_id),
                    label=f"delete {self.label.lower()}",
                ).execute()
            return True

        return self._boundary(action, success=("Success", f"{self.label} deleted."),
                              failure_title=f"Failed to delete {self.label.lower()}")
