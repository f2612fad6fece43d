import threading

import pytest

from dompet.errors import MutationInProgressError, NotFoundError, ValidationError
from dompet.stores.notifications import Notifier
from dompet.stores.optimistic import CompensatingBatch, MutationGuard, MutationState, OptimisticCommand


class Boom(Exception):
    pass


def explode():
    raise Boom("remote down")


def test_optimistic_command_commits():
    local = []
    command = OptimisticCommand(
        remote=lambda: "saved",
        apply_local=lambda _: local.append("pending"),
        revert_local=local.clear,
        commit_local=lambda result: local.__setitem__(0, result),
    )
    assert command.execute() == "saved"
    assert local == ["saved"]
    assert command.state is MutationState.COMMITTED


def test_optimistic_command_reverts_on_failure():
    local = []
    command = OptimisticCommand(remote=explode, apply_local=lambda _: local.append("pending"),
                                revert_local=local.clear)
    with pytest.raises(Boom):
        command.execute()
    assert local == []
    assert command.state is MutationState.FAILED
    assert isinstance(command.error, Boom)


def test_non_optimistic_command_applies_after_remote():
    seen = []

    def remote():
        seen.append(list(local))
        return "row"

    local = []
    OptimisticCommand(remote=remote, apply_local=local.append, revert_local=local.clear,
                      optimistic=False).execute()
    assert seen == [[]]
    assert local == ["row"]


def test_non_optimistic_failure_never_touches_local():
    local = []
    with pytest.raises(Boom):
        OptimisticCommand(remote=explode, apply_local=local.append, revert_local=local.clear,
                          optimistic=False).execute()
    assert local == []


def test_batch_undoes_completed_steps_in_reverse():
    undone = []
    with pytest.raises(Boom):
        with CompensatingBatch("test") as batch:
            batch.run(lambda: 1, undo=lambda r: undone.append(r))
            batch.run(lambda: 2, undo=lambda r: undone.append(r))
            batch.run(explode, undo=lambda r: undone.append("never"))
    assert undone == [2, 1]


def test_batch_keeps_going_when_an_undo_fails():
    undone = []

    def bad_undo(_):
        raise Boom("undo failed")

    with pytest.raises(Boom):
        with CompensatingBatch("test") as batch:
            batch.run(lambda: 1, undo=undone.append)
            batch.run(lambda: 2, undo=bad_undo)
            explode()
    assert undone == [1]


def test_guard_rejects_second_mutation_on_same_id():
    guard = MutationGuard()
    with guard.hold("wallet-1"):
        assert guard.is_busy("wallet-1")
        with pytest.raises(MutationInProgressError):
            with guard.hold("wallet-2", "wallet-1"):
                pass
        # a rejected hold takes nothing
        assert not guard.is_busy("wallet-2")
        with guard.hold("wallet-2"):
            pass
    assert not guard.is_busy("wallet-1")


def test_guard_releases_on_error():
    guard = MutationGuard()
    with pytest.raises(Boom):
        with guard.hold("tx-1"):
            explode()
    assert not guard.is_busy("tx-1")


def test_guard_across_threads():
    guard = MutationGuard()
    entered, release = threading.Event(), threading.Event()
    errors = []

    def first():
        with guard.hold("wallet-1"):
            entered.set()
            release.wait(5)

    worker = threading.Thread(target=first)
    worker.start()
    entered.wait(5)
    try:
        with guard.hold("wallet-1"):
            pass
    except MutationInProgressError as e:
        errors.append(e)
    release.set()
    worker.join(5)

    assert len(errors) == 1
    assert not guard.is_busy("wallet-1")


def test_last_failure_belongs_to_the_calling_thread():
    notifier = Notifier()
    notifier.failure(ValidationError("mine"))

    worker = threading.Thread(target=lambda: notifier.failure(NotFoundError("theirs")))
    worker.start()
    worker.join()

    assert notifier.last.description == "theirs"
    assert notifier.last_failure().description == "mine"
    notifier.reset_failure()
    assert notifier.last_failure() is None
