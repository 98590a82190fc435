"""Unit tests for the after-commit hook of UnitOfWork."""

import pytest

from courier.domain.shared.uow import UnitOfWork


class RecordingUnitOfWork(UnitOfWork):
    def __init__(self, fail_commit: bool = False) -> None:
        super().__init__()
        self.events: list[str] = []
        self._fail_commit = fail_commit

    async def _commit(self) -> None:
        if self._fail_commit:
            raise RuntimeError("commit refused")
        self.events.append("commit")

    async def _rollback(self) -> None:
        self.events.append("rollback")


class TestAfterCommit:
    async def test_callbacks_run_after_commit_in_order(self):
        uow = RecordingUnitOfWork()

        async def first():
            uow.events.append("first")

        async def second():
            uow.events.append("second")

        uow.after_commit(first)
        uow.after_commit(second)
        await uow.commit()

        assert uow.events == ["commit", "first", "second"]
        assert uow.pending_callbacks == 0

    async def test_rollback_drops_callbacks(self):
        uow = RecordingUnitOfWork()

        async def never():
            uow.events.append("never")

        uow.after_commit(never)
        await uow.rollback()

        assert uow.events == ["rollback"]

    async def test_failed_commit_runs_no_callbacks(self):
        uow = RecordingUnitOfWork(fail_commit=True)

        async def never():
            uow.events.append("never")

        uow.after_commit(never)
        with pytest.raises(RuntimeError):
            await uow.commit()

        assert uow.events == []

    async def test_failing_callback_does_not_stop_the_others(self):
        uow = RecordingUnitOfWork()

        async def broken():
            raise ValueError("boom")

        async def fine():
            uow.events.append("fine")

        uow.after_commit(broken)
        uow.after_commit(fine)
        await uow.commit()

        assert uow.events == ["commit", "fine"]

    async def test_registering_after_finish_is_refused(self):
        uow = RecordingUnitOfWork()
        await uow.commit()

        async def late():
            pass

        with pytest.raises(RuntimeError):
            uow.after_commit(late)


class TestContextManager:
    async def test_commits_on_clean_exit(self):
        async with RecordingUnitOfWork() as uow:
            pass

        assert uow.events == ["commit"]

    async def test_rolls_back_on_error(self):
        uow = RecordingUnitOfWork()

        with pytest.raises(ValueError):
            async with uow:
                raise ValueError("abort")

        assert uow.events == ["rollback"]

    async def test_explicit_commit_is_not_repeated(self):
        async with RecordingUnitOfWork() as uow:
            await uow.commit()

        assert uow.events == ["commit"]
