import pytest

from reconcile.exceptions import ReapplyError
from reconcile.io import BufferedIO
from reconcile.reapply import Reapplier
from reconcile.session import ReconciliationSession
from reconcile.vcs import FakeSyncAdapter


class TestReapplyChanges:
    def test_nothing_stashed(
        self, adapter: FakeSyncAdapter, io: BufferedIO, session: ReconciliationSession
    ) -> None:
        Reapplier(adapter, io).reapply_changes(session)

        assert adapter.calls_to("stash_pop") == []
        assert io.errors == []

    def test_discard_flag_is_cleared_without_popping(
        self, adapter: FakeSyncAdapter, io: BufferedIO, session: ReconciliationSession
    ) -> None:
        session.mark_discarded()

        Reapplier(adapter, io).reapply_changes(session)

        assert session.has_discarded_changes is False
        assert adapter.calls_to("stash_pop") == []

    def test_pops_stash(
        self, adapter: FakeSyncAdapter, io: BufferedIO, session: ReconciliationSession
    ) -> None:
        adapter.stash_entries = 1
        session.mark_stashed()

        Reapplier(adapter, io).reapply_changes(session)

        assert adapter.stash_entries == 0
        assert io.errors == ["    Re-applying stashed changes"]
        assert session.has_stashed_changes is False

    def test_conflicting_pop_surfaces_raw_output(
        self, adapter: FakeSyncAdapter, io: BufferedIO, session: ReconciliationSession
    ) -> None:
        conflict = "CONFLICT (content): Merge conflict in README.md"
        adapter.failing_operations["stash_pop"] = conflict
        session.mark_stashed()

        with pytest.raises(ReapplyError) as exc_info:
            Reapplier(adapter, io).reapply_changes(session)

        assert str(exc_info.value) == f"Failed to apply stashed changes:\n\n{conflict}"
        assert exc_info.value.output == conflict
        assert session.has_stashed_changes is False
        assert session.has_discarded_changes is False
