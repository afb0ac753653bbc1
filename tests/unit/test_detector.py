import pytest

from reconcile.detector import ChangeDetector, branch_not_found_message
from reconcile.exceptions import CommandError
from reconcile.vcs import FakeSyncAdapter
from tests.conftest import HEAD_SHA, OTHER_SHA, WORKING_COPY, ref_listing


class TestLocalChanges:
    def test_clean_working_copy(self, adapter: FakeSyncAdapter) -> None:
        assert ChangeDetector(adapter).local_changes(WORKING_COPY) is None

    def test_whitespace_only_status_is_clean(self, adapter: FakeSyncAdapter) -> None:
        adapter.status_output = "\n  \n"

        assert ChangeDetector(adapter).local_changes(WORKING_COPY) is None

    def test_returns_trimmed_status(self, adapter: FakeSyncAdapter) -> None:
        adapter.status_output = " M README.md\n M src/lib.php\n"

        changes = ChangeDetector(adapter).local_changes(WORKING_COPY)

        assert changes is not None
        assert changes.text == "M README.md\n M src/lib.php"
        assert changes.assumed is False

    def test_queries_tracked_files_only(self, adapter: FakeSyncAdapter) -> None:
        _ = ChangeDetector(adapter).local_changes(WORKING_COPY)

        assert ("status", str(WORKING_COPY)) in adapter.calls

    def test_not_a_repository(self, adapter: FakeSyncAdapter) -> None:
        adapter.is_repo = False
        adapter.status_output = " M README.md\n"

        assert ChangeDetector(adapter).local_changes(WORKING_COPY) is None
        assert adapter.calls_to("status") == []

    def test_status_failure_raises_with_output(self, adapter: FakeSyncAdapter) -> None:
        adapter.failing_operations["status"] = "fatal: index file corrupt"

        with pytest.raises(CommandError, match="index file corrupt"):
            _ = ChangeDetector(adapter).local_changes(WORKING_COPY)


class TestUnpushedChanges:
    def test_branch_in_sync_with_remote(self, adapter: FakeSyncAdapter) -> None:
        assert ChangeDetector(adapter).unpushed_changes(WORKING_COPY) is None
        assert adapter.calls_to("diff") == [("diff", str(WORKING_COPY), "composer/main...main")]
        assert adapter.calls_to("fetch_all") == []

    def test_reports_diff_against_remote(self, adapter: FakeSyncAdapter) -> None:
        adapter.diffs["composer/main...main"] = "A\tnew.txt\n"

        changes = ChangeDetector(adapter).unpushed_changes(WORKING_COPY)

        assert changes is not None
        assert changes.text == "A\tnew.txt"
        assert changes.assumed is False

    def test_keeps_the_shortest_diff(self) -> None:
        adapter = FakeSyncAdapter(
            refs=ref_listing(
                (HEAD_SHA, "refs/heads/main"),
                (OTHER_SHA, "refs/remotes/composer/main"),
                (OTHER_SHA, "refs/remotes/origin/main"),
            ),
            diffs={
                "composer/main...main": "A\tone.txt\nA\ttwo.txt\n",
                "origin/main...main": "A\tone.txt\n",
            },
        )

        changes = ChangeDetector(adapter).unpushed_changes(WORKING_COPY)

        assert changes is not None
        assert changes.text == "A\tone.txt"

    def test_empty_diff_on_any_remote_wins(self) -> None:
        adapter = FakeSyncAdapter(
            refs=ref_listing(
                (HEAD_SHA, "refs/heads/main"),
                (OTHER_SHA, "refs/remotes/composer/main"),
                (HEAD_SHA, "refs/remotes/origin/main"),
            ),
            diffs={"composer/main...main": "A\tone.txt\n"},
        )

        assert ChangeDetector(adapter).unpushed_changes(WORKING_COPY) is None

    def test_missing_head_is_not_fatal(self) -> None:
        adapter = FakeSyncAdapter(refs=ref_listing((HEAD_SHA, "refs/heads/main"), head=None))

        assert ChangeDetector(adapter).unpushed_changes(WORKING_COPY) is None
        assert adapter.calls_to("fetch_all") == []

    def test_detached_head_has_no_branch_to_compare(self) -> None:
        adapter = FakeSyncAdapter(
            refs=ref_listing(
                (OTHER_SHA, "refs/heads/main"),
                (OTHER_SHA, "refs/remotes/composer/main"),
            )
        )

        assert ChangeDetector(adapter).unpushed_changes(WORKING_COPY) is None
        assert adapter.calls_to("diff") == []

    def test_later_candidate_with_remote_is_confirmed(self) -> None:
        adapter = FakeSyncAdapter(
            refs=ref_listing(
                (HEAD_SHA, "refs/heads/local-only"),
                (HEAD_SHA, "refs/heads/main"),
                (HEAD_SHA, "refs/remotes/composer/main"),
            )
        )

        assert ChangeDetector(adapter).unpushed_changes(WORKING_COPY) is None
        assert adapter.calls_to("diff") == [("diff", str(WORKING_COPY), "composer/main...main")]

    def test_unknown_branch_fetches_once_then_clears(self) -> None:
        adapter = FakeSyncAdapter(
            refs=ref_listing((HEAD_SHA, "refs/heads/feature")),
            refs_after_fetch=ref_listing(
                (HEAD_SHA, "refs/heads/feature"),
                (HEAD_SHA, "refs/remotes/origin/feature"),
            ),
        )

        changes = ChangeDetector(adapter).unpushed_changes(WORKING_COPY)

        assert changes is None
        assert len(adapter.calls_to("fetch_all")) == 1
        assert len(adapter.calls_to("list_refs")) == 2

    def test_unknown_branch_after_fetch_is_assumed_unpushed(self) -> None:
        adapter = FakeSyncAdapter(refs=ref_listing((HEAD_SHA, "refs/heads/feature")))

        changes = ChangeDetector(adapter).unpushed_changes(WORKING_COPY)

        assert changes is not None
        assert changes.assumed is True
        assert changes.text == branch_not_found_message("feature")
        assert "feature could not be found on any remote" in changes.text
        assert len(adapter.calls_to("fetch_all")) == 1

    def test_diff_found_after_fetch(self) -> None:
        adapter = FakeSyncAdapter(
            refs=ref_listing((HEAD_SHA, "refs/heads/feature")),
            refs_after_fetch=ref_listing(
                (HEAD_SHA, "refs/heads/feature"),
                (OTHER_SHA, "refs/remotes/origin/feature"),
            ),
            diffs={"origin/feature...feature": "M\tsrc/lib.php\n"},
        )

        changes = ChangeDetector(adapter).unpushed_changes(WORKING_COPY)

        assert changes is not None
        assert changes.text == "M\tsrc/lib.php"
        assert changes.assumed is False

    def test_failed_fetch_still_reports_unpushed(self) -> None:
        adapter = FakeSyncAdapter(
            refs=ref_listing((HEAD_SHA, "refs/heads/feature")),
            failing_operations={"fetch_all": "fatal: unable to access remote"},
        )

        changes = ChangeDetector(adapter).unpushed_changes(WORKING_COPY)

        assert changes is not None
        assert changes.assumed is True
        assert len(adapter.calls_to("fetch_all")) == 1

    def test_list_refs_failure_raises(self, adapter: FakeSyncAdapter) -> None:
        adapter.failing_operations["list_refs"] = "fatal: not a git repository"

        with pytest.raises(CommandError, match="not a git repository"):
            _ = ChangeDetector(adapter).unpushed_changes(WORKING_COPY)

    def test_diff_failure_raises(self, adapter: FakeSyncAdapter) -> None:
        adapter.failing_operations["diff"] = "fatal: bad revision"

        with pytest.raises(CommandError, match="bad revision"):
            _ = ChangeDetector(adapter).unpushed_changes(WORKING_COPY)

    def test_not_a_repository(self, adapter: FakeSyncAdapter) -> None:
        adapter.is_repo = False

        assert ChangeDetector(adapter).unpushed_changes(WORKING_COPY) is None
        assert adapter.calls_to("list_refs") == []
