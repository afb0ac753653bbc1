from hypothesis import given, strategies as st

from reconcile.enums import PromptState, ReferenceKind
from reconcile.reconciler import next_prompt_state
from reconcile.reference import (
    BranchName,
    CommitHash,
    TagName,
    classify,
    normalize_branch,
    strip_dev_decoration,
)

commit_hashes = st.from_regex(r"[0-9a-fA-F]{40}", fullmatch=True)

# Short plain names: never hash-shaped and free of dev decoration
branch_names = st.from_regex(r"[a-z][a-z0-9_/]{0,20}", fullmatch=True)


@given(sha=commit_hashes, tags=st.lists(st.text(max_size=10)))
def test_hash_shaped_strings_are_always_commits(sha: str, tags: list[str]) -> None:
    assert classify(sha, tags=[*tags, sha]) == CommitHash(sha)


@given(version=st.text(max_size=60), tags=st.none() | st.lists(st.text(max_size=10)))
def test_classify_is_total_and_deterministic(version: str, tags: list[str] | None) -> None:
    first = classify(version, tags=tags)

    assert first == classify(version, tags=tags)
    assert first.kind in set(ReferenceKind)


@given(name=branch_names)
def test_dev_prefix_is_stripped(name: str) -> None:
    assert classify(f"dev-{name}") == BranchName(name)
    assert strip_dev_decoration(f"dev-{name}") == name


@given(name=branch_names)
def test_known_tags_win_over_branches(name: str) -> None:
    assert classify(name, tags=[name]) == TagName(name)


@given(version=st.text(max_size=60))
def test_without_tags_nothing_is_a_tag(version: str) -> None:
    assert classify(version).kind is not ReferenceKind.TAG


@given(name=st.from_regex(r"[a-z][a-z_]{0,15}", fullmatch=True))
def test_named_branches_become_dev_versions(name: str) -> None:
    assert normalize_branch(name) == f"dev-{name}"


@given(major=st.integers(0, 999), minor=st.integers(0, 999))
def test_numeric_branches_are_padded(major: int, minor: int) -> None:
    assert normalize_branch(f"{major}.{minor}") == f"{major}.{minor}.9999999.9999999-dev"


@given(
    alias=st.from_regex(r"[a-z]{1,8}", fullmatch=True),
    node=st.from_regex(r"[A-Za-z0-9]{48}", fullmatch=True),
    name=branch_names,
)
def test_radicle_node_prefix_is_dropped(alias: str, node: str, name: str) -> None:
    assert normalize_branch(f"{alias}@{node}/{name}") == normalize_branch(name)


@given(answer=st.text(max_size=5))
def test_stash_is_only_offered_during_updates(answer: str) -> None:
    assert next_prompt_state(answer, update=False) is not PromptState.STASH
    assert next_prompt_state(answer, update=True) in set(PromptState)
