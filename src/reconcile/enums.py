"""Enumeration types for reconcile."""

from enum import StrEnum


class ReferenceKind(StrEnum):
    """Kinds of reference a version string can denote."""

    COMMIT = "commit"
    BRANCH = "branch"
    TAG = "tag"


class RefKind(StrEnum):
    """Kinds of entries in a ref listing."""

    HEAD = "head"
    LOCAL_BRANCH = "local-branch"
    REMOTE_BRANCH = "remote-branch"
    TAG = "tag"


class DiscardPolicy(StrEnum):
    """What to do with local changes when running non-interactively.

    ``ALWAYS`` discards them, ``STASH`` stashes them during updates and
    ``NEVER`` defers to the caller's default, which refuses to proceed.
    """

    ALWAYS = "true"
    NEVER = "false"
    STASH = "stash"


class PromptState(StrEnum):
    """States of the interactive discard prompt."""

    ASK = "ask"
    HELP = "help"
    LIST = "list"
    DIFF = "diff"
    DISCARD = "discard"
    STASH = "stash"
    ABORT = "abort"
