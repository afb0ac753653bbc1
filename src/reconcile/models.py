"""Value types shared by the detector and the reconciler."""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ChangeSet:
    """A non-empty description of changes found in a working copy.

    Attributes:
        text: The trimmed status or diff output describing the changes.
        assumed: True when no remote could be compared against and the
            changes are assumed rather than observed.
    """

    text: str
    assumed: bool = False

    def __post_init__(self) -> None:
        if not self.text.strip():
            msg = "A change set cannot be empty"
            raise ValueError(msg)

    @property
    def size(self) -> int:
        """Length of the text, used to rank candidate diffs."""
        return len(self.text)

    @property
    def lines(self) -> list[str]:
        """Non-blank lines of the text."""
        return [line for line in self.text.splitlines() if line.strip()]

    def __str__(self) -> str:
        return self.text
