# ruff: noqa: A005  # module name shadows stdlib io only inside this package
"""Interactive IO collaborators.

The reconciler talks to the operator through ``IOProtocol``. ``ConsoleIO``
uses rich consoles on a terminal; ``BufferedIO`` replays scripted answers
and captures output, for tests and for embedding in other tools.
"""

import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from typing import Protocol, runtime_checkable

from rich.console import Console

from reconcile.exceptions import UpdateAbortedError

INPUT_CLOSED_MESSAGE = "Update aborted, input closed before an answer was given"


@runtime_checkable
class IOProtocol(Protocol):
    """Operator-facing input and output."""

    def is_interactive(self) -> bool:
        """Whether questions can be asked."""
        ...

    def write(self, messages: str | Sequence[str]) -> None:
        """Write informational lines."""
        ...

    def write_error(self, messages: str | Sequence[str]) -> None:
        """Write lines to the error stream."""
        ...

    def ask(self, question: str, default: str) -> str:
        """Ask a question and return the answer, or ``default`` on empty input.

        Raises:
            UpdateAbortedError: If input ended before an answer was read.
        """
        ...


def _as_lines(messages: str | Iterable[str]) -> list[str]:
    if isinstance(messages, str):
        return [messages]
    return list(messages)


class ConsoleIO:
    """IO on the terminal through rich consoles.

    Output is printed without markup interpretation: diffs and file lists
    often contain square brackets.
    """

    def __init__(
        self,
        console: Console | None = None,
        err_console: Console | None = None,
        *,
        interactive: bool | None = None,
    ) -> None:
        self._console: Console = console or Console()
        self._err_console: Console = err_console or Console(stderr=True)
        self._interactive: bool = sys.stdin.isatty() if interactive is None else interactive

    def is_interactive(self) -> bool:
        return self._interactive

    def write(self, messages: str | Sequence[str]) -> None:
        for line in _as_lines(messages):
            self._console.print(line, markup=False, highlight=False)

    def write_error(self, messages: str | Sequence[str]) -> None:
        for line in _as_lines(messages):
            self._err_console.print(line, markup=False, highlight=False)

    def ask(self, question: str, default: str) -> str:
        if not self._interactive:
            return default
        try:
            answer = self._err_console.input(question)
        except EOFError:
            raise UpdateAbortedError(INPUT_CLOSED_MESSAGE) from None
        return answer.strip() or default


@dataclass(slots=True)
class BufferedIO:
    """Scripted IO that records everything written.

    Answers are consumed in order. Running out of answers behaves like a
    closed terminal and aborts.

    Example:
        >>> io = BufferedIO(answers=["v", "y"])
        >>> io.ask("Discard changes [y,n,v,d,s,?]? ", "?")
        'v'
    """

    answers: list[str] = field(default_factory=list)
    interactive: bool = True
    output: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    questions: list[str] = field(default_factory=list)

    def is_interactive(self) -> bool:
        return self.interactive

    def write(self, messages: str | Sequence[str]) -> None:
        self.output.extend(_as_lines(messages))

    def write_error(self, messages: str | Sequence[str]) -> None:
        self.errors.extend(_as_lines(messages))

    def ask(self, question: str, default: str) -> str:
        if not self.interactive:
            return default
        self.questions.append(question)
        if not self.answers:
            raise UpdateAbortedError(INPUT_CLOSED_MESSAGE)
        return self.answers.pop(0).strip() or default

    def get_error_output(self) -> str:
        """All error lines joined with newlines."""
        return "\n".join(self.errors)
