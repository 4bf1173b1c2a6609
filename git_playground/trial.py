"""
Puzzle layer: replay commands in a sandbox until a goal holds.

A `TrialEvaluator` owns a private copy of a level's initial state. Each
successful command is checked against the level's goal predicate; once it
holds the trial is solved and ignores further commands until `retry()`.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable

from loguru import logger

from git_playground.errors import RepositoryError
from git_playground.operations import execute
from git_playground.state import RepositoryState

GoalPredicate = Callable[[RepositoryState], bool]

_FULL_ID = re.compile(r"^[0-9a-f]{40}$")


class TrialStatus(str, Enum):
    IN_PROGRESS = "in_progress"
    SOLVED = "solved"


@dataclass(frozen=True)
class Failure:
    kind: str
    reason: str

    @classmethod
    def from_error(cls, error: RepositoryError) -> "Failure":
        return cls(error.kind, error.reason)


@dataclass(frozen=True)
class StepResult:
    """Outcome of one command sent to a trial."""

    applied: bool
    status: TrialStatus
    failure: Failure | None = None

    @property
    def solved(self) -> bool:
        return self.status is TrialStatus.SOLVED


@dataclass
class Level:
    id: int
    title: str
    description: str
    goal_description: str
    initial_state: RepositoryState
    check_win: GoalPredicate
    hint: str = ""
    intro_log: list[str] = field(default_factory=list)


def command_line(operation: str, *args: Any, **kwargs: Any) -> str:
    """Render a command the way the trial terminal shows it."""
    name = operation.replace("_", "-")
    values = [a for a in args if a is not None]
    words = ["git"]

    if name == "commit":
        words.append("commit")
        if values and values[0]:
            words.append(f'-m "{values[0]}"')
    elif name == "stash-pop":
        words.extend(["stash", "pop"])
    elif name == "reset":
        mode = kwargs.get("mode") or (values[1] if len(values) > 1 else "hard")
        words.extend(["reset", f"--{mode}", str(values[0]) if values else "HEAD"])
    elif name == "checkout" and kwargs.get("create"):
        words.extend(["checkout", "-b", *map(str, values)])
    else:
        words.append(name)
        words.extend(str(v) for v in values)

    return "> " + " ".join(w[:7] if _FULL_ID.match(w) else w for w in words)


class TrialEvaluator:
    def __init__(self, level: Level) -> None:
        self.level = level
        # Private copy: later edits to the level object cannot leak in
        self._initial = level.initial_state.copy()
        self.retry()

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("TrialEvaluator(...)")
        else:
            with p.group(4, "TrialEvaluator(", ")"):
                p.breakable()
                p.text(f"level={self.level.id},")
                p.breakable()
                p.text(f"status={self.status.value},")
                p.breakable()
                p.text("state=")
                p.pretty(self.state)
                p.breakable()

    @property
    def solved(self) -> bool:
        return self.status is TrialStatus.SOLVED

    def retry(self) -> None:
        """Start over from a fresh copy of the level's initial state."""
        self.state = self._initial.copy()
        self.status = TrialStatus.IN_PROGRESS
        self.history: list[str] = list(self.level.intro_log)
        self.last_failure: Failure | None = None
        self._check_goal()

    def _check_goal(self) -> None:
        try:
            reached = self.level.check_win(self.state)
        except RepositoryError:
            reached = False
        if reached:
            self.status = TrialStatus.SOLVED
            steps = len(self.history) - len(self.level.intro_log)
            logger.info(f"Trial {self.level.id} solved after {steps} step(s)")

    def apply(self, operation: str, *args: Any, **kwargs: Any) -> StepResult:
        if self.solved:
            logger.warning(f"Trial {self.level.id} is solved, ignoring '{operation}'")
            return StepResult(False, self.status)

        try:
            new_state = execute(self.state, operation, *args, **kwargs)
        except RepositoryError as e:
            self.last_failure = Failure.from_error(e)
            logger.warning(f"Trial {self.level.id} rejected '{operation}': {e.kind}: {e}")
            return StepResult(False, self.status, self.last_failure)

        self.state = new_state
        self.last_failure = None
        self.history.append(command_line(operation, *args, **kwargs))
        self._check_goal()
        return StepResult(True, self.status)
