from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

Snapshot = dict[str, str]
# None marks a deleted path
Changes = dict[str, str | None]


@dataclass(frozen=True)
class Commit:
    """
    Immutable node of the commit graph.

    `snapshot` is the complete tree at this point in history, not a delta.
    It is a read-only view over a private copy of the files passed in.
    `created_at` is the insertion counter of the owning graph.
    """

    id: str
    parent_id: str | None
    second_parent_id: str | None
    snapshot: Mapping[str, str] = field(hash=False, compare=False)
    created_at: int
    message: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "snapshot", MappingProxyType(dict(self.snapshot)))

    @property
    def parents(self) -> tuple[str, ...]:
        return tuple(p for p in (self.parent_id, self.second_parent_id) if p)

    @property
    def is_root(self) -> bool:
        return self.parent_id is None

    @property
    def is_merge(self) -> bool:
        return self.second_parent_id is not None

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("Commit(...)")
        else:
            with p.group(4, "Commit(", ")"):
                p.breakable()
                p.text(f"id={self.id[:7]},")
                p.breakable()
                p.text(f"parents={[parent[:7] for parent in self.parents]},")
                p.breakable()
                p.text(f"message={self.message!r},")
                p.breakable()
                p.text("snapshot=")
                p.pretty(dict(self.snapshot))
                p.breakable()


class RefKind(str, Enum):
    BRANCH = "branch"
    TAG = "tag"


@dataclass(frozen=True)
class Ref:
    name: str
    kind: RefKind
    commit_id: str


@dataclass(frozen=True)
class Head:
    """
    HEAD is either attached to a branch name or detached at a commit id.
    Exactly one of the two fields is set.
    """

    branch: str | None = None
    commit_id: str | None = None

    def __post_init__(self) -> None:
        if (self.branch is None) == (self.commit_id is None):
            raise ValueError("Head needs exactly one of branch or commit_id")

    @property
    def is_detached(self) -> bool:
        return self.branch is None

    def __str__(self) -> str:
        if self.branch is not None:
            return f"ref: {self.branch}"
        return f"detached at {self.commit_id[:7]}"  # type: ignore[index]


@dataclass(frozen=True)
class StashEntry:
    files: Changes
    message: str = ""


def diff_snapshots(old: Mapping[str, str], new: Mapping[str, str]) -> Changes:
    """Changes that turn `old` into `new`."""
    changes: Changes = {}
    for path, content in new.items():
        if old.get(path) != content:
            changes[path] = content
    for path in old:
        if path not in new:
            changes[path] = None
    return changes


def apply_changes(snapshot: Mapping[str, str], changes: Mapping[str, str | None]) -> Snapshot:
    result = dict(snapshot)
    for path, content in changes.items():
        if content is None:
            result.pop(path, None)
        else:
            result[path] = content
    return result


def invert_changes(before: Mapping[str, str], changes: Mapping[str, str | None]) -> Changes:
    """Changes undoing `changes`, given the snapshot they were applied to."""
    return {path: before.get(path) for path in changes}
