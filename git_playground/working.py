from typing import Any, Mapping

from git_playground.errors import NothingToStage, NothingToStash, StashConflict, StashEmpty
from git_playground.model import Changes, Snapshot, StashEntry, apply_changes


class WorkingSet:
    """
    Uncommitted work layered over the checked-out commit.

    `working_files` holds unstaged edits, `staged_files` the index. Both map
    a path to its new content, or to None when the path is deleted. A path
    is never in both at once. `stash_stack` keeps the most recent entry
    first.
    """

    def __init__(
        self,
        working_files: Changes | None = None,
        staged_files: Changes | None = None,
        stash_stack: list[StashEntry] | None = None,
    ) -> None:
        self.working_files: Changes = working_files if working_files is not None else {}
        self.staged_files: Changes = staged_files if staged_files is not None else {}
        self.stash_stack: list[StashEntry] = stash_stack if stash_stack is not None else []

    def copy(self) -> "WorkingSet":
        # stash entries are frozen, only their file dicts need copying
        return WorkingSet(
            dict(self.working_files),
            dict(self.staged_files),
            [StashEntry(dict(e.files), e.message) for e in self.stash_stack],
        )

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("WorkingSet(...)")
        else:
            with p.group(4, "WorkingSet(", ")"):
                p.breakable()
                p.text("working=")
                p.pretty(self.working_files)
                p.text(",")
                p.breakable()
                p.text("staged=")
                p.pretty(self.staged_files)
                p.text(",")
                p.breakable()
                p.text(f"stash={len(self.stash_stack)},")
                p.breakable()

    def is_dirty(self) -> bool:
        return bool(self.working_files) or bool(self.staged_files)

    def set(self, path: str, content: str | None) -> None:
        """Edit a file in the working tree. Pass None to delete it."""
        self.staged_files.pop(path, None)
        self.working_files[path] = content

    def stage(self, path: str | None = None) -> None:
        if not self.working_files:
            raise NothingToStage("No unstaged changes")
        if path is None:
            paths = list(self.working_files)
        elif path in self.working_files:
            paths = [path]
        else:
            raise NothingToStage(f"'{path}' has no unstaged changes")

        for p in paths:
            self.staged_files[p] = self.working_files.pop(p)

    def unstage(self, path: str | None = None) -> None:
        if not self.staged_files:
            raise NothingToStage("Nothing is staged")
        if path is None:
            paths = list(self.staged_files)
        elif path in self.staged_files:
            paths = [path]
        else:
            raise NothingToStage(f"'{path}' is not staged")

        for p in paths:
            self.working_files[p] = self.staged_files.pop(p)

    def changes(self) -> Changes:
        return {**self.staged_files, **self.working_files}

    def files(self, base: Mapping[str, str]) -> Snapshot:
        """Files visible in the working tree on top of `base`."""
        return apply_changes(base, self.changes())

    def staged_snapshot(self, base: Mapping[str, str]) -> Snapshot:
        return apply_changes(base, self.staged_files)

    def clear(self) -> None:
        self.working_files = {}
        self.staged_files = {}

    def push_stash(self, message: str = "") -> StashEntry:
        if not self.working_files:
            raise NothingToStash("No local changes to stash")
        entry = StashEntry(dict(self.working_files), message)
        self.stash_stack.insert(0, entry)
        self.working_files = {}
        return entry

    def pop_stash(self) -> StashEntry:
        """
        Move the newest stash entry back into the working files.

        Refuses, leaving the stack as it was, when a stashed path already
        has staged or unstaged changes.
        """
        if not self.stash_stack:
            raise StashEmpty("No stash entries")
        changes = self.changes()
        pending = sorted(p for p in self.stash_stack[0].files if p in changes)
        if pending:
            raise StashConflict(f"Local changes would be overwritten: {', '.join(pending)}")
        entry = self.stash_stack.pop(0)
        for path, content in entry.files.items():
            self.set(path, content)
        return entry
