from collections import deque
from typing import Any, Iterator, Mapping

from git_playground.errors import DanglingParent, UnknownCommit
from git_playground.identity import fingerprint, identity
from git_playground.model import Commit


class CommitGraph:
    """
    Append-only store of commits and their parent edges.

    Backends implement storage (`_store`, `_find`, iteration and `copy`);
    insertion rules and ancestry traversal are shared and live here.
    Commits are never edited or removed once inserted.
    """

    def _store(self, commit: Commit) -> None:
        """Persist an already validated commit."""
        raise NotImplementedError()

    def _find(self, commit_id: str) -> Commit | None:
        """Look a commit up by its full id."""
        raise NotImplementedError()

    def __iter__(self) -> Iterator[Commit]:
        """Iterate commits in insertion order."""
        raise NotImplementedError()

    def __len__(self) -> int:
        raise NotImplementedError()

    def copy(self) -> "CommitGraph":
        """Create an independent graph holding the same commits."""
        raise NotImplementedError()

    def __contains__(self, commit_id: object) -> bool:
        return isinstance(commit_id, str) and self._find(commit_id) is not None

    def get(self, commit_id: str) -> Commit:
        commit = self._find(commit_id)
        if commit is None:
            raise UnknownCommit(f"Commit '{commit_id}' does not exist")
        return commit

    def commits(self) -> list[Commit]:
        return list(self)

    def insert_commit(
        self,
        parent_id: str | None,
        second_parent_id: str | None = None,
        snapshot: Mapping[str, str] | None = None,
        message: str = "",
    ) -> Commit:
        """
        Mint a new commit on top of existing parents.

        The id covers the snapshot, both parents and the insertion order,
        so the same content committed on a different ancestry never reuses
        an id.
        """
        if second_parent_id is not None and parent_id is None:
            raise DanglingParent("A second parent needs a first parent")
        for parent in (parent_id, second_parent_id):
            if parent is not None and parent not in self:
                raise DanglingParent(f"Parent commit '{parent}' does not exist")

        files = dict(snapshot or {})
        created_at = len(self) + 1

        header = [f"tree {fingerprint(files)}"]
        if parent_id is not None:
            header.append(f"parent {parent_id}")
        if second_parent_id is not None:
            header.append(f"parent {second_parent_id}")
        header.append(f"order {created_at}")
        header.append("")
        header.append(message)

        commit = Commit(
            id=identity("\n".join(header)),
            parent_id=parent_id,
            second_parent_id=second_parent_id,
            snapshot=files,
            created_at=created_at,
            message=message,
        )
        self._store(commit)
        return commit

    def ancestors_of(self, commit_id: str, include_self: bool = False) -> set[str]:
        """All commits reachable through parent and second parent edges."""
        start = self.get(commit_id)
        seen: set[str] = {start.id} if include_self else set()
        pending = list(start.parents)
        while pending:
            current = pending.pop()
            if current in seen:
                continue
            seen.add(current)
            pending.extend(self.get(current).parents)
        return seen

    def is_ancestor(self, ancestor_id: str, descendant_id: str) -> bool:
        """True if `ancestor_id` is `descendant_id` or one of its ancestors."""
        self.get(ancestor_id)
        return ancestor_id in self.ancestors_of(descendant_id, include_self=True)

    def merge_base(self, a: str, b: str) -> str | None:
        """
        Closest common ancestor of two commits.

        Walks breadth-first from `a` and stops at the first commit that `b`
        also reaches. With criss-cross histories any one of the candidates
        may be returned.
        """
        reachable_from_b = self.ancestors_of(b, include_self=True)
        seen = {a}
        queue = deque([a])
        while queue:
            current = queue.popleft()
            if current in reachable_from_b:
                return current
            for parent in self.get(current).parents:
                if parent not in seen:
                    seen.add(parent)
                    queue.append(parent)
        return None

    def unique_to(self, tip: str, other: str) -> list[Commit]:
        """Commits reachable from `tip` but not from `other`, oldest first."""
        excluded = self.ancestors_of(other, include_self=True)
        ids = self.ancestors_of(tip, include_self=True) - excluded
        return sorted((self.get(i) for i in ids), key=lambda c: c.created_at)

    def first_parent(self, commit_id: str, generations: int = 1) -> str:
        current = self.get(commit_id)
        for _ in range(generations):
            if current.parent_id is None:
                raise UnknownCommit(
                    f"Commit '{commit_id[:7]}' has fewer than {generations} ancestors"
                )
            current = self.get(current.parent_id)
        return current.id

    def log(self, commit_id: str) -> list[Commit]:
        """History reachable from a commit, newest first."""
        ids = self.ancestors_of(commit_id, include_self=True)
        return sorted((self.get(i) for i in ids), key=lambda c: -c.created_at)

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        name = type(self).__name__
        if cycle:
            p.text(f"{name}(...)")
        else:
            with p.group(4, f"{name}(", ")"):
                for commit in self:
                    p.breakable()
                    parents = ",".join(parent[:7] for parent in commit.parents)
                    p.text(f"{commit.id[:7]} <- [{parents}] {commit.message!r},")
                p.breakable()
