import re
from dataclasses import dataclass, field
from typing import Any

from git_playground.base import CommitGraph
from git_playground.errors import UnknownCommit
from git_playground.model import Commit, Snapshot
from git_playground.refs import RefStore
from git_playground.working import WorkingSet

MIN_PREFIX_LENGTH = 4

_REVISION = re.compile(r"^(?P<base>.+?)(?P<suffix>(?:~\d*|\^)*)$")
_STEP = re.compile(r"~(\d*)|\^")


@dataclass
class RepositoryState:
    """
    One complete repository value: graph, refs with HEAD, and working set.

    Operations never edit a state they receive; they work on `copy()`.
    """

    graph: CommitGraph
    refs: RefStore
    work: WorkingSet = field(default_factory=WorkingSet)

    def copy(self) -> "RepositoryState":
        return RepositoryState(self.graph.copy(), self.refs.copy(), self.work.copy())

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("RepositoryState(...)")
        else:
            with p.group(4, "RepositoryState(", ")"):
                p.breakable()
                p.text("graph=")
                p.pretty(self.graph)
                p.text(",")
                p.breakable()
                p.text("refs=")
                p.pretty(self.refs)
                p.text(",")
                p.breakable()
                p.text("work=")
                p.pretty(self.work)
                p.breakable()

    @property
    def head(self):
        return self.refs.head

    def head_commit(self) -> Commit:
        return self.graph.get(self.refs.head_commit_id())

    def files(self) -> Snapshot:
        """Visible working tree: HEAD snapshot plus pending changes."""
        return self.work.files(self.head_commit().snapshot)

    def reachable(self) -> set[str]:
        """Commits reachable from any branch, tag, or a detached HEAD."""
        tips = set(self.refs.branches().values()) | set(self.refs.tags().values())
        if self.refs.head.is_detached:
            tips.add(self.refs.head_commit_id())

        result: set[str] = set()
        for tip in tips:
            if tip not in result:
                result |= self.graph.ancestors_of(tip, include_self=True)
        return result

    def unreachable(self) -> set[str]:
        reachable = self.reachable()
        return {c.id for c in self.graph if c.id not in reachable}

    def find(self, message: str) -> Commit:
        """Newest commit carrying exactly this message."""
        matches = [c for c in self.graph if c.message == message]
        if not matches:
            raise UnknownCommit(f"No commit with message '{message}'")
        return matches[-1]

    def resolve(self, revision: str) -> str:
        """
        Turn a revision into a full commit id.

        Accepts HEAD, branch names, tag names, full ids, unique id
        prefixes and `:/text` (newest commit whose message contains text),
        each optionally followed by `~N` or `^` steps along first parents.
        """
        match = _REVISION.match(revision)
        if match is None:
            raise UnknownCommit(f"Unknown revision '{revision}'")

        commit_id = self._resolve_base(match.group("base"))
        for step in _STEP.finditer(match.group("suffix")):
            generations = int(step.group(1)) if step.group(1) else 1
            commit_id = self.graph.first_parent(commit_id, generations)
        return commit_id

    def _resolve_base(self, name: str) -> str:
        if name == "HEAD":
            return self.refs.head_commit_id()
        if name.startswith(":/"):
            matches = [c for c in self.graph if name[2:] in c.message]
            if not matches:
                raise UnknownCommit(f"No commit message matches '{name[2:]}'")
            return matches[-1].id
        if self.refs.has_branch(name):
            return self.refs.branch(name)
        if self.refs.has_tag(name):
            return self.refs.tag(name)
        if name in self.graph:
            return name

        if len(name) >= MIN_PREFIX_LENGTH:
            candidates = [c.id for c in self.graph if c.id.startswith(name)]
            if len(candidates) == 1:
                return candidates[0]
            if len(candidates) > 1:
                raise UnknownCommit(
                    f"Short id '{name}' is ambiguous ({len(candidates)} commits)"
                )
        raise UnknownCommit(f"Unknown revision '{name}'")
