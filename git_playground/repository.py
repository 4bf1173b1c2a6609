from typing import Any, Callable, Mapping

from sqlalchemy.orm import Session

from git_playground.base import CommitGraph
from git_playground.config import EngineConfig
from git_playground.identity import short_identity
from git_playground.impl.memory import create_memory_graph
from git_playground.impl.sql import create_session_maker, create_sql_graph
from git_playground.model import Commit, Head, Ref, Snapshot
from git_playground.operations import execute
from git_playground.refs import RefStore
from git_playground.state import RepositoryState
from git_playground.working import WorkingSet


def init_state(
    graph: CommitGraph,
    files: Mapping[str, str] | None = None,
    config: EngineConfig | None = None,
) -> RepositoryState:
    """Root commit on the default branch with HEAD attached to it."""
    config = config or EngineConfig()
    root = graph.insert_commit(None, snapshot=files, message=config.initial_message)
    refs = RefStore(Head(branch=config.default_branch), {config.default_branch: root.id})
    return RepositoryState(graph, refs, WorkingSet())


class Repository:
    """
    The shared repository model handed to every view.

    Commands replace the current state with the executor's result, so a
    rejected command leaves the repository exactly as it was. Views read
    the query methods and never keep their own copy of the graph.
    """

    def __init__(self, state: RepositoryState, config: EngineConfig | None = None) -> None:
        self.state = state
        self.config = config or EngineConfig()

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("Repository(...)")
        else:
            with p.group(4, "Repository(", ")"):
                p.breakable()
                p.text(f"head='{self.head}',")
                p.breakable()
                p.text("state=")
                p.pretty(self.state)
                p.breakable()

    def apply(self, operation: str, *args, **kwargs) -> RepositoryState:
        self.state = execute(self.state, operation, *args, **kwargs)
        return self.state

    def commit(self, message: str = "") -> RepositoryState:
        return self.apply("commit", message)

    def branch(self, name: str, start: str | None = None) -> RepositoryState:
        return self.apply("branch", name, start)

    def checkout(self, target: str, create: bool = False) -> RepositoryState:
        return self.apply("checkout", target, create=create)

    def merge(
        self, source: str, message: str | None = None, no_ff: bool = False
    ) -> RepositoryState:
        return self.apply("merge", source, message, no_ff=no_ff)

    def rebase(self, onto: str) -> RepositoryState:
        return self.apply("rebase", onto)

    def reset(self, to: str, mode: str = "hard") -> RepositoryState:
        return self.apply("reset", to, mode)

    def revert(self, target: str) -> RepositoryState:
        return self.apply("revert", target)

    def cherry_pick(self, source: str) -> RepositoryState:
        return self.apply("cherry_pick", source)

    def tag(self, name: str, at: str | None = None) -> RepositoryState:
        return self.apply("tag", name, at)

    def stash(self, message: str = "") -> RepositoryState:
        return self.apply("stash", message)

    def stash_pop(self) -> RepositoryState:
        return self.apply("stash_pop")

    def stage(self, path: str | None = None) -> RepositoryState:
        return self.apply("stage", path)

    def unstage(self, path: str | None = None) -> RepositoryState:
        return self.apply("unstage", path)

    @property
    def graph(self) -> CommitGraph:
        return self.state.graph

    @property
    def head(self) -> Head:
        return self.state.refs.head

    @property
    def working(self) -> WorkingSet:
        return self.state.work

    def head_commit(self) -> Commit:
        return self.state.head_commit()

    def commits(self) -> list[Commit]:
        return self.state.graph.commits()

    def refs(self) -> list[Ref]:
        return self.state.refs.refs()

    def branches(self) -> dict[str, str]:
        return self.state.refs.branches()

    def tags(self) -> dict[str, str]:
        return self.state.refs.tags()

    def files(self) -> Snapshot:
        return self.state.files()

    def get(self, path: str) -> str | None:
        return self.state.files().get(path)

    def is_dirty(self) -> bool:
        return self.state.work.is_dirty()

    def resolve(self, revision: str) -> str:
        return self.state.resolve(revision)

    def find(self, message: str) -> Commit:
        return self.state.find(message)

    def log(self, revision: str = "HEAD") -> list[Commit]:
        return self.state.graph.log(self.resolve(revision))

    def reachable(self) -> set[str]:
        return self.state.reachable()

    def unreachable(self) -> set[str]:
        return self.state.unreachable()

    def short(self, commit_id: str) -> str:
        return short_identity(commit_id, self.config.short_id_length)

    # Kept last: inside the class body this name shadows the builtin `set`
    def set(self, path: str, content: str | None) -> RepositoryState:
        """Edit a working tree file. Pass None to delete it."""
        if content is None:
            return self.apply("remove", path)
        return self.apply("edit", path, content)


def create_memory_repository(
    files: Mapping[str, str] | None = None, config: EngineConfig | None = None
) -> Repository:
    return Repository(init_state(create_memory_graph(), files, config), config)


def create_sql_repository(
    session_maker: Callable[[], Session] | None = None,
    files: Mapping[str, str] | None = None,
    config: EngineConfig | None = None,
) -> Repository:
    config = config or EngineConfig(backend="sql")
    session_maker = session_maker or create_session_maker(config.database_url)
    return Repository(init_state(create_sql_graph(session_maker), files, config), config)


def create_repository(
    config: EngineConfig | None = None, files: Mapping[str, str] | None = None
) -> Repository:
    config = config or EngineConfig()
    if config.backend == "sql":
        return create_sql_repository(files=files, config=config)
    return create_memory_repository(files, config)
