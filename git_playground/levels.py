from typing import Sequence

from git_playground.base import CommitGraph
from git_playground.impl.memory import create_memory_graph
from git_playground.model import Head
from git_playground.refs import RefStore
from git_playground.state import RepositoryState
from git_playground.trial import Level
from git_playground.working import WorkingSet

# (label, parent label, second parent label)
CommitSpec = tuple[str, str | None] | tuple[str, str | None, str | None]


def build_state(
    commits: Sequence[CommitSpec],
    branches: dict[str, str],
    head: str,
    graph: CommitGraph | None = None,
) -> RepositoryState:
    """
    Build a state from labelled commits, parents listed before children.

    Each label becomes the commit message and adds one file named after
    it, so every commit carries a visible change. Branch values are labels.
    """
    graph = graph if graph is not None else create_memory_graph()
    ids: dict[str, str] = {}

    for spec in commits:
        label, parent = spec[0], spec[1]
        second = spec[2] if len(spec) > 2 else None

        snapshot: dict[str, str] = {}
        if parent is not None:
            snapshot.update(graph.get(ids[parent]).snapshot)
        if second is not None:
            snapshot.update(graph.get(ids[second]).snapshot)
        snapshot[f"{label.lower()}.txt"] = label

        created = graph.insert_commit(
            ids[parent] if parent is not None else None,
            ids[second] if second is not None else None,
            snapshot,
            label,
        )
        ids[label] = created.id

    refs = RefStore(Head(branch=head), {name: ids[label] for name, label in branches.items()})
    return RepositoryState(graph, refs, WorkingSet())


def _first_steps(state: RepositoryState) -> bool:
    main = state.refs.branch("main")
    root = state.find("C1")
    return state.graph.is_ancestor(root.id, main) and len(state.graph.log(main)) >= 3


def _branching_out(state: RepositoryState) -> bool:
    if not state.refs.has_branch("dev") or state.head.branch != "dev":
        return False
    dev, c2 = state.refs.branch("dev"), state.find("C2").id
    # dev must have moved forward from C2, not back to C1
    return dev != c2 and state.graph.is_ancestor(c2, dev)


def _the_merge(state: RepositoryState) -> bool:
    return state.graph.get(state.refs.branch("main")).is_merge


def _emergency_reset(state: RepositoryState) -> bool:
    return state.refs.branch("main") == state.find("C2").id


def create_levels() -> list[Level]:
    return [
        Level(
            id=1,
            title="First Steps",
            description="Every project starts with a first step. Move the work forward.",
            goal_description="Create 2 new commits on the main branch.",
            initial_state=build_state([("C1", None)], {"main": "C1"}, "main"),
            check_win=_first_steps,
            hint="Commit twice.",
            intro_log=["Repo initialized."],
        ),
        Level(
            id=2,
            title="Branching Out",
            description="A new feature must not disturb the stable main line.",
            goal_description="Create a branch named 'dev', switch to it and commit once.",
            initial_state=build_state([("C1", None), ("C2", "C1")], {"main": "C2"}, "main"),
            check_win=_branching_out,
            hint="branch dev, checkout dev, then commit.",
            intro_log=["Initial setup complete."],
        ),
        Level(
            id=3,
            title="The Merge",
            description="The feature is done, bring it back into the main line.",
            goal_description="Merge the 'feat' branch into 'main'.",
            initial_state=build_state(
                [("C1", None), ("C2", "C1"), ("F1", "C1")],
                {"main": "C2", "feat": "F1"},
                "main",
            ),
            check_win=_the_merge,
            hint="Make sure HEAD is on main, then merge feat.",
            intro_log=["Branches diverged."],
        ),
        Level(
            id=4,
            title="Emergency Reset",
            description="The last commit shipped a serious bug. Undo it.",
            goal_description="Reset 'main' back to the previous version (C2).",
            initial_state=build_state(
                [("C1", None), ("C2", "C1"), ("C3-ERR", "C2")],
                {"main": "C3-ERR"},
                "main",
            ),
            check_win=_emergency_reset,
            hint="Use reset to force the branch pointer back.",
            intro_log=["Bug introduced in C3-ERR."],
        ),
    ]


def get_level(level_id: int) -> Level:
    for level in create_levels():
        if level.id == level_id:
            return level
    raise KeyError(f"No level {level_id}")
