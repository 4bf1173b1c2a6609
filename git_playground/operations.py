"""
Executors for the repository commands.

Every executor takes a `RepositoryState` and returns a new one. The input
is never modified: preconditions are checked against it and the result is
built on a copy, so a raised `RepositoryError` leaves nothing half applied.
"""

import inspect
from typing import Callable

from loguru import logger

from git_playground.errors import (
    DetachedHead,
    InvalidOperation,
    RefExists,
    SelfMerge,
    UnknownCommit,
    UnknownRef,
)
from git_playground.model import (
    Changes,
    Commit,
    apply_changes,
    diff_snapshots,
    invert_changes,
)
from git_playground.state import RepositoryState
from git_playground.working import WorkingSet

RESET_MODES = ("soft", "mixed", "hard")

Executor = Callable[..., RepositoryState]


def _short(commit_id: str) -> str:
    return commit_id[:7]


def _own_change(state: RepositoryState, commit: Commit) -> Changes:
    """What a commit changed relative to its first parent."""
    if commit.parent_id is None:
        return diff_snapshots({}, commit.snapshot)
    parent = state.graph.get(commit.parent_id)
    return diff_snapshots(parent.snapshot, commit.snapshot)


def _attached_branch(state: RepositoryState, action: str) -> str:
    branch = state.refs.head.branch
    if branch is None:
        raise DetachedHead(f"Cannot {action} with a detached HEAD")
    return branch


def _branch_tip(state: RepositoryState, name: str) -> str:
    if state.refs.has_branch(name):
        return state.refs.branch(name)
    try:
        return state.resolve(name)
    except UnknownCommit:
        raise UnknownRef(f"Branch '{name}' does not exist") from None


def commit(state: RepositoryState, message: str = "") -> RepositoryState:
    head = state.head_commit()
    snapshot = state.work.staged_snapshot(head.snapshot)

    new = state.copy()
    created = new.graph.insert_commit(head.id, snapshot=snapshot, message=message)
    new.refs.advance_head(created.id)
    new.work.staged_files = {}

    logger.debug(f"Committed {_short(created.id)} on {new.refs.head}")
    return new


def branch(state: RepositoryState, name: str, start: str | None = None) -> RepositoryState:
    if state.refs.has_branch(name):
        raise RefExists(f"Branch '{name}' already exists")
    at = state.resolve(start) if start is not None else state.refs.head_commit_id()

    new = state.copy()
    new.refs.create_branch(name, at)
    logger.debug(f"Created branch {name} at {_short(at)}")
    return new


def checkout(state: RepositoryState, target: str, create: bool = False) -> RepositoryState:
    """
    Attach HEAD to a branch, or detach it at any other revision.

    Pending working set changes are carried over onto the new base.
    """
    if create:
        new = branch(state, target)
        new.refs.attach(target)
        logger.debug(f"Switched to new branch {target}")
        return new

    if state.refs.has_branch(target):
        new = state.copy()
        new.refs.attach(target)
        logger.debug(f"Switched to branch {target}")
        return new

    try:
        commit_id = state.resolve(target)
    except UnknownCommit:
        raise UnknownRef(f"'{target}' matches no branch or commit") from None

    new = state.copy()
    new.refs.detach(commit_id)
    logger.debug(f"HEAD detached at {_short(commit_id)}")
    return new


def merge(
    state: RepositoryState,
    source: str,
    message: str | None = None,
    no_ff: bool = False,
) -> RepositoryState:
    """
    Merge another branch into the one HEAD is attached to.

    Fast-forwards when the current tip is an ancestor of the source tip,
    unless `no_ff` asks for a merge commit anyway. Merge commits take the
    current tip as first parent and the source tip as second parent.
    """
    target = _attached_branch(state, "merge")
    if source == target:
        raise SelfMerge(f"Cannot merge branch '{target}' into itself")

    graph = state.graph
    source_tip = _branch_tip(state, source)
    target_tip = state.refs.branch(target)

    if graph.is_ancestor(source_tip, target_tip):
        logger.debug(f"{target} already contains {source}")
        return state.copy()

    if graph.is_ancestor(target_tip, source_tip) and not no_ff:
        new = state.copy()
        new.refs.move_branch(target, source_tip)
        logger.debug(f"Fast-forward {target} to {_short(source_tip)}")
        return new

    base_id = graph.merge_base(target_tip, source_tip)
    base = graph.get(base_id).snapshot if base_id is not None else {}
    theirs = diff_snapshots(base, graph.get(source_tip).snapshot)
    # Overlapping edits resolve in favour of the merged branch
    snapshot = apply_changes(graph.get(target_tip).snapshot, theirs)

    new = state.copy()
    created = new.graph.insert_commit(
        target_tip,
        source_tip,
        snapshot,
        message or f"Merge branch '{source}' into {target}",
    )
    new.refs.move_branch(target, created.id)
    logger.debug(f"Merged {source} into {target} as {_short(created.id)}")
    return new


def rebase(state: RepositoryState, onto: str) -> RepositoryState:
    """
    Replay the current branch's own commits on top of `onto`.

    Commits are replayed oldest first as new commits carrying the same
    change; merge commits in the range are dropped. The originals stay in
    the graph, and any tag on them keeps pointing at them.
    """
    current = _attached_branch(state, "rebase")
    graph = state.graph
    onto_tip = _branch_tip(state, onto)
    head_tip = state.refs.branch(current)

    if graph.is_ancestor(onto_tip, head_tip):
        logger.debug(f"{current} is already based on {onto}")
        return state.copy()

    if graph.is_ancestor(head_tip, onto_tip):
        new = state.copy()
        new.refs.move_branch(current, onto_tip)
        logger.debug(f"Fast-forward {current} to {_short(onto_tip)}")
        return new

    replay = [c for c in graph.unique_to(head_tip, onto_tip) if not c.is_merge]

    new = state.copy()
    previous = new.graph.get(onto_tip)
    for original in replay:
        snapshot = apply_changes(previous.snapshot, _own_change(state, original))
        previous = new.graph.insert_commit(previous.id, snapshot=snapshot, message=original.message)
        logger.debug(f"Replayed {_short(original.id)} as {_short(previous.id)}")

    new.refs.move_branch(current, previous.id)
    return new


def reset(state: RepositoryState, to: str, mode: str = "hard") -> RepositoryState:
    """
    Force HEAD's branch (or a detached HEAD) onto another commit.

    `hard` discards the working set, `mixed` keeps the old tree as unstaged
    changes and `soft` keeps it staged. Commits only reachable from the old
    tip become unreachable but stay in the graph.
    """
    if mode not in RESET_MODES:
        raise InvalidOperation(f"Unknown reset mode '{mode}'")
    target = state.graph.get(state.resolve(to))
    old_head = state.head_commit()

    new = state.copy()
    new.refs.advance_head(target.id)

    if mode == "hard":
        new.work.clear()
    elif mode == "mixed":
        new.work.staged_files = {}
        new.work.working_files = diff_snapshots(target.snapshot, state.files())
    else:
        index = state.work.staged_snapshot(old_head.snapshot)
        staged = diff_snapshots(target.snapshot, index)
        new.work.staged_files = {
            path: content
            for path, content in staged.items()
            if path not in new.work.working_files
        }

    logger.debug(f"Reset ({mode}) {new.refs.head} to {_short(target.id)}")
    return new


def revert(state: RepositoryState, target: str) -> RepositoryState:
    target_id = state.resolve(target)
    head = state.head_commit()
    if not state.graph.is_ancestor(target_id, head.id):
        raise UnknownCommit(f"Commit '{_short(target_id)}' is not reachable from HEAD")

    reverted = state.graph.get(target_id)
    before = state.graph.get(reverted.parent_id).snapshot if reverted.parent_id else {}
    inverse = invert_changes(before, _own_change(state, reverted))
    snapshot = apply_changes(head.snapshot, inverse)

    new = state.copy()
    created = new.graph.insert_commit(head.id, snapshot=snapshot, message=f'Revert "{reverted.message}"')
    new.refs.advance_head(created.id)
    logger.debug(f"Reverted {_short(target_id)} as {_short(created.id)}")
    return new


def cherry_pick(state: RepositoryState, source: str) -> RepositoryState:
    picked = state.graph.get(state.resolve(source))
    head = state.head_commit()
    snapshot = apply_changes(head.snapshot, _own_change(state, picked))

    new = state.copy()
    created = new.graph.insert_commit(head.id, snapshot=snapshot, message=picked.message)
    new.refs.advance_head(created.id)
    logger.debug(f"Picked {_short(picked.id)} as {_short(created.id)}")
    return new


def tag(state: RepositoryState, name: str, at: str | None = None) -> RepositoryState:
    if state.refs.has_tag(name):
        raise RefExists(f"Tag '{name}' already exists")
    commit_id = state.resolve(at) if at is not None else state.refs.head_commit_id()

    new = state.copy()
    new.refs.create_tag(name, commit_id)
    logger.debug(f"Tagged {_short(commit_id)} as {name}")
    return new


def _with_work(state: RepositoryState, work: WorkingSet) -> RepositoryState:
    """New state sharing the history of `state` with an already edited working set."""
    return RepositoryState(state.graph.copy(), state.refs.copy(), work)


def stash(state: RepositoryState, message: str = "") -> RepositoryState:
    work = state.work.copy()
    entry = work.push_stash(message)
    logger.debug(f"Stashed {len(entry.files)} file(s)")
    return _with_work(state, work)


def stash_pop(state: RepositoryState) -> RepositoryState:
    work = state.work.copy()
    entry = work.pop_stash()
    logger.debug(f"Restored {len(entry.files)} stashed file(s)")
    return _with_work(state, work)


def edit(state: RepositoryState, path: str, content: str) -> RepositoryState:
    work = state.work.copy()
    work.set(path, content)
    return _with_work(state, work)


def remove(state: RepositoryState, path: str) -> RepositoryState:
    if path not in state.files():
        raise InvalidOperation(f"'{path}' is not in the working tree")
    work = state.work.copy()
    work.set(path, None)
    return _with_work(state, work)


def stage(state: RepositoryState, path: str | None = None) -> RepositoryState:
    work = state.work.copy()
    work.stage(path)
    return _with_work(state, work)


def unstage(state: RepositoryState, path: str | None = None) -> RepositoryState:
    work = state.work.copy()
    work.unstage(path)
    return _with_work(state, work)


OPERATIONS: dict[str, Executor] = {
    "commit": commit,
    "branch": branch,
    "checkout": checkout,
    "merge": merge,
    "rebase": rebase,
    "reset": reset,
    "revert": revert,
    "cherry_pick": cherry_pick,
    "tag": tag,
    "stash": stash,
    "stash_pop": stash_pop,
    "edit": edit,
    "remove": remove,
    "stage": stage,
    "unstage": unstage,
}


def get_executor(name: str) -> Executor:
    key = name.replace("-", "_")
    if key not in OPERATIONS:
        raise InvalidOperation(f"Unknown operation '{name}'")
    return OPERATIONS[key]


def execute(state: RepositoryState, name: str, *args, **kwargs) -> RepositoryState:
    """Run an executor by its command name, e.g. `cherry-pick`."""
    executor = get_executor(name)
    try:
        inspect.signature(executor).bind(state, *args, **kwargs)
    except TypeError as e:
        raise InvalidOperation(f"Bad arguments for '{name}': {e}") from None
    return executor(state, *args, **kwargs)
