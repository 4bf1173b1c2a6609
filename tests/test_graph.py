import pytest

from git_playground.base import CommitGraph
from git_playground.errors import DanglingParent, UnknownCommit


def _chain(graph: CommitGraph, length: int) -> list[str]:
    ids: list[str] = []
    parent = None
    for i in range(length):
        commit = graph.insert_commit(parent, snapshot={"n.txt": str(i)}, message=f"C{i + 1}")
        ids.append(commit.id)
        parent = commit.id
    return ids


def test_insert_root_and_children(graph: CommitGraph):
    root = graph.insert_commit(None, snapshot={"a.txt": "1"}, message="root")
    child = graph.insert_commit(root.id, snapshot={"a.txt": "2"}, message="child")

    assert len(graph) == 2
    assert root.is_root
    assert child.parent_id == root.id
    assert child.second_parent_id is None
    assert child.created_at == 2
    assert graph.get(child.id).snapshot == {"a.txt": "2"}
    assert [c.id for c in graph] == [root.id, child.id]
    assert root.id in graph
    assert "nope" not in graph


def test_dangling_parent_is_rejected(graph: CommitGraph):
    root = graph.insert_commit(None)

    with pytest.raises(DanglingParent):
        graph.insert_commit("0" * 40)
    with pytest.raises(DanglingParent):
        graph.insert_commit(root.id, "f" * 40)
    with pytest.raises(DanglingParent):
        graph.insert_commit(None, root.id)

    assert len(graph) == 1, "Rejected inserts must not grow the graph"


def test_same_content_different_ancestry_gets_new_id(graph: CommitGraph):
    root = graph.insert_commit(None, snapshot={"a": "1"})
    first = graph.insert_commit(root.id, snapshot={"a": "2"}, message="same")
    second = graph.insert_commit(first.id, snapshot={"a": "2"}, message="same")
    again = graph.insert_commit(root.id, snapshot={"a": "2"}, message="same")

    assert len({first.id, second.id, again.id}) == 3


def test_get_unknown_commit(graph: CommitGraph):
    with pytest.raises(UnknownCommit):
        graph.get("deadbeef")


def test_ancestry(graph: CommitGraph):
    c1, c2, c3 = _chain(graph, 3)

    assert graph.ancestors_of(c3) == {c1, c2}
    assert graph.ancestors_of(c3, include_self=True) == {c1, c2, c3}
    assert graph.ancestors_of(c1) == set()

    assert graph.is_ancestor(c1, c3)
    assert graph.is_ancestor(c3, c3)
    assert not graph.is_ancestor(c3, c1)


def test_merge_commit_ancestry_and_base(graph: CommitGraph):
    c1, c2 = _chain(graph, 2)
    f1 = graph.insert_commit(c1, snapshot={"f": "1"}, message="F1")
    merge = graph.insert_commit(c2, f1.id, {"n.txt": "1", "f": "1"}, "merge")

    assert merge.is_merge
    assert merge.parents == (c2, f1.id)
    assert graph.ancestors_of(merge.id) == {c1, c2, f1.id}
    assert graph.is_ancestor(f1.id, merge.id), "second parent edges count"
    assert graph.merge_base(c2, f1.id) == c1
    assert graph.merge_base(merge.id, f1.id) == f1.id


def test_disjoint_roots_have_no_merge_base(graph: CommitGraph):
    a = graph.insert_commit(None, message="a")
    b = graph.insert_commit(None, message="b")
    assert graph.merge_base(a.id, b.id) is None


def test_unique_to_and_log(graph: CommitGraph):
    c1, c2, c3 = _chain(graph, 3)
    f1 = graph.insert_commit(c1, message="F1")
    f2 = graph.insert_commit(f1.id, message="F2")

    assert [c.id for c in graph.unique_to(f2.id, c3)] == [f1.id, f2.id]
    assert [c.id for c in graph.log(c3)] == [c3, c2, c1]
    assert graph.first_parent(c3, 2) == c1
    with pytest.raises(UnknownCommit):
        graph.first_parent(c3, 3)


def test_copy_is_independent(graph: CommitGraph):
    c1, c2 = _chain(graph, 2)
    clone = graph.copy()
    extra = clone.insert_commit(c2, message="only in clone")

    assert len(clone) == 3
    assert len(graph) == 2
    assert extra.id not in graph
    assert clone.get(c1).snapshot == graph.get(c1).snapshot
    assert type(clone) is type(graph)


def test_snapshot_is_read_only_and_detached_from_input(graph: CommitGraph):
    files = {"a.txt": "1"}
    commit = graph.insert_commit(None, snapshot=files)
    files["a.txt"] = "changed"

    with pytest.raises(TypeError):
        commit.snapshot["a.txt"] = "2"  # type: ignore[index]
    assert graph.get(commit.id).snapshot == {"a.txt": "1"}
    assert graph.copy().get(commit.id).snapshot == {"a.txt": "1"}
