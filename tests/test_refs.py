import pytest

from git_playground.errors import ImmutableRef, InvalidOperation, RefExists, UnknownRef
from git_playground.model import Head, RefKind
from git_playground.refs import RefStore


@pytest.fixture
def refs() -> RefStore:
    return RefStore(Head(branch="main"), {"main": "c1"})


def test_create_branch_and_tag(refs: RefStore):
    refs.create_branch("dev", "c1")
    refs.create_tag("v1.0", "c1")

    assert refs.branch("dev") == "c1"
    assert refs.tag("v1.0") == "c1"
    kinds = {(r.name, r.kind) for r in refs.refs()}
    assert kinds == {("main", RefKind.BRANCH), ("dev", RefKind.BRANCH), ("v1.0", RefKind.TAG)}


def test_names_are_unique_per_kind(refs: RefStore):
    with pytest.raises(RefExists):
        refs.create_branch("main", "c2")

    refs.create_tag("main", "c1")
    with pytest.raises(RefExists):
        refs.create_tag("main", "c2")


def test_tags_never_move(refs: RefStore):
    refs.create_tag("v1.0", "c1")
    with pytest.raises(ImmutableRef):
        refs.move_tag("v1.0", "c2")
    assert refs.tag("v1.0") == "c1"


def test_move_branch(refs: RefStore):
    refs.move_branch("main", "c9")
    assert refs.head_commit_id() == "c9"
    with pytest.raises(UnknownRef):
        refs.move_branch("nope", "c9")


def test_attach_and_detach(refs: RefStore):
    refs.detach("c5")
    assert refs.head.is_detached
    assert refs.head_commit_id() == "c5"

    refs.advance_head("c6")
    assert refs.head == Head(commit_id="c6")
    assert refs.branch("main") == "c1", "detached HEAD moves no branch"

    refs.attach("main")
    assert not refs.head.is_detached
    with pytest.raises(UnknownRef):
        refs.attach("nope")


@pytest.mark.parametrize("name", ["HEAD", "", "-x", "a..b", "a b", "x~1", "x^", "feat/"])
def test_invalid_names(refs: RefStore, name: str):
    with pytest.raises(InvalidOperation):
        refs.create_branch(name, "c1")


def test_copy_is_independent(refs: RefStore):
    clone = refs.copy()
    clone.create_branch("dev", "c1")
    clone.move_branch("main", "c2")
    assert not refs.has_branch("dev")
    assert refs.branch("main") == "c1"


def test_head_requires_exactly_one_target():
    with pytest.raises(ValueError):
        Head()
    with pytest.raises(ValueError):
        Head(branch="main", commit_id="c1")
