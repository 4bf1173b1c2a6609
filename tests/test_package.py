import typing

import git_playground
from git_playground.repository import Repository


def test_public_names_resolve():
    missing = [name for name in git_playground.__all__ if not hasattr(git_playground, name)]
    assert missing == []


def test_query_annotations_use_builtin_set():
    # Repository.set must not shadow the builtin in earlier annotations
    assert typing.get_type_hints(Repository.reachable)["return"] == set[str]
    assert typing.get_type_hints(Repository.unreachable)["return"] == set[str]
    assert callable(Repository.set)
