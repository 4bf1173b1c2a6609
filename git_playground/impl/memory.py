from typing import Iterator

from git_playground.base import CommitGraph
from git_playground.model import Commit

MemoryGraphData = dict[str, Commit]


class MemoryCommitGraph(CommitGraph):
    def __init__(self, data: MemoryGraphData | None = None) -> None:
        # dicts keep insertion order, which is the graph's creation order
        self.data: MemoryGraphData = data if data is not None else {}

    def _store(self, commit: Commit) -> None:
        self.data[commit.id] = commit

    def _find(self, commit_id: str) -> Commit | None:
        return self.data.get(commit_id)

    def __iter__(self) -> Iterator[Commit]:
        return iter(list(self.data.values()))

    def __len__(self) -> int:
        return len(self.data)

    def copy(self) -> "MemoryCommitGraph":
        # Commits are frozen, a shallow copy of the index is enough
        return MemoryCommitGraph(self.data.copy())


def create_memory_graph(data: MemoryGraphData | None = None) -> MemoryCommitGraph:
    return MemoryCommitGraph(data)
