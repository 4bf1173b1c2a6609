import re
from typing import Any

from git_playground.errors import ImmutableRef, InvalidOperation, RefExists, UnknownRef
from git_playground.model import Head, Ref, RefKind


class RefStore:
    """
    Named pointers into the commit graph plus the HEAD pointer.

    Branches move freely, tags are bound once and never move. Names are
    unique within their kind, so a branch and a tag may share one.
    """

    def __init__(
        self,
        head: Head,
        branches: dict[str, str] | None = None,
        tags: dict[str, str] | None = None,
    ) -> None:
        self.head = head
        self._branches: dict[str, str] = branches if branches is not None else {}
        self._tags: dict[str, str] = tags if tags is not None else {}

    def copy(self) -> "RefStore":
        return RefStore(self.head, self._branches.copy(), self._tags.copy())

    def _repr_pretty_(self, p: Any, cycle: bool) -> None:
        if cycle:
            p.text("RefStore(...)")
        else:
            with p.group(4, "RefStore(", ")"):
                p.breakable()
                p.text(f"head='{self.head}',")
                p.breakable()
                p.text(f"branches={ {k: v[:7] for k, v in self._branches.items()} },")
                p.breakable()
                p.text(f"tags={ {k: v[:7] for k, v in self._tags.items()} },")
                p.breakable()

    def has_branch(self, name: str) -> bool:
        return name in self._branches

    def has_tag(self, name: str) -> bool:
        return name in self._tags

    def branch(self, name: str) -> str:
        if name not in self._branches:
            raise UnknownRef(f"Branch '{name}' does not exist")
        return self._branches[name]

    def tag(self, name: str) -> str:
        if name not in self._tags:
            raise UnknownRef(f"Tag '{name}' does not exist")
        return self._tags[name]

    def branches(self) -> dict[str, str]:
        return dict(self._branches)

    def tags(self) -> dict[str, str]:
        return dict(self._tags)

    def refs(self) -> list[Ref]:
        result = [Ref(name, RefKind.BRANCH, cid) for name, cid in self._branches.items()]
        result.extend(Ref(name, RefKind.TAG, cid) for name, cid in self._tags.items())
        return result

    def create_branch(self, name: str, at_commit: str) -> None:
        _check_name(name)
        if name in self._branches:
            raise RefExists(f"Branch '{name}' already exists")
        self._branches[name] = at_commit

    def move_branch(self, name: str, to_commit: str) -> None:
        if name not in self._branches:
            raise UnknownRef(f"Branch '{name}' does not exist")
        self._branches[name] = to_commit

    def create_tag(self, name: str, at_commit: str) -> None:
        _check_name(name)
        if name in self._tags:
            raise RefExists(f"Tag '{name}' already exists")
        self._tags[name] = at_commit

    def move_tag(self, name: str, to_commit: str) -> None:
        if name not in self._tags:
            raise UnknownRef(f"Tag '{name}' does not exist")
        raise ImmutableRef(f"Tag '{name}' cannot be moved")

    def attach(self, branch: str) -> None:
        if branch not in self._branches:
            raise UnknownRef(f"Branch '{branch}' does not exist")
        self.head = Head(branch=branch)

    def detach(self, commit_id: str) -> None:
        self.head = Head(commit_id=commit_id)

    def head_commit_id(self) -> str:
        if self.head.branch is not None:
            return self.branch(self.head.branch)
        return self.head.commit_id  # type: ignore[return-value]

    def advance_head(self, commit_id: str) -> None:
        """Move whatever HEAD points at: the branch if attached, else HEAD."""
        if self.head.branch is not None:
            self.move_branch(self.head.branch, commit_id)
        else:
            self.detach(commit_id)


_VALID_NAME = re.compile(r"^(?!-)(?!.*\.\.)[A-Za-z0-9._/-]+(?<![./])$")


def _check_name(name: str) -> None:
    if name == "HEAD" or not _VALID_NAME.match(name):
        raise InvalidOperation(f"'{name}' is not a valid ref name")
