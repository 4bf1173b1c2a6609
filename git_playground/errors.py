class RepositoryError(Exception):
    """
    Base class for every rejected repository operation.

    Errors are raised before any state is touched, so the repository
    stays usable after catching one.
    """

    @property
    def kind(self) -> str:
        return type(self).__name__

    @property
    def reason(self) -> str:
        return str(self)


class DanglingParent(RepositoryError):
    pass


class RefExists(RepositoryError):
    pass


class ImmutableRef(RepositoryError):
    pass


class UnknownRef(RepositoryError):
    pass


class UnknownCommit(RepositoryError):
    pass


class SelfMerge(RepositoryError):
    pass


class NothingToStash(RepositoryError):
    pass


class StashEmpty(RepositoryError):
    pass


class DetachedHead(RepositoryError):
    """Operation needs HEAD attached to a branch."""


class NothingToStage(RepositoryError):
    pass


class InvalidOperation(RepositoryError):
    """Unknown operation name or bad arguments for a known one."""


class StashConflict(RepositoryError):
    """Popping the stash would overwrite pending changes."""
