from loguru import logger

from .base import CommitGraph
from .config import EngineConfig
from .errors import (
    DanglingParent,
    DetachedHead,
    ImmutableRef,
    InvalidOperation,
    NothingToStage,
    NothingToStash,
    RefExists,
    RepositoryError,
    SelfMerge,
    StashConflict,
    StashEmpty,
    UnknownCommit,
    UnknownRef,
)
from .identity import fingerprint, identity, short_identity
from .impl.memory import MemoryCommitGraph, create_memory_graph
from .impl.sql import SqlCommitGraph, create_sql_graph
from .levels import build_state, create_levels, get_level
from .logging_config import configure_logging
from .model import Commit, Head, Ref, RefKind, StashEntry
from .operations import OPERATIONS, execute
from .refs import RefStore
from .repository import (
    Repository,
    create_memory_repository,
    create_repository,
    create_sql_repository,
    init_state,
)
from .state import RepositoryState
from .trial import Failure, Level, StepResult, TrialEvaluator, TrialStatus
from .working import WorkingSet

logger.disable("git_playground")

__all__ = [
    "CommitGraph",
    "MemoryCommitGraph",
    "SqlCommitGraph",
    "create_memory_graph",
    "create_sql_graph",
    "EngineConfig",
    "configure_logging",
    "identity",
    "short_identity",
    "fingerprint",
    "Commit",
    "Head",
    "Ref",
    "RefKind",
    "StashEntry",
    "RefStore",
    "WorkingSet",
    "RepositoryState",
    "OPERATIONS",
    "execute",
    "Repository",
    "init_state",
    "create_memory_repository",
    "create_sql_repository",
    "create_repository",
    "Level",
    "TrialEvaluator",
    "TrialStatus",
    "StepResult",
    "Failure",
    "build_state",
    "create_levels",
    "get_level",
    "RepositoryError",
    "DanglingParent",
    "RefExists",
    "ImmutableRef",
    "UnknownRef",
    "UnknownCommit",
    "SelfMerge",
    "NothingToStash",
    "StashEmpty",
    "StashConflict",
    "DetachedHead",
    "NothingToStage",
    "InvalidOperation",
]
