import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from git_playground.base import CommitGraph
from git_playground.impl.memory import create_memory_graph
from git_playground.impl.sql import Base, create_sql_graph
from git_playground.repository import (
    Repository,
    create_memory_repository,
    create_sql_repository,
)


class RepoProvider:
    def create(self, files: dict[str, str] | None = None) -> Repository:
        raise NotImplementedError()

    def graph(self) -> CommitGraph:
        raise NotImplementedError()

    def cleanup(self) -> None:
        pass


class MemoryRepoProvider(RepoProvider):
    def create(self, files: dict[str, str] | None = None) -> Repository:
        return create_memory_repository(files)

    def graph(self) -> CommitGraph:
        return create_memory_graph()


class SqlRepoProvider(RepoProvider):
    def __init__(self):
        # Shared in-memory database, one engine per test
        self.engine = create_engine(
            "sqlite://",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        Base.metadata.create_all(self.engine)
        self.session_maker = sessionmaker(bind=self.engine)

    def create(self, files: dict[str, str] | None = None) -> Repository:
        return create_sql_repository(self.session_maker, files)

    def graph(self) -> CommitGraph:
        return create_sql_graph(self.session_maker)

    def cleanup(self) -> None:
        self.engine.dispose()


PROVIDERS = [
    MemoryRepoProvider,
    SqlRepoProvider,
]
PROVIDER_IDS = ["memory", "sql"]


@pytest.fixture(params=PROVIDERS, ids=PROVIDER_IDS)
def provider(request):
    repo_provider = request.param()
    yield repo_provider
    repo_provider.cleanup()


@pytest.fixture
def repo(provider: RepoProvider) -> Repository:
    return provider.create({"README.md": "# Docs"})


@pytest.fixture
def graph(provider: RepoProvider) -> CommitGraph:
    return provider.graph()
