import pytest
from loguru import logger
from pydantic import ValidationError

from git_playground.config import EngineConfig
from git_playground.impl.memory import MemoryCommitGraph
from git_playground.impl.sql import SqlCommitGraph
from git_playground.logging_config import configure_logging
from git_playground.repository import create_repository


def test_defaults():
    config = EngineConfig()
    assert config.default_branch == "main"
    assert config.initial_message == "Initial commit"
    assert config.short_id_length == 7
    assert config.backend == "memory"
    assert config.log_level == "WARNING"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"short_id_length": 3},
        {"short_id_length": 41},
        {"backend": "postgres"},
        {"log_level": "chatty"},
        {"default_branch": "HEAD"},
        {"default_branch": "  "},
    ],
)
def test_invalid_values(kwargs):
    with pytest.raises(ValidationError):
        EngineConfig(**kwargs)


def test_log_level_is_normalized():
    assert EngineConfig(log_level="debug").log_level == "DEBUG"


def test_from_env(monkeypatch):
    monkeypatch.setenv("GIT_PLAYGROUND_DEFAULT_BRANCH", "trunk")
    monkeypatch.setenv("GIT_PLAYGROUND_SHORT_ID_LENGTH", "10")
    monkeypatch.setenv("GIT_PLAYGROUND_BACKEND", "sql")
    monkeypatch.setenv("GIT_PLAYGROUND_LOG_LEVEL", "info")

    config = EngineConfig.from_env()
    assert config.default_branch == "trunk"
    assert config.short_id_length == 10
    assert config.backend == "sql"
    assert config.database_url == "sqlite://"
    assert config.log_level == "INFO"


def test_create_repository_picks_backend():
    memory = create_repository()
    sql = create_repository(EngineConfig(backend="sql"), files={"a.txt": "1"})

    assert isinstance(memory.graph, MemoryCommitGraph)
    assert isinstance(sql.graph, SqlCommitGraph)
    assert sql.get("a.txt") == "1"


def test_custom_branch_and_short_ids():
    config = EngineConfig(default_branch="trunk", initial_message="root", short_id_length=10)
    repo = create_repository(config)

    assert repo.head.branch == "trunk"
    assert repo.branches() == {"trunk": repo.head_commit().id}
    assert repo.head_commit().message == "root"
    assert repo.short(repo.head_commit().id) == repo.head_commit().id[:10]


def test_configure_logging_enables_package_messages():
    messages: list[str] = []
    handler_id = configure_logging(level="DEBUG", colorize=False)
    sink_id = logger.add(messages.append, level="DEBUG", format="{message}")
    try:
        repo = create_repository()
        repo.commit("logged")
        repo.branch("dev")
    finally:
        logger.remove(sink_id)
        logger.remove(handler_id)
        logger.disable("git_playground")

    assert any(m.startswith("Committed") for m in messages)
    assert any("Created branch dev" in m for m in messages)


@pytest.mark.parametrize("log_level, shown", [("DEBUG", True), ("ERROR", False)])
def test_configure_logging_applies_config_level(capsys, log_level: str, shown: bool):
    handler_id = configure_logging(EngineConfig(log_level=log_level), colorize=False)
    try:
        create_repository().commit("leveled")
    finally:
        logger.remove(handler_id)
        logger.disable("git_playground")

    assert ("Committed" in capsys.readouterr().err) is shown


def test_configure_logging_reads_level_from_env(monkeypatch, capsys):
    monkeypatch.setenv("GIT_PLAYGROUND_LOG_LEVEL", "debug")
    handler_id = configure_logging(colorize=False)
    try:
        create_repository().branch("dev")
    finally:
        logger.remove(handler_id)
        logger.disable("git_playground")

    assert "Created branch dev" in capsys.readouterr().err


def test_package_is_silent_by_default():
    messages: list[str] = []
    sink_id = logger.add(messages.append, level="DEBUG")
    try:
        create_repository().commit("quiet")
    finally:
        logger.remove(sink_id)
    assert messages == []


def test_pretty_printing():
    pretty = pytest.importorskip("IPython.lib.pretty")
    repo = create_repository(files={"README.md": "# Docs"})
    repo.commit("second")

    text = pretty.pretty(repo)
    assert text.startswith("Repository(")
    assert "head='ref: main'" in text
    assert "'second'" in text
    commit_text = pretty.pretty(repo.head_commit())
    assert commit_text.startswith("Commit(")
    assert "README.md" in commit_text
