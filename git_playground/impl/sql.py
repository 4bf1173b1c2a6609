import uuid
from typing import Callable, Iterator

from sqlalchemy import ForeignKey, Text, and_, create_engine, func, or_, select
from sqlalchemy.orm import DeclarativeBase, Mapped, Session, mapped_column, sessionmaker
from sqlalchemy.pool import StaticPool

from git_playground.base import CommitGraph
from git_playground.model import Commit

# (graph key, last created_at inherited from it)
Lineage = list[tuple[str, int]]


class Base(DeclarativeBase):
    pass


class GraphModel(Base):
    __tablename__ = "graphs"
    key: Mapped[str] = mapped_column(primary_key=True)
    # A copy sees its base's commits up to base_length, then its own
    base_key: Mapped[str | None] = mapped_column(ForeignKey("graphs.key"), nullable=True)
    base_length: Mapped[int] = mapped_column(default=0)


class CommitModel(Base):
    __tablename__ = "commits"
    # Ids cover content and ancestry, so rows are shared by every graph
    id: Mapped[str] = mapped_column(primary_key=True)
    parent_id: Mapped[str | None] = mapped_column(nullable=True)
    second_parent_id: Mapped[str | None] = mapped_column(nullable=True)
    created_at: Mapped[int] = mapped_column(nullable=False)
    message: Mapped[str] = mapped_column(Text, default="")


class CommitFileModel(Base):
    __tablename__ = "commit_files"
    commit_id: Mapped[str] = mapped_column(ForeignKey("commits.id"), primary_key=True)
    path: Mapped[str] = mapped_column(primary_key=True)
    position: Mapped[int] = mapped_column(nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)


class GraphCommitModel(Base):
    __tablename__ = "graph_commits"
    graph: Mapped[str] = mapped_column(ForeignKey("graphs.key"), primary_key=True)
    commit_id: Mapped[str] = mapped_column(ForeignKey("commits.id"), primary_key=True)
    created_at: Mapped[int] = mapped_column(nullable=False)


class SqlCommitGraph(CommitGraph):
    """
    Commit graph stored in SQL tables.

    Commit rows are written once and shared. A graph only records which
    commits were inserted through it; `copy()` adds a single `graphs` row
    pointing at its base instead of duplicating history.
    """

    def __init__(
        self,
        session_maker: Callable[[], Session],
        graph_key: str | None = None,
        lineage: Lineage | None = None,
        cache: dict[str, Commit] | None = None,
    ) -> None:
        self.session_maker = session_maker
        self.graph_key = graph_key or uuid.uuid4().hex
        # Rows never change once written, so loaded commits stay valid
        self._cache: dict[str, Commit] = cache if cache is not None else {}

        if lineage is None:
            self._lineage, self._owned = self._open()
        else:
            self._lineage, self._owned = lineage, 0

    def _open(self) -> tuple[Lineage, int]:
        """Register a new graph key, or load the lineage of an existing one."""
        with self.session_maker() as session:
            row = session.get(GraphModel, self.graph_key)
            if row is None:
                session.add(GraphModel(key=self.graph_key))
                session.commit()
                return [], 0

            lineage: Lineage = []
            while row.base_key is not None:
                lineage.append((row.base_key, row.base_length))
                row = session.get(GraphModel, row.base_key)
            owned = session.execute(
                select(func.count())
                .select_from(GraphCommitModel)
                .where(GraphCommitModel.graph == self.graph_key)
            ).scalar_one()
        return lineage[::-1], owned

    def _members(self):
        clauses = [GraphCommitModel.graph == self.graph_key]
        clauses.extend(
            and_(GraphCommitModel.graph == key, GraphCommitModel.created_at <= length)
            for key, length in self._lineage
        )
        return or_(*clauses)

    def _store(self, commit: Commit) -> None:
        with self.session_maker() as session:
            if session.get(CommitModel, commit.id) is None:
                session.add(
                    CommitModel(
                        id=commit.id,
                        parent_id=commit.parent_id,
                        second_parent_id=commit.second_parent_id,
                        created_at=commit.created_at,
                        message=commit.message,
                    )
                )
                session.flush()
                session.add_all(
                    CommitFileModel(
                        commit_id=commit.id,
                        path=path,
                        position=position,
                        content=content,
                    )
                    for position, (path, content) in enumerate(commit.snapshot.items())
                )
            session.add(
                GraphCommitModel(
                    graph=self.graph_key,
                    commit_id=commit.id,
                    created_at=commit.created_at,
                )
            )
            session.commit()
        self._owned += 1
        self._cache[commit.id] = commit

    def _load_files(self, session: Session, commit_id: str) -> dict[str, str]:
        rows = session.execute(
            select(CommitFileModel.path, CommitFileModel.content)
            .where(CommitFileModel.commit_id == commit_id)
            .order_by(CommitFileModel.position)
        ).all()
        return {row.path: row.content for row in rows}

    def _to_commit(self, session: Session, row: CommitModel) -> Commit:
        return Commit(
            id=row.id,
            parent_id=row.parent_id,
            second_parent_id=row.second_parent_id,
            snapshot=self._load_files(session, row.id),
            created_at=row.created_at,
            message=row.message,
        )

    def _member_commits(self):
        return select(CommitModel).join(
            GraphCommitModel, GraphCommitModel.commit_id == CommitModel.id
        ).where(self._members())

    def _find(self, commit_id: str) -> Commit | None:
        if commit_id in self._cache:
            return self._cache[commit_id]

        with self.session_maker() as session:
            row = (
                session.execute(self._member_commits().where(CommitModel.id == commit_id))
                .scalars()
                .first()
            )
            if row is None:
                return None
            commit = self._to_commit(session, row)

        self._cache[commit_id] = commit
        return commit

    def __iter__(self) -> Iterator[Commit]:
        with self.session_maker() as session:
            rows = (
                session.execute(self._member_commits().order_by(GraphCommitModel.created_at))
                .scalars()
                .all()
            )
            commits = [self._cache.get(row.id) or self._to_commit(session, row) for row in rows]

        for commit in commits:
            self._cache.setdefault(commit.id, commit)
        return iter(commits)

    def __len__(self) -> int:
        with self.session_maker() as session:
            stmt = select(func.count()).select_from(GraphCommitModel).where(self._members())
            return session.execute(stmt).scalar_one()

    def copy(self) -> "SqlCommitGraph":
        # A graph that never inserted anything adds nothing to the lineage
        if self._owned:
            lineage = [*self._lineage, (self.graph_key, len(self))]
        else:
            lineage = list(self._lineage)
        base_key, base_length = lineage[-1] if lineage else (None, 0)

        new_key = uuid.uuid4().hex
        with self.session_maker() as session:
            session.add(GraphModel(key=new_key, base_key=base_key, base_length=base_length))
            session.commit()

        return SqlCommitGraph(self.session_maker, new_key, lineage, self._cache.copy())


def create_session_maker(database_url: str = "sqlite://") -> sessionmaker[Session]:
    if database_url == "sqlite://":
        # One shared in-process database for every session
        engine = create_engine(
            database_url,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    else:
        engine = create_engine(database_url)

    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)


def create_sql_graph(
    session_maker: Callable[[], Session] | None = None,
    graph_key: str | None = None,
) -> SqlCommitGraph:
    return SqlCommitGraph(session_maker or create_session_maker(), graph_key)
