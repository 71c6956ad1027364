"""
Configuração do banco de dados e repositório de snapshots sobre SQLAlchemy
"""
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from loguru import logger
from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
    create_engine,
    select,
    update,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, relationship, sessionmaker

from ..models.entities import Sprint, SprintSnapshot, WorkItem
from .repository import SnapshotNotFoundError, SnapshotRepository, validate_counters

Base = declarative_base()


class ProjectRecord(Base):
    """Projeto do Azure DevOps"""
    __tablename__ = "projects"

    id = Column(String(64), primary_key=True)
    name = Column(String(255), nullable=False)

    sprints = relationship("SprintRecord", back_populates="project")


class SprintRecord(Base):
    """Sprint (iteração) de um projeto"""
    __tablename__ = "sprints"

    id = Column(String(64), primary_key=True)
    project_id = Column(String(64), ForeignKey("projects.id"), nullable=True)
    name = Column(String(255), nullable=False)
    start_date = Column(DateTime, nullable=True)
    end_date = Column(DateTime, nullable=True)

    project = relationship("ProjectRecord", back_populates="sprints")
    work_items = relationship("WorkItemRecord", back_populates="sprint")
    snapshots = relationship("SprintSnapshotRecord", back_populates="sprint")


class WorkItemRecord(Base):
    """Work item espelhado do Azure DevOps"""
    __tablename__ = "work_items"

    id = Column(Integer, primary_key=True, autoincrement=False)
    sprint_id = Column(String(64), ForeignKey("sprints.id"), nullable=True, index=True)
    work_item_type = Column(String(100))
    state = Column(String(100))

    # Ciclo de vida
    created_date = Column(DateTime, nullable=False)
    activated_date = Column(DateTime, nullable=True)
    closed_date = Column(DateTime, nullable=True)

    is_removed = Column(Boolean, default=False, nullable=False)

    sprint = relationship("SprintRecord", back_populates="work_items")


class SprintSnapshotRecord(Base):
    """Snapshot diário dos contadores da sprint"""
    __tablename__ = "sprint_snapshots"
    __table_args__ = (UniqueConstraint("sprint_id", "snapshot_date"),)

    id = Column(String(64), primary_key=True)
    sprint_id = Column(String(64), ForeignKey("sprints.id"), nullable=False, index=True)
    snapshot_date = Column(DateTime, nullable=False)

    todo_count = Column(Integer, default=0, nullable=False)
    in_progress_count = Column(Integer, default=0, nullable=False)
    done_count = Column(Integer, default=0, nullable=False)
    blocked_count = Column(Integer, default=0, nullable=False)

    sprint = relationship("SprintRecord", back_populates="snapshots")


def create_db_engine(database_url: str, echo: bool = False) -> Engine:
    """Cria o engine do SQLAlchemy"""
    return create_engine(database_url, echo=echo)


def init_db(engine: Engine) -> None:
    """Cria as tabelas que ainda não existem"""
    Base.metadata.create_all(bind=engine)


def _to_sprint(record: SprintRecord) -> Sprint:
    return Sprint(
        id=record.id,
        name=record.name,
        project_name=record.project.name if record.project else None,
        start_date=record.start_date,
        end_date=record.end_date
    )


def _to_work_item(record: WorkItemRecord) -> WorkItem:
    return WorkItem(
        id=record.id,
        sprint_id=record.sprint_id,
        work_item_type=record.work_item_type,
        state=record.state,
        created_date=record.created_date,
        activated_date=record.activated_date,
        closed_date=record.closed_date,
        is_removed=record.is_removed
    )


def _to_snapshot(record: SprintSnapshotRecord) -> SprintSnapshot:
    return SprintSnapshot(
        id=record.id,
        sprint_id=record.sprint_id,
        snapshot_date=record.snapshot_date,
        todo_count=record.todo_count,
        in_progress_count=record.in_progress_count,
        done_count=record.done_count,
        blocked_count=record.blocked_count
    )


class SqlAlchemySnapshotRepository(SnapshotRepository):
    """Repositório de snapshots sobre o banco relacional"""

    def __init__(self, engine: Engine):
        self.engine = engine
        self.session_factory = sessionmaker(bind=engine, autoflush=False)

    @contextmanager
    def session(self) -> Iterator[Session]:
        """Abre uma sessão; faz rollback se algo falhar"""
        db = self.session_factory()
        try:
            yield db
        except Exception:
            db.rollback()
            raise
        finally:
            db.close()

    def list_sprints(self, sprint_ids: Optional[Iterable[str]] = None) -> List[Sprint]:
        stmt = select(SprintRecord).order_by(SprintRecord.start_date.asc().nulls_last(), SprintRecord.id.asc())
        if sprint_ids is not None:
            stmt = stmt.where(SprintRecord.id.in_(list(sprint_ids)))
        with self.session() as db:
            return [_to_sprint(record) for record in db.scalars(stmt)]

    def get_sprint(self, sprint_id: str) -> Optional[Sprint]:
        with self.session() as db:
            record = db.get(SprintRecord, sprint_id)
            return _to_sprint(record) if record else None

    def list_work_items(self, sprint_id: str) -> List[WorkItem]:
        stmt = (
            select(WorkItemRecord)
            .where(WorkItemRecord.sprint_id == sprint_id, WorkItemRecord.is_removed.is_(False))
            .order_by(WorkItemRecord.id.asc())
        )
        with self.session() as db:
            return [_to_work_item(record) for record in db.scalars(stmt)]

    def has_work_items(self, sprint_id: str) -> bool:
        stmt = select(WorkItemRecord.id).where(WorkItemRecord.sprint_id == sprint_id).limit(1)
        with self.session() as db:
            return db.scalar(stmt) is not None

    def list_snapshots(self, sprint_id: str) -> List[SprintSnapshot]:
        stmt = (
            select(SprintSnapshotRecord)
            .where(SprintSnapshotRecord.sprint_id == sprint_id)
            .order_by(SprintSnapshotRecord.snapshot_date.asc())
        )
        with self.session() as db:
            return [_to_snapshot(record) for record in db.scalars(stmt)]

    def update_snapshot_counts(self, snapshot_id: str, **counters: int) -> None:
        validate_counters(counters)
        stmt = (
            update(SprintSnapshotRecord)
            .where(SprintSnapshotRecord.id == snapshot_id)
            .values(**counters)
        )
        # Cada atualização é uma transação independente
        with self.session() as db:
            result = db.execute(stmt)
            if result.rowcount == 0:
                raise SnapshotNotFoundError(snapshot_id)
            db.commit()
        logger.debug(f"Snapshot {snapshot_id} atualizado: {counters}")
