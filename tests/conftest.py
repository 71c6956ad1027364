import pytest
from datetime import datetime
from snapshot_maintenance.models.entities import Sprint, SprintSnapshot, WorkItem
from snapshot_maintenance.storage.repository import InMemorySnapshotRepository


@pytest.fixture
def make_snapshot():
    """Fixture para fábrica de snapshots de março/2024"""
    def _make(sprint_id: str, day: int, todo: int = 0, in_progress: int = 0, done: int = 0, blocked: int = 0) -> SprintSnapshot:
        return SprintSnapshot(
            id=f"{sprint_id}-snap-{day:02d}",
            sprint_id=sprint_id,
            snapshot_date=datetime(2024, 3, day),
            todo_count=todo,
            in_progress_count=in_progress,
            done_count=done,
            blocked_count=blocked
        )
    return _make


@pytest.fixture
def sprint():
    """Fixture para sprint de teste"""
    return Sprint(
        id="S1",
        name="2024_S05_Mar04-Mar15",
        project_name="AzureBridge",
        start_date=datetime(2024, 3, 4),
        end_date=datetime(2024, 3, 15)
    )


@pytest.fixture
def work_items():
    """Fixture para work items da sprint S1 (um deles removido)"""
    return [
        # Fechado no dia 06
        WorkItem(
            id=101,
            sprint_id="S1",
            work_item_type="Task",
            created_date=datetime(2024, 3, 1),
            activated_date=datetime(2024, 3, 4, 10, 0),
            closed_date=datetime(2024, 3, 6, 16, 0)
        ),
        # Ativado no dia 05
        WorkItem(
            id=102,
            sprint_id="S1",
            work_item_type="Task",
            created_date=datetime(2024, 3, 1),
            activated_date=datetime(2024, 3, 5, 9, 0)
        ),
        # Nunca iniciado
        WorkItem(
            id=103,
            sprint_id="S1",
            work_item_type="Bug",
            created_date=datetime(2024, 3, 2)
        ),
        # Removido: não entra na contagem
        WorkItem(
            id=104,
            sprint_id="S1",
            work_item_type="Task",
            created_date=datetime(2024, 3, 1),
            closed_date=datetime(2024, 3, 4),
            is_removed=True
        ),
    ]


@pytest.fixture
def repository(sprint, work_items, make_snapshot):
    """Fixture para repositório em memória com snapshots dos dias 04 a 07"""
    snapshots = [
        make_snapshot("S1", 4, todo=0, in_progress=0, done=0),
        make_snapshot("S1", 5, todo=3, in_progress=0, done=0),
        make_snapshot("S1", 6, todo=1, in_progress=1, done=1),
        make_snapshot("S1", 7, todo=1, in_progress=1, done=1),
    ]
    return InMemorySnapshotRepository(
        sprints=[sprint],
        work_items=work_items,
        snapshots=snapshots
    )
