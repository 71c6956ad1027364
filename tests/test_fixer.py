import pytest
from datetime import datetime
from snapshot_maintenance.models.entities import Sprint, StateCounts
from snapshot_maintenance.services.fixer import SnapshotCountFixer
from snapshot_maintenance.storage.repository import InMemorySnapshotRepository

@pytest.fixture
def defective_repository(sprint, make_snapshot):
    """Fixture para sprint com dois snapshots iniciais zerados"""
    return InMemorySnapshotRepository(
        sprints=[sprint],
        snapshots=[
            make_snapshot("S1", 4, blocked=2),
            make_snapshot("S1", 5),
            make_snapshot("S1", 6, todo=5, in_progress=2, done=1),
            make_snapshot("S1", 7, todo=3, in_progress=4, done=1),
        ]
    )

def test_fix_selects_first_positive_snapshot_as_reference(defective_repository, sprint):
    """Testa a escolha do snapshot de referência e a correção dos anteriores"""
    result = SnapshotCountFixer(defective_repository).fix_sprint(sprint)

    assert result.reference_date == datetime(2024, 3, 6)
    assert result.total_items == 8
    assert result.fixed == 2
    snapshots = defective_repository.snapshots
    assert snapshots["S1-snap-04"].counts == StateCounts(todo=8)
    assert snapshots["S1-snap-05"].counts == StateCounts(todo=8)
    assert snapshots["S1-snap-06"].counts == StateCounts(todo=5, in_progress=2, done=1)
    assert snapshots["S1-snap-07"].counts == StateCounts(todo=3, in_progress=4, done=1)

def test_fix_resets_blocked(defective_repository, sprint):
    """Testa que o contador de bloqueados é zerado nos snapshots corrigidos"""
    SnapshotCountFixer(defective_repository).fix_sprint(sprint)

    assert defective_repository.snapshots["S1-snap-04"].blocked_count == 0
    assert all(call["blocked_count"] == 0 for call in defective_repository.update_calls)

def test_fix_is_idempotent(defective_repository, sprint):
    """Testa que a segunda execução não gera novas alterações"""
    fixer = SnapshotCountFixer(defective_repository)
    fixer.fix_sprint(sprint)
    calls_after_first = len(defective_repository.update_calls)

    second = fixer.fix_sprint(sprint)

    assert second.fixed == 0
    assert len(defective_repository.update_calls) == calls_after_first

def test_fix_leaves_zero_snapshots_after_reference(sprint, make_snapshot):
    """Testa que snapshots zerados depois da referência não são alterados"""
    repository = InMemorySnapshotRepository(
        sprints=[sprint],
        snapshots=[
            make_snapshot("S1", 4),
            make_snapshot("S1", 5, todo=4),
            make_snapshot("S1", 6),
        ]
    )

    result = SnapshotCountFixer(repository).fix_sprint(sprint)

    assert result.fixed == 1
    assert repository.snapshots["S1-snap-04"].counts == StateCounts(todo=4)
    assert repository.snapshots["S1-snap-06"].counts == StateCounts()

def test_fix_without_snapshots(sprint):
    """Testa sprint sem snapshots: pulada sem erro"""
    repository = InMemorySnapshotRepository(sprints=[sprint])

    result = SnapshotCountFixer(repository).fix_sprint(sprint)

    assert result.fixed == 0
    assert result.skipped_reason is not None
    assert repository.update_calls == []

def test_fix_without_reference(sprint, make_snapshot):
    """Testa sprint com todos os snapshots zerados: pulada sem erro"""
    repository = InMemorySnapshotRepository(
        sprints=[sprint],
        snapshots=[make_snapshot("S1", 4), make_snapshot("S1", 5)]
    )

    result = SnapshotCountFixer(repository).fix_sprint(sprint)

    assert result.fixed == 0
    assert result.reference_date is None
    assert result.skipped_reason == "sem snapshot de referência"
    assert repository.update_calls == []

def test_fix_dry_run(defective_repository, sprint):
    """Testa que o dry run não grava"""
    result = SnapshotCountFixer(defective_repository, dry_run=True).fix_sprint(sprint)

    assert result.fixed == 2
    assert defective_repository.update_calls == []
    assert defective_repository.snapshots["S1-snap-04"].counts == StateCounts()

def test_fix_batch_summary(defective_repository):
    """Testa o resumo da execução em lote"""
    empty = Sprint(id="S2", name="Sem dados", start_date=datetime(2024, 3, 18))
    defective_repository.sprints[empty.id] = empty

    results, summary = SnapshotCountFixer(defective_repository).fix(["S1", "S2", "S9"])

    assert [r.sprint.id for r in results] == ["S1", "S2"]
    assert summary.updated == 2
    assert summary.processed == 1
    assert summary.skipped == 1
    assert summary.missing_sprints == ["S9"]
