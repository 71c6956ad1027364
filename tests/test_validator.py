from datetime import datetime
from snapshot_maintenance.models.entities import Sprint, StateCounts, WorkItem
from snapshot_maintenance.services.rebuilder import SnapshotRebuilder
from snapshot_maintenance.services.validator import SnapshotValidator
from snapshot_maintenance.storage.repository import InMemorySnapshotRepository

def test_validate_flags_mismatches(repository):
    """Testa a marcação dos snapshots cuja soma difere do total de work items"""
    results, summary = SnapshotValidator(repository).validate()

    assert len(results) == 1
    validation = results[0]
    assert validation.live_work_items == 3
    assert len(validation.checks) == 4
    assert [c.snapshot_date for c in validation.mismatches] == [datetime(2024, 3, 4)]
    assert summary.mismatches == 1

def test_validate_is_read_only(repository):
    """Testa que a validação não altera nenhum snapshot"""
    SnapshotValidator(repository).validate()

    assert repository.update_calls == []

def test_validate_skips_sprints_without_data(repository):
    """Testa que sprints sem work items ou sem snapshots são ignoradas"""
    repository.sprints["S2"] = Sprint(id="S2", name="Sem dados", start_date=datetime(2024, 3, 18))

    results, summary = SnapshotValidator(repository).validate()

    assert [v.sprint.id for v in results] == ["S1"]
    assert summary.skipped == 1

def test_validate_after_rebuild(repository):
    """Testa que após a reconstrução não há divergências"""
    SnapshotRebuilder(repository).rebuild()

    results, summary = SnapshotValidator(repository).validate()

    assert summary.mismatches == 0
    assert results[0].mismatches == []

def test_validate_missing_sprint(repository):
    """Testa sprint inexistente na validação"""
    results, summary = SnapshotValidator(repository).validate(["X"])

    assert results == []
    assert summary.missing_sprints == ["X"]

def test_validate_sprint_with_only_removed_items(sprint, make_snapshot):
    """Testa que sprint com todos os itens removidos é validada contra total zero"""
    repository = InMemorySnapshotRepository(
        sprints=[sprint],
        work_items=[
            WorkItem(id=1, sprint_id="S1", created_date=datetime(2024, 3, 1), is_removed=True),
        ],
        snapshots=[make_snapshot("S1", 4, todo=5)]
    )
    SnapshotRebuilder(repository).rebuild()

    results, summary = SnapshotValidator(repository).validate()

    assert summary.processed == 1
    assert summary.mismatches == 1
    assert results[0].live_work_items == 0
    assert results[0].mismatches[0].counts == StateCounts(todo=5)

def test_validate_skips_sprint_without_any_work_item(sprint, make_snapshot):
    """Testa que sprint sem nenhum work item (nem removido) é ignorada"""
    repository = InMemorySnapshotRepository(
        sprints=[sprint],
        snapshots=[make_snapshot("S1", 4, todo=5)]
    )

    results, summary = SnapshotValidator(repository).validate()

    assert results == []
    assert summary.skipped == 1
