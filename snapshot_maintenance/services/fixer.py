from typing import Iterable, List, Optional, Tuple
from loguru import logger

from ..models.entities import RunSummary, SnapshotChange, Sprint, SprintFixResult, StateCounts
from ..storage.repository import SnapshotRepository
from .batch import resolve_sprints


class SnapshotCountFixer:
    """
    Serviço que corrige snapshots gravados com os contadores zerados

    O backfill antigo do burndown criava snapshots do início da sprint sem
    popular os contadores de estado. Tomando como referência o primeiro
    snapshot com contadores reais, os snapshots anteriores zerados passam a
    ter todos os itens em To Do.
    """

    def __init__(self, repository: SnapshotRepository, dry_run: bool = False):
        self.repository = repository
        self.dry_run = dry_run

    def fix(self, sprint_ids: Optional[Iterable[str]] = None) -> Tuple[List[SprintFixResult], RunSummary]:
        """
        Corrige as sprints informadas (ou todas, se nenhuma for informada)

        Args:
            sprint_ids: Ids das sprints alvo

        Returns:
            Tuple: Resultados por sprint e resumo da execução
        """
        summary = RunSummary(dry_run=self.dry_run)
        results = []

        for sprint in resolve_sprints(self.repository, sprint_ids, summary):
            result = self.fix_sprint(sprint)
            results.append(result)
            if result.skipped_reason:
                summary.skipped += 1
            else:
                summary.processed += 1
            summary.updated += result.fixed

        logger.info(f"Total corrigido: {summary.updated} snapshots")
        return results, summary

    def fix_sprint(self, sprint: Sprint) -> SprintFixResult:
        """
        Corrige os snapshots zerados anteriores ao primeiro snapshot válido

        Args:
            sprint: Sprint a ser corrigida

        Returns:
            SprintFixResult: Snapshots corrigidos (ou a razão do pulo)
        """
        result = SprintFixResult(sprint=sprint)
        snapshots = self.repository.list_snapshots(sprint.id)
        if not snapshots:
            result.skipped_reason = "sem snapshots"
            return result

        reference = next((s for s in snapshots if s.state_total > 0), None)
        if reference is None:
            logger.warning(f"{sprint.label}: sem snapshots com contadores válidos, pulando")
            result.skipped_reason = "sem snapshot de referência"
            return result

        result.reference_date = reference.snapshot_date
        result.total_items = reference.state_total
        fixed_counts = StateCounts(todo=result.total_items)

        to_fix = [
            s for s in snapshots
            if s.is_empty and s.snapshot_date < reference.snapshot_date
        ]
        if not to_fix:
            logger.info(f"{sprint.label}: OK (sem snapshots para corrigir)")
            return result

        for snapshot in to_fix:
            if not self.dry_run:
                self.repository.update_snapshot_counts(
                    snapshot.id,
                    todo_count=result.total_items,
                    in_progress_count=0,
                    done_count=0,
                    blocked_count=0
                )
            result.changes.append(SnapshotChange(
                snapshot_id=snapshot.id,
                snapshot_date=snapshot.snapshot_date,
                before=snapshot.counts,
                after=fixed_counts
            ))

        dates = ", ".join(c.snapshot_date.strftime("%Y-%m-%d") for c in result.changes)
        logger.info(f"{sprint.label}: corrigidos {result.fixed} snapshots ({dates}) -> todoCount={result.total_items}")
        return result
