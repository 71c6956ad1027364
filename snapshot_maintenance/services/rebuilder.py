from typing import Iterable, List, Optional, Tuple
from loguru import logger

from ..models.entities import (
    RebuildMode,
    RunSummary,
    SnapshotChange,
    Sprint,
    SprintRebuildResult,
)
from ..storage.repository import SnapshotRepository
from .batch import resolve_sprints
from .classifier import count_states


class SnapshotRebuilder:
    """Serviço que reconstrói os contadores de estado dos snapshots de uma sprint"""

    def __init__(
        self,
        repository: SnapshotRepository,
        mode: RebuildMode = RebuildMode.ALL,
        dry_run: bool = False,
    ):
        """
        Inicializa o reconstrutor

        Args:
            repository: Repositório de sprints, work items e snapshots
            mode: ALL recalcula todos os snapshots; EMPTY só os zerados
            dry_run: Se True, calcula as alterações sem gravar
        """
        self.repository = repository
        self.mode = RebuildMode(mode)
        self.dry_run = dry_run

    def rebuild(self, sprint_ids: Optional[Iterable[str]] = None) -> Tuple[List[SprintRebuildResult], RunSummary]:
        """
        Reconstrói as sprints informadas (ou todas, se nenhuma for informada)

        Args:
            sprint_ids: Ids das sprints alvo

        Returns:
            Tuple: Resultados por sprint e resumo da execução
        """
        summary = RunSummary(dry_run=self.dry_run)
        results = []

        for sprint in resolve_sprints(self.repository, sprint_ids, summary):
            result = self.rebuild_sprint(sprint)
            results.append(result)
            if result.snapshots_checked == 0 or result.work_items == 0:
                summary.skipped += 1
            else:
                summary.processed += 1
            summary.updated += result.updated

        logger.info(
            f"Reconstrução concluída: {summary.updated} snapshots atualizados, "
            f"{summary.skipped} sprints puladas"
        )
        return results, summary

    def rebuild_sprint(self, sprint: Sprint) -> SprintRebuildResult:
        """
        Recalcula os contadores de cada snapshot a partir dos work items atuais

        Só grava os snapshots cuja tripla calculada difere da armazenada.

        Args:
            sprint: Sprint a ser reconstruída

        Returns:
            SprintRebuildResult: Alterações aplicadas (ou simuladas)
        """
        snapshots = self.repository.list_snapshots(sprint.id)
        if self.mode == RebuildMode.EMPTY:
            snapshots = [s for s in snapshots if s.is_empty]

        result = SprintRebuildResult(sprint=sprint, snapshots_checked=len(snapshots))
        if not snapshots:
            logger.info(f"{sprint.label}: nenhum snapshot para atualizar")
            return result

        work_items = self.repository.list_work_items(sprint.id)
        result.work_items = len(work_items)
        if not work_items:
            logger.info(f"{sprint.label}: 0 work items, pulando")
            return result

        logger.info(f"{sprint.label}: {len(snapshots)} snapshots, {len(work_items)} work items")

        for snapshot in snapshots:
            computed = count_states(work_items, snapshot.snapshot_date)
            if computed == snapshot.counts:
                continue

            if not self.dry_run:
                self.repository.update_snapshot_counts(
                    snapshot.id,
                    todo_count=computed.todo,
                    in_progress_count=computed.in_progress,
                    done_count=computed.done
                )
            result.changes.append(SnapshotChange(
                snapshot_id=snapshot.id,
                snapshot_date=snapshot.snapshot_date,
                before=snapshot.counts,
                after=computed
            ))

        logger.info(f"{sprint.label}: {result.updated} snapshots atualizados")
        return result
