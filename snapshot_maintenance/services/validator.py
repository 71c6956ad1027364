from typing import Iterable, List, Optional, Tuple
from loguru import logger

from ..models.entities import RunSummary, SnapshotCheck, SprintValidation
from ..storage.repository import SnapshotRepository
from .batch import resolve_sprints


class SnapshotValidator:
    """Verificação somente leitura dos contadores dos snapshots"""

    def __init__(self, repository: SnapshotRepository):
        self.repository = repository

    def validate(self, sprint_ids: Optional[Iterable[str]] = None) -> Tuple[List[SprintValidation], RunSummary]:
        """
        Compara a soma dos contadores de cada snapshot com o total atual de work items

        Entram as sprints que têm snapshots e algum work item, inclusive
        removido; o total esperado é sempre o de work items não removidos.

        Args:
            sprint_ids: Ids das sprints alvo

        Returns:
            Tuple: Validação por sprint e resumo da execução
        """
        summary = RunSummary()
        results = []

        for sprint in resolve_sprints(self.repository, sprint_ids, summary):
            snapshots = self.repository.list_snapshots(sprint.id)
            if not snapshots or not self.repository.has_work_items(sprint.id):
                summary.skipped += 1
                continue

            work_items = self.repository.list_work_items(sprint.id)
            validation = SprintValidation(
                sprint=sprint,
                live_work_items=len(work_items),
                checks=[
                    SnapshotCheck(
                        snapshot_date=s.snapshot_date,
                        counts=s.counts,
                        live_work_items=len(work_items)
                    )
                    for s in snapshots
                ]
            )
            mismatches = len(validation.mismatches)
            if mismatches:
                logger.warning(f"{sprint.label}: {mismatches} snapshots divergentes de {len(work_items)} work items")
            results.append(validation)
            summary.processed += 1
            summary.mismatches += mismatches

        return results, summary
