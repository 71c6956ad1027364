from typing import Iterable, List, Optional
from loguru import logger

from ..models.entities import RunSummary, Sprint
from ..storage.repository import SnapshotRepository


def resolve_sprints(
    repository: SnapshotRepository,
    sprint_ids: Optional[Iterable[str]],
    summary: RunSummary,
) -> List[Sprint]:
    """
    Busca as sprints alvo de uma execução em lote

    Sem ids, retorna todas as sprints. Ids inexistentes são registrados no
    resumo e ignorados, sem interromper o lote.

    Args:
        repository: Repositório de sprints
        sprint_ids: Ids das sprints alvo
        summary: Resumo da execução, onde os ids ausentes são registrados

    Returns:
        List[Sprint]: Sprints encontradas, na ordem pedida
    """
    if not sprint_ids:
        return repository.list_sprints()

    sprints = []
    for sprint_id in sprint_ids:
        sprint = repository.get_sprint(sprint_id)
        if sprint is None:
            logger.warning(f"Sprint {sprint_id} não encontrada, ignorando")
            summary.missing_sprints.append(sprint_id)
            continue
        sprints.append(sprint)
    return sprints
