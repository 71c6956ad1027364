from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional

from ..models.entities import Sprint, SprintSnapshot, WorkItem

# Contadores que podem ser atualizados em um snapshot
SNAPSHOT_COUNTERS = ("todo_count", "in_progress_count", "done_count", "blocked_count")


class SnapshotNotFoundError(KeyError):
    """Snapshot inexistente no armazenamento"""


def validate_counters(counters: Dict[str, int]) -> None:
    """
    Valida os contadores recebidos em uma atualização

    Args:
        counters: Contadores a serem gravados

    Raises:
        ValueError: Se houver contador desconhecido, negativo ou nenhum contador
    """
    if not counters:
        raise ValueError("Nenhum contador informado para atualização")
    unknown = set(counters) - set(SNAPSHOT_COUNTERS)
    if unknown:
        raise ValueError(f"Contadores desconhecidos: {', '.join(sorted(unknown))}")
    for name, value in counters.items():
        if value < 0:
            raise ValueError(f"Contador {name} não pode ser negativo: {value}")


class SnapshotRepository(ABC):
    """Interface de leitura e escrita usada pelas rotinas de manutenção"""

    @abstractmethod
    def list_sprints(self, sprint_ids: Optional[Iterable[str]] = None) -> List[Sprint]:
        """Lista as sprints (opcionalmente filtradas por id) ordenadas pela data de início"""

    @abstractmethod
    def get_sprint(self, sprint_id: str) -> Optional[Sprint]:
        """Busca uma sprint pelo id; retorna None se não existir"""

    @abstractmethod
    def list_work_items(self, sprint_id: str) -> List[WorkItem]:
        """Lista os work items não removidos da sprint"""

    @abstractmethod
    def has_work_items(self, sprint_id: str) -> bool:
        """Verifica se a sprint tem algum work item, removido ou não"""

    @abstractmethod
    def list_snapshots(self, sprint_id: str) -> List[SprintSnapshot]:
        """Lista os snapshots da sprint em ordem crescente de data"""

    @abstractmethod
    def update_snapshot_counts(self, snapshot_id: str, **counters: int) -> None:
        """Atualiza qualquer subconjunto dos contadores de um snapshot"""


class InMemorySnapshotRepository(SnapshotRepository):
    """Repositório em memória, usado em testes e simulações"""

    def __init__(
        self,
        sprints: Iterable[Sprint] = (),
        work_items: Iterable[WorkItem] = (),
        snapshots: Iterable[SprintSnapshot] = ()
    ):
        self.sprints: Dict[str, Sprint] = {s.id: s for s in sprints}
        self.work_items: List[WorkItem] = list(work_items)
        self.snapshots: Dict[str, SprintSnapshot] = {s.id: s for s in snapshots}
        self.update_calls: List[Dict] = []

    def list_sprints(self, sprint_ids: Optional[Iterable[str]] = None) -> List[Sprint]:
        sprints = list(self.sprints.values())
        if sprint_ids is not None:
            wanted = set(sprint_ids)
            sprints = [s for s in sprints if s.id in wanted]
        return sorted(sprints, key=lambda s: (s.start_date is None, s.start_date or 0, s.id))

    def get_sprint(self, sprint_id: str) -> Optional[Sprint]:
        return self.sprints.get(sprint_id)

    def list_work_items(self, sprint_id: str) -> List[WorkItem]:
        return [
            item for item in self.work_items
            if item.sprint_id == sprint_id and not item.is_removed
        ]

    def has_work_items(self, sprint_id: str) -> bool:
        return any(item.sprint_id == sprint_id for item in self.work_items)

    def list_snapshots(self, sprint_id: str) -> List[SprintSnapshot]:
        snapshots = [s for s in self.snapshots.values() if s.sprint_id == sprint_id]
        # Cópias, para que o chamador não altere o estado armazenado sem update
        return [s.model_copy() for s in sorted(snapshots, key=lambda s: s.snapshot_date)]

    def update_snapshot_counts(self, snapshot_id: str, **counters: int) -> None:
        validate_counters(counters)
        if snapshot_id not in self.snapshots:
            raise SnapshotNotFoundError(snapshot_id)
        self.snapshots[snapshot_id] = self.snapshots[snapshot_id].model_copy(update=counters)
        self.update_calls.append({"snapshot_id": snapshot_id, **counters})
