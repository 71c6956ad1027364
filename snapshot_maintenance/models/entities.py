from datetime import datetime
from typing import List, Optional
from enum import Enum
from pydantic import BaseModel, Field

class WorkItemState(str, Enum):
    """Estados possíveis de um work item em um dia da sprint"""
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    DONE = "done"

class RebuildMode(str, Enum):
    """Modos de reconstrução dos snapshots"""
    ALL = "all"
    EMPTY = "empty"

class WorkItem(BaseModel):
    """Modelo de um work item espelhado do Azure DevOps"""
    id: int
    sprint_id: str
    work_item_type: Optional[str] = None
    state: Optional[str] = None
    created_date: datetime
    activated_date: Optional[datetime] = None
    closed_date: Optional[datetime] = None
    is_removed: bool = False

class StateCounts(BaseModel, frozen=True):
    """Contadores de estado de um dia da sprint"""
    todo: int = Field(default=0, ge=0)
    in_progress: int = Field(default=0, ge=0)
    done: int = Field(default=0, ge=0)

    @property
    def total(self) -> int:
        return self.todo + self.in_progress + self.done

    def __str__(self) -> str:
        return f"({self.todo}, {self.in_progress}, {self.done})"

class SprintSnapshot(BaseModel):
    """Modelo de um snapshot diário da sprint"""
    id: str
    sprint_id: str
    snapshot_date: datetime
    todo_count: int = Field(default=0, ge=0)
    in_progress_count: int = Field(default=0, ge=0)
    done_count: int = Field(default=0, ge=0)
    blocked_count: int = Field(default=0, ge=0)

    @property
    def counts(self) -> StateCounts:
        """Retorna a tripla de contadores armazenada"""
        return StateCounts(
            todo=self.todo_count,
            in_progress=self.in_progress_count,
            done=self.done_count
        )

    @property
    def state_total(self) -> int:
        """Soma dos três contadores de estado (blocked não entra)"""
        return self.todo_count + self.in_progress_count + self.done_count

    @property
    def is_empty(self) -> bool:
        """Verifica se os três contadores estão zerados"""
        return self.state_total == 0

class Sprint(BaseModel):
    """Modelo de uma sprint"""
    id: str
    name: str
    project_name: Optional[str] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None

    @property
    def label(self) -> str:
        """Nome de exibição no formato Projeto / Sprint"""
        return f"{self.project_name or '?'} / {self.name}"

class SnapshotChange(BaseModel):
    """Alteração (aplicada ou simulada) em um snapshot"""
    snapshot_id: str
    snapshot_date: datetime
    before: StateCounts
    after: StateCounts

class SprintRebuildResult(BaseModel):
    """Resultado da reconstrução de uma sprint"""
    sprint: Sprint
    snapshots_checked: int = 0
    work_items: int = 0
    changes: List[SnapshotChange] = Field(default_factory=list)

    @property
    def updated(self) -> int:
        return len(self.changes)

class SprintFixResult(BaseModel):
    """Resultado da correção de contadores de uma sprint"""
    sprint: Sprint
    reference_date: Optional[datetime] = None
    total_items: int = 0
    changes: List[SnapshotChange] = Field(default_factory=list)
    skipped_reason: Optional[str] = None

    @property
    def fixed(self) -> int:
        return len(self.changes)

class SnapshotCheck(BaseModel):
    """Linha do relatório de validação"""
    snapshot_date: datetime
    counts: StateCounts
    live_work_items: int

    @property
    def is_mismatch(self) -> bool:
        return self.counts.total != self.live_work_items

class SprintValidation(BaseModel):
    """Resultado da validação de uma sprint"""
    sprint: Sprint
    live_work_items: int
    checks: List[SnapshotCheck] = Field(default_factory=list)

    @property
    def mismatches(self) -> List[SnapshotCheck]:
        return [check for check in self.checks if check.is_mismatch]

class RunSummary(BaseModel):
    """Resumo de uma execução em lote"""
    processed: int = 0
    skipped: int = 0
    updated: int = 0
    mismatches: int = 0
    missing_sprints: List[str] = Field(default_factory=list)
    dry_run: bool = False
