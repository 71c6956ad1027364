from datetime import datetime
from typing import List, Optional
from rich.console import Console
from rich.rule import Rule
from rich.table import Table

from ..models.entities import (
    RunSummary,
    SnapshotChange,
    SprintFixResult,
    SprintRebuildResult,
    SprintValidation,
)


def format_date(value: Optional[datetime]) -> str:
    """Formata a data do snapshot como YYYY-MM-DD"""
    return value.strftime("%Y-%m-%d") if value else "-"


class ConsoleReport:
    """Relatório de antes/depois impresso no terminal"""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def header(self, title: str, **options) -> None:
        """Imprime o cabeçalho da execução com as opções usadas"""
        self.console.print(Rule(title))
        if options:
            self.console.print(" | ".join(f"{k}: {v}" for k, v in options.items()))

    def _changes_table(self, changes: List[SnapshotChange]) -> Table:
        """Cria a tabela com os contadores antes e depois de cada snapshot"""
        table = Table(show_header=True, header_style="bold")
        table.add_column("Data")
        table.add_column("Antes (todo, prog, done)", justify="right")
        table.add_column("Depois (todo, prog, done)", justify="right")
        for change in changes:
            table.add_row(format_date(change.snapshot_date), str(change.before), str(change.after))
        return table

    def rebuild_results(self, results: List[SprintRebuildResult], summary: RunSummary) -> None:
        """Imprime o resultado da reconstrução"""
        for result in results:
            self.console.print(
                f"\n[bold]{result.sprint.label}[/bold]: {result.snapshots_checked} snapshots, "
                f"{result.work_items} WIs -> {result.updated} atualizados"
            )
            if result.changes:
                self.console.print(self._changes_table(result.changes))
        self.summary(summary, "Snapshots atualizados")

    def fix_results(self, results: List[SprintFixResult], summary: RunSummary) -> None:
        """Imprime o resultado da correção"""
        for result in results:
            if result.skipped_reason:
                self.console.print(f"\n[bold]{result.sprint.label}[/bold]: pulada ({result.skipped_reason})")
                continue
            self.console.print(
                f"\n[bold]{result.sprint.label}[/bold]: referência {format_date(result.reference_date)} "
                f"(total {result.total_items}) -> {result.fixed} corrigidos"
            )
            if result.changes:
                self.console.print(self._changes_table(result.changes))
        self.summary(summary, "Snapshots corrigidos")

    def validation_results(self, results: List[SprintValidation], summary: RunSummary) -> None:
        """Imprime a validação, marcando com !!! os snapshots divergentes"""
        for validation in results:
            table = Table(
                title=f"{validation.sprint.label} ({validation.live_work_items} WIs)",
                show_header=True,
                header_style="bold"
            )
            for column in ("Data", "ToDo", "InProg", "Done", "Total", ""):
                table.add_column(column, justify="right")
            for check in validation.checks:
                table.add_row(
                    format_date(check.snapshot_date),
                    str(check.counts.todo),
                    str(check.counts.in_progress),
                    str(check.counts.done),
                    str(check.counts.total),
                    "[red]!!![/red]" if check.is_mismatch else ""
                )
            self.console.print(table)
        self.console.print(Rule())
        self.console.print(f"Sprints verificadas: {summary.processed}")
        self.console.print(f"Snapshots divergentes: {summary.mismatches}")
        self._missing(summary)

    def summary(self, summary: RunSummary, updated_label: str) -> None:
        """Imprime o resumo da execução"""
        self.console.print(Rule("RESULTADO"))
        if summary.dry_run:
            self.console.print("[yellow]DRY RUN - nenhuma alteração foi gravada[/yellow]")
        self.console.print(f"{updated_label}: {summary.updated}")
        self.console.print(f"Sprints puladas: {summary.skipped}")
        self._missing(summary)

    def _missing(self, summary: RunSummary) -> None:
        if summary.missing_sprints:
            self.console.print(f"Sprints não encontradas: {', '.join(summary.missing_sprints)}")
