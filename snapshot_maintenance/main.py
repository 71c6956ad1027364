from pathlib import Path
from typing import List, Optional
import typer
from loguru import logger
from rich.console import Console

from .models.config import MaintenanceSettings
from .models.entities import RebuildMode
from .storage.database import SqlAlchemySnapshotRepository, create_db_engine, init_db
from .storage.repository import SnapshotRepository
from .services.rebuilder import SnapshotRebuilder
from .services.fixer import SnapshotCountFixer
from .services.validator import SnapshotValidator
from .services.report import ConsoleReport

app = typer.Typer(help="Manutenção dos snapshots de sprint (burndown / cumulative flow)")
console = Console()

SprintOption = typer.Option(
    None,
    "--sprint",
    "-s",
    help="Id da sprint alvo (pode ser repetido; padrão: TARGET_SPRINTS ou todas)"
)


def configurar_logger(output_dir: Path = Path("logs"), level: str = "INFO"):
    """Configura o sistema de logs"""
    output_dir.mkdir(parents=True, exist_ok=True)

    logger.remove()  # Remove handlers padrão
    logger.add(
        output_dir / "maintenance_{time}.log",
        rotation="1 day",
        retention="7 days",
        level=level,
        encoding='utf-8'
    )
    logger.add(lambda msg: console.print(msg, style="blue", markup=False, soft_wrap=True, end=""), level=level)


def carregar_configuracao() -> MaintenanceSettings:
    """Carrega a configuração e inicializa os logs"""
    settings = MaintenanceSettings()
    configurar_logger(Path(settings.log_dir), settings.log_level)
    return settings


def build_repository(settings: MaintenanceSettings) -> SnapshotRepository:
    """Conecta ao banco configurado"""
    engine = create_db_engine(settings.database_url, echo=settings.sql_echo)
    init_db(engine)
    return SqlAlchemySnapshotRepository(engine)


@app.command()
def reconstruir(
    sprint: Optional[List[str]] = SprintOption,
    modo: Optional[RebuildMode] = typer.Option(
        None,
        "--modo",
        case_sensitive=False,
        help="all recalcula todos os snapshots; empty só os zerados (padrão: REBUILD_MODE)"
    ),
    dry_run: Optional[bool] = typer.Option(
        None,
        "--dry-run/--no-dry-run",
        help="Calcula as alterações sem gravar (padrão: DRY_RUN)"
    )
):
    """Reconstrói os contadores dos snapshots a partir das datas dos work items"""
    try:
        settings = carregar_configuracao()
        mode = modo or settings.rebuild_mode
        dry = settings.dry_run if dry_run is None else dry_run
        report = ConsoleReport(console)
        report.header("REBUILD SNAPSHOT STATE COUNTS", modo=mode.value, dry_run=dry)

        repository = build_repository(settings)
        rebuilder = SnapshotRebuilder(repository, mode=mode, dry_run=dry)
        results, summary = rebuilder.rebuild(sprint or settings.target_sprints)
        report.rebuild_results(results, summary)

    except Exception as e:
        logger.error(f"Erro durante a reconstrução: {str(e)}")
        raise typer.Exit(1)


@app.command()
def corrigir(
    sprint: Optional[List[str]] = SprintOption,
    dry_run: Optional[bool] = typer.Option(
        None,
        "--dry-run/--no-dry-run",
        help="Calcula as alterações sem gravar (padrão: DRY_RUN)"
    )
):
    """Corrige snapshots do início da sprint gravados com contadores zerados"""
    try:
        settings = carregar_configuracao()
        dry = settings.dry_run if dry_run is None else dry_run
        report = ConsoleReport(console)
        report.header("FIX SNAPSHOT STATE COUNTS", dry_run=dry)

        repository = build_repository(settings)
        fixer = SnapshotCountFixer(repository, dry_run=dry)
        results, summary = fixer.fix(sprint or settings.target_sprints)
        report.fix_results(results, summary)

    except Exception as e:
        logger.error(f"Erro durante a correção: {str(e)}")
        raise typer.Exit(1)


@app.command()
def validar(
    sprint: Optional[List[str]] = SprintOption,
    strict: bool = typer.Option(
        False,
        "--strict",
        help="Sai com código 2 se houver snapshots divergentes"
    )
):
    """Verifica se a soma dos contadores bate com o total de work items da sprint"""
    try:
        settings = carregar_configuracao()
        report = ConsoleReport(console)
        report.header("VALIDATE SNAPSHOT STATE COUNTS")

        repository = build_repository(settings)
        validator = SnapshotValidator(repository)
        results, summary = validator.validate(sprint or settings.target_sprints)
        report.validation_results(results, summary)

    except Exception as e:
        logger.error(f"Erro durante a validação: {str(e)}")
        raise typer.Exit(1)

    if strict and summary.mismatches:
        raise typer.Exit(2)


if __name__ == "__main__":
    app()
