from typing import Annotated, List, Union
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

from .entities import RebuildMode


class MaintenanceSettings(BaseSettings):
    """Configuração das rotinas de manutenção (variáveis de ambiente ou .env)"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    database_url: str = Field(default="sqlite:///azurebridge.db")
    rebuild_mode: RebuildMode = Field(default=RebuildMode.ALL)
    dry_run: bool = Field(default=False)
    target_sprints: Annotated[List[str], NoDecode] = Field(default_factory=list)
    log_dir: str = Field(default="logs")
    log_level: str = Field(default="INFO")
    sql_echo: bool = Field(default=False)

    @field_validator("rebuild_mode", mode="before")
    @classmethod
    def normalize_mode(cls, v: Union[str, RebuildMode]) -> Union[str, RebuildMode]:
        """Aceita o modo em qualquer caixa (ALL, Empty...)"""
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator("target_sprints", mode="before")
    @classmethod
    def split_sprints(cls, v: Union[str, List[str], None]) -> List[str]:
        """Converte a lista separada por vírgulas em lista de ids"""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return [s.strip() for s in v if s and s.strip()]

    @field_validator("log_level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Nível de log inválido: {v}")
        return level
