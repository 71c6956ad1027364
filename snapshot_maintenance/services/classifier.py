from datetime import date, datetime, timedelta, timezone
from typing import Iterable, Union

from ..models.entities import StateCounts, WorkItem, WorkItemState

ONE_DAY = timedelta(days=1)


def to_utc_midnight(value: Union[datetime, date]) -> datetime:
    """
    Trunca uma data para a meia-noite UTC do mesmo dia

    Datas sem timezone são tratadas como UTC; datas com timezone são
    convertidas para UTC antes do truncamento.

    Args:
        value: Data ou datetime

    Returns:
        datetime: Meia-noite UTC (timezone-aware)
    """
    if not isinstance(value, datetime):
        return datetime(value.year, value.month, value.day, tzinfo=timezone.utc)
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.replace(hour=0, minute=0, second=0, microsecond=0)


def classify(item: WorkItem, snapshot_date: Union[datetime, date]) -> WorkItemState:
    """
    Classifica o estado de um work item no dia do snapshot

    Fechado tem precedência sobre ativado: um item ativado e fechado no mesmo
    dia conta como done naquele dia. A data de criação não é considerada.

    Args:
        item: Work item
        snapshot_date: Data do snapshot

    Returns:
        WorkItemState: Estado do item ao final do dia
    """
    day_end = to_utc_midnight(snapshot_date) + ONE_DAY

    if item.closed_date is not None and to_utc_midnight(item.closed_date) < day_end:
        return WorkItemState.DONE
    if item.activated_date is not None and to_utc_midnight(item.activated_date) < day_end:
        return WorkItemState.IN_PROGRESS
    return WorkItemState.TODO


def count_states(items: Iterable[WorkItem], snapshot_date: Union[datetime, date]) -> StateCounts:
    """Conta os itens por estado no dia do snapshot"""
    totals = {state: 0 for state in WorkItemState}
    for item in items:
        totals[classify(item, snapshot_date)] += 1
    return StateCounts(
        todo=totals[WorkItemState.TODO],
        in_progress=totals[WorkItemState.IN_PROGRESS],
        done=totals[WorkItemState.DONE]
    )
