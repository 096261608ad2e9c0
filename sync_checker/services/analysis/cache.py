"""Кэш результатов анализа модулей."""

from dataclasses import dataclass, field
from enum import Enum


class ModuleState(Enum):
    VISITING = "visiting"
    DONE = "done"
    FAILED = "failed"


@dataclass
class ModuleRecord:
    """Состояние анализа одного модуля."""

    module_id: str
    state: ModuleState = ModuleState.VISITING
    direct_blocking: set[str] = field(default_factory=set)
    exports: dict[str, str] = field(default_factory=dict)
    error: str | None = None


class ModuleCache:
    """
    Результаты анализа модулей в рамках одной сессии.

    Модуль помечается VISITING до обхода его импортов, поэтому повторная
    встреча модуля в цикле импортов возвращает уже известный (возможно,
    неполный) результат вместо рекурсии.
    """

    def __init__(self):
        self._records: dict[str, ModuleRecord] = {}

    def mark_visiting(self, module_id: str) -> None:
        self._records[module_id] = ModuleRecord(module_id)

    def store(self, module_id: str, direct_blocking: set[str], exports: dict[str, str]) -> None:
        record = self._records.setdefault(module_id, ModuleRecord(module_id))
        record.direct_blocking = set(direct_blocking)
        record.exports = dict(exports)

    def mark_done(self, module_id: str) -> None:
        self._records[module_id].state = ModuleState.DONE

    def mark_failed(self, module_id: str, error: str) -> None:
        record = self._records.setdefault(module_id, ModuleRecord(module_id))
        record.state = ModuleState.FAILED
        record.direct_blocking = set()
        record.error = error

    def has(self, module_id: str) -> bool:
        return module_id in self._records

    def is_finished(self, module_id: str) -> bool:
        record = self._records.get(module_id)
        return record is not None and record.state is not ModuleState.VISITING

    def direct_blocking(self, module_id: str) -> set[str]:
        record = self._records.get(module_id)
        return set(record.direct_blocking) if record else set()

    def exported_name(self, module_id: str, name: str) -> str:
        """Локальное имя в модуле для экспортного имени."""
        record = self._records.get(module_id)
        if record is None:
            return name
        return record.exports.get(name, name)

    def records(self) -> list[ModuleRecord]:
        return list(self._records.values())

    def failed(self) -> dict[str, str]:
        return {
            record.module_id: record.error or ""
            for record in self._records.values()
            if record.state is ModuleState.FAILED
        }
