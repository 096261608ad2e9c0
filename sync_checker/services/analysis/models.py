"""Модели данных для анализа блокирующих вызовов."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


@dataclass(frozen=True)
class FunctionLocation:
    """Положение объявления или вызова в исходнике (строка и колонка с 1)."""

    file: str
    line: int
    column: int

    def __str__(self) -> str:
        return f"{self.file}:{self.line}:{self.column}"


@dataclass(frozen=True)
class ImportBinding:
    """Одно имя из import: локальное имя и имя в исходном модуле."""

    local: str
    imported: str


@dataclass
class ImportDeclaration:
    """Импорт (или реэкспорт) модуля."""

    source: str
    bindings: list[ImportBinding]
    line: int


@dataclass(frozen=True)
class ImportAlias:
    """Куда указывает импортированное локальное имя."""

    source: str  # идентификатор модуля
    name: str  # исходное экспортированное имя


@dataclass(frozen=True)
class ModuleSource:
    """Прочитанный модуль."""

    module_id: str
    text: str
    location: str  # путь к файлу или фактический URL после редиректов


@dataclass
class ParsedModule:
    """Результат парсинга модуля."""

    module_id: str
    location: str
    language: str
    content: bytes
    root: Any  # tree_sitter.Node


@dataclass
class ModuleGraph:
    """Граф вызовов одного модуля."""

    module_id: str
    direct_blocking: set[str] = field(default_factory=set)
    calls: dict[str, set[str]] = field(default_factory=dict)
    locations: dict[str, FunctionLocation] = field(default_factory=dict)
    imports: list[ImportDeclaration] = field(default_factory=list)
    exports: dict[str, str] = field(default_factory=dict)  # экспортное имя -> локальное


@dataclass
class PropagationResult:
    """Результат распространения блокирующего статуса."""

    blocking: set[str]
    added_per_pass: list[set[str]]

    @property
    def passes(self) -> int:
        return len(self.added_per_pass)


@dataclass(frozen=True)
class AnalysisSnapshot:
    """Неизменяемый срез состояния сессии после анализа."""

    root: str
    blocking: frozenset[str]
    direct_blocking: dict[str, frozenset[str]]
    calls: dict[str, frozenset[str]]
    failed: dict[str, str]

    @property
    def modules(self) -> list[str]:
        return sorted(self.direct_blocking)


class DiagnosticKind(Enum):
    DIRECT_SYNC_CALL = "direct-sync-call"
    TRANSITIVE_BLOCKING_CALL = "transitive-blocking-call"


@dataclass(frozen=True)
class Fix:
    """Предлагаемая замена текста в диапазоне байтов."""

    start_byte: int
    end_byte: int
    text: str


@dataclass(frozen=True)
class Diagnostic:
    """Блокирующий вызов внутри async-функции."""

    function_name: str
    enclosing_async_function: str
    site: FunctionLocation
    kind: DiagnosticKind
    message: str
    definition: FunctionLocation | None = None
    fix: Fix | None = None
