"""Разрешение импортов и карта импортированных имён."""

import logging
import os
from dataclasses import dataclass
from urllib.parse import urljoin

import pathspec

from .config import AnalysisConfig
from .models import ImportAlias

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolvedImport:
    """Результат разрешения спецификатора."""

    specifier: str
    module_id: str | None  # None - импорт пропущен
    is_remote: bool = False
    reason: str = ""

    @property
    def skipped(self) -> bool:
        return self.module_id is None


class ImportResolver:
    """Вычисляет идентификатор модуля по спецификатору импорта."""

    def __init__(self, config: AnalysisConfig):
        self.config = config
        self._ignore_spec = pathspec.PathSpec.from_lines(
            "gitwildmatch", config.ignore_patterns
        )

    def is_remote(self, module_id: str) -> bool:
        return module_id.startswith(self.config.remote_schemes)

    def root_module(self, path: str) -> str:
        """Идентификатор корневого модуля: абсолютный путь или URL как есть."""
        if self.is_remote(path):
            return path
        return os.path.abspath(path)

    def resolve(self, specifier: str, current_location: str) -> ResolvedImport:
        """
        Разрешить спецификатор относительно импортирующего модуля.

        Args:
            specifier: строка из import ... from "<specifier>"
            current_location: путь к файлу или URL импортирующего модуля

        Returns:
            ResolvedImport; пропущенные импорты несут причину в reason
        """
        if specifier.startswith("."):
            return self._resolve_relative(specifier, current_location)

        if specifier.startswith(self.config.skipped_schemes):
            return ResolvedImport(
                specifier, None, reason="specifiers of this scheme are not supported"
            )

        if self.is_remote(specifier):
            if not self.config.follow_remote_imports:
                return ResolvedImport(specifier, None, reason="remote imports are disabled")
            return ResolvedImport(specifier, specifier, is_remote=True)

        return ResolvedImport(specifier, None, reason="bare specifiers are not resolved")

    def _resolve_relative(self, specifier: str, current_location: str) -> ResolvedImport:
        if self.is_remote(current_location):
            resolved = self._with_extension(urljoin(current_location, specifier))
            return ResolvedImport(specifier, resolved, is_remote=True)

        current_dir = os.path.dirname(current_location)
        resolved = self._with_extension(os.path.normpath(os.path.join(current_dir, specifier)))

        if self._ignore_spec.match_file(resolved.lstrip("/")):
            return ResolvedImport(specifier, None, reason="matches ignore patterns")

        return ResolvedImport(specifier, resolved)

    def _with_extension(self, path: str) -> str:
        """Добавить расширение по умолчанию, если его нет."""
        tail = path.rsplit("/", 1)[-1]
        if os.path.splitext(tail)[1]:
            return path
        return path + self.config.default_extension


class ImportAliasMap:
    """Локальные имена импортов в каждом модуле."""

    def __init__(self):
        self._aliases: dict[str, dict[str, ImportAlias]] = {}

    def record(self, module_id: str, local: str, alias: ImportAlias) -> None:
        # Повторный импорт того же локального имени перезаписывает прежний
        self._aliases.setdefault(module_id, {})[local] = alias

    def get(self, module_id: str, local: str) -> ImportAlias | None:
        return self._aliases.get(module_id, {}).get(local)

    def for_local(self, local: str) -> list[tuple[str, ImportAlias]]:
        """Все импорты с данным локальным именем: [(импортирующий модуль, alias)]."""
        return [
            (module_id, aliases[local])
            for module_id, aliases in self._aliases.items()
            if local in aliases
        ]

    def items(self):
        for module_id, aliases in self._aliases.items():
            for local, alias in aliases.items():
                yield module_id, local, alias

    def __len__(self) -> int:
        return sum(len(aliases) for aliases in self._aliases.values())
