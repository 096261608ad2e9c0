"""Конфигурация для анализа блокирующих вызовов."""

from dataclasses import dataclass


@dataclass
class AnalysisConfig:
    """Конфигурация анализа."""

    # Блокирующая операция: <sync_namespace>.<имя><blocking_suffix>(...)
    sync_namespace: str = "Deno"
    blocking_suffix: str = "Sync"

    # Расширение, добавляемое к относительному импорту без расширения
    default_extension: str = ".ts"

    # Схемы удалённых модулей, которые загружаются и анализируются
    remote_schemes: tuple[str, ...] = ("jsr:", "https://", "http://")

    # Схемы, которые пропускаются с предупреждением
    skipped_schemes: tuple[str, ...] = ("npm:", "node:")

    follow_remote_imports: bool = True

    # Шаблоны gitwildmatch для локальных модулей, которые не анализируются
    ignore_patterns: tuple[str, ...] = ("node_modules/",)

    # Ограничение параллельных чтений в async-режиме
    max_concurrency: int = 8
