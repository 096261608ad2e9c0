"""Ошибки анализа.

Ни одна из них не прерывает весь прогон: драйвер обхода ловит их для
каждого модуля отдельно, и модуль вносит пустой вклад.
"""


class AnalysisError(Exception):
    """Базовая ошибка анализа одного модуля."""

    def __init__(self, module_id: str, reason: str):
        super().__init__(f"{module_id}: {reason}")
        self.module_id = module_id
        self.reason = reason


class SourceReadError(AnalysisError):
    """Не удалось прочитать или загрузить модуль."""


class ParseError(AnalysisError):
    """Исходный текст модуля содержит синтаксические ошибки."""


class ResolutionError(AnalysisError):
    """Не удалось разрешить удалённый спецификатор."""
