"""Поиск блокирующих (синхронных) вызовов в async-функциях TypeScript/JavaScript."""

__version__ = "0.1.0"
