"""Распространение блокирующего статуса по графу вызовов и импортам."""

import logging

from .cache import ModuleCache
from .call_graph import CallGraph
from .import_resolver import ImportAliasMap
from .models import PropagationResult

logger = logging.getLogger(__name__)


class BlockingPropagator:
    """Замыкание множества блокирующих функций до неподвижной точки."""

    def __init__(self, call_graph: CallGraph, aliases: ImportAliasMap, modules: ModuleCache):
        self.call_graph = call_graph
        self.aliases = aliases
        self.modules = modules

    def run(self, seed: set[str]) -> PropagationResult:
        """
        Расширять множество, пока полный проход что-то добавляет.

        Множество только растёт и ограничено числом имён, поэтому цикл
        завершается не более чем за |имён| + 1 проходов.

        Args:
            seed: прямо блокирующие функции всех модулей

        Returns:
            PropagationResult с итоговым множеством и добавлениями по проходам
        """
        blocking = set(seed)
        added_per_pass: list[set[str]] = []

        changed = True
        while changed:
            added = self._single_pass(blocking)
            added_per_pass.append(added)
            changed = bool(added)

        logger.info(
            f"[Propagation] {len(blocking)} blocking functions "
            f"({len(seed)} direct) after {len(added_per_pass)} passes"
        )
        return PropagationResult(blocking=blocking, added_per_pass=added_per_pass)

    def _single_pass(self, blocking: set[str]) -> set[str]:
        added = set()

        def add(name: str) -> None:
            if name not in blocking:
                blocking.add(name)
                added.add(name)

        # Вызывающий блокирующей функции сам блокирующий
        for caller, callee in self.call_graph.edges():
            if callee in blocking:
                add(caller)

        # Импортированное имя блокирующее, если блокирующий оригинал
        for _, local, alias in self.aliases.items():
            if self._alias_blocking(alias.source, alias.name, blocking):
                add(local)

        # Вызов через цепочку импортов
        for caller, callee in self.call_graph.edges():
            if caller in blocking or callee in blocking:
                continue
            if self._resolves_to_blocking(callee, blocking):
                add(caller)

        return added

    def _alias_blocking(self, source: str, imported: str, blocking: set[str]) -> bool:
        original = self.modules.exported_name(source, imported)
        return (
            original in self.modules.direct_blocking(source)
            or original in blocking
            or imported in blocking
        )

    def _resolves_to_blocking(self, local: str, blocking: set[str]) -> bool:
        stack = list(self.aliases.for_local(local))
        seen: set[tuple[str, str]] = set()

        while stack:
            module_id, alias = stack.pop()
            if (module_id, alias.name) in seen:
                continue
            seen.add((module_id, alias.name))

            if self._alias_blocking(alias.source, alias.name, blocking):
                return True

            # Реэкспорт: имя в исходном модуле само импортировано
            original = self.modules.exported_name(alias.source, alias.name)
            next_alias = self.aliases.get(alias.source, original)
            if next_alias is not None:
                stack.append((alias.source, next_alias))

        return False
