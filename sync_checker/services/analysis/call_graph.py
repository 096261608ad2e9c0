"""Построение графа вызовов."""

import logging

from .config import AnalysisConfig
from .models import (
    FunctionLocation,
    ImportBinding,
    ImportDeclaration,
    ModuleGraph,
    ParsedModule,
)
from .syntax import CallNode, Callee, ExportNode, FunctionNode, ImportNode, classify

logger = logging.getLogger(__name__)


def is_sync_operation(callee: Callee | None, config: AnalysisConfig) -> bool:
    """`Deno.<имя>Sync(...)` - синхронная операция платформы."""
    return (
        callee is not None
        and callee.is_member
        and callee.object_name == config.sync_namespace
        and callee.name.endswith(config.blocking_suffix)
    )


def callee_name(callee: Callee | None, config: AnalysisConfig) -> str | None:
    """Имя, по которому вызов становится ребром графа (или None)."""
    if callee is None:
        return None
    if callee.is_member and callee.object_name == config.sync_namespace:
        return None
    return callee.name


class CallGraphBuilder:
    """Построение графа вызовов одного модуля."""

    def __init__(self, config: AnalysisConfig):
        self.config = config

    def build(self, parsed: ParsedModule) -> ModuleGraph:
        """
        Обойти AST модуля.

        Returns:
            ModuleGraph с прямо блокирующими функциями, рёбрами вызовов,
            положениями функций, импортами и экспортами
        """
        graph = ModuleGraph(module_id=parsed.module_id)

        # Явный стек: глубина дерева не ограничена лимитом рекурсии.
        # current - ближайшая именованная функция; анонимные функции прозрачны.
        stack = [(parsed.root, None)]
        while stack:
            node, current = stack.pop()
            item = classify(node)

            if isinstance(item, FunctionNode):
                current = item.name
                graph.calls.setdefault(current, set())
                graph.locations[current] = FunctionLocation(
                    file=graph.module_id,
                    line=node.start_point[0] + 1,
                    column=node.start_point[1] + 1,
                )

            elif isinstance(item, CallNode):
                if current is not None:
                    self._record_call(item.callee, current, graph)

            elif isinstance(item, ImportNode):
                graph.imports.append(
                    ImportDeclaration(
                        source=item.source,
                        bindings=[
                            ImportBinding(local, imported) for local, imported in item.bindings
                        ],
                        line=node.start_point[0] + 1,
                    )
                )

            elif isinstance(item, ExportNode):
                self._record_export(item, graph)

            children = item.body.children if isinstance(item, FunctionNode) else node.children
            stack.extend((child, current) for child in reversed(children))

        logger.debug(
            f"[Graph] {parsed.module_id}: {len(graph.calls)} functions, "
            f"{len(graph.direct_blocking)} directly blocking, {len(graph.imports)} imports"
        )
        return graph

    def _record_call(self, callee: Callee | None, caller: str, graph: ModuleGraph) -> None:
        if is_sync_operation(callee, self.config):
            graph.direct_blocking.add(caller)
            return

        name = callee_name(callee, self.config)
        if name is not None:
            graph.calls.setdefault(caller, set()).add(name)

    def _record_export(self, item: ExportNode, graph: ModuleGraph) -> None:
        if item.source is None:
            for exported, local in item.specifiers:
                graph.exports[exported] = local
            return

        # export { a as b } from "./m" - одновременно импорт и экспорт
        graph.imports.append(
            ImportDeclaration(
                source=item.source,
                bindings=[ImportBinding(exported, local) for exported, local in item.specifiers],
                line=item.node.start_point[0] + 1,
            )
        )
        for exported, _ in item.specifiers:
            graph.exports[exported] = exported


class CallGraph:
    """Объединённый граф вызовов всех проанализированных модулей."""

    def __init__(self):
        self._calls: dict[str, set[str]] = {}

    def add_module(self, graph: ModuleGraph) -> None:
        """Добавить рёбра модуля (имена функций глобальны для всей программы)."""
        for caller, callees in graph.calls.items():
            self._calls.setdefault(caller, set()).update(callees)

    def edges(self):
        for caller, callees in self._calls.items():
            for callee in callees:
                yield caller, callee

    def as_dict(self) -> dict[str, frozenset[str]]:
        return {caller: frozenset(callees) for caller, callees in self._calls.items()}
