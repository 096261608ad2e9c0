"""Правило: блокирующие вызовы в async-функциях."""

import logging

from .call_graph import callee_name, is_sync_operation
from .models import Diagnostic, DiagnosticKind, Fix, FunctionLocation, ParsedModule
from .session import AnalysisSession
from .syntax import AnonymousFunctionNode, CallNode, FunctionNode, classify, is_async, text_of

logger = logging.getLogger(__name__)

RULE_ID = "sync-checker/no-sync-in-async"


class NoSyncInAsyncRule:
    """
    Находит места вызова, из-за которых async-функция блокирует цикл событий.

    Диагностика выдаётся только для вызова, чья ближайшая именованная
    функция объявлена async. Синхронный вызов в обычной функции сам по себе
    не сообщается, но делает её блокирующей для вызывающих. Исправление
    через await предлагается, только если async и самая внутренняя функция
    (в том числе анонимная).
    """

    def __init__(self, session: AnalysisSession):
        self.session = session
        self.config = session.config

    def check(self, module_id: str | None = None) -> list[Diagnostic]:
        """
        Проверить модуль (по умолчанию - корневой модуль сессии).

        Returns:
            диагностики в порядке следования в исходнике
        """
        module_id = module_id if module_id is not None else self.session.root
        parsed = self.session.parsed_module(module_id) if module_id else None
        if parsed is None:
            logger.debug(f"[Lint] Module {module_id} was not analyzed")
            return []

        diagnostics: list[Diagnostic] = []
        self._walk(parsed, diagnostics)
        return diagnostics

    def _walk(self, parsed: ParsedModule, diagnostics: list[Diagnostic]) -> None:
        # enclosing - ближайшая именованная функция (для сообщения и статуса),
        # awaitable - объявлена ли async ближайшая функция любого вида:
        # только внутри неё исправление через await допустимо
        stack = [(parsed.root, None, False)]
        while stack:
            node, enclosing, awaitable = stack.pop()
            item = classify(node)

            if isinstance(item, FunctionNode):
                enclosing = item
                awaitable = item.is_async
            elif isinstance(item, AnonymousFunctionNode):
                awaitable = is_async(node)
            elif isinstance(item, CallNode) and enclosing is not None and enclosing.is_async:
                diagnostic = self._check_call(item, enclosing, parsed, awaitable)
                if diagnostic is not None:
                    diagnostics.append(diagnostic)

            children = item.body.children if isinstance(item, FunctionNode) else node.children
            stack.extend((child, enclosing, awaitable) for child in reversed(children))

    def _check_call(
        self,
        call: CallNode,
        enclosing: FunctionNode,
        parsed: ParsedModule,
        awaitable: bool,
    ) -> Diagnostic | None:
        if not self.session.is_blocking_function(enclosing.name):
            return None

        site = FunctionLocation(
            file=parsed.module_id,
            line=call.node.start_point[0] + 1,
            column=call.node.start_point[1] + 1,
        )

        if is_sync_operation(call.callee, self.config):
            return Diagnostic(
                function_name=call.callee.name,
                enclosing_async_function=enclosing.name,
                site=site,
                kind=DiagnosticKind.DIRECT_SYNC_CALL,
                message=(
                    f"Sync operation {call.callee.name} found in async function {enclosing.name}"
                ),
                fix=self._async_fix(call) if awaitable else None,
            )

        name = callee_name(call.callee, self.config)
        if name is None or not self.session.is_blocking_function(name):
            return None

        return Diagnostic(
            function_name=name,
            enclosing_async_function=enclosing.name,
            site=site,
            kind=DiagnosticKind.TRANSITIVE_BLOCKING_CALL,
            message=f"Blocking function {name} called in async function {enclosing.name}",
            definition=self.session.location_of(name),
        )

    def _async_fix(self, call: CallNode) -> Fix | None:
        """`Deno.readTextFileSync(p)` -> `await Deno.readTextFile(p)`."""
        arguments = call.node.child_by_field_name("arguments")
        if arguments is None:
            return None

        operation = call.callee.name[: -len(self.config.blocking_suffix)]
        if not operation:
            return None

        return Fix(
            start_byte=call.node.start_byte,
            end_byte=call.node.end_byte,
            text=f"await {call.callee.object_name}.{operation}{text_of(arguments)}",
        )
