"""Сессия анализа одного корневого файла (фасад)."""

import asyncio
import logging

from .ast_parser import ModuleParser
from .cache import ModuleCache
from .call_graph import CallGraph, CallGraphBuilder
from .config import AnalysisConfig
from .import_resolver import ImportAliasMap, ImportResolver
from .locations import LocationIndex
from .models import (
    AnalysisSnapshot,
    FunctionLocation,
    ImportAlias,
    ImportDeclaration,
    ModuleGraph,
    ModuleSource,
    ParsedModule,
    PropagationResult,
)
from .propagation import BlockingPropagator
from .source_provider import SourceProvider

logger = logging.getLogger(__name__)


class AnalysisSession:
    """
    Всё состояние одного прогона анализа.

    Сессия создаётся на каждый корневой файл и не разделяется между
    прогонами. Обход модулей наполняет граф вызовов и карту импортов,
    затем распространение считает замыкание, после чего запросы
    `is_blocking_function` и `location_of` отвечают без повторного анализа.
    """

    def __init__(
        self,
        config: AnalysisConfig | None = None,
        source_provider: SourceProvider | None = None,
    ):
        self.config = config if config is not None else AnalysisConfig()
        self.source_provider = (
            source_provider
            if source_provider is not None
            else SourceProvider(remote_schemes=self.config.remote_schemes)
        )

        self.parser = ModuleParser(self.config)
        self.builder = CallGraphBuilder(self.config)
        self.resolver = ImportResolver(self.config)

        self.cache = ModuleCache()
        self.call_graph = CallGraph()
        self.aliases = ImportAliasMap()
        self.locations = LocationIndex()

        self._parsed: dict[str, ParsedModule] = {}
        self._in_flight: dict[str, asyncio.Future] = {}
        self._semaphore: asyncio.Semaphore | None = None
        self._root: str | None = None
        self._propagation: PropagationResult | None = None

    # ── Обход в синхронном режиме ──

    def analyze_file(self, path: str) -> AnalysisSnapshot:
        """
        Проанализировать файл и всё, что он статически импортирует.

        Args:
            path: путь к корневому файлу (или URL удалённого модуля)

        Returns:
            AnalysisSnapshot после распространения
        """
        self._root = self.resolver.root_module(path)
        logger.info(f"[Session] Analyzing {self._root}")

        self.analyze_module(self._root, set())
        return self._finish()

    def analyze_module(self, module_id: str, visiting: set[str]) -> set[str]:
        """
        Проанализировать модуль и рекурсивно его импорты.

        Returns:
            прямо блокирующие функции модуля; для модуля, который ещё
            анализируется выше по стеку, - текущий (возможно, пустой) результат
        """
        if module_id in visiting or self.cache.is_finished(module_id):
            logger.debug(f"[Session] Already visited {module_id}")
            return self.cache.direct_blocking(module_id)

        visiting.add(module_id)
        self.cache.mark_visiting(module_id)

        try:
            graph = self._register(self.source_provider.read(module_id))
        except Exception as e:
            # Любая ошибка одного модуля (в том числе неожиданная) не прерывает прогон
            self._fail(module_id, e)
            return set()

        for declaration in graph.imports:
            target = self._link_import(graph, declaration)
            if target is not None:
                self.analyze_module(target, visiting)

        self.cache.mark_done(module_id)
        return set(graph.direct_blocking)

    # ── Обход в asyncio ──

    async def analyze_file_async(self, path: str) -> AnalysisSnapshot:
        """То же, что analyze_file, но чтения и загрузки не блокируют цикл событий."""
        self._root = self.resolver.root_module(path)
        logger.info(f"[Session] Analyzing {self._root} (async)")

        self._semaphore = asyncio.Semaphore(self.config.max_concurrency)
        try:
            await self.analyze_module_async(self._root)
        finally:
            self._in_flight.clear()
        return self._finish()

    async def analyze_module_async(self, module_id: str) -> set[str]:
        """
        Проанализировать модуль; импорты одного модуля обходятся параллельно.

        Повторный запрос модуля, который уже в работе, ждёт только построения
        его графа, но не его импортов, поэтому циклы импортов не зацикливают
        ожидание.
        """
        pending = self._in_flight.get(module_id)
        if pending is not None:
            await pending
            return self.cache.direct_blocking(module_id)

        if self.cache.is_finished(module_id):
            return self.cache.direct_blocking(module_id)

        if self._semaphore is None:
            self._semaphore = asyncio.Semaphore(self.config.max_concurrency)

        built = asyncio.get_running_loop().create_future()
        self._in_flight[module_id] = built
        self.cache.mark_visiting(module_id)

        try:
            async with self._semaphore:
                source = await self.source_provider.aread(module_id)
            graph = self._register(source)
        except Exception as e:
            self._fail(module_id, e)
            return set()
        finally:
            if not built.done():
                built.set_result(None)

        targets = [
            target
            for target in (self._link_import(graph, d) for d in graph.imports)
            if target is not None
        ]
        results = await asyncio.gather(
            *(self.analyze_module_async(target) for target in targets),
            return_exceptions=True,
        )
        for target, result in zip(targets, results):
            if isinstance(result, BaseException):
                self._fail(target, result)

        self.cache.mark_done(module_id)
        return set(graph.direct_blocking)

    # ── Общее ──

    def _register(self, source: ModuleSource) -> ModuleGraph:
        parsed = self.parser.parse(source)
        graph = self.builder.build(parsed)

        self._parsed[source.module_id] = parsed
        self.cache.store(source.module_id, graph.direct_blocking, graph.exports)
        self.call_graph.add_module(graph)
        self.locations.update(graph.locations)
        return graph

    def _link_import(self, graph: ModuleGraph, declaration: ImportDeclaration) -> str | None:
        """Записать алиасы импорта; вернуть модуль, который нужно обойти."""
        location = self._parsed[graph.module_id].location
        resolved = self.resolver.resolve(declaration.source, location)

        if resolved.skipped:
            logger.warning(
                f"[Imports] Skipping {declaration.source} in {graph.module_id}: {resolved.reason}"
            )
            return None

        for binding in declaration.bindings:
            self.aliases.record(
                graph.module_id,
                binding.local,
                ImportAlias(source=resolved.module_id, name=binding.imported),
            )
        return resolved.module_id

    def _fail(self, module_id: str, error: BaseException) -> None:
        logger.warning(f"[Session] Failed to analyze {module_id}: {error}")
        self.cache.mark_failed(module_id, str(error))

    def _finish(self) -> AnalysisSnapshot:
        seed = set()
        for record in self.cache.records():
            seed.update(record.direct_blocking)

        propagator = BlockingPropagator(self.call_graph, self.aliases, self.cache)
        self._propagation = propagator.run(seed)
        return self.snapshot()

    # ── Запросы ──

    @property
    def propagation(self) -> PropagationResult | None:
        return self._propagation

    def is_blocking_function(self, name: str) -> bool:
        if self._propagation is None:
            return False
        return name in self._propagation.blocking

    def blocking_functions(self) -> list[str]:
        if self._propagation is None:
            return []
        return sorted(self._propagation.blocking)

    def location_of(self, name: str) -> FunctionLocation | None:
        """Положение объявления; для импортированного имени - положение оригинала."""
        location = self.locations.get(name)
        if location is not None:
            return location

        seen = {name}
        stack = [alias for _, alias in self.aliases.for_local(name)]
        while stack:
            alias = stack.pop()
            original = self.cache.exported_name(alias.source, alias.name)
            location = self.locations.get(original)
            if location is not None:
                return location
            if original in seen:
                continue
            seen.add(original)
            next_alias = self.aliases.get(alias.source, original)
            if next_alias is not None:
                stack.append(next_alias)
        return None

    def parsed_module(self, module_id: str) -> ParsedModule | None:
        return self._parsed.get(module_id)

    @property
    def root(self) -> str | None:
        return self._root

    def snapshot(self) -> AnalysisSnapshot:
        return AnalysisSnapshot(
            root=self._root or "",
            blocking=frozenset(self._propagation.blocking if self._propagation else ()),
            direct_blocking={
                record.module_id: frozenset(record.direct_blocking)
                for record in self.cache.records()
            },
            calls=self.call_graph.as_dict(),
            failed=self.cache.failed(),
        )
