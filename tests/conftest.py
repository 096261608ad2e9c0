"""Общие фикстуры для тестов sync_checker."""

import textwrap

import pytest

from sync_checker.services.analysis import AnalysisConfig
from sync_checker.services.analysis.ast_parser import ModuleParser
from sync_checker.services.analysis.call_graph import CallGraphBuilder
from sync_checker.services.analysis.errors import SourceReadError
from sync_checker.services.analysis.models import ModuleSource
from sync_checker.services.analysis.source_provider import SourceProvider


class FakeSourceProvider(SourceProvider):
    """Локальные файлы читаются с диска, удалённые модули берутся из словаря."""

    def __init__(self, remote: dict[str, str] | None = None, redirects: dict[str, str] | None = None):
        super().__init__()
        self.remote = remote or {}
        self.redirects = redirects or {}
        self.reads: list[str] = []

    def read(self, module_id: str) -> ModuleSource:
        self.reads.append(module_id)
        if not module_id.startswith(self.remote_schemes):
            return super().read(module_id)
        url = self.redirects.get(module_id, module_id)
        if url not in self.remote:
            raise SourceReadError(module_id, "404 Not Found")
        return ModuleSource(module_id, self.remote[url], url)

    async def aread(self, module_id: str) -> ModuleSource:
        if not module_id.startswith(self.remote_schemes):
            self.reads.append(module_id)
            return await super().aread(module_id)
        return self.read(module_id)


@pytest.fixture
def write_module(tmp_path):
    """Записать модуль в tmp_path и вернуть путь к нему."""

    def write(name: str, source: str) -> str:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source))
        return str(path)

    return write


@pytest.fixture
def parse_module():
    """Распарсить исходник и построить граф модуля."""
    config = AnalysisConfig()
    parser = ModuleParser(config)
    builder = CallGraphBuilder(config)

    def parse(source: str, module_id: str = "/src/a.ts"):
        parsed = parser.parse(ModuleSource(module_id, textwrap.dedent(source), module_id))
        return builder.build(parsed)

    return parse


@pytest.fixture
def make_provider():
    """Фабрика FakeSourceProvider."""
    return FakeSourceProvider
