"""Парсинг исходного текста модуля в AST tree-sitter."""

import logging
import os
from typing import cast
from urllib.parse import urlparse

from tree_sitter_language_pack import get_parser, SupportedLanguage

from sync_checker.constants import DEFAULT_LANGUAGE, LANGUAGE_MAP
from .config import AnalysisConfig
from .errors import ParseError
from .models import ModuleSource, ParsedModule

logger = logging.getLogger(__name__)


class ModuleParser:
    """Парсер модулей TypeScript/JavaScript."""

    def __init__(self, config: AnalysisConfig):
        self.config = config
        self.parsers = {}

    def parse(self, source: ModuleSource) -> ParsedModule:
        """
        Распарсить модуль.

        Raises:
            ParseError: если дерево содержит синтаксические ошибки
        """
        lang = self._detect_language(source.location)
        content = bytes(source.text, "utf8")
        tree = self._get_parser(lang).parse(content)

        if tree.root_node.has_error:
            line = self._first_error_line(tree.root_node)
            raise ParseError(source.module_id, f"syntax error near line {line}")

        return ParsedModule(
            module_id=source.module_id,
            location=source.location,
            language=lang,
            content=content,
            root=tree.root_node,
        )

    def _get_parser(self, lang: str):
        if lang not in self.parsers:
            self.parsers[lang] = get_parser(cast(SupportedLanguage, lang))
        return self.parsers[lang]

    def _detect_language(self, location: str) -> str:
        """Определить язык по расширению файла (для URL - по пути)."""
        path = urlparse(location).path if "://" in location else location
        ext = os.path.splitext(path)[1].lstrip(".").lower()
        return LANGUAGE_MAP.get(ext, DEFAULT_LANGUAGE)

    def _first_error_line(self, node) -> int:
        while node.type != "ERROR" and not node.is_missing:
            child = next((c for c in node.children if c.has_error), None)
            if child is None:
                break
            node = child
        return node.start_point[0] + 1
