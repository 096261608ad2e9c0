"""Общие константы."""

# Расширение файла -> грамматика tree-sitter
LANGUAGE_MAP = {
    "ts": "typescript",
    "mts": "typescript",
    "cts": "typescript",
    "tsx": "tsx",
    "js": "javascript",
    "jsx": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
}

DEFAULT_LANGUAGE = "typescript"
