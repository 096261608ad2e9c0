"""Классификация узлов tree-sitter.

Анализу нужны только несколько видов узлов: именованные функции, анонимные
функции, вызовы, импорты и экспорты. `classify` один раз переводит тип узла
tree-sitter в один из вариантов ниже; всё остальное дерево непрозрачно и
обходится через `node.children`.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any


class NodeKind(Enum):
    FUNCTION = "function"
    ANONYMOUS_FUNCTION = "anonymous_function"
    CALL = "call"
    IMPORT = "import"
    EXPORT = "export"
    OTHER = "other"


FUNCTION_DECLARATIONS = (
    "function_declaration",
    "generator_function_declaration",
    "method_definition",
)

FUNCTION_EXPRESSIONS = (
    "arrow_function",
    "function_expression",
    "function",
    "generator_function",
)

# Привязки, значение которых может быть функцией: const f = () => {}, class { f = () => {} }
VALUE_BINDINGS = {
    "variable_declarator": ("name", "value"),
    "public_field_definition": ("name", "value"),
    "field_definition": ("property", "value"),
}


@dataclass(frozen=True)
class FunctionNode:
    """Именованная функция, метод или переменная-функция."""

    node: Any
    name: str
    is_async: bool
    body: Any  # узел, чьи дети обходятся в контексте этой функции
    kind: NodeKind = NodeKind.FUNCTION


@dataclass(frozen=True)
class AnonymousFunctionNode:
    node: Any
    kind: NodeKind = NodeKind.ANONYMOUS_FUNCTION


@dataclass(frozen=True)
class Callee:
    """Вызываемое выражение: `name(...)` или `object.name(...)`."""

    name: str
    object_name: str | None = None  # только для обращения к свойству идентификатора
    is_member: bool = False


@dataclass(frozen=True)
class CallNode:
    node: Any
    callee: Callee | None  # None для вызовов, которые статически не разобрать
    kind: NodeKind = NodeKind.CALL


@dataclass(frozen=True)
class ImportNode:
    node: Any
    source: str
    bindings: list[tuple[str, str]]  # (локальное имя, импортированное имя)
    kind: NodeKind = NodeKind.IMPORT


@dataclass(frozen=True)
class ExportNode:
    node: Any
    source: str | None  # для `export ... from "..."`
    specifiers: list[tuple[str, str]]  # (экспортное имя, локальное имя)
    kind: NodeKind = NodeKind.EXPORT


@dataclass(frozen=True)
class OtherNode:
    node: Any
    kind: NodeKind = NodeKind.OTHER


def text_of(node) -> str:
    return node.text.decode("utf-8")


def string_value(node) -> str:
    return text_of(node).strip("\"'`")


def is_async(node) -> bool:
    return any(child.type == "async" for child in node.children)


def classify(node):
    """Определить вариант узла."""
    node_type = node.type

    if node_type in FUNCTION_DECLARATIONS:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            return FunctionNode(node, string_value(name_node), is_async(node), node)
        return AnonymousFunctionNode(node)

    if node_type in VALUE_BINDINGS:
        name_field, value_field = VALUE_BINDINGS[node_type]
        name_node = node.child_by_field_name(name_field)
        value_node = node.child_by_field_name(value_field)
        if (
            name_node is not None
            and value_node is not None
            and value_node.type in FUNCTION_EXPRESSIONS
            and name_node.type
            in ("identifier", "property_identifier", "private_property_identifier")
        ):
            # Значение обходится без повторной классификации, иначе имя
            # именованного function-выражения заменило бы имя привязки
            return FunctionNode(
                node, text_of(name_node), is_async(value_node), value_node
            )
        return OtherNode(node)

    if node_type in FUNCTION_EXPRESSIONS:
        name_node = node.child_by_field_name("name")
        if name_node is not None:
            return FunctionNode(node, text_of(name_node), is_async(node), node)
        return AnonymousFunctionNode(node)

    if node_type == "call_expression":
        return CallNode(node, _callee(node.child_by_field_name("function")))

    if node_type == "import_statement":
        source = node.child_by_field_name("source")
        if source is None:
            return OtherNode(node)
        return ImportNode(node, string_value(source), _import_bindings(node))

    if node_type == "export_statement":
        return _export(node)

    return OtherNode(node)


def _callee(func) -> Callee | None:
    if func is None:
        return None

    if func.type == "identifier":
        return Callee(name=text_of(func))

    if func.type == "member_expression":
        prop = func.child_by_field_name("property")
        obj = func.child_by_field_name("object")
        if prop is None or prop.type not in (
            "property_identifier",
            "private_property_identifier",
        ):
            return None
        object_name = text_of(obj) if obj is not None and obj.type == "identifier" else None
        return Callee(name=text_of(prop), object_name=object_name, is_member=True)

    return None


def _import_bindings(node) -> list[tuple[str, str]]:
    """Привязки `import d, { a, b as c } from "..."`. Namespace-импорт не даёт привязок."""
    bindings = []

    for clause in node.children:
        if clause.type != "import_clause":
            continue

        for child in clause.children:
            if child.type == "identifier":
                bindings.append((text_of(child), "default"))

            elif child.type == "named_imports":
                for spec in child.children:
                    if spec.type != "import_specifier":
                        continue
                    name = spec.child_by_field_name("name")
                    alias = spec.child_by_field_name("alias")
                    if name is None:
                        continue
                    imported = string_value(name)
                    local = text_of(alias) if alias is not None else imported
                    bindings.append((local, imported))

    return bindings


def _export(node) -> ExportNode:
    source_node = node.child_by_field_name("source")
    source = string_value(source_node) if source_node is not None else None
    specifiers = []

    is_default = any(child.type == "default" for child in node.children)
    declaration = node.child_by_field_name("declaration")
    value = node.child_by_field_name("value")

    if declaration is not None:
        for name in _declared_names(declaration):
            specifiers.append(("default" if is_default else name, name))
    elif is_default and value is not None:
        if value.type == "identifier":
            specifiers.append(("default", text_of(value)))
        elif value.type in FUNCTION_EXPRESSIONS:
            name_node = value.child_by_field_name("name")
            if name_node is not None:
                specifiers.append(("default", text_of(name_node)))

    for child in node.children:
        if child.type != "export_clause":
            continue
        for spec in child.children:
            if spec.type != "export_specifier":
                continue
            name = spec.child_by_field_name("name")
            alias = spec.child_by_field_name("alias")
            if name is None:
                continue
            local = string_value(name)
            exported = string_value(alias) if alias is not None else local
            specifiers.append((exported, local))

    return ExportNode(node, source, specifiers)


def _declared_names(declaration) -> list[str]:
    name_node = declaration.child_by_field_name("name")
    if name_node is not None:
        return [text_of(name_node)]

    names = []
    if declaration.type in ("lexical_declaration", "variable_declaration"):
        for child in declaration.children:
            if child.type == "variable_declarator":
                name = child.child_by_field_name("name")
                if name is not None and name.type == "identifier":
                    names.append(text_of(name))
    return names
