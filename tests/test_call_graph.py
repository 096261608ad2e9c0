"""Тесты построения графа вызовов одного модуля."""

import pytest

from sync_checker.services.analysis import AnalysisConfig, ParseError
from sync_checker.services.analysis.ast_parser import ModuleParser
from sync_checker.services.analysis.call_graph import CallGraph, CallGraphBuilder
from sync_checker.services.analysis.models import (
    FunctionLocation,
    ImportBinding,
    ModuleSource,
)


class TestDirectBlocking:
    def test_deno_sync_call_marks_enclosing_function(self, parse_module):
        graph = parse_module("""\
            export async function blocking() {
              Deno.writeTextFileSync("hello.txt", "world");
              await new Promise((resolve) => setTimeout(resolve, 1000));
            }

            export async function notBlocking() {
              await new Promise((resolve) => setTimeout(resolve, 1000));
            }
            """)
        assert graph.direct_blocking == {"blocking"}

    def test_non_sync_deno_call_is_not_blocking(self, parse_module):
        graph = parse_module("""\
            async function read() {
              return await Deno.readTextFile("a.txt");
            }
            """)
        assert graph.direct_blocking == set()
        # Вызовы пространства имён платформы не становятся рёбрами
        assert graph.calls["read"] == set()

    def test_sync_suffix_on_other_object_is_an_edge(self, parse_module):
        graph = parse_module("""\
            function f() {
              fs.readFileSync("a.txt");
            }
            """)
        assert graph.direct_blocking == set()
        assert graph.calls["f"] == {"readFileSync"}

    def test_top_level_sync_call_has_no_owner(self, parse_module):
        graph = parse_module("""\
            Deno.readTextFileSync("config.json");
            function f() {}
            """)
        assert graph.direct_blocking == set()

    def test_custom_namespace_and_suffix(self):
        config = AnalysisConfig(sync_namespace="fs", blocking_suffix="Sync")
        parsed = ModuleParser(config).parse(
            ModuleSource("/a.js", "function f() { fs.readFileSync('x'); }\n", "/a.js")
        )
        graph = CallGraphBuilder(config).build(parsed)
        assert graph.direct_blocking == {"f"}


class TestFunctionLikes:
    def test_arrow_and_function_expression_bindings(self, parse_module):
        graph = parse_module("""\
            const arrow = async () => {
              Deno.removeSync("a");
            };
            const expr = function () {
              arrow();
            };
            """)
        assert graph.direct_blocking == {"arrow"}
        assert graph.calls["expr"] == {"arrow"}

    def test_methods(self, parse_module):
        graph = parse_module("""\
            class Store {
              async load() {
                this.readAll();
              }

              readAll() {
                return Deno.readDirSync(".");
              }
            }
            """)
        assert graph.direct_blocking == {"readAll"}
        assert graph.calls["load"] == {"readAll"}

    def test_class_field_arrow(self, parse_module):
        graph = parse_module("""\
            class Store {
              save = async () => {
                Deno.writeFileSync("a", new Uint8Array());
              };
            }
            """)
        assert graph.direct_blocking == {"save"}

    def test_anonymous_callbacks_attribute_to_named_parent(self, parse_module):
        graph = parse_module("""\
            async function outer(items: string[]) {
              items.forEach((item) => {
                Deno.statSync(item);
                helper(item);
              });
            }
            """)
        assert graph.direct_blocking == {"outer"}
        assert graph.calls["outer"] == {"forEach", "helper"}

    def test_nested_function_restores_outer_context(self, parse_module):
        graph = parse_module("""\
            function outer() {
              function inner() {
                Deno.readTextFileSync("a");
              }
              after();
            }
            """)
        assert graph.direct_blocking == {"inner"}
        assert graph.calls["outer"] == {"after"}
        assert graph.calls["inner"] == set()

    def test_locations_are_one_based(self, parse_module):
        graph = parse_module(
            """\
            // header
            export function first() {}

              const second = () => {};
            """,
            module_id="/src/loc.ts",
        )
        assert graph.locations["first"] == FunctionLocation("/src/loc.ts", 2, 8)
        assert graph.locations["second"] == FunctionLocation("/src/loc.ts", 4, 9)


class TestImportsAndExports:
    def test_named_default_and_renamed_imports(self, parse_module):
        graph = parse_module("""\
            import main, { helper, other as renamed } from "./b.ts";
            import * as ns from "./c.ts";
            import { join } from "jsr:@std/path";
            """)
        assert [d.source for d in graph.imports] == ["./b.ts", "./c.ts", "jsr:@std/path"]
        assert graph.imports[0].bindings == [
            ImportBinding("main", "default"),
            ImportBinding("helper", "helper"),
            ImportBinding("renamed", "other"),
        ]
        assert graph.imports[1].bindings == []
        assert graph.imports[0].line == 1

    def test_export_map(self, parse_module):
        graph = parse_module("""\
            export default function run() {}
            function local() {}
            export { local as published };
            export const value = () => {};
            """)
        assert graph.exports == {
            "default": "run",
            "published": "local",
            "value": "value",
        }

    def test_reexport_is_an_import(self, parse_module):
        graph = parse_module("""\
            export { inner as outer } from "./c.ts";
            export * from "./d.ts";
            """)
        assert [d.source for d in graph.imports] == ["./c.ts", "./d.ts"]
        assert graph.imports[0].bindings == [ImportBinding("outer", "inner")]
        assert graph.exports == {"outer": "outer"}


class TestParser:
    def test_malformed_source_raises_parse_error(self):
        parser = ModuleParser(AnalysisConfig())
        with pytest.raises(ParseError):
            parser.parse(ModuleSource("/bad.ts", "function (((\n", "/bad.ts"))

    def test_parse_error_reports_line(self):
        parser = ModuleParser(AnalysisConfig())
        source = "const a = 1;\nconst b = 2;\nfunction (((\n"
        with pytest.raises(ParseError) as exc:
            parser.parse(ModuleSource("/bad.ts", source, "/bad.ts"))
        assert exc.value.reason.startswith("syntax error near line ")
        # Ошибка не раньше третьей строки: первые две корректны
        assert int(exc.value.reason.rsplit(" ", 1)[1]) >= 3

    @pytest.mark.parametrize(
        "location, language",
        [
            ("/a.ts", "typescript"),
            ("/a.tsx", "tsx"),
            ("/a.mjs", "javascript"),
            ("https://deno.land/std/path/mod.ts?v=1", "typescript"),
            ("jsr:@std/path", "typescript"),
        ],
    )
    def test_language_detection(self, location, language):
        parser = ModuleParser(AnalysisConfig())
        parsed = parser.parse(ModuleSource(location, "export {};\n", location))
        assert parsed.language == language


class TestCallGraph:
    def test_merges_modules_by_name(self, parse_module):
        graph = CallGraph()
        graph.add_module(parse_module("function a() { b(); }\n", "/a.ts"))
        graph.add_module(parse_module("function a() { c(); }\n", "/b.ts"))

        assert set(graph.edges()) == {("a", "b"), ("a", "c")}
        assert graph.as_dict() == {"a": frozenset({"b", "c"})}
