"""Тесты командной строки."""

import pytest

from sync_checker.config import Settings
from sync_checker.main import build_session, main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    # .env из рабочего каталога не должен влиять на тесты
    monkeypatch.chdir(tmp_path)
    for key in ("SYNC_CHECKER_ASYNC_MODE", "SYNC_CHECKER_LOG_LEVEL"):
        monkeypatch.delenv(key, raising=False)


class TestMain:
    def test_requires_path(self, capsys):
        with pytest.raises(SystemExit) as exc:
            main([])
        assert exc.value.code != 0

    def test_reports_blocking_functions(self, write_module, capsys):
        path = write_module(
            "a.ts",
            """\
            export async function blocking() {
              Deno.readTextFileSync("");
            }

            export async function fine() {}
            """,
        )
        assert main([path]) == 0

        out = capsys.readouterr().out
        assert "Found blocking functions" in out
        assert f"  - blocking (in {path}:1:8)" in out
        assert "fine" not in out
        assert "Sync operation readTextFileSync found in async function blocking" in out
        assert 'fix: await Deno.readTextFile("")' in out

    def test_no_blocking_functions(self, write_module, capsys):
        path = write_module("a.ts", "export async function fine() {}\n")
        assert main([path]) == 0
        assert "No blocking functions found." in capsys.readouterr().out

    def test_missing_file_is_not_fatal(self, tmp_path, capsys):
        assert main([str(tmp_path / "missing.ts")]) == 0
        assert "No blocking functions found." in capsys.readouterr().out

    def test_async_flag(self, write_module, capsys):
        path = write_module(
            "a.ts",
            """\
            export async function blocking() {
              Deno.readTextFileSync("");
            }
            """,
        )
        assert main([path, "--async"]) == 0
        assert "  - blocking" in capsys.readouterr().out


class TestSettings:
    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("SYNC_CHECKER_FOLLOW_REMOTE_IMPORTS", "false")
        monkeypatch.setenv("SYNC_CHECKER_MAX_CONCURRENCY", "2")
        monkeypatch.setenv("SYNC_CHECKER_HTTP_TIMEOUT", "5")

        settings = Settings()
        session = build_session(settings)

        assert session.config.follow_remote_imports is False
        assert session.config.max_concurrency == 2
        assert session.source_provider.http_timeout == 5.0
