"""Поиск блокирующих функций из командной строки.

Usage::

    python -m sync_checker.main path/to/main.ts [--async] [-v]
"""

import argparse
import asyncio
import logging
import sys

from sync_checker.config import Settings
from sync_checker.services.analysis import AnalysisSession, NoSyncInAsyncRule
from sync_checker.services.analysis.lint import RULE_ID
from sync_checker.services.analysis.source_provider import JsrResolver, SourceProvider

logger = logging.getLogger(__name__)


def build_session(settings: Settings) -> AnalysisSession:
    """Собрать сессию анализа из настроек."""
    config = settings.analysis_config()
    provider = SourceProvider(
        remote_schemes=config.remote_schemes,
        jsr_resolver=JsrResolver(settings.deno_executable),
        http_timeout=settings.http_timeout,
    )
    return AnalysisSession(config=config, source_provider=provider)


def print_report(session: AnalysisSession) -> None:
    """Вывести блокирующие функции и диагностики корневого файла."""
    blocking = session.blocking_functions()

    if blocking:
        print("\nWarning: Found blocking functions in the following locations:")
        for name in blocking:
            location = session.location_of(name)
            where = str(location) if location else "unknown location"
            print(f"  - {name} (in {where})")
    else:
        print("\nNo blocking functions found.")

    diagnostics = NoSyncInAsyncRule(session).check()
    if diagnostics:
        print(f"\n{len(diagnostics)} blocking call(s) in async functions:")
    for diagnostic in diagnostics:
        print(f"  {diagnostic.site}: {diagnostic.message} [{RULE_ID}]")
        if diagnostic.fix:
            print(f"    fix: {diagnostic.fix.text}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        prog="sync-checker",
        description="Find blocking (sync) operations reachable from async functions.",
    )
    parser.add_argument("path", help="root file to analyze")
    parser.add_argument(
        "--async",
        dest="async_mode",
        action="store_true",
        default=None,
        help="read and fetch modules with asyncio",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    args = parser.parse_args(argv)

    settings = Settings()
    if args.async_mode is not None:
        settings.async_mode = args.async_mode

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(message)s",
    )

    session = build_session(settings)
    if settings.async_mode:
        asyncio.run(session.analyze_file_async(args.path))
    else:
        session.analyze_file(args.path)

    print_report(session)
    return 0


if __name__ == "__main__":
    sys.exit(main())
