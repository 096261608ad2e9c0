"""Чтение локальных модулей и загрузка удалённых."""

import asyncio
import json
import logging
import subprocess
import tempfile
from pathlib import Path

import httpx

from .errors import ResolutionError, SourceReadError
from .models import ModuleSource

logger = logging.getLogger(__name__)


class JsrResolver:
    """Разрешение `jsr:` спецификаторов в URL через `deno info --json`."""

    def __init__(self, deno_executable: str = "deno"):
        self.deno_executable = deno_executable

    def resolve(self, specifier: str) -> str:
        with tempfile.TemporaryDirectory() as tmp:
            entry = self._write_entry(Path(tmp), specifier)
            try:
                completed = subprocess.run(
                    [self.deno_executable, "info", str(entry), "--json"],
                    capture_output=True,
                    check=True,
                    text=True,
                )
            except (OSError, subprocess.CalledProcessError) as e:
                raise ResolutionError(specifier, f"deno info failed: {e}") from e

        return self._parse_info(specifier, completed.stdout)

    async def aresolve(self, specifier: str) -> str:
        with tempfile.TemporaryDirectory() as tmp:
            entry = self._write_entry(Path(tmp), specifier)
            try:
                process = await asyncio.create_subprocess_exec(
                    self.deno_executable,
                    "info",
                    str(entry),
                    "--json",
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.PIPE,
                )
                stdout, stderr = await process.communicate()
            except OSError as e:
                raise ResolutionError(specifier, f"deno info failed: {e}") from e

        if process.returncode != 0:
            raise ResolutionError(
                specifier, f"deno info exited with {process.returncode}: {stderr.decode().strip()}"
            )
        return self._parse_info(specifier, stdout.decode())

    def _write_entry(self, tmp_dir: Path, specifier: str) -> Path:
        entry = tmp_dir / "resolve.ts"
        entry.write_text(f'import {{}} from "{specifier}";\n', encoding="utf-8")
        return entry

    def _parse_info(self, specifier: str, output: str) -> str:
        try:
            info = json.loads(output)
        except json.JSONDecodeError as e:
            raise ResolutionError(specifier, f"invalid deno info output: {e}") from e

        url = info.get("redirects", {}).get(specifier)
        if not url:
            raise ResolutionError(specifier, "no redirect in deno info output")
        return url


class SourceProvider:
    """Источник текста модулей: файловая система и HTTP."""

    def __init__(
        self,
        remote_schemes: tuple[str, ...] = ("jsr:", "https://", "http://"),
        jsr_resolver: JsrResolver | None = None,
        http_timeout: float = 30.0,
    ):
        self.remote_schemes = remote_schemes
        self.jsr_resolver = jsr_resolver if jsr_resolver is not None else JsrResolver()
        self.http_timeout = http_timeout

    def read(self, module_id: str) -> ModuleSource:
        """
        Прочитать модуль синхронно.

        Raises:
            SourceReadError: файл недоступен или загрузка не удалась
            ResolutionError: не удалось разрешить jsr: спецификатор
        """
        if not module_id.startswith(self.remote_schemes):
            return ModuleSource(module_id, self._read_local(module_id), module_id)

        url = self.jsr_resolver.resolve(module_id) if module_id.startswith("jsr:") else module_id
        logger.info(f"[Source] Fetching module from {url}")
        try:
            with httpx.Client(timeout=self.http_timeout, follow_redirects=True) as client:
                response = client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise SourceReadError(module_id, f"fetch failed: {e}") from e

        return ModuleSource(module_id, response.text, str(response.url))

    async def aread(self, module_id: str) -> ModuleSource:
        """Прочитать модуль, не блокируя цикл событий."""
        if not module_id.startswith(self.remote_schemes):
            text = await asyncio.to_thread(self._read_local, module_id)
            return ModuleSource(module_id, text, module_id)

        url = (
            await self.jsr_resolver.aresolve(module_id)
            if module_id.startswith("jsr:")
            else module_id
        )
        logger.info(f"[Source] Fetching module from {url}")
        try:
            async with httpx.AsyncClient(
                timeout=self.http_timeout, follow_redirects=True
            ) as client:
                response = await client.get(url)
                response.raise_for_status()
        except httpx.HTTPError as e:
            raise SourceReadError(module_id, f"fetch failed: {e}") from e

        return ModuleSource(module_id, response.text, str(response.url))

    def _read_local(self, path: str) -> str:
        try:
            return Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise SourceReadError(path, str(e)) from e
