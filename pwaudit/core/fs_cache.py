"""
Per-run file cache.

One FileCache lives for exactly one audit run. It is installed in a
context variable so analyzers keep the plain ``(target_dir)`` signature
and still share reads within the run.
"""

import asyncio
import json
import logging
from contextlib import contextmanager
from contextvars import ContextVar
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Union

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class FileCache:
    """Кэш существования и содержимого файлов (path -> text, path -> bool)."""

    def __init__(self):
        self._text: Dict[str, str] = {}
        self._exists: Dict[str, bool] = {}

    @staticmethod
    def _key(path: PathLike) -> str:
        return str(Path(path))

    async def exists(self, path: PathLike) -> bool:
        key = self._key(path)
        if key not in self._exists:
            self._exists[key] = await asyncio.to_thread(Path(key).exists)
        return self._exists[key]

    async def read_text(self, path: PathLike) -> str:
        """
        Прочитать файл как UTF-8 текст.

        Нечитаемый или отсутствующий файл -> пустая строка.
        """
        key = self._key(path)
        if key not in self._text:
            try:
                self._text[key] = await asyncio.to_thread(
                    Path(key).read_text, encoding="utf-8", errors="replace"
                )
            except OSError as e:
                logger.debug(f"Cannot read {key}: {e}")
                self._text[key] = ""
        return self._text[key]

    async def read_json(self, path: PathLike) -> Optional[Any]:
        """Прочитать JSON файл; None если файла нет или JSON битый."""
        text = await self.read_text(path)
        if not text:
            return None
        try:
            return json.loads(text)
        except ValueError:
            logger.debug(f"Invalid JSON in {path}")
            return None

    def clear(self):
        self._text.clear()
        self._exists.clear()


_current_cache: ContextVar[Optional[FileCache]] = ContextVar("pwaudit_file_cache", default=None)


def get_cache() -> FileCache:
    """
    Кэш текущего запуска.

    Вне запуска (например, анализатор вызван напрямую в тесте)
    создаётся и устанавливается новый кэш.
    """
    cache = _current_cache.get()
    if cache is None:
        cache = FileCache()
        _current_cache.set(cache)
    return cache


@contextmanager
def use_cache(cache: FileCache) -> Iterator[FileCache]:
    """Установить кэш на время одного запуска аудита."""
    token = _current_cache.set(cache)
    try:
        yield cache
    finally:
        _current_cache.reset(token)
