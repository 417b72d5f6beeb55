"""
Resilient analyzer runner.

Resolves an analyzer module by its stem, looks up the analyzer function,
runs it against the target directory and converts every outcome
(success, load failure, crash) into data.
"""

import importlib
import importlib.util
import inspect
import logging
import sys
from pathlib import Path
from types import ModuleType
from typing import Callable, List, Optional, Sequence, Tuple

from .exceptions import AnalyzerLoadError
from .fs_cache import get_cache
from .models import (
    Category,
    Finding,
    Severity,
    Status,
    error_category,
    is_category_like,
    normalize_category,
)
from .registry import AnalyzerEntry

logger = logging.getLogger(__name__)

BUNDLED_ANALYZERS_DIR = Path(__file__).resolve().parent.parent / "analyzers"
LOCAL_ANALYZERS_DIR = Path(__file__).resolve().parent / "analyzers"

# Варианты файла модуля в каждой директории поиска
MODULE_VARIANTS = ("{stem}.py", "{stem}.pyc", "{stem}/__init__.py")

BARE_SPECIFIERS = ("pwaudit.analyzers.{stem}", "{stem}")

NO_RESULT_MESSAGE = "Analyzer returned no result"


class AnalyzerRunner:
    """
    Загрузка и запуск анализаторов.

    Порядок поиска модуля:
    1. Пользовательские директории плагинов (analyzer_paths)
    2. Встроенный пакет pwaudit/analyzers
    3. analyzers/ рядом с этим модулем
    Затем импорт по имени: pwaudit.analyzers.<stem>, <stem>.
    """

    def __init__(self, analyzer_paths: Optional[Sequence[str]] = None):
        self.analyzer_paths = [Path(p).expanduser() for p in (analyzer_paths or [])]

    @property
    def search_paths(self) -> List[Path]:
        return [*self.analyzer_paths, BUNDLED_ANALYZERS_DIR, LOCAL_ANALYZERS_DIR]

    def candidates(self, stem: str) -> List[Path]:
        """Все пути-кандидаты для модуля в порядке приоритета."""
        return [
            directory / variant.format(stem=stem)
            for directory in self.search_paths
            for variant in MODULE_VARIANTS
        ]

    async def load_module(self, stem: str) -> ModuleType:
        """
        Найти и загрузить модуль анализатора.

        Raises:
            AnalyzerLoadError: ни один кандидат не загрузился
        """
        cache = get_cache()
        tried: List[str] = []
        errors: List[str] = []

        for path in self.candidates(stem):
            tried.append(str(path))
            if not await cache.exists(path):
                continue
            try:
                module = _load_from_path(stem, path)
                logger.debug(f"Loaded analyzer '{stem}' from {path}")
                return module
            except Exception as e:
                logger.warning(f"Failed to load analyzer '{stem}' from {path}: {e}")
                errors.append(f"{path}: {type(e).__name__}: {e}")

        for pattern in BARE_SPECIFIERS:
            specifier = pattern.format(stem=stem)
            tried.append(specifier)
            try:
                module = importlib.import_module(specifier)
                logger.debug(f"Imported analyzer '{stem}' as {specifier}")
                return module
            except ModuleNotFoundError as e:
                if e.name not in (specifier, specifier.rpartition(".")[0]):
                    errors.append(f"{specifier}: {type(e).__name__}: {e}")
            except Exception as e:
                errors.append(f"{specifier}: {type(e).__name__}: {e}")

        raise AnalyzerLoadError(stem, tried, errors)

    async def run(
        self, entry: AnalyzerEntry, target_dir: str
    ) -> Tuple[Optional[Category], Optional[Finding]]:
        """
        Запустить один анализатор.

        Returns:
            (category, None) если анализатор выполнился (даже с ошибкой),
            (None, load_issue) если модуль или функцию не удалось найти
        """
        try:
            module = await self.load_module(entry.analyzer_name)
        except AnalyzerLoadError as e:
            logger.warning(f"Analyzer not loaded: {entry.title} ({len(e.tried)} paths tried)")
            return None, load_issue(entry, e)

        fn = resolve_function(module, entry.function_name)
        if fn is None:
            logger.warning(f"No analyzer function in {module.__name__} for {entry.title}")
            return None, Finding(
                id=f"no-fn-{entry.id}",
                title=f"Analyzer function missing: {entry.title}",
                message=(
                    f"Module {module.__name__} has no callable '{entry.function_name}' "
                    f"and no other public function"
                ),
                severity=Severity.HIGH,
                status=Status.FAIL,
            )

        try:
            out = fn(target_dir)
            if inspect.isawaitable(out):
                out = await out
            if not is_category_like(out):
                logger.error(f"Analyzer {entry.title} returned {type(out).__name__}")
                return error_category(entry.id, entry.title, NO_RESULT_MESSAGE), None
            category = normalize_category(entry.id, entry.title, out)
        except Exception as e:
            logger.error(f"Analyzer {entry.title} failed: {e}", exc_info=True)
            return error_category(entry.id, entry.title, str(e) or type(e).__name__), None

        return category, None


def _load_from_path(stem: str, path: Path) -> ModuleType:
    bundled_name = f"pwaudit.analyzers.{stem}"
    module_name = f"_pwaudit_analyzer_{stem}"

    # Уже загруженный модуль из того же файла не исполняем повторно
    for name in (bundled_name, module_name):
        loaded = sys.modules.get(name)
        if loaded is not None and _same_file(loaded, path):
            return loaded

    if path in (BUNDLED_ANALYZERS_DIR / f"{stem}.py", BUNDLED_ANALYZERS_DIR / stem / "__init__.py"):
        return importlib.import_module(bundled_name)

    locations = [str(path.parent)] if path.name == "__init__.py" else None
    spec = importlib.util.spec_from_file_location(
        module_name, path, submodule_search_locations=locations
    )
    if spec is None or spec.loader is None:
        raise ImportError(f"No loader for {path}")

    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    try:
        spec.loader.exec_module(module)
    except BaseException:
        sys.modules.pop(module_name, None)
        raise
    return module


def _same_file(module: ModuleType, path: Path) -> bool:
    file = getattr(module, "__file__", None)
    if not file:
        return False
    try:
        return Path(file).resolve() == path.resolve()
    except OSError:
        return False


def resolve_function(module: ModuleType, name: str) -> Optional[Callable]:
    """
    Функция анализатора: ожидаемое имя, иначе первая публичная функция модуля.

    Если в модуле есть __all__, перебираются только его имена.
    """
    fn = getattr(module, name, None)
    if callable(fn):
        return fn

    exported = getattr(module, "__all__", None)
    if exported is not None:
        for attr in exported:
            candidate = getattr(module, attr, None)
            if callable(candidate):
                return candidate
        return None

    for attr, candidate in vars(module).items():
        if attr.startswith("_"):
            continue
        if inspect.isfunction(candidate) and candidate.__module__ == module.__name__:
            return candidate
    return None


def load_issue(entry: AnalyzerEntry, error: AnalyzerLoadError) -> Finding:
    """Finding для анализатора, модуль которого не загрузился."""
    lines = ["Tried:"]
    lines.extend(f"  - {path}" for path in error.tried)
    if error.errors:
        lines.append("Errors:")
        lines.extend(f"  - {message}" for message in error.errors)

    return Finding(
        id=f"load-{entry.id}",
        title=f"Analyzer not loaded: {entry.title}",
        message="\n".join(lines),
        severity=Severity.HIGH,
        status=Status.FAIL,
        suggestion=(
            f"Add {entry.analyzer_name}.py to pwaudit/analyzers or to a directory "
            f"listed in PWAUDIT_ANALYZER_PATHS"
        ),
    )
