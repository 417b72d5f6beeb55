"""
Shared helpers for analyzers.

All file access goes through the per-run FileCache, so analyzers that look
at the same files (package.json, playwright config, CI workflows) read each
of them once per audit.
"""

import asyncio
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, List, Optional, Pattern, Sequence, Union

from pwaudit.core.fs_cache import get_cache
from pwaudit.core.models import Category, Finding, Severity, Status
from pwaudit.core.scoring import compute_deduction_score

PathLike = Union[str, Path]

IGNORED_DIRS = frozenset({"node_modules", "dist", ".git"})

SOURCE_EXTS = re.compile(r"\.(t|j)sx?$", re.IGNORECASE)
TEST_FILE = re.compile(r"\.(spec|test)\.(t|j)sx?$")

# Типичные корни исходников тестового проекта
CODE_ROOTS = ("src", "tests", "test", "e2e", "__tests__", "scripts")

CONFIG_CANDIDATES = (
    "playwright.config.ts",
    "playwright.config.js",
    "playwright.config.mjs",
    "playwright.config.cjs",
)


# === Category building ===

def create_category(category_id: str, title: str) -> Category:
    """Новая пустая категория (создаётся заново на каждый вызов анализатора)."""
    return Category(id=category_id, title=title)


def make_id(prefix: str, title: str) -> str:
    """'data', 'Env files present' -> 'data-env-files-present'."""
    return f"{prefix}-" + re.sub(r"\W+", "-", title.lower())


def add_finding(
    category: Category,
    title: str,
    ok: bool,
    severity: Union[Severity, str],
    message: Optional[str] = None,
    suggestion: Optional[str] = None,
    file: Optional[str] = None,
    artifacts: Optional[Iterable[Optional[str]]] = None,
    finding_id: Optional[str] = None,
) -> Finding:
    """Добавить pass/fail проверку в категорию."""
    finding = Finding(
        id=finding_id or make_id(category.id, title),
        title=title,
        message=message if message is not None else ("Configured" if ok else "Not configured"),
        severity=Severity(severity),
        status=Status.PASS if ok else Status.FAIL,
        suggestion=suggestion,
        file=file,
        artifacts=[a for a in (artifacts or []) if a],
    )
    category.findings.append(finding)
    return finding


def finalize(category: Category) -> Category:
    """Проставить предварительный балл (вычет за проваленные проверки)."""
    category.score = compute_deduction_score(category.findings)
    return category


# === Text helpers ===

def has_match(pattern: Union[str, Pattern], text: Optional[str]) -> bool:
    if not text:
        return False
    return re.search(pattern, text) is not None


def strip_comments(text: str) -> str:
    """Убрать // и /* */ комментарии (грубо, без учёта строк)."""
    text = re.sub(r"/\*[\s\S]*?\*/", "", text)
    return re.sub(r"(^|[^:\\])//.*$", r"\1", text, flags=re.MULTILINE)


def pick(items: Iterable[str], n: int = 10) -> List[str]:
    return list(items)[:n]


# === File access ===

async def exists(path: PathLike) -> bool:
    return await get_cache().exists(path)


async def read_text(path: Optional[PathLike]) -> str:
    if not path:
        return ""
    return await get_cache().read_text(path)


async def read_json(path: Optional[PathLike]) -> Optional[Any]:
    if not path:
        return None
    return await get_cache().read_json(path)


async def first_existing(root: PathLike, candidates: Sequence[str]) -> Optional[str]:
    """Первый существующий путь из кандидатов (относительно root)."""
    for candidate in candidates:
        path = Path(candidate) if os.path.isabs(candidate) else Path(root) / candidate
        if await exists(path):
            return str(path)
    return None


async def find_config(root: PathLike, candidates: Sequence[str] = CONFIG_CANDIDATES) -> Optional[str]:
    return await first_existing(root, candidates)


def _walk(root: Path, exts: Optional[Pattern], limit: int) -> List[str]:
    out: List[str] = []
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in IGNORED_DIRS)
        for name in sorted(filenames):
            path = os.path.join(dirpath, name)
            if exts is None or exts.search(path):
                out.append(path)
                if len(out) >= limit:
                    return out
    return out


async def walk_files(
    root: PathLike, exts: Optional[Pattern] = SOURCE_EXTS, limit: int = 3000
) -> List[str]:
    """
    Рекурсивно собрать файлы под root, пропуская node_modules, dist и .git.

    Args:
        root: Директория для обхода (отсутствующая -> пустой список)
        exts: Фильтр по пути (None = все файлы)
        limit: Максимальное количество файлов
    """
    root = Path(root)
    if not await exists(root):
        return []
    return await asyncio.to_thread(_walk, root, exts, limit)


def expand_braces(pattern: str) -> List[str]:
    """'**/*.{ts,js}' -> ['**/*.ts', '**/*.js']."""
    match = re.search(r"\{([^{}]*)\}", pattern)
    if not match:
        return [pattern]
    head, tail = pattern[:match.start()], pattern[match.end():]
    out: List[str] = []
    for option in match.group(1).split(","):
        out.extend(expand_braces(head + option + tail))
    return out


def _glob(cwd: Path, patterns: Sequence[str]) -> List[str]:
    found: Dict[str, None] = {}
    for pattern in patterns:
        for expanded in expand_braces(pattern):
            for path in cwd.glob(expanded):
                parts = path.relative_to(cwd).parts
                if IGNORED_DIRS.intersection(parts) or not path.is_file():
                    continue
                found.setdefault(str(path), None)
    return list(found)


async def find_files(cwd: PathLike, patterns: Sequence[str]) -> List[str]:
    """Glob по шаблонам (с {a,b}), без node_modules, dist и .git."""
    cwd = Path(cwd)
    if not await exists(cwd):
        return []
    return await asyncio.to_thread(_glob, cwd, list(patterns))


async def find_first_file(
    target_dir: PathLike,
    predicate: Callable[[str, str], bool],
    roots: Sequence[str] = CODE_ROOTS,
) -> Optional[str]:
    """Первый исходный файл, для которого predicate(text, path) истинен."""
    for root in roots:
        for path in await walk_files(Path(target_dir) / root, limit=4000):
            if predicate(await read_text(path), path):
                return path
    return None


async def find_anti_pattern_files(
    target_dir: PathLike,
    pattern: Union[str, Pattern],
    roots: Sequence[str] = CODE_ROOTS,
    limit: int = 5,
) -> List[str]:
    """Файлы (не больше limit), где встречается pattern."""
    out: List[str] = []
    for root in roots:
        for path in await walk_files(Path(target_dir) / root, limit=6000):
            if has_match(pattern, await read_text(path)):
                out.append(path)
                if len(out) >= limit:
                    return out
    return out


async def scan_sources(
    target_dir: PathLike,
    evidence: Dict[str, Pattern],
    roots: Sequence[str] = CODE_ROOTS,
    limit: int = 2000,
) -> Dict[str, List[str]]:
    """
    Разложить исходники по "корзинам" улик.

    Returns:
        name -> список файлов, где найден evidence[name]
    """
    files: List[str] = []
    for root in roots:
        files.extend(await walk_files(Path(target_dir) / root))
    files = list(dict.fromkeys(files))[:limit]

    hits: Dict[str, List[str]] = {name: [] for name in evidence}
    for path in files:
        text = await read_text(path)
        if not text:
            continue
        for name, pattern in evidence.items():
            if pattern.search(text):
                hits[name].append(path)
    return hits


async def read_tsconfig(root: PathLike) -> Dict[str, Any]:
    path = await first_existing(root, [
        "tsconfig.json",
        "tsconfig.base.json",
        "tsconfig.build.json",
        "tsconfig.test.json",
    ])
    if not path:
        return {}
    return {"path": path, "json": await read_json(path)}


# === package.json ===

async def read_package_json(target_dir: PathLike) -> Dict[str, Any]:
    pkg = await read_json(Path(target_dir) / "package.json")
    return pkg if isinstance(pkg, dict) else {}


def dep_map(pkg: Optional[Dict[str, Any]]) -> Dict[str, str]:
    """dependencies + devDependencies."""
    pkg = pkg or {}
    deps: Dict[str, str] = {}
    for key in ("dependencies", "devDependencies"):
        section = pkg.get(key)
        if isinstance(section, dict):
            deps.update({str(k): str(v) for k, v in section.items()})
    return deps


def has_dep(deps: Dict[str, str], name: str) -> bool:
    return bool(deps.get(name))


def in_deps(pkg: Optional[Dict[str, Any]], names: Iterable[str]) -> bool:
    deps = dep_map(pkg)
    return any(name in deps for name in names)


def scripts_of(pkg: Optional[Dict[str, Any]]) -> Dict[str, str]:
    scripts = (pkg or {}).get("scripts")
    return {str(k): str(v) for k, v in scripts.items()} if isinstance(scripts, dict) else {}


def any_script_includes(scripts: Dict[str, str], pattern: Union[str, Pattern]) -> bool:
    return any(re.search(pattern, s) for s in scripts.values())


def looks_floating(version: str = "") -> bool:
    """'latest', '*' или 'X.Y' без патча."""
    return version in ("latest", "*") or re.fullmatch(r"\d+\.\d+", version) is not None


# === CI ===

@dataclass
class CiScan:
    has_github: bool = False
    has_gitlab: bool = False
    files: List[str] = field(default_factory=list)
    text_by_file: Dict[str, str] = field(default_factory=dict)

    @property
    def all_text(self) -> str:
        return "\n".join(self.text_by_file.values())


async def collect_ci_configs(target_dir: PathLike) -> CiScan:
    """Прочитать GitHub Actions workflows и .gitlab-ci.yml."""
    scan = CiScan()

    workflows = Path(target_dir) / ".github" / "workflows"
    if await exists(workflows):
        scan.has_github = True
        names = await asyncio.to_thread(lambda: sorted(os.listdir(workflows)) if workflows.is_dir() else [])
        for name in names:
            if not re.search(r"\.ya?ml$", name, re.IGNORECASE):
                continue
            path = str(workflows / name)
            scan.files.append(path)
            scan.text_by_file[path] = await read_text(path)

    for name in (".gitlab-ci.yml", ".gitlab-ci.yaml"):
        path = Path(target_dir) / name
        if await exists(path):
            scan.has_gitlab = True
            scan.files.append(str(path))
            scan.text_by_file[str(path)] = await read_text(path)

    return scan


def first_file_matching(scan: CiScan, pattern: Union[str, Pattern]) -> Optional[str]:
    for path in scan.files:
        if has_match(pattern, scan.text_by_file.get(path, "")):
            return path
    return None
