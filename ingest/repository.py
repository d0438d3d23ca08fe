"""
Local repository introspection for the documentation generator.
Everything here is best-effort context for the prompt: failures are logged and replaced
with a short "not available" string instead of aborting the run.
"""
import json
import logging
import os
import subprocess
import time
import tokenize
import tomllib
from collections import Counter
from dataclasses import dataclass
from typing import Iterator, List, Optional

from radon.complexity import cc_visit
from radon.raw import analyze

logger = logging.getLogger(__name__)

STRUCTURE_EXTENSIONS = (".py", ".js", ".json", ".md", ".yml", ".yaml", ".toml")
SKIP_DIRS = {".git", "node_modules", ".venv", "venv", "__pycache__", ".mypy_cache", ".pytest_cache", ".tox", "dist", "build"}
README_NAMES = ("README.md", "readme.md", "README.MD", "README.txt", "README.rst")
STRUCTURE_LIMIT = 50
README_LIMIT = 3000


@dataclass(frozen=True)
class RepositoryInfo:
    project_structure: str
    readme: str
    package_info: str
    code_analysis: Optional[str]
    gathering_time_ms: int


def iter_files(root: str) -> Iterator[str]:
    """Relative paths of files under root, skipping VCS, dependency and cache dirs."""
    for dirpath, dirnames, filenames in os.walk(root):
        dirnames[:] = sorted(d for d in dirnames if d not in SKIP_DIRS and not d.endswith(".egg-info"))
        for name in sorted(filenames):
            yield os.path.relpath(os.path.join(dirpath, name), root)


def project_structure(root: str, limit: int = STRUCTURE_LIMIT) -> str:
    try:
        paths: List[str] = []
        for rel in iter_files(root):
            if rel.endswith(STRUCTURE_EXTENSIONS):
                paths.append("./" + rel.replace(os.sep, "/"))
                if len(paths) >= limit:
                    break
    except OSError as exc:
        logger.warning("Could not generate project structure: %s", exc)
        return "Project structure not available"
    return "Project Files:\n" + "\n".join(paths)


def read_readme(root: str, limit: int = README_LIMIT) -> str:
    for name in README_NAMES:
        path = os.path.join(root, name)
        if not os.path.isfile(path):
            continue
        try:
            with open(path, "r", encoding="utf-8", errors="replace") as fh:
                return fh.read(limit)
        except OSError as exc:
            logger.warning("Error reading README %s: %s", path, exc)
            return "README content not available"
    return "No README file found"


def _pyproject_info(path: str) -> str:
    with open(path, "rb") as fh:
        project = tomllib.load(fh).get("project") or {}
    return (
        f"Package: {project.get('name') or 'Unknown'}\n"
        f"Version: {project.get('version') or 'Unknown'}\n"
        f"Description: {project.get('description') or 'No description'}\n"
        f"Dependencies: {', '.join(project.get('dependencies') or [])}\n"
        f"Optional Dependencies: {', '.join(sorted((project.get('optional-dependencies') or {}).keys()))}"
    )


def _package_json_info(path: str) -> str:
    with open(path, "r", encoding="utf-8") as fh:
        pkg = json.load(fh)
    return (
        f"Package: {pkg.get('name') or 'Unknown'}\n"
        f"Version: {pkg.get('version') or 'Unknown'}\n"
        f"Description: {pkg.get('description') or 'No description'}\n"
        f"Dependencies: {', '.join((pkg.get('dependencies') or {}).keys())}\n"
        f"Dev Dependencies: {', '.join((pkg.get('devDependencies') or {}).keys())}"
    )


def package_info(root: str) -> str:
    """Name/version/dependencies from pyproject.toml, falling back to package.json."""
    readers = (("pyproject.toml", _pyproject_info), ("package.json", _package_json_info))
    for filename, reader in readers:
        path = os.path.join(root, filename)
        if not os.path.isfile(path):
            continue
        try:
            return reader(path)
        except (OSError, ValueError, tomllib.TOMLDecodeError) as exc:
            logger.warning("Error reading %s: %s", filename, exc)
            return "Package information not available"
    return "No package metadata found"


def recent_commits(root: str, count: int = 5) -> str:
    try:
        result = subprocess.run(
            ["git", "log", "--oneline", f"-{count}"], cwd=root, capture_output=True, text=True, check=True, timeout=30
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("git log failed in %s: %s", root, exc)
        return "Git history not available"
    return result.stdout.strip() or "Git history not available"


def _python_stats(root: str, python_files: List[str]):
    total_lines = 0
    blocks = []
    for rel in python_files:
        try:
            with open(os.path.join(root, rel), "r", encoding="utf-8", errors="replace") as fh:
                src = fh.read()
            total_lines += analyze(src).loc
            blocks.extend((rel, b) for b in cc_visit(src))
        except (OSError, SyntaxError, ValueError, tokenize.TokenError) as exc:
            logger.debug("Skipping %s in code analysis: %s", rel, exc)
    return total_lines, blocks


def code_analysis(root: str) -> str:
    """File statistics, radon complexity hot spots and recent history."""
    try:
        files = list(iter_files(root))
    except OSError as exc:
        logger.warning("Error performing code analysis: %s", exc)
        return "Code analysis not available"
    python_files = [f for f in files if f.endswith(".py")]
    total_lines, blocks = _python_stats(root, python_files)

    if blocks:
        average = sum(b.complexity for _, b in blocks) / len(blocks)
        hottest = sorted(blocks, key=lambda item: item[1].complexity, reverse=True)[:5]
        complexity = f"{average:.2f} average over {len(blocks)} blocks\n" + "\n".join(
            f"  {rel}:{b.lineno} {b.name} (complexity={b.complexity})" for rel, b in hottest
        )
    else:
        complexity = "no Python blocks found"

    extensions = Counter(os.path.splitext(f)[1].lstrip(".") or "(none)" for f in files)
    file_types = "\n".join(f"  {count} {ext}" for ext, count in extensions.most_common(10))

    return (
        "Code Analysis:\n"
        f"- Python files: {len(python_files)}\n"
        f"- Total lines of Python: {total_lines}\n"
        f"- Cyclomatic complexity: {complexity}\n"
        f"- Recent commits:\n{recent_commits(root)}\n"
        f"- File types:\n{file_types}"
    )


def gather_repository_info(root: str, include_code_analysis: bool = False) -> RepositoryInfo:
    start = time.monotonic()
    logger.info("Gathering repository information from %s (code analysis: %s)", root, include_code_analysis)
    info = RepositoryInfo(
        project_structure=project_structure(root),
        readme=read_readme(root),
        package_info=package_info(root),
        code_analysis=code_analysis(root) if include_code_analysis else None,
        gathering_time_ms=int((time.monotonic() - start) * 1000),
    )
    logger.info("Repository info gathered in %dms", info.gathering_time_ms)
    return info
