from __future__ import annotations

import json
import os
import re
from collections.abc import Callable
from pathlib import Path
from typing import Any

MAKEFILE_NAMES = ("GNUmakefile", "makefile", "Makefile")
MAKE_TARGET_PATTERN = re.compile(r"^([A-Za-z0-9_][A-Za-z0-9_./-]*)\s*:(?![:=])")


def _makefile(directory: Path) -> Path | None:
    for name in MAKEFILE_NAMES:
        candidate = directory / name
        if candidate.is_file():
            return candidate
    return None


def makefile_targets(text: str) -> list[str]:
    targets: list[str] = []
    for line in text.splitlines():
        match = MAKE_TARGET_PATTERN.match(line)
        if not match:
            continue
        target = match.group(1)
        if "%" in target or target in targets:
            continue
        targets.append(target)
    return targets


def makefile_recipe() -> list[dict[str, Any]]:
    directory = Path.cwd()
    makefile = _makefile(directory)
    if makefile is None:
        return []
    targets = makefile_targets(makefile.read_text(encoding="utf-8", errors="replace"))
    return [
        {
            "command-name": target,
            "command-line": f"make {target}",
            "working-dir": str(directory),
        }
        for target in targets
    ]


def _package_manager(directory: Path) -> str:
    if (directory / "yarn.lock").exists():
        return "yarn"
    if (directory / "pnpm-lock.yaml").exists():
        return "pnpm"
    return "npm"


def package_json_recipe() -> list[dict[str, Any]]:
    directory = Path.cwd()
    manifest = directory / "package.json"
    if not manifest.is_file():
        return []
    try:
        scripts = json.loads(manifest.read_text(encoding="utf-8")).get("scripts", {})
    except (json.JSONDecodeError, AttributeError):
        return []
    if not isinstance(scripts, dict):
        return []
    manager = _package_manager(directory)
    return [
        {
            "command-name": name,
            "command-line": f"{manager} run {name}",
            "display": f"{name}: {body}" if isinstance(body, str) else name,
            "working-dir": str(directory),
        }
        for name, body in scripts.items()
    ]


def executables_recipe() -> list[dict[str, Any]]:
    directory = Path.cwd()
    entries: list[dict[str, Any]] = []
    for path in sorted(directory.iterdir()):
        if path.name.startswith(".") or not path.is_file():
            continue
        if not os.access(path, os.X_OK):
            continue
        entries.append(
            {
                "command-name": path.name,
                "command-line": f"./{path.name}",
                "working-dir": str(directory),
            }
        )
    return entries


def example_recipe() -> list[dict[str, Any]]:
    return [
        {
            "command-name": "serve-http",
            "command-line": "python3 -m http.server 8000",
            "display": "Serve current directory over HTTP on port 8000",
        },
        {
            "command-name": "disk-usage",
            "command-line": "du -sh .",
            "display": "Disk usage of current directory",
        },
        {
            "command-name": "list-files",
            "command-line": "ls -la",
        },
    ]


BUILTIN_RECIPES: dict[str, Callable[[], list[dict[str, Any]]]] = {
    "makefile": makefile_recipe,
    "package-json": package_json_recipe,
    "executables": executables_recipe,
    "example": example_recipe,
}
