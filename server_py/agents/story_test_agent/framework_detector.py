import json
import logging
from pathlib import Path
from typing import Any, Dict

from .constants import JEST_CONFIG_FILES, VITEST_CONFIG_FILES, PLAYWRIGHT_CONFIG_FILES
from .models import TestFramework

logger = logging.getLogger(__name__)


def _load_manifest(root: Path) -> Dict[str, Any]:
    pkg_path = root / "package.json"
    try:
        with open(pkg_path, 'r', encoding='utf-8') as f:
            pkg = json.load(f)
    except (OSError, ValueError) as e:
        logger.info(f"No usable package.json at {pkg_path}: {e}")
        return {}
    return pkg if isinstance(pkg, dict) else {}


def _has_dependency(pkg: Dict[str, Any], name: str) -> bool:
    for section in ("dependencies", "devDependencies"):
        deps = pkg.get(section)
        if isinstance(deps, dict) and deps.get(name):
            return True
    return False


def _any_exists(root: Path, names) -> bool:
    return any((root / name).exists() for name in names)


def detect_framework(workspace_path: str) -> TestFramework:
    """Classify the workspace's test framework.

    Dependency evidence from package.json wins over config files.
    """
    root = Path(workspace_path)
    pkg = _load_manifest(root)

    if _has_dependency(pkg, "vitest"):
        return TestFramework.VITEST
    if _has_dependency(pkg, "jest") or _has_dependency(pkg, "@jest/globals"):
        return TestFramework.JEST
    if _has_dependency(pkg, "playwright") or _has_dependency(pkg, "@playwright/test"):
        return TestFramework.PLAYWRIGHT

    if _any_exists(root, JEST_CONFIG_FILES):
        return TestFramework.JEST
    if _any_exists(root, VITEST_CONFIG_FILES):
        return TestFramework.VITEST
    if _any_exists(root, PLAYWRIGHT_CONFIG_FILES):
        return TestFramework.PLAYWRIGHT

    return TestFramework.UNKNOWN
