"""
Pytest configuration for StoryToTest tests.

The service modules live under server_py/ and import each other as top-level
packages (core, utils, agents, ...), so that directory goes on sys.path.

Run with: pytest -v
"""

import json
import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).parent.parent
SERVER_ROOT = PROJECT_ROOT / "server_py"
sys.path.insert(0, str(SERVER_ROOT))


CART_SOURCE = """\
export interface CartItem {
  id: string;
  name: string;
  quantity?: number;
}

export default class CartService {
  addItem(item: CartItem): void {
    console.log(item);
  }
}
"""


def write_workspace(root: Path, files: dict, package_json: dict = None, tsconfig: str = '{"compilerOptions": {}}'):
    """Lay out a small TypeScript project under `root`."""
    if tsconfig is not None:
        (root / "tsconfig.json").write_text(tsconfig, encoding="utf-8")
    if package_json is not None:
        (root / "package.json").write_text(json.dumps(package_json), encoding="utf-8")
    for rel_path, content in files.items():
        path = root / rel_path
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
    return root


@pytest.fixture
def cart_workspace(tmp_path):
    """Vitest project exposing CartItem / CartService from src/cart.ts."""
    root = tmp_path.resolve()
    return write_workspace(
        root,
        {"src/cart.ts": CART_SOURCE},
        package_json={"devDependencies": {"vitest": "^1.0.0"}},
    )
