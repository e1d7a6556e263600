import os
from typing import Union

from ..constants import IMPORT_STRIP_EXTENSIONS
from ..models import ClassInfo, InterfaceInfo


def calculate_import_path(test_dir: str, source_file_path: str) -> str:
    """Module specifier for `source_file_path` as seen from a file in `test_dir`."""
    rel_path = os.path.relpath(source_file_path, test_dir)

    for ext in IMPORT_STRIP_EXTENSIONS:
        if rel_path.endswith(ext):
            rel_path = rel_path[: -len(ext)]
            break

    import_path = rel_path.replace(os.sep, "/").replace(chr(92), "/")

    if not import_path.startswith("."):
        import_path = "./" + import_path

    return import_path


def resolve_import(symbol: Union[InterfaceInfo, ClassInfo], test_dir: str) -> str:
    """Build the import statement for a symbol, keeping its default/named export shape.

    Example: import { BlogCardProps } from "../app/components/BlogCard";
    """
    import_path = calculate_import_path(test_dir, symbol.file_path)
    name = symbol.name or "DefaultExport"

    if symbol.is_default_export:
        return f'import {name} from "{import_path}";'

    return f'import {{ {name} }} from "{import_path}";'
