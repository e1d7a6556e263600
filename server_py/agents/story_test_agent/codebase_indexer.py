"""Lexical index of exported TypeScript interfaces and classes.

The scanner works on two aligned copies of each file: `code` has comments
blanked out, `masked` additionally blanks string and regex-literal contents.
Structure (braces, declarations, member boundaries) is read from `masked`,
text (types, signatures) is sliced from `code` at the same offsets.
"""
import asyncio
import re
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from utils.exceptions import IndexingError
from utils.text import collapse_whitespace, parse_jsonc

from .constants import logger, SOURCE_DIRS, SOURCE_EXTENSIONS, IGNORE_DIRS
from .models import ClassInfo, CodebaseIndex, InterfaceInfo, PropertyInfo

_DECLARATION = re.compile(
    r"^[ \t]*(?P<export>export[ \t]+(?P<default>default[ \t]+)?)?(?:declare[ \t]+)?(?:abstract[ \t]+)?"
    r"(?P<kind>interface|class)\b[ \t]*(?P<name>[A-Za-z_$][\w$]*)?",
    re.MULTILINE,
)
_EXPORT_LIST = re.compile(
    r"^[ \t]*export[ \t]+(?:type[ \t]+)?\{(?P<body>[^}]*)\}(?P<source>[ \t]*from\b)?",
    re.MULTILINE,
)
_EXPORT_DEFAULT_NAME = re.compile(
    r"^[ \t]*export[ \t]+default[ \t]+(?P<name>[A-Za-z_$][\w$]*)[ \t]*;?[ \t]*$",
    re.MULTILINE,
)
_MEMBER = re.compile(
    r"^(?:readonly\s+)?(?P<name>[A-Za-z_$][\w$]*|\"[^\"]*\"|'[^']*')\s*\??\s*(?P<rest>[:(<][\s\S]*)$"
)
_METHOD_HEAD = re.compile(
    r"^[ \t]*(?:@[\w.]+(?:\([^)\n]*\))?\s*)*"
    r"(?:(?:public|private|protected|static|async|override|abstract|declare)[ \t]+)*"
    r"(?:\*[ \t]*)?(?P<accessor>(?:get|set)[ \t]+)?"
    r"(?P<name>#?[A-Za-z_$][\w$]*)[ \t]*\??[ \t]*(?:<[^>\n]*>)?[ \t]*\(",
    re.MULTILINE,
)
_HERITAGE_WORDS = {"extends", "implements"}
_OPENERS = {"(": ")", "[": "]", "{": "}", "<": ">"}
_CLOSERS = {")", "]", "}", ">"}
_REGEX_PRECEDERS = set("(,=:[!&|?{};+-*%~^")
_REGEX_KEYWORDS = {
    "return", "typeof", "case", "do", "else", "in", "of", "new", "delete", "void", "throw", "yield", "await",
}


def _regex_allowed(code: List[str], i: int) -> bool:
    """True when a `/` at `i` starts a regex literal rather than a division."""
    k = i - 1
    while k >= 0 and code[k] in " \t\r\n":
        k -= 1
    if k < 0:
        return True
    prev = code[k]
    if prev == ">":
        return k > 0 and code[k - 1] == "="
    if prev in _REGEX_PRECEDERS:
        return True
    end = k + 1
    while k >= 0 and (code[k].isalnum() or code[k] in "_$"):
        k -= 1
    return "".join(code[k + 1:end]) in _REGEX_KEYWORDS


def _regex_literal_end(source: str, i: int) -> int:
    """Index of the closing `/` of a regex literal opened at `i`, or -1."""
    j, n = i + 1, len(source)
    in_class = False
    while j < n and source[j] != "\n":
        ch = source[j]
        if ch == "\\":
            j += 2
            continue
        if ch == "[":
            in_class = True
        elif ch == "]":
            in_class = False
        elif ch == "/" and not in_class:
            return j
        j += 1
    return -1


def _mask_source(source: str) -> Tuple[str, str]:
    code = list(source)
    masked = list(source)
    i, n = 0, len(source)

    while i < n:
        ch = source[i]
        if source.startswith("//", i):
            end = source.find("\n", i)
            end = n if end == -1 else end
            for j in range(i, end):
                code[j] = masked[j] = " "
            i = end
        elif source.startswith("/*", i):
            end = source.find("*/", i + 2)
            end = n if end == -1 else end + 2
            for j in range(i, end):
                if source[j] != "\n":
                    code[j] = masked[j] = " "
            i = end
        elif ch in ("'", '"', "`"):
            j = i + 1
            while j < n and source[j] != ch:
                if source[j] == "\\":
                    j += 1
                elif source[j] == "\n" and ch != "`":
                    break
                j += 1
            for k in range(i + 1, min(j, n)):
                if source[k] != "\n":
                    masked[k] = " "
            i = j + 1
        elif ch == "/" and _regex_allowed(code, i):
            end = _regex_literal_end(source, i)
            if end == -1:
                i += 1
                continue
            for k in range(i + 1, end):
                masked[k] = " "
            i = end + 1
        else:
            i += 1

    return "".join(code), "".join(masked)


def _find_block_end(masked: str, open_idx: int) -> int:
    depth = 0
    for i in range(open_idx, len(masked)):
        if masked[i] == "{":
            depth += 1
        elif masked[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    return len(masked)


def _find_body_start(masked: str, start: int) -> int:
    """First `{` after a declaration head that is not inside generic brackets."""
    angle = 0
    for i in range(start, len(masked)):
        ch = masked[i]
        if ch == "<":
            angle += 1
        elif ch == ">" and masked[i - 1] != "=":
            angle = max(angle - 1, 0)
        elif ch == "{" and angle == 0:
            return i
        elif ch == ";" and angle == 0:
            return -1
    return -1


def _split_members(code_body: str, masked_body: str) -> List[str]:
    members: List[str] = []
    depth = 0
    start = 0

    for i, ch in enumerate(masked_body):
        if ch in _OPENERS:
            depth += 1
        elif ch in _CLOSERS:
            if ch == ">" and i > 0 and masked_body[i - 1] == "=":
                continue
            depth = max(depth - 1, 0)
        elif depth == 0 and ch in ";,":
            members.append(code_body[start:i])
            start = i + 1
        elif depth == 0 and ch == "\n":
            pending = masked_body[start:i].rstrip()
            following = masked_body[i + 1:].lstrip()[:1]
            if pending and following and following not in "|&" and not pending.endswith((":", "|", "&", "=>")):
                members.append(code_body[start:i])
                start = i + 1

    members.append(code_body[start:])
    return [m.strip() for m in members if m.strip()]


def _parse_interface_members(code_body: str, masked_body: str) -> List[PropertyInfo]:
    properties: List[PropertyInfo] = []
    for chunk in _split_members(code_body, masked_body):
        if chunk.startswith("["):
            continue
        match = _MEMBER.match(chunk)
        if not match:
            continue
        name = match.group("name").strip("\"'")
        rest = match.group("rest")
        if rest.startswith(":"):
            type_text = rest[1:].strip().lstrip("|").strip()
        else:
            type_text = rest.strip()
        properties.append(PropertyInfo(name=name, type=collapse_whitespace(type_text)))
    return properties


def _top_level_text(masked_body: str) -> str:
    kept: List[str] = []
    depth = 0
    for ch in masked_body:
        if ch == "{":
            if depth == 0:
                kept.append(";")
            depth += 1
        elif ch == "}":
            depth = max(depth - 1, 0)
        elif depth == 0:
            kept.append(ch)
    return "".join(kept)


def _parse_class_methods(masked_body: str) -> List[str]:
    methods: List[str] = []
    for match in _METHOD_HEAD.finditer(_top_level_text(masked_body)):
        name = match.group("name")
        if match.group("accessor") or name == "constructor" or name in methods:
            continue
        methods.append(name)
    return methods


class _Declaration:
    def __init__(self, kind: str, name: str, is_default: bool, is_named: bool, members):
        self.kind = kind
        self.name = name
        self.is_default = is_default
        self.is_named = is_named
        self.members = members


def _collect_export_statements(masked: str) -> Tuple[Dict[str, Optional[str]], Set[str]]:
    named: Dict[str, Optional[str]] = {}
    defaults: Set[str] = set()

    for match in _EXPORT_LIST.finditer(masked):
        if match.group("source"):
            continue
        for spec in match.group("body").split(","):
            parts = spec.split()
            if parts and parts[0] == "type":
                parts = parts[1:]
            if not parts:
                continue
            local = parts[0]
            alias = parts[2] if len(parts) >= 3 and parts[1] == "as" else None
            if alias == "default":
                defaults.add(local)
            else:
                named[local] = alias

    for match in _EXPORT_DEFAULT_NAME.finditer(masked):
        defaults.add(match.group("name"))

    return named, defaults


def scan_source(source: str, file_path: str) -> Tuple[List[InterfaceInfo], List[ClassInfo]]:
    """Extract exported top-level interfaces and classes from one TypeScript file."""
    code, masked = _mask_source(source)
    declarations: List[_Declaration] = []

    depth = 0
    cursor = 0
    for match in _DECLARATION.finditer(masked):
        start = match.start()
        if start < cursor:
            continue
        segment = masked[cursor:start]
        depth += segment.count("{") - segment.count("}")
        cursor = start
        if depth != 0:
            continue

        kind = match.group("kind")
        name = match.group("name")
        if name in _HERITAGE_WORDS:
            name = None
        is_default = bool(match.group("default"))
        is_named = bool(match.group("export")) and not is_default

        body_start = _find_body_start(masked, match.end())
        if body_start == -1:
            continue
        body_end = _find_block_end(masked, body_start)
        code_body = code[body_start + 1:body_end]
        masked_body = masked[body_start + 1:body_end]
        cursor = min(body_end + 1, len(masked))

        if kind == "interface":
            if not name:
                continue
            members = _parse_interface_members(code_body, masked_body)
        else:
            if not name and not is_default:
                continue
            members = _parse_class_methods(masked_body)

        declarations.append(_Declaration(kind, name or "Anonymous", is_default, is_named, members))

    named_exports, default_exports = _collect_export_statements(masked)

    interfaces: List[InterfaceInfo] = []
    classes: List[ClassInfo] = []
    for decl in declarations:
        name = decl.name
        is_default = decl.is_default or name in default_exports
        is_named = decl.is_named or name in named_exports
        if not is_named and not is_default:
            continue
        if not decl.is_named and named_exports.get(name):
            name = named_exports[name]

        if decl.kind == "interface":
            interfaces.append(InterfaceInfo(
                name=name,
                file_path=file_path,
                properties=decl.members,
                is_default_export=is_default,
                is_named_export=is_named,
            ))
        else:
            classes.append(ClassInfo(
                name=name,
                file_path=file_path,
                methods=decl.members,
                is_default_export=is_default,
                is_named_export=is_named,
            ))

    return interfaces, classes


def _load_project_config(root: Path) -> dict:
    tsconfig = root / "tsconfig.json"
    try:
        raw = tsconfig.read_text(encoding="utf-8")
    except OSError as e:
        raise IndexingError(f"Cannot read project config {tsconfig}: {e}") from e
    try:
        config = parse_jsonc(raw)
    except ValueError as e:
        raise IndexingError(f"Malformed project config {tsconfig}: {e}") from e
    if not isinstance(config, dict):
        raise IndexingError(f"Malformed project config {tsconfig}: expected a JSON object")
    return config


def collect_source_files(root: Path) -> List[Path]:
    files: Set[Path] = set()
    for dir_name in SOURCE_DIRS:
        base = root / dir_name
        if not base.is_dir():
            continue
        for fp in base.rglob("*"):
            if any(part in IGNORE_DIRS for part in fp.relative_to(root).parts):
                continue
            if fp.suffix not in SOURCE_EXTENSIONS or fp.name.endswith(".d.ts"):
                continue
            if fp.is_file():
                files.add(fp)
    return sorted(files)


def _index_sync(workspace_path: str) -> CodebaseIndex:
    root = Path(workspace_path)
    logger.info(f"Starting to index codebase at: {workspace_path}")
    _load_project_config(root)

    source_files = collect_source_files(root)
    logger.info(f"Found {len(source_files)} TypeScript files")

    interfaces: List[InterfaceInfo] = []
    classes: List[ClassInfo] = []
    for fp in source_files:
        try:
            source = fp.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Skipping unreadable source file {fp}: {e}")
            continue
        file_interfaces, file_classes = scan_source(source, str(fp.resolve()))
        interfaces.extend(file_interfaces)
        classes.extend(file_classes)

    logger.info(f"Extracted {len(interfaces)} interfaces and {len(classes)} classes")
    return CodebaseIndex(interfaces=interfaces, classes=classes)


async def index_codebase(workspace_path: str) -> CodebaseIndex:
    """Build a fresh symbol index for the workspace.

    Raises:
        IndexingError: if tsconfig.json is missing, unreadable or malformed
    """
    return await asyncio.to_thread(_index_sync, workspace_path)
