"""Story-to-test pipeline for a single invocation.

Everything an invocation needs (workspace, credentials, matcher, progress
channel) travels in a `PipelineContext`; nothing is cached between runs.
"""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from pydantic import BaseModel

from .codebase_indexer import index_codebase
from .component_search import SubstringMatcher, SymbolMatcher, search_components
from .constants import logger, DEFAULT_MODEL, MAX_ATTEMPTS, TEST_DIR_NAME
from .framework_detector import detect_framework
from .models import CodebaseIndex, ParsedStory, SearchResult, TestFramework, ValidationOutcome
from .progress import ProgressChannel
from .story_parser import parse_story
from .test_validator import validate_and_fix_test
from .utils.import_resolver import resolve_import

WARNING_NO_MATCH = "no_match"
WARNING_FRAMEWORK_UNKNOWN = "framework_unknown"


@dataclass
class PipelineContext:
    workspace_root: str
    api_key: str
    model: str = DEFAULT_MODEL
    api_base: Optional[str] = None
    max_attempts: int = MAX_ATTEMPTS
    extra_instructions: str = ""
    matcher: SymbolMatcher = field(default_factory=SubstringMatcher)
    progress: ProgressChannel = field(default_factory=ProgressChannel)

    @property
    def test_dir(self) -> str:
        return os.path.join(self.workspace_root, TEST_DIR_NAME)


class PipelineResult(BaseModel):
    outcome: ValidationOutcome
    framework: TestFramework
    parsed: ParsedStory
    search: SearchResult
    imports: List[str]
    warnings: List[str] = []
    written_path: Optional[str] = None


async def prepare_generation(story: str, ctx: PipelineContext):
    """Detect, index, parse, match and resolve imports for a story.

    Returns (framework, index, parsed, search, imports).
    """
    ctx.progress.progress("Detecting test framework...", phase="detect_framework")
    framework = detect_framework(ctx.workspace_root)
    logger.info(f"Detected framework: {framework.value}")

    ctx.progress.progress("Indexing codebase...", phase="index")
    index: CodebaseIndex = await index_codebase(ctx.workspace_root)

    ctx.progress.progress("Parsing story...", phase="parse")
    parsed = parse_story(story)
    logger.info(f"Story entities: {sorted(parsed.entities)}")

    ctx.progress.progress("Searching for matching components...", phase="search")
    search = search_components(index, parsed.entities, ctx.matcher)
    logger.info(
        f"Matched {len(search.matched_interfaces)} interfaces, {len(search.matched_classes)} classes"
    )

    ctx.progress.progress("Resolving imports...", phase="resolve_imports")
    imports = [resolve_import(iface, ctx.test_dir) for iface in search.matched_interfaces]

    return framework, index, parsed, search, imports


def write_artifact(test_dir: str, file_name: str, code: str) -> str:
    path = Path(test_dir) / file_name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(code, encoding="utf-8")
    return str(path)


async def run_story_pipeline(story: str, ctx: PipelineContext, write_file: bool = False) -> PipelineResult:
    """Turn a story into a validated test for the workspace in `ctx`.

    Missing matches and an undetected framework are reported as warnings on
    the progress channel and do not stop the run. Indexing and generation
    errors propagate.
    """
    framework, index, parsed, search, imports = await prepare_generation(story, ctx)

    warnings: List[str] = []
    if framework == TestFramework.UNKNOWN:
        warnings.append(WARNING_FRAMEWORK_UNKNOWN)
        ctx.progress.warning(
            "Could not detect a test framework (jest, vitest or playwright); tests cannot be executed.",
            phase="detect_framework",
            code=WARNING_FRAMEWORK_UNKNOWN,
        )
    if search.is_empty:
        warnings.append(WARNING_NO_MATCH)
        ctx.progress.warning(
            f"No interfaces or classes matched the story (indexed {len(index.interfaces)} interfaces, "
            f"{len(index.classes)} classes).",
            phase="search",
            code=WARNING_NO_MATCH,
        )

    ctx.progress.progress("Generating and validating tests...", phase="validate")
    outcome = await validate_and_fix_test(
        ctx.api_key,
        story,
        search,
        ctx.test_dir,
        framework,
        imports,
        ctx.workspace_root,
        model=ctx.model,
        base_extra=ctx.extra_instructions,
        max_attempts=ctx.max_attempts,
        progress=ctx.progress,
        api_base=ctx.api_base,
    )

    written_path = None
    if write_file:
        written_path = write_artifact(ctx.test_dir, outcome.file_name, outcome.code)
        logger.info(f"Wrote {written_path}")

    status = "passed" if outcome.passed else "did not pass"
    ctx.progress.emit(
        "success" if outcome.passed else "info",
        f"Generated {outcome.file_name} from {len(search.matched_interfaces)} interfaces and "
        f"{len(search.matched_classes)} classes; validation {status} after {outcome.attempts} attempt(s).",
        phase="done",
    )

    return PipelineResult(
        outcome=outcome,
        framework=framework,
        parsed=parsed,
        search=search,
        imports=imports,
        warnings=warnings,
        written_path=written_path,
    )
