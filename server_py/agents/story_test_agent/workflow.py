import time
from typing import Optional

from core.config import WorkflowConfig
from services.github_client import GitHubClient

from .constants import (
    logger,
    BRANCH_PREFIX,
    DEFAULT_MODEL,
    FALLBACK_BASE_BRANCH,
    MAX_ATTEMPTS,
    PRIMARY_BASE_BRANCH,
    TEST_DIR_NAME,
)
from .models import GitHubIssue, ValidationOutcome, WorkflowResult
from .pipeline import PipelineContext, prepare_generation
from .progress import ProgressChannel
from .test_validator import validate_and_fix_test


def build_story_text(issue: GitHubIssue) -> str:
    return "\n".join([issue.title, issue.body or ""]).strip()


def build_branch_name(issue_number: int, timestamp_ms: Optional[int] = None) -> str:
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    return f"{BRANCH_PREFIX}{issue_number}-{timestamp_ms}"


def build_pr_title(issue: GitHubIssue) -> str:
    return f"Tests for issue #{issue.number}: {issue.title}"


def build_pr_body(issue: GitHubIssue, outcome: ValidationOutcome) -> str:
    if outcome.passed:
        validation_status = f"Passed after {outcome.attempts} attempt(s)"
    else:
        validation_status = (
            f"Did not pass after {outcome.attempts} attempt(s) - {outcome.last_error or 'unknown error'}"
        )

    return "\n".join([
        "## Auto-generated Tests",
        "",
        f"This PR was automatically generated from issue #{issue.number}.",
        "",
        f"**Issue:** [{issue.title}]({issue.html_url})",
        "",
        f"**Validation:** {validation_status}",
        "",
        "### Issue Description",
        "",
        issue.body if issue.body is not None else "_No description provided._",
    ])


def build_issue_comment(pr_url: str, outcome: ValidationOutcome) -> str:
    if outcome.passed:
        status = "passed validation and a pull request has been created"
    else:
        status = "generated (validation did not pass) and a pull request has been created"

    return "\n".join([
        f"Tests have been {status}.",
        "",
        f"**PR:** {pr_url}",
        "",
        f"Validation attempts: {outcome.attempts}",
    ])


def build_failure_comment(message: str) -> str:
    return f"Test generation failed: {message}"


def _error_message(exc: Exception) -> str:
    return getattr(exc, "message", None) or str(exc) or "Unknown error"


async def _publish(issue: GitHubIssue, config: WorkflowConfig, client: GitHubClient) -> str:
    story_text = build_story_text(issue)
    logger.info(f"Processing issue #{issue.number}: {issue.title}")

    ctx = PipelineContext(
        workspace_root=config.workspace_root,
        api_key=config.openai_api_key,
        model=DEFAULT_MODEL,
        api_base=config.openai_api_base,
        max_attempts=MAX_ATTEMPTS,
        progress=ProgressChannel([lambda event: logger.info(f"[issue #{issue.number}] {event.content}")]),
    )

    framework, _, _, search, imports = await prepare_generation(story_text, ctx)

    outcome = await validate_and_fix_test(
        ctx.api_key,
        story_text,
        search,
        ctx.test_dir,
        framework,
        imports,
        ctx.workspace_root,
        model=ctx.model,
        max_attempts=ctx.max_attempts,
        progress=ctx.progress,
        api_base=ctx.api_base,
    )
    logger.info(f"Validation result: passed={outcome.passed}, attempts={outcome.attempts}")

    branch_name = build_branch_name(issue.number)
    logger.info(f"Creating PR for branch: {branch_name}")
    pr_url = await client.create_test_pr(
        issue_number=issue.number,
        branch_name=branch_name,
        file_path=f"{TEST_DIR_NAME}/{outcome.file_name}",
        file_content=outcome.code,
        pr_title=build_pr_title(issue),
        pr_body=build_pr_body(issue, outcome),
        primary_branch=PRIMARY_BASE_BRANCH,
        fallback_branch=FALLBACK_BASE_BRANCH,
    )

    await client.comment_on_issue(issue.number, build_issue_comment(pr_url, outcome))
    return pr_url


async def process_github_issue(
    issue: GitHubIssue,
    config: WorkflowConfig,
    client: Optional[GitHubClient] = None,
) -> WorkflowResult:
    """Generate tests for an issue and publish them as a pull request.

    Any failure after the client is built is reported back on the issue as a
    best-effort comment and returned as a failed result; nothing is rolled back.
    """
    owns_client = client is None
    if client is None:
        client = GitHubClient(
            token=config.github_token,
            owner=config.github_owner,
            repo=config.github_repo,
            api_url=config.github_api_url,
        )

    try:
        pr_url = await _publish(issue, config, client)
        logger.info(f"Workflow completed successfully for issue #{issue.number}")
        return WorkflowResult(success=True, pr_url=pr_url)
    except Exception as e:
        message = _error_message(e)
        logger.error(f"Workflow failed for issue #{issue.number}: {message}")
        try:
            await client.comment_on_issue(issue.number, build_failure_comment(message))
        except Exception as comment_err:
            logger.error(f"Failed to comment on issue #{issue.number}: {_error_message(comment_err)}")
        return WorkflowResult(success=False, error=message)
    finally:
        if owns_client:
            await client.aclose()
