"""GitHub webhook router: runs the issue-to-PR workflow for labeled issues."""
from fastapi import APIRouter, BackgroundTasks, Depends, Request, status
from fastapi.responses import JSONResponse
from pydantic import ValidationError as PydanticValidationError

from core.config import Settings, WorkflowConfig, get_settings
from core.logging import log_info, log_error, log_warning
from schemas.requests_webhook import GitHubWebhookPayload
from agents.story_test_agent.constants import TRIGGER_ACTION, TRIGGER_LABEL
from utils.exceptions import ConfigurationError

router = APIRouter(prefix="/webhook", tags=["webhook"])


def _message(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"message": message})


async def run_issue_workflow(issue, config: WorkflowConfig):
    """Background entry point; the webhook has already answered, so errors are only logged."""
    from agents.story_test_agent.models import GitHubIssue
    from agents.story_test_agent.workflow import process_github_issue

    try:
        result = await process_github_issue(GitHubIssue(**issue.model_dump()), config)
        if result.success:
            log_info(f"Issue #{issue.number} published: {result.pr_url}", "webhook")
        else:
            log_warning(f"Issue #{issue.number} failed: {result.error}", "webhook")
    except Exception as e:
        log_error(f"Unhandled error in workflow for issue #{issue.number}", "webhook", e)


@router.api_route("/github", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
async def github_webhook(
    request: Request,
    background_tasks: BackgroundTasks,
    settings: Settings = Depends(get_settings),
):
    """Accept `issues` events; only `labeled` with the trigger label starts work."""
    if request.method != "POST":
        return _message(status.HTTP_405_METHOD_NOT_ALLOWED, "Method not allowed")

    try:
        payload = await request.json()
    except ValueError:
        payload = {}
    if not isinstance(payload, dict) or not payload.get("issue"):
        return _message(status.HTTP_400_BAD_REQUEST, "No issue in payload")

    try:
        event = GitHubWebhookPayload.model_validate(payload)
    except PydanticValidationError as e:
        log_warning(f"Malformed issue payload: {e.error_count()} errors", "webhook")
        return _message(status.HTTP_400_BAD_REQUEST, "Invalid issue in payload")

    label_name = event.label.name if event.label else None
    if event.action != TRIGGER_ACTION or label_name != TRIGGER_LABEL:
        return _message(status.HTTP_200_OK, "Event ignored")

    try:
        config = WorkflowConfig.from_settings(settings)
    except ConfigurationError as e:
        log_error(e.message, "webhook")
        return _message(status.HTTP_500_INTERNAL_SERVER_ERROR, "Missing required environment variables")

    log_info(f"Accepted issue #{event.issue.number}: {event.issue.title}", "webhook")
    background_tasks.add_task(run_issue_workflow, event.issue, config)
    return _message(status.HTTP_202_ACCEPTED, "Accepted")
