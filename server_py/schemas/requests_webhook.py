"""Models for GitHub issue webhook payloads."""
from pydantic import BaseModel, ConfigDict
from typing import Optional


class WebhookLabel(BaseModel):
    """Label attached by a `labeled` issue event."""
    model_config = ConfigDict(extra="ignore")

    name: Optional[str] = None


class WebhookIssue(BaseModel):
    """The subset of the issue object the workflow reads."""
    model_config = ConfigDict(extra="ignore")

    number: int
    title: str
    body: Optional[str] = None
    html_url: str = ""


class GitHubWebhookPayload(BaseModel):
    """Issue event delivered by a GitHub webhook."""
    model_config = ConfigDict(extra="ignore")

    action: Optional[str] = None
    label: Optional[WebhookLabel] = None
    issue: WebhookIssue
