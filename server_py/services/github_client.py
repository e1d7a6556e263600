"""GitHub REST client for publishing generated tests as a pull request."""
import base64
from typing import Any, Dict, Optional

import httpx

from core.logging import log_info
from utils.exceptions import GitHubAPIError

DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 30.0


def get_github_headers(token: str) -> Dict[str, str]:
    """GitHub API headers with bearer authentication."""
    return {
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": "StoryToTest",
        "Authorization": f"Bearer {token}",
    }


class GitHubClient:
    """Thin async wrapper over the handful of GitHub endpoints the workflow needs.

    Every non-2xx answer raises GitHubAPIError with the HTTP status and the
    `message` GitHub returned, so callers can branch on 404 / already-exists.
    """

    def __init__(
        self,
        token: str,
        owner: str,
        repo: str,
        api_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.owner = owner
        self.repo = repo
        self._client = httpx.AsyncClient(
            base_url=api_url.rstrip("/"),
            headers=get_github_headers(token),
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def _repo_path(self) -> str:
        return f"/repos/{self.owner}/{self.repo}"

    async def _request(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
        params: Optional[Dict[str, str]] = None,
    ) -> Dict[str, Any]:
        try:
            response = await self._client.request(method, f"{self._repo_path}{path}", json=json, params=params)
        except httpx.HTTPError as e:
            raise GitHubAPIError(f"GitHub request {method} {path} failed: {e}") from e

        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {}
            message = payload.get("message") if isinstance(payload, dict) else None
            raise GitHubAPIError(
                message or f"GitHub API error: {response.status_code}",
                status_code=response.status_code,
                details=payload,
            )

        if not response.content:
            return {}
        return response.json()

    async def get_branch_sha(self, branch: str) -> str:
        log_info(f"Getting SHA for branch: {branch}", "github")
        data = await self._request("GET", f"/branches/{branch}")
        return data["commit"]["sha"]

    async def create_branch(self, branch_name: str, from_sha: str) -> None:
        """Create refs/heads/<branch_name>; an existing branch is not an error."""
        log_info(f"Creating branch: {branch_name} from SHA: {from_sha}", "github")
        try:
            await self._request("POST", "/git/refs", json={
                "ref": f"refs/heads/{branch_name}",
                "sha": from_sha,
            })
        except GitHubAPIError as e:
            if not e.already_exists:
                raise
            log_info(f"Branch already exists: {branch_name}", "github")

    async def get_file_sha(self, branch_name: str, file_path: str) -> Optional[str]:
        """Blob SHA of `file_path` on the branch, or None when it does not exist yet."""
        try:
            data = await self._request("GET", f"/contents/{file_path}", params={"ref": branch_name})
        except GitHubAPIError as e:
            if e.is_not_found:
                return None
            raise
        return data.get("sha") if isinstance(data, dict) else None

    async def commit_file(self, branch_name: str, file_path: str, content: str, message: str) -> None:
        log_info(f"Committing file: {file_path} to branch: {branch_name}", "github")
        body = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
            "branch": branch_name,
        }
        # updating an existing file requires its current blob sha
        existing_sha = await self.get_file_sha(branch_name, file_path)
        if existing_sha:
            body["sha"] = existing_sha
        await self._request("PUT", f"/contents/{file_path}", json=body)

    async def create_pull_request(self, title: str, body: str, head: str, base: str) -> str:
        log_info(f"Creating PR: {title}", "github")
        data = await self._request("POST", "/pulls", json={
            "title": title,
            "body": body,
            "head": head,
            "base": base,
        })
        pr_url = data["html_url"]
        log_info(f"PR created: {pr_url}", "github")
        return pr_url

    async def comment_on_issue(self, issue_number: int, comment: str) -> None:
        log_info(f"Commenting on issue #{issue_number}", "github")
        await self._request("POST", f"/issues/{issue_number}/comments", json={"body": comment})

    async def resolve_base_branch(self, primary: str = "main", fallback: str = "master"):
        """Return (branch, sha) for `primary`, or for `fallback` when `primary` is missing."""
        try:
            return primary, await self.get_branch_sha(primary)
        except GitHubAPIError as e:
            if not e.is_not_found:
                raise
        log_info(f"Branch '{primary}' not found, trying '{fallback}'", "github")
        return fallback, await self.get_branch_sha(fallback)

    async def create_test_pr(
        self,
        issue_number: int,
        branch_name: str,
        file_path: str,
        file_content: str,
        pr_title: str,
        pr_body: str,
        primary_branch: str = "main",
        fallback_branch: str = "master",
    ) -> str:
        """Branch off the base branch, commit the test file and open a PR. Returns the PR URL."""
        log_info(f"Starting test PR creation for issue #{issue_number}", "github")
        base_branch, base_sha = await self.resolve_base_branch(primary_branch, fallback_branch)

        await self.create_branch(branch_name, base_sha)
        await self.commit_file(
            branch_name,
            file_path,
            file_content,
            f"Add generated tests for issue #{issue_number}",
        )
        return await self.create_pull_request(pr_title, pr_body, branch_name, base_branch)
