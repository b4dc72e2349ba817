# ============================================
# GITHUB TOOL
# ============================================

from collections import defaultdict
from typing import Any

import aiohttp

from agentdock.core.domain.errors import ToolExecutionFailure
from agentdock.core.domain.models import ActionSpec, ExecutionResult, ParameterSpec
from agentdock.infrastructure.tools.base_tool import ActionHandler, BaseTool

GITHUB_API_BASE = "https://api.github.com"
MAX_PAGE_SIZE = 100


def _number_param(description: str) -> dict[str, ParameterSpec]:
    return {"number": ParameterSpec("number", required=True, description=description)}


def parse_patch(patch: str | None) -> list[dict[str, Any]] | None:
    """
    Split a unified diff patch into hunks of typed line changes.

    Returns:
        List of ``{"lineInfo", "changes"}`` hunks, or None when the patch
        is empty or has no hunk bodies
    """
    if not patch:
        return None

    hunks = []
    for chunk in patch.split("@@ ")[1:]:
        line_info, sep, body = chunk.partition(" @@")
        if not sep or not body:
            continue
        changes = []
        for line in body.split("\n"):
            if not line.strip():
                continue
            change_type = {"+": "addition", "-": "deletion"}.get(line[0], "context")
            changes.append({"type": change_type, "content": line})
        hunks.append({"lineInfo": line_info, "changes": changes})

    return hunks or None


def _commit_author(commit: dict[str, Any]) -> str | None:
    if commit.get("author"):
        return commit["author"].get("login")
    return commit["commit"]["author"].get("name")


class GitHubTool(BaseTool):
    """Pull requests, issues and comments of one GitHub repository (REST v3)."""

    kind = "github"
    label = "GitHub"
    ALIASES = {
        "getPullRequests": "listPRs",
        "getPullRequestDetails": "getPR",
        "summarizePullRequest": "summarizePR",
        "reviewPR": "reviewCode",
        "codeReview": "reviewCode",
        "addComment": "createComment",
        "addNewComment": "createComment",
        "mergePR": "mergePullRequest",
        "declinePR": "declinePullRequest",
    }

    def __init__(
        self,
        name: str = "github",
        description: str = "",
        repo_owner: str | None = None,
        repo_name: str | None = None,
        token: str | None = None,
        api_base: str = GITHUB_API_BASE,
        request_timeout: float = 30.0,
    ):
        super().__init__(name, description or "Interact with GitHub repositories, pull requests and issues")
        self.repo_owner = repo_owner
        self.repo_name = repo_name
        self._token = token
        self.api_base = api_base.rstrip("/")
        self.request_timeout = request_timeout
        self.logger.info(
            "github_tool_initialized",
            repository=f"{repo_owner}/{repo_name}",
            token_set=bool(token),
        )

    # ------------------------------------------------------------------
    # Catalog
    # ------------------------------------------------------------------

    def actions(self) -> list[ActionSpec]:
        listing = {
            "state": ParameterSpec("string", description="State to fetch (open, closed, all)", default="open"),
            "limit": ParameterSpec("number", description="Maximum number of items to return", default=5),
        }
        return [
            ActionSpec("info", "Get information about this tool"),
            ActionSpec("getRepository", "Get details about the configured repository"),
            ActionSpec("listPRs", "List pull requests for the repository", dict(listing)),
            ActionSpec("getPR", "Get details about a specific pull request", _number_param("PR number")),
            ActionSpec("listIssues", "List issues for the repository", dict(listing)),
            ActionSpec("getIssue", "Get details about a specific issue", _number_param("Issue number")),
            ActionSpec(
                "summarizePR", "Get a detailed summary of a pull request", _number_param("Pull request number")
            ),
            ActionSpec(
                "getChangedFiles",
                "Get detailed information about files changed in a pull request",
                _number_param("Pull request number"),
            ),
            ActionSpec(
                "reviewCode",
                "Perform a detailed code review of a pull request",
                _number_param("Pull request number"),
            ),
            ActionSpec(
                "createComment",
                "Create a comment on an issue or PR",
                {
                    **_number_param("Issue or PR number"),
                    "body": ParameterSpec("string", required=True, description="Comment text"),
                },
            ),
            ActionSpec(
                "mergePullRequest",
                "Merge a pull request",
                {
                    **_number_param("Pull request number"),
                    "commit_title": ParameterSpec("string", description="Custom commit title"),
                    "commit_message": ParameterSpec("string", description="Custom commit message"),
                    "merge_method": ParameterSpec(
                        "string", description="Merge method (merge, squash, rebase)", default="merge"
                    ),
                },
            ),
            ActionSpec(
                "declinePullRequest",
                "Decline (close) a pull request without merging",
                {
                    **_number_param("Pull request number"),
                    "reason": ParameterSpec("string", description="Reason for declining the pull request"),
                },
            ),
        ]

    def handlers(self) -> dict[str, ActionHandler]:
        return {
            "info": self.get_info,
            "getRepository": self.get_repository,
            "listPRs": self.list_prs,
            "getPR": self.get_pr,
            "listIssues": self.list_issues,
            "getIssue": self.get_issue,
            "summarizePR": self.summarize_pr,
            "getChangedFiles": self.get_changed_files,
            "reviewCode": self.review_code,
            "createComment": self.create_comment,
            "mergePullRequest": self.merge_pull_request,
            "declinePullRequest": self.decline_pull_request,
        }

    def contextual_defaults(self) -> dict[str, Any]:
        defaults = {}
        if self.repo_owner:
            defaults["owner"] = self.repo_owner
        if self.repo_name:
            defaults["repo"] = self.repo_name
        return defaults

    def check_ready(self) -> None:
        if not self.repo_owner or not self.repo_name:
            raise ToolExecutionFailure("GitHub repository not configured", tool=self.name)

    # ------------------------------------------------------------------
    # HTTP
    # ------------------------------------------------------------------

    async def _request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> Any:
        headers = {"Accept": "application/vnd.github+json", "User-Agent": "agentdock"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"

        async with aiohttp.ClientSession(headers=headers) as session:
            async with session.request(
                method,
                f"{self.api_base}{path}",
                params=params,
                json=body,
                timeout=aiohttp.ClientTimeout(total=self.request_timeout),
            ) as response:
                payload = await response.json(content_type=None)
                if response.status >= 400:
                    message = payload.get("message") if isinstance(payload, dict) else None
                    raise ToolExecutionFailure(
                        f"GitHub API returned {response.status}: {message or response.reason}",
                        tool=self.name,
                    )
                return payload

    def _repo_path(self, params: dict[str, Any]) -> str:
        owner = params.get("owner") or self.repo_owner
        repo = params.get("repo") or self.repo_name
        if not owner or not repo:
            raise ToolExecutionFailure("Repository owner and name are required", tool=self.name)
        return f"/repos/{owner}/{repo}"

    @staticmethod
    def _pr_number(params: dict[str, Any]) -> int:
        number = params.get("number")
        if not number:
            raise ToolExecutionFailure("Pull request number is required")
        return int(number)

    # ------------------------------------------------------------------
    # Repository, pull requests and issues
    # ------------------------------------------------------------------

    async def get_repository(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("get repository"):
            repo = await self._request("GET", self._repo_path(params))
            return ExecutionResult(
                success=True,
                data={
                    "id": repo["id"],
                    "name": repo["name"],
                    "full_name": repo["full_name"],
                    "description": repo.get("description"),
                    "private": repo.get("private", False),
                    "url": repo.get("html_url"),
                    "stars": repo.get("stargazers_count", 0),
                    "forks": repo.get("forks_count", 0),
                    "open_issues": repo.get("open_issues_count", 0),
                    "default_branch": repo.get("default_branch"),
                },
            )

    async def list_prs(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("list PRs"):
            prs = await self._request(
                "GET",
                f"{self._repo_path(params)}/pulls",
                params={"state": params.get("state") or "open", "per_page": int(params.get("limit") or 5)},
            )
            return ExecutionResult(
                success=True,
                data=[
                    {
                        "number": pr["number"],
                        "title": pr["title"],
                        "state": pr["state"],
                        "author": pr["user"]["login"],
                        "created_at": pr.get("created_at"),
                        "updated_at": pr.get("updated_at"),
                        "url": pr.get("html_url"),
                    }
                    for pr in prs
                ],
            )

    async def _comments(self, repo_path: str, number: int) -> list[dict[str, Any]]:
        comments = await self._request("GET", f"{repo_path}/issues/{number}/comments")
        return [
            {"author": c["user"]["login"], "body": c.get("body"), "created_at": c.get("created_at")}
            for c in comments
        ]

    async def _pr_details(self, params: dict[str, Any]) -> dict[str, Any]:
        repo_path = self._repo_path(params)
        number = self._pr_number(params)
        pr = await self._request("GET", f"{repo_path}/pulls/{number}")
        return {
            "number": pr["number"],
            "title": pr["title"],
            "state": pr["state"],
            "body": pr.get("body"),
            "author": pr["user"]["login"],
            "created_at": pr.get("created_at"),
            "updated_at": pr.get("updated_at"),
            "merged": pr.get("merged", False),
            "mergeable": pr.get("mergeable"),
            "comments": await self._comments(repo_path, number),
            "url": pr.get("html_url"),
        }

    async def get_pr(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context(f"get PR #{params.get('number')}"):
            return ExecutionResult(success=True, data=await self._pr_details(params))

    async def list_issues(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("list issues"):
            issues = await self._request(
                "GET",
                f"{self._repo_path(params)}/issues",
                params={"state": params.get("state") or "open", "per_page": int(params.get("limit") or 5)},
            )
            return ExecutionResult(
                success=True,
                data=[
                    {
                        "number": issue["number"],
                        "title": issue["title"],
                        "state": issue["state"],
                        "author": issue["user"]["login"],
                        "created_at": issue.get("created_at"),
                        "updated_at": issue.get("updated_at"),
                        "url": issue.get("html_url"),
                    }
                    for issue in issues
                    # the issues endpoint also lists pull requests
                    if not issue.get("pull_request")
                ],
            )

    async def get_issue(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context(f"get issue #{params.get('number')}"):
            repo_path = self._repo_path(params)
            number = int(params["number"])
            issue = await self._request("GET", f"{repo_path}/issues/{number}")
            return ExecutionResult(
                success=True,
                data={
                    "number": issue["number"],
                    "title": issue["title"],
                    "state": issue["state"],
                    "body": issue.get("body"),
                    "author": issue["user"]["login"],
                    "created_at": issue.get("created_at"),
                    "updated_at": issue.get("updated_at"),
                    "comments": await self._comments(repo_path, number),
                    "url": issue.get("html_url"),
                },
            )

    # ------------------------------------------------------------------
    # Pull request analysis
    # ------------------------------------------------------------------

    async def _pr_files(self, repo_path: str, number: int) -> list[dict[str, Any]]:
        return await self._request(
            "GET", f"{repo_path}/pulls/{number}/files", params={"per_page": MAX_PAGE_SIZE}
        )

    async def _pr_commits(self, repo_path: str, number: int) -> list[dict[str, Any]]:
        return await self._request(
            "GET", f"{repo_path}/pulls/{number}/commits", params={"per_page": MAX_PAGE_SIZE}
        )

    async def summarize_pr(self, params: dict[str, Any]) -> ExecutionResult:
        number = self._pr_number(params)
        with self.failure_context(f"summarize PR #{number}"):
            repo_path = self._repo_path(params)
            details = await self._pr_details(params)
            files = await self._pr_files(repo_path, number)
            commits = await self._pr_commits(repo_path, number)

            return ExecutionResult(
                success=True,
                data={
                    **details,
                    "files": [
                        {
                            "filename": f["filename"],
                            "status": f["status"],
                            "additions": f["additions"],
                            "deletions": f["deletions"],
                            "changes": f["changes"],
                            "patch": f.get("patch"),
                            "blob_url": f.get("blob_url"),
                            "raw_url": f.get("raw_url"),
                        }
                        for f in files
                    ],
                    "commits": [
                        {
                            "sha": c["sha"],
                            "message": c["commit"]["message"],
                            "author": _commit_author(c),
                            "date": c["commit"]["author"].get("date"),
                        }
                        for c in commits
                    ],
                    "stats": {
                        "files_changed": len(files),
                        "total_additions": sum(f["additions"] for f in files),
                        "total_deletions": sum(f["deletions"] for f in files),
                        "total_changes": sum(f["changes"] for f in files),
                        "commit_count": len(commits),
                    },
                },
            )

    async def _changed_files(self, params: dict[str, Any]) -> dict[str, Any]:
        number = self._pr_number(params)
        files = await self._pr_files(self._repo_path(params), number)
        return {
            "files": [
                {
                    "filename": f["filename"],
                    "status": f["status"],
                    "additions": f["additions"],
                    "deletions": f["deletions"],
                    "changes": f["changes"],
                    "patch": f.get("patch"),
                    "blob_url": f.get("blob_url"),
                    "raw_url": f.get("raw_url"),
                    "lineChanges": parse_patch(f.get("patch")),
                }
                for f in files
            ],
            "stats": {
                "total_files": len(files),
                "total_additions": sum(f["additions"] for f in files),
                "total_deletions": sum(f["deletions"] for f in files),
                "total_changes": sum(f["changes"] for f in files),
            },
        }

    async def get_changed_files(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("get changed files"):
            return ExecutionResult(success=True, data=await self._changed_files(params))

    async def review_code(self, params: dict[str, Any]) -> ExecutionResult:
        number = self._pr_number(params)
        with self.failure_context("review code"):
            repo_path = self._repo_path(params)
            pr = await self._request("GET", f"{repo_path}/pulls/{number}")
            changed = await self._changed_files(params)
            review_comments = await self._request("GET", f"{repo_path}/pulls/{number}/comments")
            commits = await self._pr_commits(repo_path, number)

            files = changed["files"]
            by_extension: dict[str, list[str]] = defaultdict(list)
            for f in files:
                by_extension[f["filename"].rsplit(".", 1)[-1] or "unknown"].append(f["filename"])

            def with_status(status: str, include_changes: bool = False) -> list[dict[str, Any]]:
                return [
                    {"filename": f["filename"], "changes": f["changes"]}
                    if include_changes
                    else {"filename": f["filename"]}
                    for f in files
                    if f["status"] == status
                ]

            return ExecutionResult(
                success=True,
                data={
                    "pull_request": {
                        "number": pr["number"],
                        "title": pr["title"],
                        "author": pr["user"]["login"],
                        "created_at": pr.get("created_at"),
                        "updated_at": pr.get("updated_at"),
                        "status": pr["state"],
                        "base_ref": pr["base"]["ref"],
                        "head_ref": pr["head"]["ref"],
                    },
                    "stats": {**changed["stats"], "commit_count": len(commits)},
                    "changes_by_type": {
                        ext: {"count": len(names), "files": names} for ext, names in by_extension.items()
                    },
                    "categorized_files": {
                        "added": with_status("added", include_changes=True),
                        "modified": with_status("modified", include_changes=True),
                        "removed": with_status("removed"),
                        "renamed": with_status("renamed"),
                    },
                    "file_details": [
                        {
                            "filename": f["filename"],
                            "status": f["status"],
                            "additions": f["additions"],
                            "deletions": f["deletions"],
                            "changes": f["changes"],
                            "has_detailed_changes": bool(f["lineChanges"]),
                        }
                        for f in files
                    ],
                    "review_comments": [
                        {
                            "id": c["id"],
                            "path": c.get("path"),
                            "position": c.get("position"),
                            "body": c.get("body"),
                            "author": c["user"]["login"],
                            "created_at": c.get("created_at"),
                        }
                        for c in review_comments
                    ],
                    "commits": [
                        {
                            "sha": c["sha"][:7],
                            "message": c["commit"]["message"],
                            "author": _commit_author(c),
                            "date": c["commit"]["author"].get("date"),
                        }
                        for c in commits
                    ],
                },
            )

    # ------------------------------------------------------------------
    # Write actions
    # ------------------------------------------------------------------

    async def create_comment(self, params: dict[str, Any]) -> ExecutionResult:
        with self.failure_context("create comment"):
            number = int(params["number"])
            comment = await self._request(
                "POST",
                f"{self._repo_path(params)}/issues/{number}/comments",
                body={"body": params["body"]},
            )
            return ExecutionResult(
                success=True,
                data={"id": comment["id"], "body": comment.get("body"), "url": comment.get("html_url")},
            )

    async def merge_pull_request(self, params: dict[str, Any]) -> ExecutionResult:
        number = self._pr_number(params)
        with self.failure_context(f"merge PR #{number}"):
            repo_path = self._repo_path(params)
            pr = await self._request("GET", f"{repo_path}/pulls/{number}")

            if pr.get("merged"):
                message = f"Pull request #{number} has already been merged"
                return ExecutionResult(success=False, data={"message": message}, error=message)
            if pr.get("mergeable") is False:
                message = f"Pull request #{number} has conflicts that must be resolved before merging"
                return ExecutionResult(success=False, data={"message": message}, error=message)

            body = {"merge_method": params.get("merge_method") or "merge"}
            for key in ("commit_title", "commit_message"):
                if params.get(key):
                    body[key] = params[key]

            result = await self._request("PUT", f"{repo_path}/pulls/{number}/merge", body=body)
            self.logger.info("pull_request_merged", number=number, sha=result.get("sha"))
            return ExecutionResult(
                success=True,
                data={
                    "message": f"Pull request #{number} merged successfully",
                    "merged": result.get("merged"),
                    "sha": result.get("sha"),
                },
            )

    async def decline_pull_request(self, params: dict[str, Any]) -> ExecutionResult:
        number = self._pr_number(params)
        with self.failure_context(f"decline PR #{number}"):
            repo_path = self._repo_path(params)
            pr = await self._request("GET", f"{repo_path}/pulls/{number}")

            if pr["state"] != "open":
                message = f"Pull request #{number} is already {pr['state']}"
                return ExecutionResult(success=False, data={"message": message}, error=message)

            if params.get("reason"):
                await self._request(
                    "POST",
                    f"{repo_path}/issues/{number}/comments",
                    body={"body": f"Declining this pull request: {params['reason']}"},
                )

            result = await self._request("PATCH", f"{repo_path}/pulls/{number}", body={"state": "closed"})
            self.logger.info("pull_request_declined", number=number)
            return ExecutionResult(
                success=True,
                data={"message": f"Pull request #{number} declined successfully", "state": result["state"]},
            )
