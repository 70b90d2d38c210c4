"""REST client for Forgejo and Gitea.

Both backends serve the same ``/api/v1`` endpoints. The dialect subclasses
only differ in how they normalize a few response shapes.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx

from .detection import Dialect
from .models import (
    Comment,
    Issue,
    Notification,
    PullRequest,
    PullRequestBranch,
)

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"
DEFAULT_TIMEOUT = 30
DRAFT_TITLE_PREFIX = "WIP: "
# Default MAX_RESPONSE_ITEMS of both backends; larger pages get truncated
MAX_PAGE_SIZE = 50


class ForgeAPIError(Exception):
    """Exception raised when a REST call fails."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def _split_repository(repository: str) -> Tuple[str, str]:
    owner, _, name = repository.partition("/")
    return owner, name


def _page_span(limit: int, offset: int) -> Tuple[int, List[int], int]:
    """Translate limit/offset into server pages.

    Returns the page size, the 1-based pages covering
    ``offset .. offset + limit`` and the number of leading items to skip.
    """
    page_size = min(limit, MAX_PAGE_SIZE)
    first = offset // page_size
    last = (offset + limit - 1) // page_size
    return page_size, list(range(first + 1, last + 2)), offset - first * page_size


class ForgeClient:
    """Async REST client shared by both dialects.

    Args:
        base_url: Base URL of the instance (without ``/api/v1``)
        token: API token
        timeout: Request timeout in seconds
    """

    dialect: Dialect

    def __init__(self, base_url: str, token: str, timeout: float = DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def api_url(self) -> str:
        return f"{self.base_url}{API_PREFIX}"

    def get_request_headers(self) -> Dict[str, str]:
        """Get all request headers including auth and content type."""
        return {
            "Authorization": f"token {self.token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    @property
    def session(self) -> httpx.AsyncClient:
        """Get or create HTTP session."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self.timeout, headers=self.get_request_headers()
            )
        return self._client

    async def close(self):
        """Close the HTTP session."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[Dict[str, Any]] = None,
        json: Optional[Dict[str, Any]] = None,
    ) -> Any:
        url = f"{self.api_url}{path}"
        logger.debug(f"{method} {url} params={params}")
        try:
            response = await self.session.request(method, url, params=params, json=json)
        except httpx.TimeoutException as e:
            raise ForgeAPIError(f"{method} {path} timed out: {e}") from e
        except httpx.HTTPError as e:
            raise ForgeAPIError(f"{method} {path} failed: {e}") from e

        if response.status_code >= 400:
            detail = response.text
            try:
                body = response.json()
                if isinstance(body, dict) and body.get("message"):
                    detail = body["message"]
            except ValueError:
                pass
            raise ForgeAPIError(
                f"{method} {path} returned status {response.status_code}: {detail}",
                status_code=response.status_code,
            )

        if response.status_code == 204 or not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ForgeAPIError(
                f"{method} {path} returned invalid JSON: {e}",
                status_code=response.status_code,
            ) from e

    async def _request_object(
        self,
        method: str,
        path: str,
        json: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        data = await self._request(method, path, json=json)
        if not isinstance(data, dict):
            raise ForgeAPIError(f"{method} {path} returned no object")
        return data

    async def _list_window(
        self, path: str, params: Dict[str, Any], limit: int, offset: int
    ) -> List[Dict[str, Any]]:
        """Fetch the items at ``offset .. offset + limit`` page by page."""
        page_size, pages, skip = _page_span(limit, offset)
        items: List[Dict[str, Any]] = []
        for page in pages:
            batch = await self._request(
                "GET", path, params={"page": page, "limit": page_size, **params}
            )
            if batch is None:
                batch = []
            if not isinstance(batch, list):
                raise ForgeAPIError(f"GET {path} returned no list")
            items.extend(batch)
            if len(batch) < page_size:
                break
        return items[skip : skip + limit]

    # Dialect hooks

    def _user_login(self, user: Optional[Dict[str, Any]]) -> str:
        if not user:
            return ""
        return user.get("login") or ""

    def _filter_issues(self, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return items

    # Normalization

    def _issue(self, data: Dict[str, Any]) -> Issue:
        return Issue(
            id=data.get("id", 0),
            number=data.get("number", 0),
            title=data.get("title") or "",
            state=data.get("state") or "",
            body=data.get("body") or "",
            user=self._user_login(data.get("user")),
            created=data.get("created_at") or "",
            updated=data.get("updated_at") or "",
        )

    def _comment(self, data: Dict[str, Any]) -> Comment:
        return Comment(
            id=data.get("id", 0),
            body=data.get("body") or "",
            user=self._user_login(data.get("user")),
            created=data.get("created_at") or "",
            updated=data.get("updated_at") or "",
        )

    def _branch(self, data: Optional[Dict[str, Any]]) -> PullRequestBranch:
        data = data or {}
        return PullRequestBranch(ref=data.get("ref") or "", sha=data.get("sha") or "")

    def _pull_request(self, data: Dict[str, Any]) -> PullRequest:
        return PullRequest(
            id=data.get("id", 0),
            number=data.get("number", 0),
            title=data.get("title") or "",
            state=data.get("state") or "",
            body=data.get("body") or "",
            user=self._user_login(data.get("user")),
            created=data.get("created_at") or "",
            updated=data.get("updated_at") or "",
            head=self._branch(data.get("head")),
            base=self._branch(data.get("base")),
            mergeable=data.get("mergeable"),
            merged=bool(data.get("merged")),
            html_url=data.get("html_url") or "",
        )

    def _notification(self, data: Dict[str, Any]) -> Notification:
        subject = data.get("subject") or {}
        repository = data.get("repository") or {}
        return Notification(
            id=data.get("id", 0),
            repository=repository.get("full_name") or "",
            subject_title=subject.get("title") or "",
            subject_type=subject.get("type") or "",
            subject_url=subject.get("url") or "",
            unread=bool(data.get("unread")),
            pinned=bool(data.get("pinned")),
            updated=data.get("updated_at") or "",
        )

    # Issues

    async def list_issues(
        self, repository: str, state: str = "open", limit: int = 15, offset: int = 0
    ) -> List[Issue]:
        owner, repo = _split_repository(repository)
        items = await self._list_window(
            f"/repos/{owner}/{repo}/issues",
            {"state": state, "type": "issues"},
            limit,
            offset,
        )
        return [self._issue(item) for item in self._filter_issues(items)]

    async def create_issue(self, repository: str, title: str, body: str = "") -> Issue:
        owner, repo = _split_repository(repository)
        data = await self._request_object(
            "POST", f"/repos/{owner}/{repo}/issues", json={"title": title, "body": body}
        )
        return self._issue(data)

    async def edit_issue(
        self,
        repository: str,
        number: int,
        title: Optional[str] = None,
        body: Optional[str] = None,
        state: Optional[str] = None,
    ) -> Issue:
        owner, repo = _split_repository(repository)
        changes = {
            key: value
            for key, value in (("title", title), ("body", body), ("state", state))
            if value is not None
        }
        data = await self._request_object(
            "PATCH", f"/repos/{owner}/{repo}/issues/{number}", json=changes
        )
        return self._issue(data)

    # Comments (pull request comments are issue comments on the PR number)

    async def list_issue_comments(
        self, repository: str, number: int, limit: int = 15, offset: int = 0
    ) -> Tuple[List[Comment], int]:
        """List comments, returning the requested page and the total count."""
        owner, repo = _split_repository(repository)
        path = f"/repos/{owner}/{repo}/issues/{number}/comments"
        items = await self._request("GET", path)
        items = items or []
        if not isinstance(items, list):
            raise ForgeAPIError(f"GET {path} returned no list")
        page = [self._comment(item) for item in items[offset : offset + limit]]
        return page, len(items)

    async def create_issue_comment(
        self, repository: str, number: int, body: str
    ) -> Comment:
        owner, repo = _split_repository(repository)
        data = await self._request_object(
            "POST",
            f"/repos/{owner}/{repo}/issues/{number}/comments",
            json={"body": body},
        )
        return self._comment(data)

    async def edit_issue_comment(
        self, repository: str, comment_id: int, body: str
    ) -> Comment:
        owner, repo = _split_repository(repository)
        data = await self._request_object(
            "PATCH",
            f"/repos/{owner}/{repo}/issues/comments/{comment_id}",
            json={"body": body},
        )
        return self._comment(data)

    # Pull requests

    async def list_pull_requests(
        self, repository: str, state: str = "open", limit: int = 15, offset: int = 0
    ) -> List[PullRequest]:
        owner, repo = _split_repository(repository)
        items = await self._list_window(
            f"/repos/{owner}/{repo}/pulls", {"state": state}, limit, offset
        )
        return [self._pull_request(item) for item in items]

    async def get_pull_request(self, repository: str, number: int) -> PullRequest:
        owner, repo = _split_repository(repository)
        data = await self._request_object(
            "GET", f"/repos/{owner}/{repo}/pulls/{number}"
        )
        return self._pull_request(data)

    async def create_pull_request(
        self,
        repository: str,
        head: str,
        base: str,
        title: str,
        body: str = "",
        assignee: Optional[str] = None,
        draft: bool = False,
    ) -> PullRequest:
        owner, repo = _split_repository(repository)
        if draft and not title.startswith(DRAFT_TITLE_PREFIX):
            title = f"{DRAFT_TITLE_PREFIX}{title}"
        payload: Dict[str, Any] = {
            "head": head,
            "base": base,
            "title": title,
            "body": body,
        }
        if assignee:
            payload["assignee"] = assignee
        data = await self._request_object(
            "POST", f"/repos/{owner}/{repo}/pulls", json=payload
        )
        return self._pull_request(data)

    async def edit_pull_request(
        self,
        repository: str,
        number: int,
        title: Optional[str] = None,
        body: Optional[str] = None,
        state: Optional[str] = None,
        base_branch: Optional[str] = None,
    ) -> PullRequest:
        owner, repo = _split_repository(repository)
        changes = {
            key: value
            for key, value in (
                ("title", title),
                ("body", body),
                ("state", state),
                ("base", base_branch),
            )
            if value is not None
        }
        data = await self._request_object(
            "PATCH", f"/repos/{owner}/{repo}/pulls/{number}", json=changes
        )
        return self._pull_request(data)

    # Notifications

    async def list_notifications(
        self, repository: str, status: str = "unread", limit: int = 15, offset: int = 0
    ) -> List[Notification]:
        owner, repo = _split_repository(repository)
        params: Dict[str, Any] = {}
        if status == "all":
            params["all"] = "true"
        else:
            params["status-types"] = status
        items = await self._list_window(
            f"/repos/{owner}/{repo}/notifications", params, limit, offset
        )
        return [self._notification(item) for item in items]


class GiteaClient(ForgeClient):
    """Client for Gitea backends.

    Gitea's issue listing can include pull requests despite ``type=issues``;
    those entries carry a ``pull_request`` object and are dropped here.
    """

    dialect = Dialect.GITEA

    def _filter_issues(self, items: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return [item for item in items if not item.get("pull_request")]


class ForgejoClient(ForgeClient):
    """Client for Forgejo backends.

    Forgejo user objects may carry ``username`` without ``login``.
    """

    dialect = Dialect.FORGEJO

    def _user_login(self, user: Optional[Dict[str, Any]]) -> str:
        if not user:
            return ""
        return user.get("login") or user.get("username") or ""


def client_for_dialect(
    dialect: Dialect, base_url: str, token: str, timeout: float = DEFAULT_TIMEOUT
) -> ForgeClient:
    """Create the REST client for a concrete dialect."""
    if dialect is Dialect.FORGEJO:
        return ForgejoClient(base_url, token, timeout)
    if dialect is Dialect.GITEA:
        return GiteaClient(base_url, token, timeout)
    raise ValueError(f"Dialect must be detected before creating a client: {dialect}")
