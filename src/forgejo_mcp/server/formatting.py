"""Text rendering of tool results.

Every tool builds one structured payload and hands it to ``format_result``.
The payload is returned to the client unchanged as structured content; only
the accompanying text depends on the formatting mode:

* terse mode (default): a single summary line
* verbose mode (compat): the summary line followed by per-item detail lines
"""

import json
from typing import Any, Callable, Dict, List, Mapping

COMMENT_PREVIEW_LENGTH = 100


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


def _truncate(text: str, length: int = COMMENT_PREVIEW_LENGTH) -> str:
    text = " ".join(text.split())
    if len(text) <= length:
        return text
    return text[:length] + "..."


def _action_suffix(payload: Mapping[str, Any]) -> str:
    action = payload.get("action")
    return f" {action}" if action else ""


def _format_issues(payload: Mapping[str, Any], verbose: bool) -> List[str]:
    issues = payload["issues"]
    lines = [f"Found {_plural(len(issues), 'issue')}"]
    if verbose:
        for issue in issues:
            lines.append(f"- #{issue['number']}: {issue['title']} ({issue['state']})")
    return lines


def _format_issue(payload: Mapping[str, Any], verbose: bool) -> List[str]:
    issue = payload["issue"]
    lines = [f"Issue #{issue['number']}{_action_suffix(payload)}: {issue['title']}"]
    if verbose:
        lines.append(f"State: {issue['state']}")
        if issue.get("user"):
            lines.append(f"Author: {issue['user']}")
        if issue.get("updated"):
            lines.append(f"Updated: {issue['updated']}")
        if issue.get("body"):
            lines.append(f"Body: {issue['body']}")
    return lines


def _format_pull_requests(payload: Mapping[str, Any], verbose: bool) -> List[str]:
    pull_requests = payload["pull_requests"]
    lines = [f"Found {_plural(len(pull_requests), 'pull request')}"]
    if verbose:
        for pr in pull_requests:
            lines.append(
                f"- #{pr['number']}: {pr['title']} ({pr['state']}) "
                f"{pr['head']['ref']} -> {pr['base']['ref']}"
            )
    return lines


def _format_pull_request(payload: Mapping[str, Any], verbose: bool) -> List[str]:
    pr = payload["pull_request"]
    lines = [
        f"Pull request #{pr['number']}{_action_suffix(payload)}: {pr['title']}"
    ]
    if verbose:
        state = "merged" if pr.get("merged") else pr["state"]
        lines.append(f"State: {state}")
        lines.append(f"Branches: {pr['head']['ref']} -> {pr['base']['ref']}")
        if pr.get("user"):
            lines.append(f"Author: {pr['user']}")
        if pr.get("mergeable") is not None:
            lines.append(f"Mergeable: {'yes' if pr['mergeable'] else 'no'}")
        if pr.get("html_url"):
            lines.append(f"URL: {pr['html_url']}")
        if pr.get("body"):
            lines.append(f"Body: {pr['body']}")
    return lines


def _format_comments(payload: Mapping[str, Any], verbose: bool) -> List[str]:
    comments = payload["comments"]
    total = payload.get("total", len(comments))
    summary = f"Found {_plural(total, 'comment')}"
    if total != len(comments):
        summary += f", showing {len(comments)}"
    lines = [summary]
    if verbose:
        for comment in comments:
            lines.append(
                f"- Comment #{comment['id']} by {comment['user'] or 'unknown'}: "
                f"{_truncate(comment['body'])}"
            )
    return lines


def _format_comment(payload: Mapping[str, Any], verbose: bool) -> List[str]:
    comment = payload["comment"]
    lines = [f"Comment #{comment['id']}{_action_suffix(payload)}"]
    if verbose:
        if comment.get("user"):
            lines.append(f"Author: {comment['user']}")
        lines.append(f"Body: {comment['body']}")
    return lines


def _format_notifications(payload: Mapping[str, Any], verbose: bool) -> List[str]:
    notifications = payload["notifications"]
    lines = [f"Found {_plural(len(notifications), 'notification')}"]
    if verbose:
        for notification in notifications:
            status = "unread" if notification["unread"] else "read"
            lines.append(
                f"- #{notification['id']} [{notification['subject_type']}] "
                f"{notification['subject_title']} ({status})"
            )
    return lines


def _format_message(payload: Mapping[str, Any], verbose: bool) -> List[str]:
    return [str(payload["message"])]


# Checked in order; the first key present in the payload selects the renderer
_FORMATTERS: Dict[str, Callable[[Mapping[str, Any], bool], List[str]]] = {
    "issues": _format_issues,
    "issue": _format_issue,
    "pull_requests": _format_pull_requests,
    "pull_request": _format_pull_request,
    "comments": _format_comments,
    "comment": _format_comment,
    "notifications": _format_notifications,
    "message": _format_message,
}


def format_result(payload: Mapping[str, Any], verbose: bool = False) -> str:
    """Render the text accompanying a structured tool payload.

    Args:
        payload: Structured payload built by a tool handler (not modified)
        verbose: Emit per-item detail lines after the summary

    Returns:
        Text for the tool result's text content
    """
    for key, formatter in _FORMATTERS.items():
        if key in payload:
            return "\n".join(formatter(payload, verbose))
    return json.dumps(payload, indent=2, default=str)
