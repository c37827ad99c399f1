"""Backlog API client wrapper"""
import logging
import time
from typing import Any, Dict, List, Optional

import httpx

from prbridge.errors import NotFoundError, TransportError

logger = logging.getLogger(__name__)


def strip_scheme(host: str) -> str:
    """'https://example.backlog.com/' -> 'example.backlog.com'"""
    host = (host or "").strip()
    for prefix in ("https://", "http://"):
        if host.lower().startswith(prefix):
            host = host[len(prefix):]
    return host.rstrip("/")


class BacklogClient:
    """Wrapper for Backlog REST API v2 operations"""

    def __init__(
        self, host: str, api_key: str, *, timeout: float = 30.0, http: Optional[httpx.Client] = None
    ):
        """Initialize Backlog client"""
        self.host = strip_scheme(host)
        self.http = http or httpx.Client(
            base_url=f"https://{self.host}/api/v2",
            params={"apiKey": api_key},
            timeout=timeout,
        )

    @staticmethod
    def _should_retry(exc: Exception) -> bool:
        """Best-effort retry predicate for transient Backlog failures."""
        if isinstance(exc, httpx.TransportError):
            return True
        if isinstance(exc, httpx.HTTPStatusError):
            return exc.response.status_code in (429, 500, 502, 503, 504)
        return False

    def _with_retries(self, fn, *, max_attempts: int = 3, base_delay_s: float = 0.5):
        """Run callable with small exponential backoff on transient errors."""
        attempt = 1
        while True:
            try:
                return fn()
            except Exception as e:
                if attempt >= max_attempts or not self._should_retry(e):
                    raise
                time.sleep(base_delay_s * (2 ** (attempt - 1)))
                attempt += 1

    def _request(self, method: str, path: str, *, retry: bool = False, **kwargs) -> Any:
        """Send a request and translate failures into NotFoundError / TransportError.

        Only reads are retried; a retried write could post a comment twice.
        """

        def _send():
            response = self.http.request(method, path, **kwargs)
            response.raise_for_status()
            return response

        try:
            response = self._with_retries(_send) if retry else _send()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 404:
                raise NotFoundError(f"Backlog {method} {path}: not found") from e
            raise TransportError(f"Backlog {method} {path} failed with HTTP {status}", status) from e
        except httpx.HTTPError as e:
            raise TransportError(f"Backlog {method} {path} failed: {e}") from e
        return response.json()

    def get_issue(self, issue_key: str) -> Dict[str, Any]:
        """Get issue by key"""
        logger.debug(f"Getting issue: {issue_key}")
        return self._request("GET", f"/issues/{issue_key}", retry=True)

    def issue_exists(self, issue_key: str) -> bool:
        """True if the issue exists; transport failures propagate."""
        try:
            self.get_issue(issue_key)
            return True
        except NotFoundError:
            return False

    def add_comment(self, issue_key: str, content: str) -> Dict[str, Any]:
        """Add a comment to an issue"""
        logger.debug(f"Adding comment to issue: {issue_key}")
        comment = self._request("POST", f"/issues/{issue_key}/comments", data={"content": content})
        logger.info(f"Created comment on issue {issue_key}")
        return comment

    def update_status(self, issue_key: str, status_id: int) -> Dict[str, Any]:
        """Update issue status"""
        logger.debug(f"Updating issue {issue_key} status to: {status_id}")
        issue = self._request("PATCH", f"/issues/{issue_key}", data={"statusId": int(status_id)})
        logger.info(f"Updated issue {issue_key} status to {status_id}")
        return issue

    def get_project_statuses(self, project_key: str) -> List[Dict[str, Any]]:
        """Get all statuses for a project"""
        logger.debug(f"Getting statuses for project: {project_key}")
        return self._request("GET", f"/projects/{project_key}/statuses", retry=True)

    def close(self) -> None:
        self.http.close()
