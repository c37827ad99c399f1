"""GitHub webhook receiver and PR sync state endpoints"""
import json
import logging
from contextlib import contextmanager
from typing import Dict, Iterator, List

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool

from prbridge.config import Settings, settings as app_settings
from prbridge.dispatch import EventDispatcher
from prbridge.errors import ConfigurationError, NotFoundError, TransportError
from prbridge.security import SIGNATURE_HEADER, verify_signature
from prbridge.services.annotations import extract_issue_keys
from prbridge.services.markers import find_markers, issue_state
from prbridge.services.sync_targets import build_sync_target

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["sync"])


class PullRequestStateResponse(BaseModel):
    repository: str
    pr_number: int
    marker_target: str
    issues: Dict[str, str]


def get_settings() -> Settings:
    return app_settings


@contextmanager
def open_dispatcher(settings: Settings) -> Iterator[EventDispatcher]:
    """Build the API clients for one request and close them afterwards"""
    try:
        dispatcher = EventDispatcher.from_settings(settings)
    except ConfigurationError as e:
        logger.error(str(e))
        raise HTTPException(status_code=500, detail=str(e))
    try:
        yield dispatcher
    finally:
        dispatcher.close()


@router.post("/webhooks/github")
async def github_webhook(
    request: Request,
    x_github_event: str = Header(""),
    signature: str | None = Header(None, alias=SIGNATURE_HEADER),
    settings: Settings = Depends(get_settings),
):
    """Receive a GitHub webhook delivery and run the matching workflow"""
    body = await request.body()
    if settings.webhook_secret and not verify_signature(
        settings.webhook_secret, body, signature
    ):
        raise HTTPException(status_code=401, detail="Invalid webhook signature")

    if x_github_event == "ping":
        return {"status": "ok", "message": "pong"}

    try:
        payload = json.loads(body or b"{}")
    except ValueError:
        raise HTTPException(status_code=400, detail="Request body is not valid JSON")

    with open_dispatcher(settings) as dispatcher:
        # Sync API calls block; keep them off the event loop.
        return await run_in_threadpool(dispatcher.dispatch, x_github_event, payload)


@router.get("/pulls/{owner}/{repo}/{pr_number}/state", response_model=PullRequestStateResponse)
def pull_request_state(
    owner: str,
    repo: str,
    pr_number: int,
    settings: Settings = Depends(get_settings),
):
    """Per-issue sync state of a pull request, read from its markers"""
    repository = f"{owner}/{repo}"
    try:
        with open_dispatcher(settings) as dispatcher:
            text = dispatcher.github.get_pr_text(repository, pr_number)
            target = build_sync_target(
                settings.marker_target, dispatcher.github, repository, pr_number
            )
            content = target.content()
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except TransportError as e:
        raise HTTPException(status_code=502, detail=str(e))
    except ConfigurationError as e:
        raise HTTPException(status_code=500, detail=str(e))

    keys: List[str] = extract_issue_keys(f"{text.title}\n{text.body}")
    for marker in find_markers(content):
        if marker.issue_key not in keys:
            keys.append(marker.issue_key)

    return PullRequestStateResponse(
        repository=repository,
        pr_number=pr_number,
        marker_target=target.kind,
        issues={key: issue_state(content, key).value for key in keys},
    )
