import logging
from datetime import datetime, timezone
from typing import Optional

import requests as http_requests
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import APIRouter, HTTPException, status
from fastapi.responses import RedirectResponse

from dependencies import DB, AppSettings, CurrentUser

logger = logging.getLogger(__name__)

router = APIRouter()

NOTION_API = "https://api.notion.com/v1"
NOTION_VERSION = "2022-06-28"


def _access_token(user):
    return (user.get("notion") or {}).get("accessToken")


def blocks_to_text(blocks) -> str:
    """Plain text of the paragraph blocks, one paragraph per line."""
    lines = []
    for block in blocks:
        if block.get("type") != "paragraph":
            continue
        rich_text = block.get("paragraph", {}).get("rich_text", [])
        lines.append("".join(part.get("plain_text", "") for part in rich_text))
    return "\n".join(lines)


@router.get("/auth-url")
def get_auth_url(user: CurrentUser, settings: AppSettings):
    if not settings.notion_authorization_url:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="Notion integration is not configured.")
    return {"url": f"{settings.notion_authorization_url}&state={user['_id']}"}


@router.get("/callback")
def notion_callback(db: DB, settings: AppSettings, code: Optional[str] = None, state: Optional[str] = None):
    if not code or not state:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing code or state.")
    try:
        user_id = ObjectId(state)
    except InvalidId:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid state.")

    try:
        token_resp = http_requests.post(
            f"{NOTION_API}/oauth/token",
            auth=(settings.notion_client_id or "", settings.notion_client_secret or ""),
            json={"grant_type": "authorization_code", "code": code, "redirect_uri": settings.notion_redirect_uri},
            timeout=15,
        )
        token_resp.raise_for_status()
    except http_requests.RequestException as exc:
        logger.exception("Notion token exchange failed for user %s", state)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="Failed to authorize with Notion.") from exc

    data = token_resp.json()
    result = db.users.update_one({"_id": user_id}, {"$set": {"notion": {
        "accessToken": data.get("access_token"),
        "workspaceId": data.get("workspace_id"),
        "workspaceName": data.get("workspace_name"),
        "botId": data.get("bot_id"),
        "connectedAt": datetime.now(timezone.utc),
    }}})
    if result.matched_count == 0:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found.")

    logger.info("Notion connected for user %s", state)
    return RedirectResponse(settings.notion_success_url)


@router.get("/is-authorized")
def is_authorized(user: CurrentUser):
    return {"authorized": bool(_access_token(user))}


@router.get("/page-content")
def get_page_content(pageId: str, user: CurrentUser):
    token = _access_token(user)
    if not token:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Notion is not authorized.")

    try:
        resp = http_requests.get(
            f"{NOTION_API}/blocks/{pageId}/children",
            headers={"Authorization": f"Bearer {token}", "Notion-Version": NOTION_VERSION},
            params={"page_size": 100},
            timeout=15,
        )
        resp.raise_for_status()
    except http_requests.RequestException as exc:
        logger.exception("Notion page fetch failed for %s", pageId)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="Failed to fetch Notion page content.") from exc

    return {"content": blocks_to_text(resp.json().get("results", []))}
