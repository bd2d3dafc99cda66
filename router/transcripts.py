import logging
import re
from typing import Optional

import requests as http_requests
from bs4 import BeautifulSoup
from fastapi import APIRouter, HTTPException, status

from dependencies import CurrentUser

logger = logging.getLogger(__name__)

router = APIRouter()

STRIPPED_TAGS = ("script", "style", "nav", "footer", "header", "noscript", "iframe")
HEADERS = {"User-Agent": "Mozilla/5.0 (compatible; StudyBuddy/1.0)"}


def page_text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(STRIPPED_TAGS):
        tag.decompose()
    return re.sub(r"\s+", " ", soup.get_text(separator=" ")).strip()


def website_transcript(url: str) -> str:
    if not url:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="URL is required.")
    try:
        response = http_requests.get(url, headers=HEADERS, timeout=10)
        response.raise_for_status()
    except http_requests.RequestException as exc:
        logger.exception("Failed to fetch %s", url)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                            detail="Failed to fetch website content.") from exc
    return page_text(response.text)


@router.get("/api/transcript/website")
def get_website_transcript(user: CurrentUser, url: Optional[str] = None):
    return {"transcript": website_transcript(url)}


@router.get("/api/transcript-public/website")
def get_public_website_transcript(url: Optional[str] = None):
    return {"transcript": website_transcript(url)}
