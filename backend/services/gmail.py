"""Thin async client for the Gmail REST API (v1).

Every call authenticates with the user's OAuth access token. A 401 from Gmail
means the token expired or was revoked and surfaces as
GmailAuthenticationError so routes can answer 401 instead of 5xx.
"""

import asyncio
import logging
from enum import Enum

import httpx

from config import settings
from errors import GmailApiError, GmailNotFoundError, UnauthenticatedError

logger = logging.getLogger(__name__)


class MessageFormat(str, Enum):
    MINIMAL = "minimal"
    FULL = "full"
    RAW = "raw"
    METADATA = "metadata"


class GmailAuthenticationError(UnauthenticatedError):
    pass


def build_client(access_token: str) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.gmail_api_base,
        headers={"Authorization": f"Bearer {access_token}"},
        timeout=settings.gmail_timeout,
    )


async def _request(
    access_token: str,
    method: str,
    path: str,
    client: httpx.AsyncClient | None = None,
    **kwargs,
) -> httpx.Response:
    """Send one Gmail request, translating failures into service errors.

    Pass `client` to reuse an open connection pool; otherwise a client is
    opened for this request only.
    """
    try:
        if client is None:
            async with build_client(access_token) as own_client:
                resp = await own_client.request(method, path, **kwargs)
        else:
            resp = await client.request(method, path, **kwargs)
    except httpx.HTTPError as e:
        logger.error("Gmail %s %s failed: %s", method, path, e)
        raise GmailApiError(f"Gmail request failed: {e}") from e

    if resp.status_code == 401:
        raise GmailAuthenticationError(f"Gmail rejected the access token ({method} {path})")
    if resp.status_code == 404:
        raise GmailNotFoundError(path)
    try:
        resp.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.error("Gmail %s %s returned %d", method, path, resp.status_code)
        raise GmailApiError(f"Gmail API error: {resp.status_code}") from e
    return resp


async def get_labels(access_token: str) -> list[dict]:
    resp = await _request(access_token, "GET", "/labels")
    return resp.json().get("labels", [])


async def get_newsletter_label(access_token: str) -> dict | None:
    """Find the label newsletters are filed under, or None if the user has none."""
    labels = await get_labels(access_token)
    return next(
        (label for label in labels if label.get("name") == settings.newsletter_label_name),
        None,
    )


async def get_base_messages(access_token: str, label_id: str, max_results: int) -> list[dict]:
    """List message stubs ({id, threadId}) carrying a label, newest first."""
    resp = await _request(
        access_token,
        "GET",
        "/messages",
        params={"labelIds": label_id, "maxResults": max_results},
    )
    # Gmail omits the key entirely when nothing matches
    return resp.json().get("messages", [])


async def get_message(
    access_token: str,
    message_id: str,
    format: MessageFormat = MessageFormat.FULL,
    client: httpx.AsyncClient | None = None,
) -> dict:
    resp = await _request(
        access_token,
        "GET",
        f"/messages/{message_id}",
        client=client,
        params={"format": MessageFormat(format).value},
    )
    return resp.json()


async def get_messages(
    access_token: str, message_ids: list[str], format: MessageFormat = MessageFormat.METADATA
) -> list[dict]:
    """Fetch several messages concurrently over one connection pool, in id order."""
    async with build_client(access_token) as client:
        return list(
            await asyncio.gather(
                *[get_message(access_token, mid, format, client=client) for mid in message_ids]
            )
        )


async def modify_message(access_token: str, message_id: str, update: dict) -> None:
    """Add or remove labels, e.g. {"removeLabelIds": ["UNREAD"]} to mark read."""
    await _request(access_token, "POST", f"/messages/{message_id}/modify", json=update)
    logger.info("Modified message %s", message_id)
