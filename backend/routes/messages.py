"""Newsletter message routes.

GET  /api/email/messages        → newsletter messages with headers + labels
GET  /api/email/messages/{id}   → one full message
POST /api/email/messages/{id}   → modify a message's labels (mark read, archive)
"""

import logging
from dataclasses import dataclass

from fastapi import APIRouter, Depends, Request, Response
from pydantic import BaseModel, ConfigDict, Field

from auth import Session, get_session
from config import settings
from errors import LabelNotFoundError
from services import gmail
from services.cache import KeyedCache, make_cache

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/email/messages")


@dataclass(frozen=True)
class NewsletterLabelParams:
    user_id: str
    access_token: str


def _newsletter_label_key(params: NewsletterLabelParams) -> str:
    # The token rotates but the label belongs to the user
    return f"user:{params.user_id}:labels:newsletter"


async def _fetch_newsletter_label(params: NewsletterLabelParams) -> dict | None:
    return await gmail.get_newsletter_label(params.access_token)


def build_newsletter_label_cache() -> KeyedCache[NewsletterLabelParams, dict | None]:
    return make_cache(
        generate_key=_newsletter_label_key,
        fetch_fresh_value=_fetch_newsletter_label,
        ttl=settings.label_cache_ttl,
        name="newsletter_label",
    )


def get_label_cache(request: Request) -> KeyedCache[NewsletterLabelParams, dict | None]:
    return request.app.state.newsletter_label_cache


class ModifyMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    add_label_ids: list[str] = Field(default_factory=list, alias="addLabelIds")
    remove_label_ids: list[str] = Field(default_factory=list, alias="removeLabelIds")


@router.get("")
async def list_messages(
    session: Session = Depends(get_session),
    label_cache: KeyedCache = Depends(get_label_cache),
) -> dict:
    """Newsletter messages with metadata (headers, labels, snippet)."""
    logger.debug("Fetching messages for user %s", session.user_id)

    label = await label_cache(NewsletterLabelParams(session.user_id, session.access_token))
    if not label:
        raise LabelNotFoundError(settings.newsletter_label_name)

    stubs = await gmail.get_base_messages(
        session.access_token,
        label_id=label["id"],
        max_results=settings.messages_max_results,
    )
    messages = await gmail.get_messages(
        session.access_token,
        [stub["id"] for stub in stubs],
        gmail.MessageFormat.METADATA,
    )
    logger.info("Fetched %d newsletter messages for user %s", len(messages), session.user_id)
    return {"messages": messages}


@router.get("/{message_id}")
async def get_message(message_id: str, session: Session = Depends(get_session)) -> dict:
    message = await gmail.get_message(session.access_token, message_id, gmail.MessageFormat.FULL)
    return {"message": message}


@router.post("/{message_id}", status_code=204)
async def modify_message(
    message_id: str,
    update: ModifyMessageRequest,
    session: Session = Depends(get_session),
) -> Response:
    await gmail.modify_message(
        session.access_token,
        message_id,
        update.model_dump(by_alias=True),
    )
    return Response(status_code=204)
