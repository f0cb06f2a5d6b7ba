"""Conversation view endpoints.

The transport posts its current snapshot (sections, status, error) and gets
back render instructions for every section. Disclosure toggles are recorded
against the same conversation so later snapshots keep the user's choices.
"""

import logging

from fastapi import APIRouter, HTTPException, Response, status

from chatstate.api.dependencies import ExistingSession, Store
from chatstate.models.render import (
    ConversationRender,
    DisclosureToggle,
    DisclosureToggleResponse,
    RenderRequest,
)
from chatstate.services.disclosure import DisclosureId

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


@router.post(
    "/{conversation_id}/render",
    response_model=ConversationRender,
    status_code=status.HTTP_200_OK,
    summary="Render a conversation snapshot",
    description=(
        "Resolve disclosure state, tool counts and the conversation-wide citation "
        "map for the given sections. The loading indicator and error attach to "
        "the last section only; an empty conversation renders no sections."
    ),
)
async def render_conversation(
    conversation_id: str,
    payload: RenderRequest,
    store: Store,
) -> ConversationRender:
    session = store.get_or_create(conversation_id)
    rendered = session.render(
        payload.sections,
        payload.status,
        payload.error,
        chat_id=payload.chat_id,
        is_guest=payload.is_guest,
    )
    if rendered is None:
        return ConversationRender(sections=[])

    logger.debug(
        "Rendered conversation %s: sections=%d citations=%d status=%s",
        conversation_id,
        len(rendered.sections),
        len(rendered.citations),
        payload.status,
    )
    return rendered


@router.put(
    "/{conversation_id}/disclosures",
    response_model=DisclosureToggleResponse,
    summary="Record a user expand/collapse toggle",
)
async def toggle_disclosure(
    payload: DisclosureToggle,
    session: ExistingSession,
) -> DisclosureToggleResponse:
    if payload.part_id is None:
        disclosure_id = DisclosureId.for_message(payload.message_id)
    else:
        disclosure_id = DisclosureId.for_part(
            payload.message_id, payload.part_id, payload.part_type
        )
    session.set_open(disclosure_id, payload.open)
    return DisclosureToggleResponse(key=disclosure_id.key, open=payload.open)


@router.delete(
    "/{conversation_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Reset a conversation view",
)
async def reset_conversation(conversation_id: str, store: Store) -> Response:
    """Drop toggles and cached counts for the conversation.

    Raises:
        HTTPException: 404 if the conversation has no live session.
    """
    if not store.discard(conversation_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Conversation not found",
        )
    logger.info("Reset conversation %s", conversation_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
