from typing import Annotated

from fastapi import Depends, HTTPException, status

from chatstate.core.sessions import SessionStore, get_session_store
from chatstate.services.composer import ConversationSession

Store = Annotated[SessionStore, Depends(get_session_store)]


def get_existing_session(conversation_id: str, store: Store) -> ConversationSession:
    """Return the live session for ``conversation_id``.

    Raises:
        HTTPException: 404 if nothing has been rendered for this conversation yet.
    """
    session = store.get(conversation_id)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Conversation not found",
        )
    return session


ExistingSession = Annotated[ConversationSession, Depends(get_existing_session)]
