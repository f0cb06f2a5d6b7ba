"""Compose a conversation into per-section render instructions.

A :class:`ConversationSession` is the state owner for one live conversation
view: it holds the user's disclosure toggles and the tool-count cache, and on
every render pass walks the sections in order, handing each message to a
renderer together with a :class:`RenderContext` capability object.
"""
import logging
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any

from chatstate.core.error_normalizer import normalize_error
from chatstate.models.chat import (
    LOADING_STATUSES,
    ChatStatus,
    CitationMap,
    Message,
    Section,
)
from chatstate.models.render import (
    ConversationRender,
    MessageOutline,
    PartOutline,
    SectionRender,
)
from chatstate.services.citations import (
    CitationExtractor,
    aggregate_citations,
    conversation_messages,
    extract_citation_map,
)
from chatstate.services.disclosure import DisclosureId, DisclosureState
from chatstate.services.tool_counts import ToolCountCache

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SessionCallbacks:
    """Transport-side actions a renderer may wire to message controls."""

    on_query_select: Callable[[str], None] | None = None
    on_update_message: Callable[[str, str], Awaitable[None]] | None = None
    reload: Callable[[str], Awaitable[Any]] | None = None
    add_tool_result: Callable[[str, Any], None] | None = None


@dataclass(frozen=True, slots=True)
class MessageDisclosure:
    """Disclosure lookup and mutator bound to a single message."""

    state: DisclosureState
    message: Message
    is_loading: bool

    def is_open(
        self,
        disclosure_id: DisclosureId,
        part_type: str | None = None,
        has_next_part: bool | None = None,
    ) -> bool:
        return self.state.is_open(
            disclosure_id,
            part_type=part_type,
            has_next_part=has_next_part,
            message=self.message,
            is_loading=self.is_loading,
        )

    def on_open_change(self, disclosure_id: DisclosureId, open: bool) -> None:
        self.state.set_open(disclosure_id, open)


@dataclass(frozen=True, slots=True)
class RenderContext:
    key: str
    message: Message
    disclosure: MessageDisclosure
    citations: CitationMap
    status: ChatStatus
    is_latest_message: bool = False
    chat_id: str | None = None
    is_guest: bool = False
    callbacks: SessionCallbacks = field(default_factory=SessionCallbacks)

    @property
    def message_id(self) -> str | None:
        return self.message.id


MessageRenderer = Callable[[Message, RenderContext], Any]


def render_message_outline(message: Message, context: RenderContext) -> MessageOutline:
    """Default renderer: resolve the disclosure state of every part of ``message``."""
    # Id-less messages fall back to their positional key so they never share
    # disclosure ids with each other.
    message_id = message.id or context.key
    last_index = len(message.parts) - 1
    parts: list[PartOutline] = []
    for index, part in enumerate(message.parts):
        disclosure_id = DisclosureId.for_part(message_id, part.id or index, part.type)
        has_next_part = index < last_index
        parts.append(
            PartOutline(
                index=index,
                type=part.type,
                disclosure_key=disclosure_id.key,
                has_next_part=has_next_part,
                is_open=context.disclosure.is_open(disclosure_id, part.type, has_next_part),
            )
        )

    return MessageOutline(
        key=context.key,
        message_id=message.id,
        role=message.role,
        is_latest_message=context.is_latest_message,
        is_open=context.disclosure.is_open(DisclosureId.for_message(message_id)),
        parts=parts,
    )


class ConversationSession:
    def __init__(
        self,
        renderer: MessageRenderer = render_message_outline,
        extractor: CitationExtractor = extract_citation_map,
        callbacks: SessionCallbacks | None = None,
    ) -> None:
        self.tool_counts = ToolCountCache()
        self.disclosure = DisclosureState(self.tool_counts)
        self._renderer = renderer
        self._extractor = extractor
        self._callbacks = callbacks or SessionCallbacks()
        self._is_loading = False

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    def observe_status(self, status: ChatStatus) -> bool:
        """Track the loading flag, invalidating tool counts when a new turn starts."""
        is_loading = status in LOADING_STATUSES
        if is_loading and not self._is_loading:
            logger.info("New turn started (status=%s); invalidating tool counts", status)
            self.tool_counts.invalidate()
        self._is_loading = is_loading
        return is_loading

    def set_open(self, disclosure_id: DisclosureId, open: bool) -> None:
        self.disclosure.set_open(disclosure_id, open)

    def reset(self) -> None:
        """Forget all toggles and cached counts; used when the conversation resets."""
        self.disclosure.reset()
        self.tool_counts.invalidate()
        self._is_loading = False

    def _context(
        self,
        key: str,
        message: Message,
        citations: CitationMap,
        status: ChatStatus,
        is_latest_message: bool,
        chat_id: str | None,
        is_guest: bool,
    ) -> RenderContext:
        return RenderContext(
            key=key,
            message=message,
            disclosure=MessageDisclosure(self.disclosure, message, self._is_loading),
            citations=citations,
            status=status,
            is_latest_message=is_latest_message,
            chat_id=chat_id,
            is_guest=is_guest,
            callbacks=self._callbacks,
        )

    def render(
        self,
        sections: Sequence[Section],
        status: ChatStatus,
        error: Any = None,
        chat_id: str | None = None,
        is_guest: bool = False,
    ) -> ConversationRender | None:
        """Render ``sections`` in order, or return None when there are none.

        The loading indicator and the normalized error attach to the final
        section only.
        """
        # Invalidation must precede any tool-count read in this pass.
        is_loading = self.observe_status(status)
        citations = aggregate_citations(conversation_messages(sections), self._extractor)

        if not sections:
            return None

        error_message = normalize_error(error)
        last_section_index = len(sections) - 1
        rendered: list[SectionRender] = []

        for section_index, section in enumerate(sections):
            is_last = section_index == last_section_index
            user_message = self._renderer(
                section.user_message,
                self._context(
                    f"{section.id}-user",
                    section.user_message,
                    citations,
                    status,
                    False,
                    chat_id,
                    is_guest,
                ),
            )

            last_message_index = len(section.assistant_messages) - 1
            assistant_messages = []
            for message_index, message in enumerate(section.assistant_messages):
                is_latest_message = is_last and message_index == last_message_index
                assistant_messages.append(
                    self._renderer(
                        message,
                        self._context(
                            f"{message.id or f'{section.id}-{section_index}'}-{message_index}",
                            message,
                            citations,
                            status,
                            is_latest_message,
                            chat_id,
                            is_guest,
                        ),
                    )
                )

            rendered.append(
                SectionRender(
                    key=f"{section.id}-{section_index}",
                    anchor=f"section-{section.id}",
                    section_id=section.id,
                    index=section_index,
                    is_last=is_last,
                    user_message=user_message,
                    assistant_messages=assistant_messages,
                    show_loading=is_last and is_loading,
                    error=error_message if is_last else None,
                )
            )

        return ConversationRender(sections=rendered, citations=citations)
