"""Expanded/collapsed state for the collapsible elements of a conversation.

Explicit user toggles are stored per :class:`DisclosureId` and always win.
Elements nobody has toggled fall back to a default derived from the part
being rendered:

- assistant tool parts are open only while their message holds at most one
  tool invocation, so several tool panels never expand at once;
- generic tool invocations are open;
- a reasoning block is open only while it is the last part of its message,
  collapsing as soon as later content streams in;
- everything else is open.
"""
import logging
from dataclasses import dataclass
from typing import Literal

from chatstate.models.chat import (
    REASONING_PART_TYPE,
    TOOL_INVOCATION_PART_TYPE,
    TOOL_PART_TYPES,
    Message,
)
from chatstate.services.tool_counts import ToolCountCache

logger = logging.getLogger(__name__)

DisclosureKind = Literal["message", "tool", "reasoning", "part"]

# A message with more tool invocations than this starts with its tool panels
# collapsed.
MAX_EXPANDED_TOOL_COUNT = 1


def _kind_for_part_type(part_type: str | None) -> DisclosureKind:
    if part_type in TOOL_PART_TYPES or part_type == TOOL_INVOCATION_PART_TYPE:
        return "tool"
    if part_type == REASONING_PART_TYPE:
        return "reasoning"
    return "part"


@dataclass(frozen=True, slots=True)
class DisclosureId:
    """Identifies one collapsible element. Build with the ``for_*`` helpers."""

    kind: DisclosureKind
    message_id: str
    part_id: str | None = None

    @classmethod
    def for_message(cls, message_id: str) -> "DisclosureId":
        return cls(kind="message", message_id=message_id)

    @classmethod
    def for_part(
        cls, message_id: str, part_id: str | int, part_type: str | None = None
    ) -> "DisclosureId":
        return cls(
            kind=_kind_for_part_type(part_type),
            message_id=message_id,
            part_id=str(part_id),
        )

    @property
    def key(self) -> str:
        if self.part_id is None:
            return f"{self.kind}:{self.message_id}"
        return f"{self.kind}:{self.message_id}:{self.part_id}"

    def __str__(self) -> str:
        return self.key


class DisclosureState:
    def __init__(self, tool_counts: ToolCountCache) -> None:
        self._tool_counts = tool_counts
        self._overrides: dict[DisclosureId, bool] = {}

    def __len__(self) -> int:
        return len(self._overrides)

    def is_open(
        self,
        disclosure_id: DisclosureId,
        part_type: str | None = None,
        has_next_part: bool | None = None,
        message: Message | None = None,
        is_loading: bool = False,
    ) -> bool:
        """Resolve whether ``disclosure_id`` is expanded.

        ``is_loading`` is forwarded to the tool-count lookup so in-flight
        messages are counted live.
        """
        override = self._overrides.get(disclosure_id)
        if override is not None:
            return override

        if part_type in TOOL_PART_TYPES:
            tool_count = self._tool_counts.get(message, is_loading)
            return tool_count <= MAX_EXPANDED_TOOL_COUNT

        if part_type == TOOL_INVOCATION_PART_TYPE:
            return True
        if part_type == REASONING_PART_TYPE:
            return not has_next_part

        return True

    def set_open(self, disclosure_id: DisclosureId, open: bool) -> None:
        logger.debug("Disclosure %s set %s by user", disclosure_id, "open" if open else "closed")
        self._overrides[disclosure_id] = open

    def reset(self) -> None:
        self._overrides.clear()
