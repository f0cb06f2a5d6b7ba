"""Per-message tool invocation counts, memoized once a message is final."""
import logging

from chatstate.models.chat import TOOL_PART_TYPES, Message

logger = logging.getLogger(__name__)


def count_tool_parts(message: Message) -> int:
    """Number of parts in ``message`` whose type is one of the assistant tools."""
    return sum(1 for part in message.parts if part.type in TOOL_PART_TYPES)


class ToolCountCache:
    """Tool counts keyed by message id, scoped to one conversation session.

    Counts are only cached for finalized messages. While a turn is loading the
    part lists are still growing, so callers pass ``is_loading=True`` and the
    count is recomputed on every call without touching the cache.
    """

    def __init__(self) -> None:
        self._counts: dict[str, int] = {}

    def __len__(self) -> int:
        return len(self._counts)

    def __contains__(self, message_id: object) -> bool:
        return message_id in self._counts

    def get(self, message: Message | None, is_loading: bool) -> int:
        if message is None or not message.id:
            return 0

        if is_loading:
            return count_tool_parts(message)

        cached = self._counts.get(message.id)
        if cached is not None:
            return cached

        count = count_tool_parts(message)
        self._counts[message.id] = count
        return count

    def invalidate(self) -> None:
        if self._counts:
            logger.debug("Invalidating %d cached tool counts", len(self._counts))
        self._counts.clear()
