"""Conversation-wide citation lookup.

Inline markers like ``[2]`` or ``[Source 2]`` in assistant text refer to the
numbered results of the search/fetch tools that ran in the same message.
Per-message maps are merged in traversal order into one index → reference
table so markers can be resolved anywhere in the conversation.
"""
import logging
import re
from collections.abc import Callable, Iterable, Mapping

from chatstate.models.chat import CitationMap, CitationRef, Message, Section

logger = logging.getLogger(__name__)

CitationExtractor = Callable[[Message], CitationMap]

# Tool parts whose output carries numbered source results.
SOURCE_PART_TYPES = ("tool-search", "tool-fetch")

_SOURCE_MARKER = re.compile(r"\[Source (\d+)\]")
_BARE_MARKER = re.compile(r"(?<![\/\w])\[(\d+)\](?![\w])")
# Characters that may precede a bare [N] for it to count as a citation.
_MARKER_PRECEDERS = (" ", ".", ":", ";", ",", ")", "—", "\n")


def _message_sources(message: Message) -> list[CitationRef]:
    sources: list[CitationRef] = []
    for part in message.parts:
        if part.type not in SOURCE_PART_TYPES or not isinstance(part.output, Mapping):
            continue
        for result in part.output.get("results") or []:
            if isinstance(result, Mapping) and result.get("url"):
                sources.append(
                    CitationRef(url=str(result["url"]), title=str(result.get("title") or ""))
                )
    return sources


def find_citation_markers(text: str) -> set[int]:
    """Return the citation indices referenced by ``[Source N]`` or ``[N]`` markers."""
    found: set[int] = {int(m.group(1)) for m in _SOURCE_MARKER.finditer(text)}
    for match in _BARE_MARKER.finditer(text):
        start = match.start()
        if start == 0 or text[start - 1] in _MARKER_PRECEDERS:
            found.add(int(match.group(1)))
    return found


def extract_citation_map(message: Message) -> CitationMap:
    """Map the citation markers in ``message`` text to its tool sources.

    Sources are numbered from 1 in the order their tool parts and results
    appear. Markers pointing past the available sources are ignored.
    """
    sources = _message_sources(message)
    if not sources:
        return {}

    text = "\n".join(part.text for part in message.parts if part.type == "text" and part.text)
    citations: CitationMap = {}
    for index in sorted(find_citation_markers(text)):
        if 1 <= index <= len(sources):
            citations[index] = sources[index - 1]
        else:
            logger.debug(
                "Ignoring citation [%d] in message %s: only %d source(s)",
                index,
                message.id,
                len(sources),
            )
    return citations


def merge_citation_maps(maps: Iterable[Mapping[int, CitationRef]]) -> CitationMap:
    """Merge left to right; a later map's entry replaces an earlier one."""
    merged: CitationMap = {}
    for citation_map in maps:
        merged.update(citation_map)
    return merged


def conversation_messages(sections: Iterable[Section]) -> list[Message]:
    """Flatten sections into traversal order: each user message, then its replies."""
    return [message for section in sections for message in section.messages()]


def aggregate_citations(
    messages: Iterable[Message],
    extractor: CitationExtractor = extract_citation_map,
) -> CitationMap:
    """Build the conversation-wide citation map from ``messages`` in order."""
    merged = merge_citation_maps(extractor(message) for message in messages)
    logger.debug("Aggregated %d citation(s)", len(merged))
    return merged
