"""Unit tests for citation extraction and aggregation."""

from chatstate.models.chat import CitationRef, Message, MessagePart, Section
from chatstate.services.citations import (
    aggregate_citations,
    conversation_messages,
    extract_citation_map,
    find_citation_markers,
    merge_citation_maps,
)

SEARCH_OUTPUT = {
    "results": [
        {"url": "https://example.com/a", "title": "A"},
        {"url": "https://example.com/b", "title": "B"},
    ]
}


def search_message(message_id, text, output=SEARCH_OUTPUT):
    return Message(
        id=message_id,
        parts=[
            MessagePart(type="tool-search", output=output),
            MessagePart(type="text", text=text),
        ],
    )


class TestFindCitationMarkers:
    def test_source_and_bare_markers(self):
        assert find_citation_markers("Hot flashes [Source 1]. HRT helps [2].") == {1, 2}

    def test_marker_at_start_of_text(self):
        assert find_citation_markers("[3] is relevant") == {3}

    def test_link_like_brackets_are_not_markers(self):
        assert find_citation_markers("see arr[1] and path/[2]") == set()


class TestExtractCitationMap:
    def test_maps_markers_to_tool_results(self):
        citations = extract_citation_map(search_message("m1", "First [1], second [2]."))
        assert citations == {
            1: CitationRef(url="https://example.com/a", title="A"),
            2: CitationRef(url="https://example.com/b", title="B"),
        }

    def test_only_referenced_sources_returned(self):
        assert list(extract_citation_map(search_message("m1", "Only [2]."))) == [2]

    def test_markers_past_available_sources_ignored(self):
        assert extract_citation_map(search_message("m1", "Phantom [7].")) == {}

    def test_message_without_sources_has_no_citations(self):
        message = Message(id="m1", parts=[MessagePart(type="text", text="Cited [1].")])
        assert extract_citation_map(message) == {}

    def test_malformed_results_are_skipped(self):
        output = {"results": [{"title": "no url"}, "junk", {"url": "https://x.test"}]}
        citations = extract_citation_map(search_message("m1", "See [1].", output=output))
        assert citations == {1: CitationRef(url="https://x.test", title="")}

    def test_sources_numbered_across_tool_parts(self):
        message = Message(
            id="m1",
            parts=[
                MessagePart(type="tool-search", output={"results": [{"url": "https://one.test"}]}),
                MessagePart(type="tool-fetch", output={"results": [{"url": "https://two.test"}]}),
                MessagePart(type="text", text="Both [1] and [2]."),
            ],
        )
        assert extract_citation_map(message)[2].url == "https://two.test"


class TestMergeCitationMaps:
    def test_last_write_wins(self):
        assert merge_citation_maps([{1: "A"}, {1: "B", 2: "C"}]) == {1: "B", 2: "C"}

    def test_empty_input(self):
        assert merge_citation_maps([]) == {}


class TestAggregateCitations:
    def test_traversal_order_is_user_then_assistants_by_section(self):
        sections = [
            Section(
                id="s1",
                user_message=Message(id="u1", role="user"),
                assistant_messages=[Message(id="a1"), Message(id="a2")],
            ),
            Section(id="s2", user_message=Message(id="u2", role="user")),
        ]
        assert [m.id for m in conversation_messages(sections)] == ["u1", "a1", "a2", "u2"]

    def test_extractor_called_once_per_message_in_order(self):
        messages = [Message(id="first"), Message(id="second")]
        seen = []

        def extractor(message):
            seen.append(message.id)
            return {1: message.id}

        assert aggregate_citations(messages, extractor) == {1: "second"}
        assert seen == ["first", "second"]

    def test_later_messages_refresh_reused_indices(self):
        older = search_message("m1", "Old [1].")
        newer = search_message(
            "m2", "New [1].", output={"results": [{"url": "https://new.test", "title": "N"}]}
        )
        citations = aggregate_citations([older, newer])
        assert citations[1].url == "https://new.test"
        assert citations[1].title == "N"
