from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

ChatStatus = Literal["idle", "submitted", "streaming", "done", "error"]

# Statuses during which message part lists are still growing.
LOADING_STATUSES: frozenset[str] = frozenset({"submitted", "streaming"})

# Part types for the assistant's own tools: search, fetch, ask-question and
# related-questions, as they are tagged on streamed message parts.
TOOL_PART_TYPES: frozenset[str] = frozenset(
    {
        "tool-search",
        "tool-fetch",
        "tool-askQuestion",
        "tool-relatedQuestions",
    }
)
TOOL_INVOCATION_PART_TYPE = "tool-invocation"
REASONING_PART_TYPE = "reasoning"


class CitationRef(BaseModel):
    url: str
    title: str = ""


CitationMap = dict[int, CitationRef]


class MessagePart(BaseModel):
    # Renderers read arbitrary part payloads (state, input, toolCallId, ...).
    model_config = ConfigDict(extra="allow")

    type: str
    id: str | None = None
    text: str | None = None
    output: Any = None


class Message(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    role: Literal["user", "assistant", "system"] = "assistant"
    parts: list[MessagePart] = Field(default_factory=list)


class Section(BaseModel):
    id: str
    user_message: Message
    assistant_messages: list[Message] = Field(default_factory=list)

    def messages(self) -> list[Message]:
        """User message first, then assistant replies in arrival order."""
        return [self.user_message, *self.assistant_messages]
