from typing import Any

from pydantic import BaseModel, Field, model_validator

from chatstate.models.chat import ChatStatus, CitationRef, Section


class PartOutline(BaseModel):
    index: int
    type: str
    disclosure_key: str
    has_next_part: bool
    is_open: bool


class MessageOutline(BaseModel):
    key: str
    message_id: str | None
    role: str
    is_latest_message: bool = False
    is_open: bool = True
    parts: list[PartOutline] = Field(default_factory=list)


class SectionRender(BaseModel):
    key: str = Field(description="Stable '<section id>-<index>' key for this snapshot")
    anchor: str = Field(description="'section-<section id>' element anchor")
    section_id: str
    index: int
    is_last: bool
    user_message: Any = None
    assistant_messages: list[Any] = Field(default_factory=list)
    show_loading: bool = False
    error: str | None = None


class ConversationRender(BaseModel):
    sections: list[SectionRender]
    citations: dict[int, CitationRef] = Field(default_factory=dict)


class RenderRequest(BaseModel):
    sections: list[Section] = Field(default_factory=list)
    status: ChatStatus = "idle"
    error: Any = Field(
        default=None,
        description="Error value reported by the transport, in any shape",
    )
    chat_id: str | None = None
    is_guest: bool = False


class DisclosureToggle(BaseModel):
    message_id: str
    part_id: str | None = Field(
        default=None,
        description="Part id or index; omit to toggle the whole message",
    )
    part_type: str | None = Field(
        default=None,
        description="Type of the toggled part; required with part_id",
    )
    open: bool

    @model_validator(mode="after")
    def validate_part(self) -> "DisclosureToggle":
        if self.part_id is not None and not self.part_type:
            raise ValueError("part_type is required when part_id is given")
        return self


class DisclosureToggleResponse(BaseModel):
    key: str
    open: bool
