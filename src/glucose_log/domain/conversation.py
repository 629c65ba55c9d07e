"""Assistant conversation models."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class MessageRole(str, Enum):
    """Author of a conversation message."""

    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """A single message in an assistant conversation."""

    role: MessageRole
    content: str

    model_config = ConfigDict(use_enum_values=True)
