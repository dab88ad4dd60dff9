from enum import Enum
from pydantic import BaseModel, model_serializer


class TurnRole(Enum):
    SYSTEM = "system"
    ASSISTANT = "assistant"
    USER = "user"
    FUNCTION = "function"


class Turn(BaseModel):
    """One role-attributed entry in the conversation history.

    ``name`` identifies the tool that produced a ``function`` turn and is
    left out of the wire format when unset.
    """

    model_config = {"frozen": True}

    role: TurnRole
    content: str
    name: str | None = None

    @model_serializer
    def serialize(self) -> dict:
        data = {"role": self.role.value, "content": self.content}
        if self.name is not None:
            data["name"] = self.name
        return data
