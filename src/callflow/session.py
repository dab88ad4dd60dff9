import json
import logging
import uuid
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr

from callflow.exceptions import SessionError
from callflow.message import Turn, TurnRole

logger = logging.getLogger(__name__)


def _to_content(content: Any) -> str:
    if isinstance(content, str):
        return content
    return json.dumps(content)


class Session(BaseModel):
    """The conversation context for one call.

    Holds the ordered, append-only list of turns plus the caller's number
    and the call identifier. Turns are only ever added through
    :meth:`append`; nothing removes or rewrites them.

    Args:
        session_id: Identifier for this conversation.
        turns: Initial turns, normally the system prompt and greeting.
    """

    session_id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    caller_number: str | None = None
    call_sid: str | None = None

    _turns: list[Turn] = PrivateAttr(default_factory=list)

    def __init__(self, turns: Iterable[Turn | dict] = (), **data: Any):
        super().__init__(**data)
        self._turns = [
            t if isinstance(t, Turn) else Turn.model_validate(t)
            for t in turns
        ]

    @property
    def turns(self) -> tuple[Turn, ...]:
        """Read-only view of the history, oldest first."""
        return tuple(self._turns)

    @classmethod
    def seeded(
        cls, system_prompt: str, greeting: str,
        session_id: str | None = None,
    ) -> "Session":
        """Build a session whose history starts with the system prompt
        and the assistant greeting."""
        turns = [
            Turn(role=TurnRole.SYSTEM, content=system_prompt),
            Turn(role=TurnRole.ASSISTANT, content=greeting),
        ]
        if session_id is None:
            return cls(turns=turns)
        return cls(session_id=session_id, turns=turns)

    def append(
        self, role: TurnRole, content: Any, name: str | None = None,
    ) -> Turn:
        """Append a turn and return it.

        Non-string content is JSON-serialised. User turns never carry a
        name; function turns must.
        """
        if role == TurnRole.USER:
            name = None
        elif role == TurnRole.FUNCTION and not name:
            raise SessionError("function turns require the tool name")
        turn = Turn(role=role, content=_to_content(content), name=name)
        self._turns.append(turn)
        return turn

    def snapshot(self) -> list[dict]:
        """Return the history in chat-completions wire format."""
        return [t.model_dump() for t in self._turns]

    def set_caller_number(self, number: str) -> None:
        if self.caller_number is not None:
            raise SessionError("caller number is already set")
        self.caller_number = number

    def set_call_sid(self, call_sid: str) -> None:
        """Record the call identifier, both on the session and as a
        system turn the model can see."""
        if self.call_sid is not None:
            raise SessionError("call sid is already set")
        self.call_sid = call_sid
        logger.info(f"Session {self.session_id} bound to call {call_sid}")
        self.append(TurnRole.SYSTEM, f"callSid: {call_sid}")

    def __len__(self) -> int:
        return len(self._turns)
