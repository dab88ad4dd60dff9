"""Exceptions raised by the completion and tool-invocation loop."""


class CallflowError(Exception):
    """Base class for every error raised by ``callflow``."""


class ToolRegistryError(CallflowError):
    """The tool list handed to a registry is invalid.

    Raised at construction time for duplicate names or non-callable
    tool functions, never per call.
    """


class UnresolvedTool(CallflowError, LookupError):
    """The model asked for a tool the registry does not know."""

    def __init__(self, name: str):
        super().__init__(f"Tool not found: {name!r}")
        self.name = name


class MalformedArguments(CallflowError, ValueError):
    """A streamed argument buffer could not be decoded to a JSON object."""

    def __init__(self, buffer: str, reason: str = ""):
        message = f"Could not decode tool arguments: {buffer!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.buffer = buffer


class ToolExecutionFailure(CallflowError):
    """A tool callable raised while handling a call.

    The original exception is available as ``__cause__``.
    """

    def __init__(self, name: str, error: BaseException):
        super().__init__(f"Error calling {name}: {error}")
        self.name = name
        self.error = error


class SessionError(CallflowError):
    """A session operation broke the conversation-context rules."""


class ToolLoopLimitExceeded(CallflowError):
    """A single turn chained more tool calls than allowed."""

    def __init__(self, limit: int):
        super().__init__(f"Exceeded {limit} chained tool calls in one turn")
        self.limit = limit
