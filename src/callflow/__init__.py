from callflow.events import (
    CallbackSink,
    CollectingSink,
    EmissionUnit,
    OrderedSink,
    OutputSink,
)
from callflow.exceptions import (
    CallflowError,
    MalformedArguments,
    SessionError,
    ToolExecutionFailure,
    ToolLoopLimitExceeded,
    ToolRegistryError,
    UnresolvedTool,
)
from callflow.instrumentation import instrument, uninstrument
from callflow.message import Turn, TurnRole
from callflow.orchestrator import CompletionResult, Orchestrator, StreamState
from callflow.session import Session
from callflow.tools import Tool, ToolRegistry, tool

__all__ = [
    "CallbackSink",
    "CallflowError",
    "CollectingSink",
    "CompletionResult",
    "EmissionUnit",
    "MalformedArguments",
    "Orchestrator",
    "OrderedSink",
    "OutputSink",
    "Session",
    "SessionError",
    "StreamState",
    "Tool",
    "ToolExecutionFailure",
    "ToolLoopLimitExceeded",
    "ToolRegistry",
    "ToolRegistryError",
    "Turn",
    "TurnRole",
    "UnresolvedTool",
    "instrument",
    "tool",
    "uninstrument",
]
