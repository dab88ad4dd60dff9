import inspect
import json
import logging
import re
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from callflow.exceptions import ToolExecutionFailure, ToolRegistryError, UnresolvedTool

logger = logging.getLogger(__name__)

# Injected by the orchestrator, never requested from the model.
CALLER_PARAM = "callerNumber"

_TYPE_MAP = {
    str: "string",
    int: "integer",
    float: "number",
    bool: "boolean",
    list: "array",
    tuple: "array",
    set: "array",
    dict: "object",
}


def _parse_param_descriptions(func: Callable) -> dict[str, str]:
    """Read per-parameter descriptions from a Google-style ``Args:`` block."""
    doc = inspect.getdoc(func) or ""
    descriptions: dict[str, str] = {}
    in_args = False
    for line in doc.splitlines():
        stripped = line.strip()
        if stripped in ("Args:", "Arguments:"):
            in_args = True
            continue
        if not in_args:
            continue
        if not stripped:
            continue
        if not line.startswith((" ", "\t")):
            break
        match = re.match(r"(\w+)\s*(?:\([^)]*\))?\s*:\s*(.*)", stripped)
        if match:
            descriptions[match.group(1)] = match.group(2)
    return descriptions


def _summary(func: Callable) -> str:
    doc = inspect.getdoc(func) or ""
    return doc.split("\n\n", 1)[0].strip()


def _build_parameters_schema(func: Callable) -> dict:
    """Derive a JSON schema for *func*'s parameters.

    The injected caller-number parameter is left out; parameters without
    a default are required.
    """
    signature = inspect.signature(func)
    descriptions = _parse_param_descriptions(func)
    properties = {}
    required = []
    for name, param in signature.parameters.items():
        if name == CALLER_PARAM:
            continue
        annotation = param.annotation
        origin = getattr(annotation, "__origin__", annotation)
        properties[name] = {
            "type": _TYPE_MAP.get(origin, "string"),
            "description": descriptions.get(name, ""),
        }
        if param.default is inspect.Parameter.empty:
            required.append(name)
    return {"type": "object", "properties": properties, "required": required}


class Tool:
    """A named action the model can request mid-conversation.

    Args:
        func: Sync or async callable receiving the decoded arguments as
            keyword arguments.
        name: Name exposed to the model. Defaults to ``func.__name__``.
        description: Description exposed to the model. Defaults to the
            first paragraph of the docstring.
        parameters: JSON schema for the arguments. Derived from the
            signature when omitted.
        say: Announcement spoken before the tool runs.
        requires_caller: Inject the caller's number as ``callerNumber``.
    """

    def __init__(
        self,
        func: Callable,
        name: str | None = None,
        description: str | None = None,
        parameters: dict | None = None,
        say: str = "",
        requires_caller: bool = False,
    ):
        if not callable(func):
            raise ToolRegistryError(f"Tool function {func!r} is not callable")
        self.func = func
        self.name = name or func.__name__
        self.description = description if description is not None else _summary(func)
        self.parameters = parameters or _build_parameters_schema(func)
        self.say = say
        self.requires_caller = requires_caller

    def __repr__(self) -> str:
        return f"Tool(name={self.name!r})"

    def schema(self) -> dict:
        return {
            "type": "function",
            "function": {
                "name": self.name,
                "description": self.description,
                "parameters": self.parameters,
            },
        }

    async def invoke(self, args: dict) -> Any:
        """Run the tool with *args*.

        Raises:
            ToolExecutionFailure: If the callable raises.
        """
        try:
            result = self.func(**args)
            if inspect.isawaitable(result):
                result = await result
        except Exception as e:
            logger.error(f"Tool {self.name} raised: {e}")
            raise ToolExecutionFailure(self.name, e) from e
        return result


def tool(
    func: Callable | None = None,
    *,
    say: str = "",
    requires_caller: bool = False,
    name: str | None = None,
    parameters: dict | None = None,
):
    """Turn a function into a :class:`Tool`.

    Usable bare (``@tool``) or with options
    (``@tool(say="One moment.", requires_caller=True)``).
    """
    def wrap(f: Callable) -> Tool:
        return Tool(
            f, name=name, parameters=parameters,
            say=say, requires_caller=requires_caller,
        )

    if func is not None:
        return wrap(func)
    return wrap


def serialize_result(result: Any) -> str:
    """Render a tool result as the string stored in the conversation."""
    if isinstance(result, str):
        return result
    return json.dumps(result)


class ToolRegistry:
    """Read-only mapping from tool name to :class:`Tool`.

    Validation happens once, here: a duplicate name or a non-callable
    function fails construction.
    """

    def __init__(self, tools: Iterable[Tool]):
        registry: dict[str, Tool] = {}
        for t in tools:
            if not isinstance(t, Tool):
                raise ToolRegistryError(f"Expected a Tool, got {t!r}")
            if not callable(t.func):
                raise ToolRegistryError(f"Tool {t.name!r} has no callable")
            if t.name in registry:
                raise ToolRegistryError(f"Duplicate tool name: {t.name!r}")
            registry[t.name] = t
        self._tools = registry

    def resolve(self, name: str) -> Tool:
        tool_obj = self._tools.get(name)
        if tool_obj is None:
            raise UnresolvedTool(name)
        return tool_obj

    def get(self, name: str) -> Tool | None:
        return self._tools.get(name)

    def schemas(self) -> list[dict]:
        return [t.schema() for t in self._tools.values()]

    def names(self) -> list[str]:
        return list(self._tools)

    def __contains__(self, name: object) -> bool:
        return name in self._tools

    def __iter__(self) -> Iterator[Tool]:
        return iter(self._tools.values())

    def __len__(self) -> int:
        return len(self._tools)
