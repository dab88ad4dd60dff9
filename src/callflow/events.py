"""Emission units and the sinks that receive them.

The orchestrator publishes every flushed chunk of assistant text, and
every tool announcement, to an :class:`OutputSink`. Publishing is a
plain synchronous call so ordering is decided entirely by the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Protocol

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EmissionUnit:
    """A chunk of assistant text ready for speech synthesis.

    ``index`` is ``None`` for tool announcements, which are spoken
    immediately and take no place in the ordered sequence.
    """

    index: int | None
    text: str
    interaction_count: int = 0

    @property
    def is_announcement(self) -> bool:
        return self.index is None


class OutputSink(Protocol):
    def publish(self, unit: EmissionUnit) -> None: ...


class CallbackSink:
    """Forwards each unit to a callable."""

    def __init__(self, callback: Callable[[EmissionUnit], None]):
        self.callback = callback

    def publish(self, unit: EmissionUnit) -> None:
        self.callback(unit)


@dataclass
class CollectingSink:
    """Keeps every published unit, in publish order."""

    units: list[EmissionUnit] = field(default_factory=list)

    def publish(self, unit: EmissionUnit) -> None:
        self.units.append(unit)

    @property
    def texts(self) -> list[str]:
        return [u.text for u in self.units]

    def ordered(self) -> list[EmissionUnit]:
        return [u for u in self.units if u.index is not None]

    def announcements(self) -> list[EmissionUnit]:
        return [u for u in self.units if u.index is None]


class OrderedSink:
    """Releases indexed units to *downstream* strictly in index order.

    Units that arrive ahead of a gap are held back until the gap is
    filled. Announcements bypass the buffer.

    Args:
        downstream: Sink that receives units in order.
        start: First index expected.
    """

    def __init__(self, downstream: OutputSink, start: int = 0):
        self.downstream = downstream
        self.expected = start
        self._held: dict[int, EmissionUnit] = {}

    def publish(self, unit: EmissionUnit) -> None:
        if unit.index is None:
            self.downstream.publish(unit)
            return
        if unit.index < self.expected:
            logger.warning(f"Dropping stale emission unit {unit.index}")
            return
        self._held[unit.index] = unit
        while self.expected in self._held:
            self.downstream.publish(self._held.pop(self.expected))
            self.expected += 1

    @property
    def held(self) -> int:
        return len(self._held)
