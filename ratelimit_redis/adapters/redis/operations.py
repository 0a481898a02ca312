"""Queued pipeline operations.

A pipeline call records one logical operation. Each operation expands into
the ordered low-level commands that are actually sent inside MULTI/EXEC, so
queue length and execution always read the same list.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ratelimit_redis.adapters.redis.encoding import KeyT, WireValue


@dataclass(frozen=True)
class QueuedCommand:
    """A single low-level command waiting inside a pipeline.

    Attributes:
        name: Redis command name (e.g., "SADD").
        args: Positional arguments, already coerced to wire form.
    """

    name: str
    args: tuple[WireValue, ...]


class QueuedOperation(ABC):
    """A logical pipeline call."""

    @abstractmethod
    def expand(self) -> tuple[QueuedCommand, ...]:
        """Return the low-level commands for this operation, in send order."""
        raise NotImplementedError


@dataclass(frozen=True)
class SDiffStore(QueuedOperation):
    destination: KeyT
    keys: tuple[KeyT, ...]

    def expand(self) -> tuple[QueuedCommand, ...]:
        return (QueuedCommand("SDIFFSTORE", (self.destination, *self.keys)),)


@dataclass(frozen=True)
class DelKeys(QueuedOperation):
    keys: tuple[KeyT, ...]

    def expand(self) -> tuple[QueuedCommand, ...]:
        return (QueuedCommand("DEL", self.keys),)


@dataclass(frozen=True)
class SAdd(QueuedOperation):
    key: KeyT
    members: tuple[WireValue, ...]

    def expand(self) -> tuple[QueuedCommand, ...]:
        return (QueuedCommand("SADD", (self.key, *self.members)),)


@dataclass(frozen=True)
class SUnionStore(QueuedOperation):
    destination: KeyT
    keys: tuple[KeyT, ...]

    def expand(self) -> tuple[QueuedCommand, ...]:
        return (QueuedCommand("SUNIONSTORE", (self.destination, *self.keys)),)


@dataclass(frozen=True)
class SetWithExpiry(QueuedOperation):
    """SET, optionally followed by PEXPIRE.

    A truthy ``px`` (milliseconds) adds the PEXPIRE as a second command right
    after the SET; ``None`` and ``0`` queue the SET alone.
    """

    key: KeyT
    value: WireValue
    px: int | None = None

    def expand(self) -> tuple[QueuedCommand, ...]:
        set_command = QueuedCommand("SET", (self.key, self.value))
        if not self.px:
            return (set_command,)
        return (set_command, QueuedCommand("PEXPIRE", (self.key, str(self.px))))
