"""Command adapter interfaces.

The rate limiter depends on these abstractions (not the concrete client
wrapper) so any Redis-compatible backend can sit behind it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Literal, Mapping, Sequence

IsDenied = Literal[0, 1]


class AbstractPipeline(ABC):
    """Builder that batches write operations for one atomic round trip.

    Queuing methods return the pipeline itself so calls can be chained::

        await adapter.multi().sadd("s1", 1).sunionstore("dest", "s1", "s2").execute()
    """

    @abstractmethod
    def sdiffstore(self, destination: str, *keys: str) -> AbstractPipeline:
        """Queue SDIFFSTORE destination key [key ...]."""
        raise NotImplementedError

    @abstractmethod
    def delete(self, *keys: str) -> AbstractPipeline:
        """Queue DEL key [key ...]."""
        raise NotImplementedError

    @abstractmethod
    def sadd(self, key: str, *members: Any) -> AbstractPipeline:
        """Queue SADD key member [member ...]."""
        raise NotImplementedError

    @abstractmethod
    def sunionstore(self, destination: str, *keys: str) -> AbstractPipeline:
        """Queue SUNIONSTORE destination key [key ...]."""
        raise NotImplementedError

    @abstractmethod
    def set(self, key: str, value: Any, *, px: int | None = None) -> AbstractPipeline:
        """Queue SET key value, plus PEXPIRE key px when px is truthy."""
        raise NotImplementedError

    @abstractmethod
    def length(self) -> int:
        """Return the number of queued low-level commands."""
        raise NotImplementedError

    @abstractmethod
    async def execute(self) -> list[Any]:
        """Send every queued command as one atomic batch.

        Returns:
            One result per low-level command, in queue order. Per-command
            errors are returned as exception entries.

        Raises:
            CommandError: If the batch as a whole is rejected.
            PipelineReusedError: If the pipeline was already executed.
        """
        raise NotImplementedError

    def __len__(self) -> int:
        return self.length()


class AbstractCommandAdapter(ABC):
    """Fixed command vocabulary consumed by the rate limiter."""

    @abstractmethod
    async def sadd(self, key: str, *members: Any) -> int:
        """Add members to a set.

        Returns:
            Number of members that were not already present.
        """
        raise NotImplementedError

    @abstractmethod
    async def hset(self, key: str, fields: Mapping[str, Any]) -> int:
        """Set hash fields.

        Returns:
            Number of fields that were newly created.
        """
        raise NotImplementedError

    @abstractmethod
    async def eval(
        self,
        script: str,
        keys: Sequence[str],
        args: Sequence[Any] | None = None,
    ) -> Any:
        """Run a Lua script and return whatever it returns."""
        raise NotImplementedError

    @abstractmethod
    async def evalsha(
        self,
        sha1: str,
        keys: Sequence[str],
        args: Sequence[Any] | None = None,
    ) -> Any:
        """Run a previously loaded Lua script by its SHA1 digest."""
        raise NotImplementedError

    @abstractmethod
    async def script_load(self, script: str) -> str:
        """Load a Lua script and return its SHA1 hex digest."""
        raise NotImplementedError

    @abstractmethod
    async def smismember(self, key: str, members: Sequence[Any]) -> list[IsDenied]:
        """Test membership of several members at once.

        Returns:
            One 0/1 flag per member, aligned with the input order.
        """
        raise NotImplementedError

    @abstractmethod
    def multi(self) -> AbstractPipeline:
        """Open a new pipeline bound to the same backend."""
        raise NotImplementedError
