from __future__ import annotations

import asyncio
import logging
from typing import Awaitable, Callable, Iterable, List, Sequence, TypeVar

from .clients import CortexClient, InstanceClient
from .config import Settings
from .errors import InstanceNotFoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class InstancePool:
    """Ordered, read-only set of instance clients.

    Membership is fixed at construction; the pool owns its clients and
    closes them in ``aclose``.
    """

    def __init__(self, clients: Iterable[InstanceClient]) -> None:
        self._clients: tuple[InstanceClient, ...] = tuple(clients)
        self._by_name = {client.name: client for client in self._clients}
        if len(self._by_name) != len(self._clients):
            raise ValueError("instance names must be unique")

    @classmethod
    def from_settings(cls, settings: Settings) -> "InstancePool":
        return cls(CortexClient(instance) for instance in settings.instances)

    def instances(self) -> Sequence[InstanceClient]:
        return self._clients

    def lookup(self, instance_id: str) -> InstanceClient:
        client = self._by_name.get(instance_id)
        if client is None:
            raise InstanceNotFoundError(instance_id)
        return client

    def __len__(self) -> int:
        return len(self._clients)

    async def fan_out(
        self,
        operation: Callable[[InstanceClient], Awaitable[T]],
        on_error: Callable[[InstanceClient, BaseException], T],
    ) -> List[T]:
        """Run ``operation`` on every instance concurrently and join all.

        Results come back in configuration order whatever the completion
        order. An exception from one instance is mapped through ``on_error``
        so the join always yields one value per instance.
        """

        outcomes = await asyncio.gather(
            *(operation(client) for client in self._clients),
            return_exceptions=True,
        )
        results: List[T] = []
        for client, outcome in zip(self._clients, outcomes):
            if isinstance(outcome, BaseException):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                logger.warning(
                    "Instance %s failed during fan-out: %s", client.name, outcome
                )
                results.append(on_error(client, outcome))
            else:
                results.append(outcome)
        return results

    async def aclose(self) -> None:
        for client in self._clients:
            await client.aclose()
