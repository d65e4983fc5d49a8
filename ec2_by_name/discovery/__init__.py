"""Instance discovery package: collaborator Protocols and public exports."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .models import Ec2Filter, IPAddress


@runtime_checkable
class InventoryClient(Protocol):
    """Protocol for the paged instance inventory."""

    async def instance_ids_by_filter(self, ec2_filter: Ec2Filter) -> set[str]:
        """Return the IDs of all instances matching one filter."""
        ...


@runtime_checkable
class HostResolver(Protocol):
    """Protocol for host name resolution."""

    async def resolve(self, host_name: str) -> set[IPAddress]:
        """Return every address host_name resolves to."""
        ...


@runtime_checkable
class Operation(Protocol):
    """An action applied once to the resolved instance IDs."""

    async def apply(self, instance_ids: list[str]) -> None:
        ...
