"""Host name -> instance ID resolution: DNS, per-address strategies, orchestration."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from . import HostResolver, InventoryClient, Operation
from .fanout import gather_drain_all, gather_fail_fast
from .models import ADDRESS_FILTERS, AddressFilter, IPAddress

logger = logging.getLogger(__name__)


async def find_instances_by_strategy(
    inventory: InventoryClient, strategy: AddressFilter, address: IPAddress
) -> set[str]:
    """Run one lookup strategy; addresses of the wrong family match nothing without a query."""
    ec2_filter = strategy.filter_for(address)
    if ec2_filter is None:
        return set()
    return await inventory.instance_ids_by_filter(ec2_filter)


async def find_instances_by_address(inventory: InventoryClient, address: IPAddress) -> set[str]:
    """Find every instance reachable at address through any of the lookup strategies."""
    logger.debug("Finding instances with IP address %s", address, extra={"address": str(address)})
    return await gather_fail_fast(
        find_instances_by_strategy(inventory, strategy, address) for strategy in ADDRESS_FILTERS
    )


async def find_instances(inventory: InventoryClient, resolver: HostResolver, host_name: str) -> set[str]:
    """Resolve host_name and find the instances behind each of its addresses."""
    addresses = await resolver.resolve(host_name)
    if not addresses:
        logger.info("%s has no addresses", host_name, extra={"host_name": host_name})
    return await gather_fail_fast(find_instances_by_address(inventory, address) for address in addresses)


async def find_instances_then(
    inventory: InventoryClient,
    resolver: HostResolver,
    host_names: Iterable[str],
    operation: Operation,
) -> None:
    """Resolve every host name, then apply operation to the sorted, deduplicated instance IDs.

    All lookups run to completion even when one fails; the first failure to
    complete is raised afterwards and the operation is not applied.
    """
    lookups = []
    for host_name in host_names:
        logger.debug("Dispatching instance lookup for %s", host_name, extra={"host_name": host_name})
        lookups.append(find_instances(inventory, resolver, host_name))

    instance_ids, first_error = await gather_drain_all(lookups)
    if first_error is not None:
        raise first_error

    logger.info("Resolved %d instances", len(instance_ids), extra={"instance_count": len(instance_ids)})
    await operation.apply(sorted(instance_ids))
