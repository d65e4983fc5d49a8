"""Asynchronous host name resolution via dnspython."""

from __future__ import annotations

import asyncio
import ipaddress
import logging

import dns.asyncresolver
import dns.exception
import dns.resolver

from ..config import DNSConfig
from ..exceptions import ConfigError, ResolveError
from .models import IPAddress

logger = logging.getLogger(__name__)

_RECORD_TYPES = ("A", "AAAA")


class DNSResolver:
    """Resolves a host name to its IPv4 and IPv6 addresses."""

    def __init__(self, dns_config: DNSConfig):
        if dns_config.nameservers:
            self._resolver = dns.asyncresolver.Resolver(configure=False)
            self._resolver.nameservers = list(dns_config.nameservers)
        else:
            try:
                self._resolver = dns.asyncresolver.Resolver()
            except dns.resolver.NoResolverConfiguration as exc:
                raise ConfigError(f"No usable system DNS configuration: {exc}") from exc
        self._resolver.timeout = dns_config.timeout
        self._resolver.lifetime = dns_config.lifetime

    async def resolve(self, host_name: str) -> set[IPAddress]:
        """Return every A/AAAA address for host_name.

        Relative names are expanded with the resolver's search list, as the
        system resolver does. An IP literal resolves to itself. A name with no
        address records yields an empty set; any other DNS failure raises
        ResolveError.
        """
        try:
            return {ipaddress.ip_address(host_name)}
        except ValueError:
            pass

        results = await asyncio.gather(
            *(self._lookup(host_name, rdtype) for rdtype in _RECORD_TYPES),
            return_exceptions=True,
        )
        addresses: set[IPAddress] = set()
        for result in results:
            if isinstance(result, BaseException):
                raise result
            addresses |= result

        for address in addresses:
            logger.debug("Found IP address %s for %s", address, host_name,
                         extra={"host_name": host_name, "address": str(address)})
        return addresses

    async def _lookup(self, host_name: str, rdtype: str) -> set[IPAddress]:
        try:
            answer = await self._resolver.resolve(host_name, rdtype, search=True)
        except dns.resolver.NoAnswer:
            return set()
        except dns.exception.DNSException as exc:
            raise ResolveError(f"DNS error: {host_name}: {exc}", host_name=host_name) from exc
        return {ipaddress.ip_address(rdata.address) for rdata in answer}
