"""Tests for the dnspython-backed resolver."""

from __future__ import annotations

import asyncio
from ipaddress import ip_address
from types import SimpleNamespace
from unittest.mock import AsyncMock, patch

import dns.asyncresolver
import dns.exception
import dns.name
import dns.resolver
import pytest

from ec2_by_name.config import DNSConfig
from ec2_by_name.discovery import HostResolver
from ec2_by_name.discovery.dns_client import DNSResolver
from ec2_by_name.exceptions import ConfigError, ResolveError


def _answer(*addresses):
    return [SimpleNamespace(address=a) for a in addresses]


def _make_resolver(records: dict[str, object], config: DNSConfig | None = None):
    """Build a DNSResolver whose lookups are answered from records[rdtype]."""

    async def fake_resolve(host_name, rdtype, search=None):
        result = records.get(rdtype, dns.resolver.NoAnswer())
        if isinstance(result, Exception):
            raise result
        return result

    with patch("dns.asyncresolver.Resolver") as MockResolver:
        MockResolver.return_value.resolve = AsyncMock(side_effect=fake_resolve)
        resolver = DNSResolver(config or DNSConfig())
    return resolver, MockResolver


class TestDNSResolver:
    def test_collects_a_and_aaaa(self):
        resolver, _ = _make_resolver({
            "A": _answer("10.0.0.1", "10.0.0.2"),
            "AAAA": _answer("2001:db8::1"),
        })
        result = asyncio.run(resolver.resolve("web.example.com"))
        assert result == {ip_address("10.0.0.1"), ip_address("10.0.0.2"), ip_address("2001:db8::1")}

    def test_no_records_is_empty_not_error(self):
        resolver, _ = _make_resolver({})
        assert asyncio.run(resolver.resolve("empty.example.com")) == set()

    def test_only_aaaa(self):
        resolver, _ = _make_resolver({"AAAA": _answer("2001:db8::5")})
        assert asyncio.run(resolver.resolve("v6.example.com")) == {ip_address("2001:db8::5")}

    def test_nxdomain_raises_resolve_error(self):
        resolver, _ = _make_resolver({"A": dns.resolver.NXDOMAIN()})
        with pytest.raises(ResolveError, match="DNS error") as exc_info:
            asyncio.run(resolver.resolve("missing.example.com"))
        assert exc_info.value.host_name == "missing.example.com"
        assert isinstance(exc_info.value.__cause__, dns.resolver.NXDOMAIN)

    def test_timeout_raises_resolve_error(self):
        resolver, _ = _make_resolver({"A": _answer("10.0.0.1"), "AAAA": dns.exception.Timeout()})
        with pytest.raises(ResolveError):
            asyncio.run(resolver.resolve("slow.example.com"))

    def test_ip_literal_skips_lookup(self):
        resolver, MockResolver = _make_resolver({})
        assert asyncio.run(resolver.resolve("192.0.2.7")) == {ip_address("192.0.2.7")}
        MockResolver.return_value.resolve.assert_not_called()

    def test_applies_timeouts(self):
        _, MockResolver = _make_resolver({}, DNSConfig(timeout=1.0, lifetime=4.0))
        assert MockResolver.return_value.timeout == 1.0
        assert MockResolver.return_value.lifetime == 4.0
        MockResolver.assert_called_once_with()

    def test_explicit_nameservers_skip_system_config(self):
        _, MockResolver = _make_resolver({}, DNSConfig(nameservers=["10.0.0.2"]))
        MockResolver.assert_called_once_with(configure=False)
        assert MockResolver.return_value.nameservers == ["10.0.0.2"]

    def test_missing_system_config(self):
        with patch("dns.asyncresolver.Resolver", side_effect=dns.resolver.NoResolverConfiguration()):
            with pytest.raises(ConfigError, match="DNS"):
                DNSResolver(DNSConfig())

    def test_relative_names_use_search_list(self):
        resolver, MockResolver = _make_resolver({"A": _answer("10.0.0.1")})
        asyncio.run(resolver.resolve("web"))
        resolve = MockResolver.return_value.resolve
        assert resolve.await_count == 2
        for call in resolve.await_args_list:
            assert call.args[0] == "web"
            assert call.kwargs == {"search": True}

    def test_queries_both_record_types(self):
        resolver, MockResolver = _make_resolver({"AAAA": _answer("2001:db8::9")})
        asyncio.run(resolver.resolve("web"))
        rdtypes = sorted(call.args[1] for call in MockResolver.return_value.resolve.await_args_list)
        assert rdtypes == ["A", "AAAA"]

    def test_search_list_expands_short_name(self):
        """A real dnspython resolver tries 'web' under each configured search domain."""
        real = dns.asyncresolver.Resolver(configure=False)
        real.search = [dns.name.from_text("corp.example")]
        tried = []

        async def record(qname, rdtype, search=None):
            tried.extend(str(n) for n in real._get_qnames_to_try(dns.name.from_text(qname, None), search))
            return _answer("10.0.0.1")

        real.resolve = record
        with patch("dns.asyncresolver.Resolver", return_value=real):
            resolver = DNSResolver(DNSConfig())
        asyncio.run(resolver.resolve("web"))
        assert "web.corp.example." in tried

    def test_satisfies_host_resolver_protocol(self):
        resolver, _ = _make_resolver({})
        assert isinstance(resolver, HostResolver)
