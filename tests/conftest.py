"""Shared fixtures: settings and a deterministic ASN data source."""

from typing import Dict, List, Optional

import pytest
from unittest.mock import patch

from mcp_ipnetinfo.models import AsnSummary, LookupFailed
from mcp_ipnetinfo.settings import Settings


class FakeAsnSource:
    """In-memory stand-in for the upstream ASN and prefix providers."""

    def __init__(
        self,
        summaries: Optional[Dict[str, AsnSummary]] = None,
        prefixes: Optional[Dict[str, List[str]]] = None,
        asn_error: Optional[LookupFailed] = None,
        prefix_error: Optional[LookupFailed] = None,
    ):
        self.summaries = summaries or {}
        self.prefixes = prefixes or {}
        self.asn_error = asn_error
        self.prefix_error = prefix_error
        self.asn_calls: List[str] = []
        self.prefix_calls: List[str] = []

    async def fetch_asn_summary(self, ip_address: str, service: Optional[str] = None) -> AsnSummary:
        self.asn_calls.append(ip_address)
        if self.asn_error:
            raise self.asn_error
        return self.summaries.get(ip_address, AsnSummary())

    async def fetch_announced_prefixes(self, as_number: str) -> List[str]:
        self.prefix_calls.append(as_number)
        if self.prefix_error:
            raise self.prefix_error
        if as_number not in self.prefixes:
            raise LookupFailed(error="No network prefixes found", details=as_number)
        return list(self.prefixes[as_number])

    # Lets a source stand in for IPDataClient inside `async with`.
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None


def patch_client(module: str, source: FakeAsnSource):
    """Patch ``IPDataClient`` in a tool module so it yields ``source``."""
    return patch(f"mcp_ipnetinfo.tools.{module}.IPDataClient", return_value=source)


@pytest.fixture
def settings():
    """Settings with fast timeouts for testing."""
    return Settings(request_timeout=5, bulk_concurrency=2, max_bulk_addresses=10)


@pytest.fixture
def google_source():
    """Source that knows 8.8.8.8 belongs to AS15169."""
    return FakeAsnSource(
        summaries={
            "8.8.8.8": AsnSummary(as_number="AS15169", as_name="Google LLC"),
            "8.8.4.4": AsnSummary(as_number="AS15169", as_name="Google LLC"),
        },
        prefixes={"AS15169": ["8.8.8.0/24", "8.8.4.0/24", "8.0.0.0/8"]},
    )
