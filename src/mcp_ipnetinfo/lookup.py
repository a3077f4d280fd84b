"""Aggregate the per-address sections: basic, network, geolocation, ASN, WHOIS."""

import logging
from typing import Any, Dict, Iterable, Optional

from .client_ipdata import IPDataClient
from .models import LookupFailed
from .resolver import NetworkResolver
from .utils.conversion import address_to_text, parse_address
from .utils.ip_utils import classify

logger = logging.getLogger(__name__)

SECTIONS = ("basic", "network", "geolocation", "asn", "whois", "datacenter")
DEFAULT_SECTIONS = ("basic", "network", "geolocation", "asn", "whois")

DATACENTER_KEYWORDS = (
    "amazon",
    "aws",
    "google",
    "microsoft",
    "azure",
    "cloudflare",
    "hosting",
    "datacenter",
    "cloud",
)


def is_datacenter(isp: Optional[str], org: Optional[str]) -> bool:
    haystack = f"{isp or ''} {org or ''}".lower()
    return any(word in haystack for word in DATACENTER_KEYWORDS)


class IPLookup:
    """All information available for one address.

    The address is validated on construction; each network-bound section
    reports upstream failures in an ``error`` key instead of raising.
    """

    def __init__(
        self,
        ip_address: str,
        client: IPDataClient,
        asn_service: Optional[str] = None,
        geo_service: Optional[str] = None,
    ):
        self.address = parse_address(ip_address)
        self.ip_address = address_to_text(self.address)
        self.client = client
        self.asn_service = asn_service
        self.geo_service = geo_service
        self.resolver = NetworkResolver(_ServiceBoundSource(client, asn_service))

    def basic_info(self) -> Dict[str, Any]:
        classification = classify(self.address)
        return {
            "version": 4,
            "is_private": classification.is_private,
            "is_global": classification.is_global,
            "is_multicast": classification.is_multicast,
            "is_loopback": classification.is_loopback,
            "is_link_local": classification.is_link_local,
            "is_reserved": classification.is_reserved,
            "private_class": classification.private_class.value if classification.private_class else None,
            "compressed": self.ip_address,
            "exploded": self.ip_address,
            "integer": self.address.value,
        }

    async def network_info(self) -> Dict[str, Any]:
        try:
            info = await self.resolver.resolve(self.address)
        except Exception as e:
            logger.error(f"Network info lookup failed for {self.ip_address}: {e}")
            return {"error": f"Failed to get network info: {e}"}
        return info.to_dict()

    async def geolocation(self) -> Dict[str, Any]:
        try:
            geo = await self.client.geolocate(self.ip_address, service=self.geo_service)
        except LookupFailed as e:
            return {"error": f"Geolocation lookup failed: {e}"}
        return geo.model_dump(by_alias=True, exclude_none=True)

    async def asn_info(self) -> Dict[str, Any]:
        try:
            summary = await self.client.fetch_asn_summary(self.ip_address, service=self.asn_service)
        except LookupFailed as e:
            return {"error": f"ASN lookup failed: {e}"}
        if summary.error:
            return {"error": f"ASN lookup failed: {summary.error}"}
        return summary.model_dump(exclude_none=True)

    async def whois_info(self) -> Dict[str, Any]:
        try:
            record = await self.client.whois(self.ip_address)
        except LookupFailed as e:
            return {"error": f"WHOIS lookup failed: {e}"}
        return record.model_dump(exclude_none=True)

    async def datacenter_info(self) -> Dict[str, Any]:
        try:
            geo = await self.client.geolocate(self.ip_address, service=self.geo_service)
        except LookupFailed as e:
            logger.debug(f"Datacenter detection fell back to False for {self.ip_address}: {e}")
            return {"is_datacenter": False}
        return {
            "is_datacenter": is_datacenter(geo.isp, geo.org),
            "isp": geo.isp,
            "org": geo.org,
        }

    async def section(self, name: str) -> Dict[str, Any]:
        if name == "basic":
            return self.basic_info()
        elif name == "network":
            return await self.network_info()
        elif name == "geolocation":
            return await self.geolocation()
        elif name == "asn":
            return await self.asn_info()
        elif name == "whois":
            return await self.whois_info()
        elif name == "datacenter":
            return await self.datacenter_info()
        raise ValueError(f"Unknown section: {name}")

    async def all_info(self, sections: Optional[Iterable[str]] = None) -> Dict[str, Any]:
        names = list(sections) if sections else list(DEFAULT_SECTIONS)
        unknown = [name for name in names if name not in SECTIONS]
        if unknown:
            raise ValueError(f"Unknown section(s): {', '.join(unknown)}")

        info: Dict[str, Any] = {"ip_address": self.ip_address}
        for name in names:
            key = "basic_info" if name == "basic" else ("network_info" if name == "network" else name)
            info[key] = await self.section(name)
        return info

    def __str__(self) -> str:
        return f"IPLookup({self.ip_address})"


class _ServiceBoundSource:
    """Adapts IPDataClient to the resolver's source protocol with a fixed ASN service."""

    def __init__(self, client: IPDataClient, asn_service: Optional[str]):
        self.client = client
        self.asn_service = asn_service

    async def fetch_asn_summary(self, ip_address: str):
        return await self.client.fetch_asn_summary(ip_address, service=self.asn_service)

    async def fetch_announced_prefixes(self, as_number: str):
        return await self.client.fetch_announced_prefixes(as_number)
