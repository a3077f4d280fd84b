"""Resolve the enclosing network of an IPv4 address."""

import logging
from typing import Dict, List, Optional, Protocol, Union

from .models import AsnSummary, LookupFailed, NetworkInfo
from .network import NetworkBlock, find_containing, parse_network_blocks
from .utils.conversion import Address, address_to_text, parse_address
from .utils.ip_utils import PrivateClass, classify

logger = logging.getLogger(__name__)

# Conventional anchors of the RFC 1918 blocks. The listed network address is
# taken from here, never from the input address masked bitwise.
PRIVATE_NETWORKS: Dict[PrivateClass, NetworkBlock] = {
    PrivateClass.CLASS_A: NetworkBlock(network_address=parse_address("10.0.0.0"), prefix_length=8),
    PrivateClass.CLASS_B: NetworkBlock(network_address=parse_address("172.16.0.0"), prefix_length=12),
    PrivateClass.CLASS_C: NetworkBlock(network_address=parse_address("192.168.0.0"), prefix_length=16),
}

SOURCE_ASN = "ASN-based lookup"


class AsnDataSource(Protocol):
    """Upstream capability the resolver needs for public addresses."""

    async def fetch_asn_summary(self, ip_address: str) -> AsnSummary:
        ...

    async def fetch_announced_prefixes(self, as_number: str) -> List[str]:
        ...


class NetworkResolver:
    """Derive network details for private addresses and look up public ones."""

    def __init__(self, source: AsnDataSource):
        self.source = source

    @staticmethod
    def private_network_info(address: Union[Address, str]) -> Optional[NetworkInfo]:
        """Network info for a private address, or None if it is not private."""
        if isinstance(address, str):
            address = parse_address(address)
        sub_class = classify(address).private_class
        if sub_class is None:
            return None

        block = PRIVATE_NETWORKS[sub_class]
        return NetworkInfo(**block.summary(), is_private=True, ip_type="Private")

    async def resolve(self, address: Union[Address, str]) -> NetworkInfo:
        """Resolve ``address`` to a :class:`NetworkInfo`.

        Invalid text raises :class:`InvalidFormat`. Upstream failures never
        raise; they come back as ``error``/``note`` fields on the result.
        """
        if isinstance(address, str):
            address = parse_address(address)

        private_info = self.private_network_info(address)
        if private_info is not None:
            return private_info

        return await self._resolve_public(address)

    async def _resolve_public(self, address: Address) -> NetworkInfo:
        ip = address_to_text(address)

        lookup_error = None
        try:
            summary = await self.source.fetch_asn_summary(ip)
        except LookupFailed as e:
            logger.warning(f"ASN lookup failed for {ip}: {e}")
            summary = AsnSummary()
            lookup_error = f"ASN lookup failed: {e}"

        as_number = summary.as_number
        if not as_number:
            return NetworkInfo(
                ip_address=ip,
                is_private=False,
                ip_type="Public",
                note="Could not determine ASN for this IP",
                error=lookup_error or summary.error,
            )

        as_name = summary.as_name or None
        try:
            prefixes = await self.source.fetch_announced_prefixes(as_number)
        except LookupFailed as e:
            logger.warning(f"Prefix lookup failed for {as_number}: {e}")
            return NetworkInfo(
                ip_address=ip,
                asn=as_number,
                asn_name=as_name,
                is_private=False,
                ip_type="Public",
                note=f"ASN {as_number} found but network details unavailable",
                asn_networks_error=e.error,
            )

        block = find_containing(address, parse_network_blocks(prefixes))
        if block is None:
            logger.info(f"{ip} not in any of {len(prefixes)} prefixes announced by {as_number}")
            return NetworkInfo(
                ip_address=ip,
                asn=as_number,
                asn_name=as_name,
                is_private=False,
                ip_type="Public",
                note=f"ASN {as_number} found but IP not in any known network",
                source=SOURCE_ASN,
            )

        return NetworkInfo(
            ip_address=ip,
            asn=as_number,
            asn_name=as_name,
            **block.summary(),
            is_private=False,
            ip_type="Public",
            note=f"IP belongs to {block.cidr} in ASN {as_number}",
            source=SOURCE_ASN,
        )
