"""Network blocks and first-match prefix lookup."""

import logging
from typing import Any, Iterable, List, Optional, Union

from pydantic import BaseModel, Field

from .models import InvalidFormat
from .utils.conversion import (
    Address,
    address_to_text,
    host_mask_for_prefix,
    mask_for_prefix,
    parse_address,
    parse_prefix_length,
)

logger = logging.getLogger(__name__)


class NetworkBlock(BaseModel):
    """A network address paired with a prefix length."""

    network_address: Address
    prefix_length: int = Field(ge=0, le=32)

    model_config = {"frozen": True}

    @property
    def mask(self) -> Address:
        return mask_for_prefix(self.prefix_length)

    @property
    def broadcast_address(self) -> Address:
        return Address(value=self.network_address.value | host_mask_for_prefix(self.prefix_length))

    @property
    def total_addresses(self) -> int:
        return 2 ** (32 - self.prefix_length)

    @property
    def usable_addresses(self) -> int:
        """Host count excluding network and broadcast; /31 and /32 reserve neither."""
        total = self.total_addresses
        if self.prefix_length >= 31:
            return total
        return max(total - 2, 0)

    @property
    def cidr(self) -> str:
        return f"{address_to_text(self.network_address)}/{self.prefix_length}"

    def contains(self, address: Address) -> bool:
        mask = self.mask.value
        return (address.value & mask) == (self.network_address.value & mask)

    def normalized(self) -> "NetworkBlock":
        """Copy with host bits cleared from the network address."""
        return NetworkBlock(
            network_address=Address(value=self.network_address.value & self.mask.value),
            prefix_length=self.prefix_length,
        )

    def summary(self) -> dict:
        """Network fields shared by every record that carries a block."""
        return {
            "network_address": address_to_text(self.network_address),
            "subnet_mask": address_to_text(self.mask),
            "subnet_mask_cidr": f"/{self.prefix_length}",
            "broadcast_address": address_to_text(self.broadcast_address),
            "total_addresses": self.total_addresses,
            "usable_addresses": self.usable_addresses,
            "prefix_length": self.prefix_length,
            "network_range": self.cidr,
        }

    def __str__(self) -> str:
        return self.cidr


def parse_network_block(text: Any) -> NetworkBlock:
    """Parse ``"a.b.c.d/p"``; host bits are kept as written.

    Raises:
        InvalidFormat: address part or overall shape is invalid.
        InvalidPrefixLength: prefix part is not in [0, 32].
    """
    if not isinstance(text, str) or text.count("/") != 1:
        raise InvalidFormat(text)
    address_text, prefix_text = text.split("/")
    return NetworkBlock(
        network_address=parse_address(address_text),
        prefix_length=parse_prefix_length(prefix_text),
    )


def find_containing(
    address: Union[Address, str],
    blocks: Iterable[Union[NetworkBlock, str]],
) -> Optional[NetworkBlock]:
    """Return the first block, in the order given, that contains ``address``.

    This is a first-match lookup, not longest-prefix match: callers that need
    the most specific block should sort ``blocks`` by descending prefix length.
    Blocks given as text that fail to parse are skipped.
    """
    if isinstance(address, str):
        address = parse_address(address)

    for block in blocks:
        if isinstance(block, str):
            try:
                block = parse_network_block(block)
            except ValueError:
                logger.debug("Skipping malformed prefix %r", block)
                continue
        if block.contains(address):
            return block
    return None


def parse_network_blocks(prefixes: Iterable[str]) -> List[NetworkBlock]:
    """Parse IPv4 CIDR strings, dropping anything that does not parse."""
    blocks: List[NetworkBlock] = []
    for prefix in prefixes:
        try:
            blocks.append(parse_network_block(prefix))
        except ValueError:
            logger.debug("Ignoring non-IPv4 or malformed prefix %r", prefix)
    return blocks
