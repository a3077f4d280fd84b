"""Tool for subnet arithmetic on an address and prefix or mask."""

import json
import logging
from typing import Any, Dict

from mcp.types import Tool, TextContent, CallToolResult

from ..settings import Settings
from ..network import NetworkBlock, parse_network_block
from ..utils.conversion import Address, parse_address, parse_prefix_length, prefix_for_mask

logger = logging.getLogger(__name__)


class CalculateSubnetTool:
    """Tool for computing network, broadcast and host counts."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def get_tool_definition(self) -> Tool:
        """Get the tool definition for MCP."""
        return Tool(
            name="calculate_subnet",
            description=(
                "Compute network address, broadcast address and host counts for an IPv4 "
                "address given in CIDR notation or with a prefix length or subnet mask"
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "address": {
                        "type": "string",
                        "description": "IPv4 address, optionally in CIDR form (e.g. '192.168.1.10/24')",
                    },
                    "prefix_length": {
                        "type": "integer",
                        "minimum": 0,
                        "maximum": 32,
                    },
                    "subnet_mask": {
                        "type": "string",
                        "description": "Dotted-quad subnet mask (e.g. '255.255.255.0')",
                    },
                },
                "required": ["address"],
            },
        )

    def _build_block(self, arguments: Dict[str, Any]) -> NetworkBlock:
        address = arguments.get("address")
        if not address:
            raise ValueError("address is required")
        address = address.strip()

        prefix_length = arguments.get("prefix_length")
        subnet_mask = arguments.get("subnet_mask")
        given = sum(1 for part in ("/" in address, prefix_length is not None, subnet_mask) if part)
        if given != 1:
            raise ValueError("Provide exactly one of CIDR notation, prefix_length or subnet_mask")

        if "/" in address:
            block = parse_network_block(address)
        elif prefix_length is not None:
            block = NetworkBlock(
                network_address=parse_address(address),
                prefix_length=parse_prefix_length(prefix_length),
            )
        else:
            block = NetworkBlock(
                network_address=parse_address(address),
                prefix_length=prefix_for_mask(subnet_mask.strip()),
            )
        return block

    async def execute(self, arguments: Dict[str, Any]) -> CallToolResult:
        """Execute the calculate_subnet tool."""
        try:
            block = self._build_block(arguments)
            network = block.normalized()

            result = {"address": str(block.network_address), **network.summary()}
            if network.prefix_length >= 31:
                result["host_min"] = str(network.network_address)
                result["host_max"] = str(network.broadcast_address)
            else:
                result["host_min"] = str(Address(value=network.network_address.value + 1))
                result["host_max"] = str(Address(value=network.broadcast_address.value - 1))

            summary = "\n".join([
                f"Address: {result['address']}",
                f"Network: {result['network_range']}",
                f"Subnet Mask: {result['subnet_mask']}",
                f"Broadcast: {result['broadcast_address']}",
                f"Host Range: {result['host_min']} - {result['host_max']}",
                f"Usable Addresses: {result['usable_addresses']:,}",
            ])

            return CallToolResult(
                content=[
                    TextContent(
                        type="text",
                        text=f"{summary}\n\nDetailed data:\n{json.dumps(result, indent=2)}"
                    )
                ],
                structuredContent=result,
            )

        except ValueError as e:
            logger.error(f"Validation error in calculate_subnet: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Validation Error: {e}")],
                isError=True,
            )
        except Exception as e:
            logger.error(f"Unexpected error in calculate_subnet: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Unexpected Error: {e}")],
                isError=True,
            )
