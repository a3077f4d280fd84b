"""Tool for resolving the enclosing network of an IPv4 address."""

import json
import logging
from typing import Any, Dict, List

from mcp.types import Tool, TextContent, CallToolResult

from ..settings import Settings, ASN_SERVICES
from ..client_ipdata import IPDataClient
from ..lookup import IPLookup
from ..models import NetworkInfo

logger = logging.getLogger(__name__)


def format_network_summary(info: Dict[str, Any]) -> str:
    """Human-readable lines for a serialised NetworkInfo record."""
    lines: List[str] = []
    if info.get("ip_address"):
        lines.append(f"IP: {info['ip_address']}")
    lines.append(f"Type: {info.get('ip_type', 'Unknown')}")

    if info.get("network_range"):
        lines.extend([
            f"Network: {info['network_range']}",
            f"Subnet Mask: {info['subnet_mask']} ({info['subnet_mask_cidr']})",
            f"Broadcast: {info['broadcast_address']}",
            f"Total Addresses: {info['total_addresses']:,}",
            f"Usable Addresses: {info['usable_addresses']:,}",
        ])

    if info.get("asn"):
        asn_line = f"ASN: {info['asn']}"
        if info.get("asn_name"):
            asn_line += f" ({info['asn_name']})"
        lines.append(asn_line)

    if info.get("note"):
        lines.append(f"Note: {info['note']}")
    if info.get("error"):
        lines.append(f"Error: {info['error']}")
    if info.get("asn_networks_error"):
        lines.append(f"Prefix lookup error: {info['asn_networks_error']}")
    return "\n".join(lines)


class GetNetworkInfoTool:
    """Tool for network resolution of a single address."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def get_tool_definition(self) -> Tool:
        """Get the tool definition for MCP."""
        return Tool(
            name="get_network_info",
            description=(
                "Get the enclosing network of an IPv4 address: network address, subnet mask, "
                "broadcast and host counts. Public addresses are matched against the "
                "prefixes announced by their ASN."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "ip_address": {
                        "type": "string",
                        "description": "IPv4 address in dotted-quad form",
                    },
                    "asn_service": {
                        "type": "string",
                        "description": "Provider used to find the owning ASN",
                        "enum": list(ASN_SERVICES),
                    },
                },
                "required": ["ip_address"],
            },
        )

    async def execute(self, arguments: Dict[str, Any]) -> CallToolResult:
        """Execute the get_network_info tool."""
        try:
            ip_address = arguments.get("ip_address")
            if not ip_address:
                raise ValueError("ip_address is required")

            asn_service = arguments.get("asn_service")
            if asn_service is not None and asn_service not in ASN_SERVICES:
                raise ValueError(f"asn_service must be one of {', '.join(ASN_SERVICES)}")

            async with IPDataClient(self.settings) as client:
                lookup = IPLookup(ip_address.strip(), client, asn_service=asn_service)
                info: NetworkInfo = await lookup.resolver.resolve(lookup.address)

            result = info.to_dict()
            logger.info(f"Resolved network for {lookup.ip_address}: {result.get('network_range', 'n/a')}")

            summary = format_network_summary(result)
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
            logger.error(f"Validation error in get_network_info: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Validation Error: {e}")],
                isError=True,
            )
        except Exception as e:
            logger.error(f"Unexpected error in get_network_info: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Unexpected Error: {e}")],
                isError=True,
            )
