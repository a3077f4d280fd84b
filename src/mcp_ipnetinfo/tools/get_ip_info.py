"""Tool for the aggregated report on a single IPv4 address."""

import json
import logging
from typing import Any, Dict, List

from mcp.types import Tool, TextContent, CallToolResult

from ..settings import Settings, ASN_SERVICES, GEO_SERVICES
from ..client_ipdata import IPDataClient
from ..lookup import IPLookup, SECTIONS

logger = logging.getLogger(__name__)


class GetIPInfoTool:
    """Tool for basic, network, geolocation, ASN, WHOIS and datacenter data."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def get_tool_definition(self) -> Tool:
        """Get the tool definition for MCP."""
        return Tool(
            name="get_ip_info",
            description="Get classification, network, geolocation, ASN and WHOIS information for an IPv4 address",
            inputSchema={
                "type": "object",
                "properties": {
                    "ip_address": {
                        "type": "string",
                        "description": "IPv4 address in dotted-quad form",
                    },
                    "sections": {
                        "type": "array",
                        "items": {"type": "string", "enum": list(SECTIONS)},
                        "description": "Sections to include (default: all except datacenter)",
                    },
                    "asn_service": {
                        "type": "string",
                        "enum": list(ASN_SERVICES),
                    },
                    "geo_service": {
                        "type": "string",
                        "enum": list(GEO_SERVICES),
                    },
                },
                "required": ["ip_address"],
            },
        )

    async def execute(self, arguments: Dict[str, Any]) -> CallToolResult:
        """Execute the get_ip_info tool."""
        try:
            ip_address = arguments.get("ip_address")
            if not ip_address:
                raise ValueError("ip_address is required")

            sections = arguments.get("sections") or None
            if sections is not None and not isinstance(sections, list):
                raise ValueError("sections must be a list")

            asn_service = arguments.get("asn_service")
            if asn_service is not None and asn_service not in ASN_SERVICES:
                raise ValueError(f"asn_service must be one of {', '.join(ASN_SERVICES)}")
            geo_service = arguments.get("geo_service")
            if geo_service is not None and geo_service not in GEO_SERVICES:
                raise ValueError(f"geo_service must be one of {', '.join(GEO_SERVICES)}")

            async with IPDataClient(self.settings) as client:
                lookup = IPLookup(
                    ip_address.strip(),
                    client,
                    asn_service=asn_service,
                    geo_service=geo_service,
                )
                result = await lookup.all_info(sections)

            summary_lines: List[str] = [f"IP: {result['ip_address']}"]

            basic = result.get("basic_info")
            if basic:
                summary_lines.append(f"Private: {'yes' if basic['is_private'] else 'no'}")
                summary_lines.append(f"Global: {'yes' if basic['is_global'] else 'no'}")

            network = result.get("network_info") or {}
            if network.get("network_range"):
                summary_lines.append(f"Network: {network['network_range']}")
            elif network.get("note"):
                summary_lines.append(f"Network: {network['note']}")

            asn = result.get("asn") or {}
            if asn.get("as_number"):
                summary_lines.append(f"ASN: {asn['as_number']} {asn.get('as_name', '')}".rstrip())

            geo = result.get("geolocation") or {}
            location = ", ".join(part for part in (geo.get("city"), geo.get("country")) if part)
            if location:
                summary_lines.append(f"Location: {location}")

            datacenter = result.get("datacenter")
            if datacenter is not None:
                summary_lines.append(f"Datacenter: {'yes' if datacenter.get('is_datacenter') else 'no'}")

            failed = [name for name, value in result.items() if isinstance(value, dict) and "error" in value]
            if failed:
                summary_lines.append(f"Failed sections: {', '.join(failed)}")

            summary = "\n".join(summary_lines)
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
            logger.error(f"Validation error in get_ip_info: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Validation Error: {e}")],
                isError=True,
            )
        except Exception as e:
            logger.error(f"Unexpected error in get_ip_info: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Unexpected Error: {e}")],
                isError=True,
            )
