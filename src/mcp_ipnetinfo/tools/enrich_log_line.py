"""Tool for annotating the IPv4 addresses in a log line with their networks."""

import re
import json
import logging
from typing import Any, Dict, List, Optional, Set

from mcp.types import Tool, TextContent, CallToolResult

from ..settings import Settings
from ..client_ipdata import IPDataClient
from ..models import InvalidFormat, NetworkInfo
from ..resolver import NetworkResolver
from ..utils.conversion import address_to_text, parse_address
from ..utils.ip_utils import is_private_ip

logger = logging.getLogger(__name__)

IPV4_PATTERN = re.compile(
    r'(?<![\d.])(?:(?:25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9]?[0-9])\.){3}'
    r'(?:25[0-5]|2[0-4][0-9]|1[0-9][0-9]|[1-9]?[0-9])(?![\d.]*\d)'
)


class EnrichLogLineTool:
    """Tool for extracting addresses from free text and resolving their networks."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def get_tool_definition(self) -> Tool:
        """Get the tool definition for MCP."""
        return Tool(
            name="enrich_log_line",
            description="Extract IPv4 addresses from a log line and resolve the network each belongs to",
            inputSchema={
                "type": "object",
                "properties": {
                    "log_line": {
                        "type": "string",
                        "description": "Log line containing IPv4 addresses",
                    },
                    "include_private": {
                        "type": "boolean",
                        "description": "Also resolve private (RFC 1918) addresses",
                        "default": True,
                    },
                },
                "required": ["log_line"],
            },
        )

    def _extract_ip_addresses(self, log_line: str, include_private: bool = True) -> List[str]:
        """Extract unique IPv4 addresses in order of appearance."""
        ips: List[str] = []
        seen_ips: Set[str] = set()

        for candidate in IPV4_PATTERN.findall(log_line):
            try:
                ip = address_to_text(parse_address(candidate))
            except InvalidFormat:
                continue
            if not include_private and is_private_ip(ip):
                continue
            if ip not in seen_ips:
                ips.append(ip)
                seen_ips.add(ip)
        return ips

    async def _enrich_ip(self, ip_address: str, resolver: NetworkResolver) -> Optional[NetworkInfo]:
        try:
            return await resolver.resolve(ip_address)
        except Exception as e:
            logger.error(f"Unexpected error resolving {ip_address}: {e}")
            return None

    async def execute(self, arguments: Dict[str, Any]) -> CallToolResult:
        """Execute the enrich_log_line tool."""
        try:
            log_line = (arguments.get("log_line") or "").strip()
            if not log_line:
                raise ValueError("log_line is required")

            include_private = arguments.get("include_private", True)
            extracted_ips = self._extract_ip_addresses(log_line, include_private)

            if not extracted_ips:
                return CallToolResult(
                    content=[
                        TextContent(
                            type="text",
                            text=f"No IP addresses found in log line:\n{log_line}"
                        )
                    ]
                )

            logger.info(f"Extracted {len(extracted_ips)} IP addresses from log line")

            enriched_data: Dict[str, NetworkInfo] = {}
            async with IPDataClient(self.settings) as client:
                resolver = NetworkResolver(client)
                for ip in extracted_ips:
                    info = await self._enrich_ip(ip, resolver)
                    if info is not None:
                        enriched_data[ip] = info

            result_data = {
                "original_log_line": log_line,
                "extracted_ips": extracted_ips,
                "enrichment_summary": {
                    "total_ips_extracted": len(extracted_ips),
                    "successfully_enriched": len(enriched_data),
                    "private_count": sum(1 for info in enriched_data.values() if info.is_private),
                },
                "ip_details": {ip: info.to_dict() for ip, info in enriched_data.items()},
            }

            summary_lines = [
                "Log Line Enrichment Results:",
                f"Original Log: {log_line}",
                "",
                f"IP Addresses Found: {len(extracted_ips)}",
                f"Successfully Enriched: {len(enriched_data)}",
            ]

            if enriched_data:
                summary_lines.append("\nAddresses:")
                for ip, info in enriched_data.items():
                    where = info.network_range or info.note or "no network found"
                    summary_lines.append(f"  • {ip} ({info.ip_type}) - {where}")

            failed_ips = [ip for ip in extracted_ips if ip not in enriched_data]
            if failed_ips:
                summary_lines.append("\n❌ Failed to Enrich:")
                for ip in failed_ips:
                    summary_lines.append(f"  • {ip}")

            summary = "\n".join(summary_lines)
            return CallToolResult(
                content=[
                    TextContent(
                        type="text",
                        text=f"{summary}\n\nDetailed data:\n{json.dumps(result_data, indent=2)}"
                    )
                ],
                structuredContent=result_data,
            )

        except ValueError as e:
            logger.error(f"Validation error in enrich_log_line: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Validation Error: {e}")],
                isError=True,
            )
        except Exception as e:
            logger.error(f"Unexpected error in enrich_log_line: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Unexpected Error: {e}")],
                isError=True,
            )
