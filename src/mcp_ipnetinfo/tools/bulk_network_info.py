"""Tool for resolving the networks of multiple IPv4 addresses."""

import asyncio
import json
import logging
from typing import Any, Dict, List, Set, Tuple

from mcp.types import Tool, TextContent, CallToolResult

from ..settings import Settings
from ..client_ipdata import IPDataClient
from ..models import BulkNetworkResult, InvalidFormat
from ..resolver import NetworkResolver
from ..utils.conversion import address_to_text, parse_address

logger = logging.getLogger(__name__)


class BulkNetworkInfoTool:
    """Tool for batch network resolution."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def get_tool_definition(self) -> Tool:
        """Get the tool definition for MCP."""
        return Tool(
            name="bulk_network_info",
            description="Resolve the enclosing network of multiple IPv4 addresses in batch",
            inputSchema={
                "type": "object",
                "properties": {
                    "ip_addresses": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "List of IPv4 addresses",
                        "minItems": 1,
                        "maxItems": self.settings.max_bulk_addresses,
                    },
                },
                "required": ["ip_addresses"],
            },
        )

    def _validate_and_dedupe_ips(self, ip_list: List[str]) -> Tuple[List[str], List[str]]:
        """Return (valid unique addresses, rejected inputs)."""
        valid_ips: List[str] = []
        skipped: List[str] = []
        seen_ips: Set[str] = set()

        for ip_str in ip_list:
            try:
                ip = address_to_text(parse_address(str(ip_str).strip()))
            except InvalidFormat as e:
                logger.warning(f"Skipping invalid IP address: {e}")
                skipped.append(str(ip_str))
                continue

            if ip not in seen_ips:
                valid_ips.append(ip)
                seen_ips.add(ip)

        return valid_ips, skipped

    async def _resolve_single_ip(
        self,
        ip_address: str,
        resolver: NetworkResolver,
        semaphore: asyncio.Semaphore,
    ) -> BulkNetworkResult:
        """Resolve a single address under the concurrency limit."""
        async with semaphore:
            try:
                info = await resolver.resolve(ip_address)
                return BulkNetworkResult(ip_address=ip_address, success=True, data=info)
            except Exception as e:
                logger.error(f"Unexpected error resolving {ip_address}: {e}")
                return BulkNetworkResult(ip_address=ip_address, success=False, error=str(e))

    async def execute(self, arguments: Dict[str, Any]) -> CallToolResult:
        """Execute the bulk_network_info tool."""
        try:
            ip_addresses = arguments.get("ip_addresses", [])
            if not ip_addresses:
                raise ValueError("ip_addresses list is required")

            limit = self.settings.max_bulk_addresses
            if len(ip_addresses) > limit:
                raise ValueError(f"Maximum {limit} IP addresses allowed per bulk request")

            valid_ips, skipped = self._validate_and_dedupe_ips(ip_addresses)
            if not valid_ips:
                raise ValueError("No valid IP addresses found")

            logger.info(f"Processing {len(valid_ips)} unique IP addresses")

            semaphore = asyncio.Semaphore(self.settings.bulk_concurrency)
            async with IPDataClient(self.settings) as client:
                resolver = NetworkResolver(client)
                tasks = [
                    self._resolve_single_ip(ip, resolver, semaphore)
                    for ip in valid_ips
                ]
                results = await asyncio.gather(*tasks)

            successful_results = [r for r in results if r.success]
            failed_results = [r for r in results if not r.success]
            matched = [r for r in successful_results if r.data and r.data.has_network]

            result_data = {
                "summary": {
                    "total_requested": len(ip_addresses),
                    "unique_ips_processed": len(valid_ips),
                    "skipped_invalid": len(skipped),
                    "successful": len(successful_results),
                    "failed": len(failed_results),
                    "with_network": len(matched),
                },
                "skipped": skipped,
                "results": [
                    {
                        "ip_address": r.ip_address,
                        "success": r.success,
                        **({"network": r.data.to_dict()} if r.data else {}),
                        **({"error": r.error} if r.error else {}),
                    }
                    for r in results
                ],
            }

            summary_lines = [
                "Bulk Network Results:",
                f"Total Requested: {len(ip_addresses)}",
                f"Unique IPs: {len(valid_ips)}",
                f"Skipped (invalid): {len(skipped)}",
                f"Successful: {len(successful_results)}",
                f"Failed: {len(failed_results)}",
                f"With Network: {len(matched)}",
            ]

            if matched:
                summary_lines.append("\nNetworks:")
                for result in matched[:10]:
                    summary_lines.append(
                        f"  • {result.ip_address} - {result.data.network_range} ({result.data.ip_type})"
                    )
                if len(matched) > 10:
                    summary_lines.append(f"  ... and {len(matched) - 10} more")

            if failed_results:
                summary_lines.append("\n❌ Failed IPs:")
                for result in failed_results[:5]:
                    summary_lines.append(f"  • {result.ip_address}: {result.error}")
                if len(failed_results) > 5:
                    summary_lines.append(f"  ... and {len(failed_results) - 5} more failures")

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
            logger.error(f"Validation error in bulk_network_info: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Validation Error: {e}")],
                isError=True,
            )
        except Exception as e:
            logger.error(f"Unexpected error in bulk_network_info: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Unexpected Error: {e}")],
                isError=True,
            )
