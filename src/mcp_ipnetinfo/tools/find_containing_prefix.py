"""Tool for finding which of a list of CIDR blocks contains an address."""

import json
import logging
from typing import Any, Dict, List

from mcp.types import Tool, TextContent, CallToolResult

from ..settings import Settings
from ..network import find_containing, parse_network_block
from ..utils.conversion import parse_address

logger = logging.getLogger(__name__)


class FindContainingPrefixTool:
    """Tool exposing first-match prefix lookup over caller-supplied blocks."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def get_tool_definition(self) -> Tool:
        """Get the tool definition for MCP."""
        return Tool(
            name="find_containing_prefix",
            description=(
                "Return the first CIDR block, in the order given, that contains an IPv4 address. "
                "Sort by descending prefix length to get the most specific match."
            ),
            inputSchema={
                "type": "object",
                "properties": {
                    "ip_address": {
                        "type": "string",
                        "description": "IPv4 address in dotted-quad form",
                    },
                    "prefixes": {
                        "type": "array",
                        "items": {"type": "string"},
                        "description": "CIDR blocks to search (e.g. ['8.8.8.0/24', '8.0.0.0/8'])",
                        "minItems": 1,
                    },
                    "most_specific": {
                        "type": "boolean",
                        "description": "Sort by descending prefix length before matching",
                        "default": False,
                    },
                },
                "required": ["ip_address", "prefixes"],
            },
        )

    async def execute(self, arguments: Dict[str, Any]) -> CallToolResult:
        """Execute the find_containing_prefix tool."""
        try:
            ip_address = arguments.get("ip_address")
            if not ip_address:
                raise ValueError("ip_address is required")
            prefixes = arguments.get("prefixes")
            if not prefixes or not isinstance(prefixes, list):
                raise ValueError("prefixes list is required")

            address = parse_address(ip_address.strip())

            blocks = []
            invalid: List[str] = []
            for prefix in prefixes:
                try:
                    blocks.append(parse_network_block(str(prefix).strip()))
                except ValueError:
                    invalid.append(str(prefix))

            if arguments.get("most_specific", False):
                # sorted() is stable, so equal lengths keep the supplied order
                blocks = sorted(blocks, key=lambda block: block.prefix_length, reverse=True)

            match = find_containing(address, blocks)

            result: Dict[str, Any] = {
                "ip_address": str(address),
                "match": match.cidr if match else None,
                "prefixes_checked": len(blocks),
                "invalid_prefixes": invalid,
            }
            if match:
                result["network"] = match.normalized().summary()
                summary = f"{address} is in {match.cidr}"
            else:
                summary = f"{address} is not in any of the {len(blocks)} prefixes supplied"

            if invalid:
                summary += f"\nIgnored {len(invalid)} invalid prefix(es): {', '.join(invalid[:5])}"

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
            logger.error(f"Validation error in find_containing_prefix: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Validation Error: {e}")],
                isError=True,
            )
        except Exception as e:
            logger.error(f"Unexpected error in find_containing_prefix: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Unexpected Error: {e}")],
                isError=True,
            )
