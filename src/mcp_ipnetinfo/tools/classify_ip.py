"""Tool for classifying a single IPv4 address without network lookups."""

import json
import logging
from typing import Any, Dict

from mcp.types import Tool, TextContent, CallToolResult

from ..settings import Settings
from ..utils.conversion import address_to_text, parse_address
from ..utils.ip_utils import classify

logger = logging.getLogger(__name__)


class ClassifyIPTool:
    """Tool for classifying address scope."""

    def __init__(self, settings: Settings):
        self.settings = settings

    async def get_tool_definition(self) -> Tool:
        """Get the tool definition for MCP."""
        return Tool(
            name="classify_ip",
            description="Classify an IPv4 address as private, loopback, multicast, link-local, reserved or global",
            inputSchema={
                "type": "object",
                "properties": {
                    "ip_address": {
                        "type": "string",
                        "description": "IPv4 address in dotted-quad form",
                    },
                },
                "required": ["ip_address"],
            },
        )

    async def execute(self, arguments: Dict[str, Any]) -> CallToolResult:
        """Execute the classify_ip tool."""
        try:
            ip_address = arguments.get("ip_address")
            if not ip_address:
                raise ValueError("ip_address is required")

            address = parse_address(ip_address.strip())
            classification = classify(address)

            result = {
                "ip_address": address_to_text(address),
                "integer": address.value,
                **classification.model_dump(mode="json"),
            }

            if classification.is_private:
                scope = f"Private ({classification.private_class.value})"
            elif classification.is_loopback:
                scope = "Loopback"
            elif classification.is_link_local:
                scope = "Link-local"
            elif classification.is_multicast:
                scope = "Multicast"
            elif classification.is_reserved:
                scope = "Reserved"
            else:
                scope = "Global"

            summary = "\n".join([
                f"IP: {result['ip_address']}",
                f"Scope: {scope}",
                f"Global: {'yes' if classification.is_global else 'no'}",
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
            logger.error(f"Validation error in classify_ip: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Validation Error: {e}")],
                isError=True,
            )
        except Exception as e:
            logger.error(f"Unexpected error in classify_ip: {e}")
            return CallToolResult(
                content=[TextContent(type="text", text=f"Unexpected Error: {e}")],
                isError=True,
            )
