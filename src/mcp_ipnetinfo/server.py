"""MCP Server for IPv4 classification and network lookups."""

import asyncio
import json
import logging
import sys
from typing import Any

from mcp.server import Server, NotificationOptions
from mcp.server.models import InitializationOptions
from mcp.server.stdio import stdio_server
from mcp.types import (
    Resource,
    Tool,
    TextContent,
    TextResourceContents,
    Prompt,
    PromptArgument,
    GetPromptResult,
    PromptMessage,
    CallToolResult,
)
from pydantic import AnyUrl

from . import __version__
from .settings import Settings

from .tools.classify_ip import ClassifyIPTool
from .tools.get_network_info import GetNetworkInfoTool
from .tools.get_ip_info import GetIPInfoTool
from .tools.bulk_network_info import BulkNetworkInfoTool
from .tools.calculate_subnet import CalculateSubnetTool
from .tools.find_containing_prefix import FindContainingPrefixTool
from .tools.enrich_log_line import EnrichLogLineTool

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class MCPIPNetInfoServer:
    """MCP Server exposing address classification and network resolution."""

    def __init__(self):
        print("[MCP IPNetInfo] Initializing settings...", file=sys.stderr)
        self.settings = Settings()
        print("[MCP IPNetInfo] Settings loaded successfully", file=sys.stderr)

        self.server = Server("mcp-ipnetinfo")

        self.tools = {
            "classify_ip": ClassifyIPTool(self.settings),
            "get_network_info": GetNetworkInfoTool(self.settings),
            "get_ip_info": GetIPInfoTool(self.settings),
            "bulk_network_info": BulkNetworkInfoTool(self.settings),
            "calculate_subnet": CalculateSubnetTool(self.settings),
            "find_containing_prefix": FindContainingPrefixTool(self.settings),
            "enrich_log_line": EnrichLogLineTool(self.settings),
        }

        self._register_handlers()

        print("[MCP IPNetInfo] Server initialized successfully", file=sys.stderr)

    def _register_handlers(self):
        """Register MCP handlers."""

        @self.server.list_tools()
        async def handle_list_tools() -> list[Tool]:
            """List available tools."""
            tools: list[Tool] = []
            for tool in self.tools.values():
                tools.append(await tool.get_tool_definition())
            return tools

        @self.server.call_tool()
        async def handle_call_tool(name: str, arguments: dict) -> Any:
            """Handle tool calls."""
            return await self._call_tool(name, arguments)

        @self.server.list_resources()
        async def handle_list_resources() -> list[Resource]:
            """List available resources."""
            return self._list_resources()

        @self.server.read_resource()
        async def handle_read_resource(uri: AnyUrl) -> list[TextResourceContents]:
            """Handle resource reads."""
            return self._read_resource(uri)

        @self.server.list_prompts()
        async def handle_list_prompts() -> list[Prompt]:
            """List available prompts."""
            return self._list_prompts()

        @self.server.get_prompt()
        async def handle_get_prompt(name: str, arguments: dict) -> GetPromptResult:
            """Handle prompt requests."""
            return self._get_prompt(name, arguments)

    async def _call_tool(self, name: str, arguments: dict) -> Any:
        if name not in self.tools:
            raise ValueError(f"Unknown tool: {name}")

        tool = self.tools[name]
        result = await tool.execute(arguments or {})

        if isinstance(result, CallToolResult):
            if result.isError:
                message = 'Tool execution failed.'
                for block in result.content:
                    if isinstance(block, TextContent):
                        message = block.text
                        break
                raise RuntimeError(message)

            content = list(result.content) if result.content else []
            if result.structuredContent is not None:
                return content, result.structuredContent
            return content

        return result

    def _list_resources(self) -> list[Resource]:
        return [
            Resource(
                uri=AnyUrl("settings://info"),
                name="Server Settings",
                description="Effective provider and batch settings",
                mimeType="application/json",
            ),
            Resource(
                uri=AnyUrl("doc://usage"),
                name="Usage Documentation",
                description="Tool usage documentation and examples",
                mimeType="text/markdown",
            ),
        ]

    def _read_resource(self, uri: AnyUrl) -> list[TextResourceContents]:
        uri_str = str(uri)

        if uri_str == "settings://info":
            info = {
                "version": __version__,
                "providers": {
                    "asn_service": self.settings.asn_service,
                    "geo_service": self.settings.geo_service,
                    "ip_api_base_url": self.settings.ip_api_base_url,
                    "ipinfo_base_url": self.settings.ipinfo_base_url,
                    "hackertarget_base_url": self.settings.hackertarget_base_url,
                    "ripestat_base_url": self.settings.ripestat_base_url,
                },
                "request_timeout": self.settings.request_timeout,
                "max_bulk_addresses": self.settings.max_bulk_addresses,
                "bulk_concurrency": self.settings.bulk_concurrency,
            }
            return [
                TextResourceContents(
                    uri=uri,
                    text=json.dumps(info, indent=2),
                    mimeType="application/json",
                )
            ]

        elif uri_str == "doc://usage":
            return [
                TextResourceContents(
                    uri=uri,
                    text=self._get_usage_documentation(),
                    mimeType="text/markdown",
                )
            ]

        else:
            raise ValueError(f"Unknown resource: {uri}")

    def _list_prompts(self) -> list[Prompt]:
        return [
            Prompt(
                name="explain_network",
                description="Explain a network lookup result for an analyst",
                arguments=[
                    PromptArgument(
                        name="network_info",
                        description="Network info record from get_network_info",
                        required=True,
                    )
                ],
            )
        ]

    def _get_prompt(self, name: str, arguments: dict) -> GetPromptResult:
        if name == "explain_network":
            network_info = (arguments or {}).get("network_info", {})
            if isinstance(network_info, str):
                try:
                    network_info = json.loads(network_info)
                except json.JSONDecodeError:
                    network_info = {}
            prompt_text = self._generate_network_prompt(network_info)

            return GetPromptResult(
                description="Explanation of an IPv4 network lookup",
                messages=[
                    PromptMessage(
                        role="user",
                        content=TextContent(type="text", text=prompt_text),
                    )
                ],
            )
        else:
            raise ValueError(f"Unknown prompt: {name}")

    def _get_usage_documentation(self) -> str:
        """Generate usage documentation."""
        return """# MCP IPNetInfo Usage Documentation

## Available Tools

### classify_ip
Classify an IPv4 address (private sub-class, loopback, multicast, link-local, reserved, global).
- **ip_address** (required): IPv4 address

### get_network_info
Resolve the enclosing network. Private addresses map to their RFC 1918 block;
public addresses are matched against the prefixes announced by their ASN.
- **ip_address** (required): IPv4 address
- **asn_service** (optional): ipapi, ipinfo or hackertarget

### get_ip_info
Aggregated report for one address.
- **ip_address** (required): IPv4 address
- **sections** (optional): any of basic, network, geolocation, asn, whois, datacenter
- **asn_service** / **geo_service** (optional): provider overrides

### bulk_network_info
Resolve networks for a list of addresses.
- **ip_addresses** (required): list of IPv4 addresses

### calculate_subnet
Subnet arithmetic without network calls.
- **address** (required): IPv4 address or CIDR block
- **prefix_length** / **subnet_mask** (optional): when address is not in CIDR form

### find_containing_prefix
First block, in the order given, containing an address.
- **ip_address** (required): IPv4 address
- **prefixes** (required): list of CIDR blocks
- **most_specific** (optional): sort by descending prefix length first

### enrich_log_line
Extract IPv4 addresses from a log line and resolve each one.
- **log_line** (required): text to scan
- **include_private** (optional): default true

## Available Resources

### settings://info
Effective provider and batch settings.

### doc://usage
This usage documentation.

## Available Prompts

### explain_network
Analyst-oriented explanation of a get_network_info result.

## Examples

```json
{
  "tool": "get_network_info",
  "arguments": {"ip_address": "8.8.8.8"}
}
```

```json
{
  "tool": "find_containing_prefix",
  "arguments": {"ip_address": "8.8.8.8", "prefixes": ["8.8.8.0/24", "8.0.0.0/8"]}
}
```
"""

    def _generate_network_prompt(self, network_info: dict) -> str:
        """Generate prompt explaining a network lookup."""
        if not network_info:
            return "No network information provided for analysis."

        ip = network_info.get("ip_address", "Unknown")
        ip_type = network_info.get("ip_type", "Unknown")
        network = network_info.get("network_range", "Not determined")
        asn = network_info.get("asn", "Unknown")
        asn_name = network_info.get("asn_name", "Unknown")
        usable = network_info.get("usable_addresses", "Unknown")
        note = network_info.get("note", "None")

        return f"""Explain this IPv4 network lookup for a network operations analyst:

**IP Address:** {ip}
**Type:** {ip_type}
**Network:** {network}
**Usable Addresses:** {usable}
**ASN:** {asn} ({asn_name})
**Note:** {note}

Please cover:
1. Who operates this network and what it is likely used for
2. Whether the block size is typical for its type
3. Any caveats in how the network was determined

Keep the explanation short and practical."""

    async def run(self):
        """Run the MCP server."""
        logging.basicConfig(
            level=getattr(logging, self.settings.log_level.upper()),
            format=LOG_FORMAT,
            stream=sys.stderr,
        )

        logger.info("Starting MCP IPNetInfo server")

        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                InitializationOptions(
                    server_name="mcp-ipnetinfo",
                    server_version=__version__,
                    capabilities=self.server.get_capabilities(
                        notification_options=NotificationOptions(),
                        experimental_capabilities={},
                    ),
                ),
            )


def main():
    """Main entry point."""
    server = MCPIPNetInfoServer()
    try:
        asyncio.run(server.run())
    except KeyboardInterrupt:
        logger.info("Shutting down server")
    except Exception as e:
        logger.error(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
