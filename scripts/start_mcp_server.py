#!/usr/bin/env python3
"""
MCP-specific startup script for the IPNetInfo server.

Prints the effective IPNETINFO_* configuration to stderr before starting,
which helps when diagnosing MCP client integration issues.
"""

import os
import sys
from pathlib import Path

SERVICE_VARIABLES = {
    "IPNETINFO_ASN_SERVICE": ("ipapi", "ipinfo", "hackertarget"),
    "IPNETINFO_GEO_SERVICE": ("ipapi", "ipinfo"),
}


def find_env_file():
    """Find .env file in current directory or parent directories."""
    current_dir = Path.cwd()
    for path in [current_dir] + list(current_dir.parents):
        env_file = path / '.env'
        if env_file.exists():
            return env_file
    return None


def report_environment():
    """Print the IPNETINFO_* variables; return False if a provider name is unknown."""
    print("[MCP Startup] Environment:", file=sys.stderr)
    print(f"  - Working directory: {Path.cwd()}", file=sys.stderr)

    env_file = find_env_file()
    print(f"  - .env file: {env_file or 'none'}", file=sys.stderr)

    overrides = {k: v for k, v in os.environ.items() if k.startswith("IPNETINFO_")}
    if not overrides:
        print("  - No IPNETINFO_* overrides, using defaults", file=sys.stderr)
    for key in sorted(overrides):
        print(f"  - {key}={overrides[key]}", file=sys.stderr)

    ok = True
    for key, allowed in SERVICE_VARIABLES.items():
        value = os.environ.get(key)
        if value is not None and value.strip().lower() not in allowed:
            print(f"  - ERROR: {key} must be one of {', '.join(allowed)}", file=sys.stderr)
            ok = False
    return ok


def main():
    """Main startup function."""
    print("[MCP Startup] Starting IPNetInfo MCP server...", file=sys.stderr)

    if not report_environment():
        print("[MCP Startup] FATAL: Environment validation failed", file=sys.stderr)
        sys.exit(1)

    try:
        from mcp_ipnetinfo.server import main as server_main
        server_main()
    except KeyboardInterrupt:
        print("[MCP Startup] Server stopped by user", file=sys.stderr)
    except Exception as e:
        print(f"[MCP Startup] Server error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
