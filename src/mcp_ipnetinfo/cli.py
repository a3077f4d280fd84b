"""Command-line interface: ``ipnetinfo 8.8.8.8`` or ``ipnetinfo -f addresses.txt``."""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

from . import __version__
from .client_ipdata import IPDataClient
from .lookup import IPLookup
from .models import InvalidFormat
from .settings import Settings, ASN_SERVICES, GEO_SERVICES
from .utils.conversion import is_valid_address

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

ONLY_FLAGS = {
    "basic_only": "basic",
    "network_only": "network",
    "asn_only": "asn",
    "geo_only": "geolocation",
    "whois_only": "whois",
    "datacenter_only": "datacenter",
}


class CLIError(Exception):
    """Error reported to the user with exit status 1."""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ipnetinfo",
        description="IPv4 information lookup: classification, network, geolocation, ASN and WHOIS",
    )
    parser.add_argument("ip_address", nargs="?", help="IPv4 address to analyze")
    parser.add_argument("-f", "--file", help="File containing IPv4 addresses, one per line")
    parser.add_argument("-o", "--output", help="Write results to this file (JSON)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    only = parser.add_mutually_exclusive_group()
    only.add_argument("--basic-only", action="store_true", help="Show only basic IP information")
    only.add_argument("--network-only", action="store_true",
                      help="Show only network information (subnet mask, network range, etc.)")
    only.add_argument("--asn-only", action="store_true", help="Show only ASN information")
    only.add_argument("--geo-only", action="store_true", help="Show only geolocation information")
    only.add_argument("--whois-only", action="store_true", help="Show only WHOIS information")
    only.add_argument("--datacenter-only", action="store_true",
                      help="Show only datacenter detection information")

    parser.add_argument("--geo-service", choices=GEO_SERVICES, help="Geolocation provider")
    parser.add_argument("--asn-service", choices=ASN_SERVICES, help="ASN provider")

    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--verbose", action="store_true", help="Verbose output")
    verbosity.add_argument("--quiet", action="store_true", help="Quiet output")
    return parser


def _selected_section(args: argparse.Namespace) -> Optional[str]:
    for flag, section in ONLY_FLAGS.items():
        if getattr(args, flag):
            return section
    return None


async def _lookup(ip_address: str, client: IPDataClient, args: argparse.Namespace) -> Dict[str, Any]:
    lookup = IPLookup(
        ip_address,
        client,
        asn_service=args.asn_service,
        geo_service=args.geo_service,
    )
    section = _selected_section(args)
    if section is not None:
        return await lookup.section(section)
    return await lookup.all_info()


def _read_addresses(path: str) -> List[str]:
    try:
        content = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        raise CLIError(f"File not found: {path}")
    addresses = [line.strip() for line in content.splitlines() if line.strip()]
    if not addresses:
        raise CLIError("No IP addresses found in file")
    return addresses


def _write_output(payload: Any, args: argparse.Namespace) -> None:
    text = json.dumps(payload, indent=2)
    if args.output:
        Path(args.output).write_text(text + "\n", encoding="utf-8")
        if not args.quiet:
            print(f"Results saved to {args.output}")
    else:
        print(text)


async def process_single_ip(args: argparse.Namespace, settings: Settings) -> None:
    ip_address = args.ip_address.strip()
    if not is_valid_address(ip_address):
        raise CLIError(f"Invalid IP address: {ip_address}")

    async with IPDataClient(settings) as client:
        result = await _lookup(ip_address, client, args)
    _write_output(result, args)


async def process_file(args: argparse.Namespace, settings: Settings) -> None:
    results: List[Dict[str, Any]] = []

    async with IPDataClient(settings) as client:
        for ip_address in _read_addresses(args.file):
            try:
                results.append(await _lookup(ip_address, client, args))
            except InvalidFormat:
                if args.verbose:
                    print(f"Skipping invalid IP: {ip_address}", file=sys.stderr)
                continue
            except Exception as e:
                logger.error(f"Error processing {ip_address}: {e}")
                continue

    if args.output:
        _write_output(results, args)
    else:
        for result in results:
            print(json.dumps(result, indent=2))
            print()


def configure_logging(args: argparse.Namespace, settings: Settings) -> None:
    if args.verbose:
        level = logging.DEBUG
    elif args.quiet:
        level = logging.ERROR
    else:
        level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level, format=LOG_FORMAT, stream=sys.stderr)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.file and not args.ip_address:
        parser.print_help()
        return 0

    try:
        settings = Settings()
        configure_logging(args, settings)
        if args.file:
            asyncio.run(process_file(args, settings))
        else:
            asyncio.run(process_single_ip(args, settings))
    except KeyboardInterrupt:
        return 130
    except Exception as e:
        if not args.quiet:
            print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
