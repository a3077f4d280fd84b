"""HTTP client for the ASN, prefix, geolocation and WHOIS providers."""

import csv
import json
import logging
from typing import Any, Dict, List, Optional, Tuple

import httpx
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log,
)

from . import __version__
from .settings import Settings
from .models import (
    AsnSummary,
    AnnouncedPrefixes,
    GeolocationInfo,
    WhoisInfo,
    LookupFailed,
)

logger = logging.getLogger(__name__)


def split_as_field(value: Optional[str]) -> Tuple[str, str]:
    """Split ``"AS15169 Google LLC"`` into number and name."""
    parts = (value or "").split()
    if not parts:
        return "", ""
    return parts[0], " ".join(parts[1:])


class IPDataClient:
    """Async client for the public IP data providers, with retry on transport errors."""

    def __init__(self, settings: Settings):
        self.settings = settings
        self.timeout = settings.request_timeout

        self.client = httpx.AsyncClient(
            headers={
                "Accept": "application/json",
                "User-Agent": f"mcp-ipnetinfo/{__version__}",
            },
            timeout=self.timeout,
        )

        logger.debug(
            "IPDataClient initialized (asn_service=%s, geo_service=%s, timeout=%s)",
            settings.asn_service, settings.geo_service, self.timeout,
        )

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.client.aclose()

    def _handle_response(self, response: httpx.Response, expect_json: bool = True) -> Any:
        """Handle HTTP response and convert errors to LookupFailed."""
        if response.status_code == 200:
            if not expect_json:
                return response.text
            try:
                return response.json()
            except json.JSONDecodeError as e:
                raise LookupFailed(
                    error="Invalid JSON response",
                    details=str(e),
                    status_code=response.status_code,
                    retryable=False,
                )

        if response.status_code == 404:
            raise LookupFailed(
                error="Not found",
                status_code=response.status_code,
                retryable=False,
            )
        elif response.status_code == 429:
            raise LookupFailed(
                error="Rate limit exceeded",
                details="Too many requests to upstream provider",
                status_code=response.status_code,
                retryable=True,
            )
        elif response.status_code >= 500:
            raise LookupFailed(
                error="Server error",
                details=f"Upstream provider returned {response.status_code}",
                status_code=response.status_code,
                retryable=True,
            )
        else:
            raise LookupFailed(
                error=f"HTTP {response.status_code}",
                status_code=response.status_code,
                retryable=False,
            )

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type((httpx.TimeoutException, httpx.ConnectError)),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True,
    )
    async def _send(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        expect_json: bool = True,
    ) -> Any:
        try:
            logger.debug("Upstream request %s %s params=%s", method, url, params)
            response = await self.client.request(method, url, params=params)
            return self._handle_response(response, expect_json=expect_json)
        except LookupFailed:
            raise
        except (httpx.TimeoutException, httpx.ConnectError):
            raise
        except Exception as e:
            logger.error(f"Unexpected error in upstream request: {e}")
            raise LookupFailed(
                error="Request failed",
                details=str(e),
                status_code=0,
                retryable=False,
            )

    async def _make_request(
        self,
        method: str,
        url: str,
        params: Optional[Dict[str, Any]] = None,
        expect_json: bool = True,
    ) -> Any:
        """Make HTTP request; transport errors that survive retry become LookupFailed."""
        try:
            data = await self._send(method, url, params=params, expect_json=expect_json)
        except httpx.TimeoutException as e:
            raise LookupFailed(error="Request timed out", details=str(e), retryable=True)
        except httpx.ConnectError as e:
            raise LookupFailed(error="Connection failed", details=str(e), retryable=True)

        # Every provider answers with a JSON object; anything else is unusable
        if expect_json and not isinstance(data, dict):
            raise LookupFailed(
                error="Invalid response",
                details=type(data).__name__,
                retryable=False,
            )
        return data

    async def fetch_asn_summary(self, ip_address: str, service: Optional[str] = None) -> AsnSummary:
        """Resolve the owning ASN of ``ip_address`` with the configured provider."""
        service = (service or self.settings.asn_service).lower()
        if service == "ipapi":
            return await self._asn_from_ipapi(ip_address)
        elif service == "ipinfo":
            return await self._asn_from_ipinfo(ip_address)
        elif service == "hackertarget":
            return await self._asn_from_hackertarget(ip_address)
        raise ValueError(f"Unknown ASN service: {service}")

    async def _asn_from_ipapi(self, ip_address: str) -> AsnSummary:
        data = await self._make_request("GET", f"{self.settings.ip_api_base_url}/{ip_address}")
        if data.get("status") == "fail":
            return AsnSummary(service="ipapi", error=data.get("message") or "Lookup failed")

        as_number, as_name = split_as_field(data.get("as"))
        return AsnSummary(
            as_number=as_number,
            as_name=as_name,
            isp=data.get("isp"),
            org=data.get("org"),
            country=data.get("country"),
            country_code=data.get("countryCode"),
            service="ipapi",
        )

    async def _asn_from_ipinfo(self, ip_address: str) -> AsnSummary:
        data = await self._make_request("GET", f"{self.settings.ipinfo_base_url}/{ip_address}/json")
        as_number, as_name = split_as_field(data.get("org"))
        return AsnSummary(
            as_number=as_number,
            as_name=as_name,
            isp=as_name or None,
            org=data.get("org"),
            country=data.get("country"),
            service="ipinfo",
        )

    async def _asn_from_hackertarget(self, ip_address: str) -> AsnSummary:
        text = await self._make_request(
            "GET",
            f"{self.settings.hackertarget_base_url}/aslookup/",
            params={"q": ip_address},
            expect_json=False,
        )
        text = text.strip()
        if not text or "No results found" in text:
            return AsnSummary(service="hackertarget", error=text or "No ASN information found")

        # "8.8.8.8","15169","8.8.8.0/24","GOOGLE, US"
        row = next(csv.reader([text.splitlines()[0]]))
        if len(row) < 2 or not row[1].strip().isdigit():
            return AsnSummary(service="hackertarget", error="No ASN information found")

        as_name = row[3].strip() if len(row) > 3 else ""
        return AsnSummary(
            as_number=f"AS{row[1].strip()}",
            as_name=as_name,
            isp=as_name or None,
            org=as_name or None,
            service="hackertarget",
        )

    async def get_announced_prefixes(self, as_number: str) -> AnnouncedPrefixes:
        """Fetch the IPv4 prefixes ``as_number`` currently announces (RIPEstat)."""
        data = await self._make_request(
            "GET",
            f"{self.settings.ripestat_base_url}/announced-prefixes/data.json",
            params={"resource": as_number},
        )

        payload = data.get("data")
        prefixes = payload.get("prefixes") if isinstance(payload, dict) else None
        if data.get("status") != "ok" or not prefixes or not isinstance(prefixes, list):
            raise LookupFailed(error="No network prefixes found", details=as_number)

        ipv4 = [
            p["prefix"] for p in prefixes
            if isinstance(p, dict) and isinstance(p.get("prefix"), str) and ":" not in p["prefix"]
        ]
        logger.debug(f"{as_number} announces {len(prefixes)} prefixes ({len(ipv4)} IPv4)")
        return AnnouncedPrefixes(as_number=as_number, prefixes=ipv4)

    async def fetch_announced_prefixes(self, as_number: str) -> List[str]:
        return (await self.get_announced_prefixes(as_number)).prefixes

    async def geolocate(self, ip_address: str, service: Optional[str] = None) -> GeolocationInfo:
        """Look up geolocation for ``ip_address``."""
        service = (service or self.settings.geo_service).lower()
        if service == "ipapi":
            data = await self._make_request("GET", f"{self.settings.ip_api_base_url}/{ip_address}")
            return GeolocationInfo(
                ip=data.get("query"),
                country=data.get("country"),
                country_code=data.get("countryCode"),
                region=data.get("region"),
                region_name=data.get("regionName"),
                city=data.get("city"),
                zip=data.get("zip"),
                lat=data.get("lat"),
                lon=data.get("lon"),
                timezone=data.get("timezone"),
                isp=data.get("isp"),
                org=data.get("org"),
                as_=data.get("as"),
                status=data.get("status"),
                service="ipapi",
            )
        elif service == "ipinfo":
            data = await self._make_request("GET", f"{self.settings.ipinfo_base_url}/{ip_address}/json")
            lat = lon = None
            if data.get("loc"):
                try:
                    lat, lon = (float(part) for part in data["loc"].split(","))
                except ValueError:
                    logger.debug(f"Unparseable ipinfo loc {data['loc']!r}")
            return GeolocationInfo(
                ip=data.get("ip"),
                hostname=data.get("hostname"),
                country=data.get("country"),
                region=data.get("region"),
                city=data.get("city"),
                zip=data.get("postal"),
                lat=lat,
                lon=lon,
                timezone=data.get("timezone"),
                org=data.get("org"),
                service="ipinfo",
            )
        raise ValueError(f"Unknown geolocation service: {service}")

    async def whois(self, ip_address: str) -> WhoisInfo:
        """WHOIS-style ownership record for an IPv4 address, via ip-api."""
        data = await self._make_request("GET", f"{self.settings.ip_api_base_url}/{ip_address}")
        asn, description = split_as_field(data.get("as"))
        return WhoisInfo(
            target=ip_address,
            asn=asn or None,
            asn_description=description or None,
            asn_country_code=data.get("countryCode"),
            org=data.get("org"),
            city=data.get("city"),
            state=data.get("regionName"),
            postal_code=data.get("zip"),
            country=data.get("country"),
            status=data.get("status"),
        )

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()
