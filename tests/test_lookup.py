"""Tests for the per-address aggregator."""

import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from mcp_ipnetinfo.client_ipdata import IPDataClient
from mcp_ipnetinfo.lookup import IPLookup, is_datacenter, DEFAULT_SECTIONS
from mcp_ipnetinfo.models import (
    AsnSummary,
    GeolocationInfo,
    WhoisInfo,
    InvalidFormat,
    LookupFailed,
)


@pytest.fixture
def mock_client():
    """IPDataClient double with canned provider answers."""
    client = MagicMock(spec=IPDataClient)
    client.fetch_asn_summary = AsyncMock(return_value=AsnSummary(
        as_number="AS15169", as_name="Google LLC", isp="Google LLC", service="ipapi",
    ))
    client.fetch_announced_prefixes = AsyncMock(return_value=["8.8.8.0/24"])
    client.geolocate = AsyncMock(return_value=GeolocationInfo(
        ip="8.8.8.8", city="Ashburn", country="United States",
        isp="Google LLC", org="Google Public DNS", service="ipapi",
    ))
    client.whois = AsyncMock(return_value=WhoisInfo(target="8.8.8.8", asn="AS15169"))
    return client


class TestIsDatacenter:
    """Test cases for hosting keyword detection."""

    def test_keyword_in_isp(self):
        assert is_datacenter("Amazon.com, Inc.", None) is True

    def test_keyword_in_org(self):
        assert is_datacenter("Some ISP", "Hetzner Hosting GmbH") is True

    def test_residential(self):
        assert is_datacenter("Comcast Cable", "Comcast") is False
        assert is_datacenter(None, None) is False


class TestIPLookup:
    """Test cases for IPLookup."""

    def test_invalid_address_rejected(self, mock_client):
        with pytest.raises(InvalidFormat):
            IPLookup("999.1.1.1", mock_client)

    def test_basic_info(self, mock_client):
        info = IPLookup("192.168.1.10", mock_client).basic_info()

        assert info["version"] == 4
        assert info["is_private"] is True
        assert info["is_global"] is False
        assert info["private_class"] == "ClassC"
        assert info["integer"] == 3232235786
        assert info["compressed"] == "192.168.1.10"

    @pytest.mark.asyncio
    async def test_network_info_private_skips_upstream(self, mock_client):
        info = await IPLookup("10.1.2.3", mock_client).network_info()

        assert info["network_range"] == "10.0.0.0/8"
        assert info["ip_type"] == "Private"
        mock_client.fetch_asn_summary.assert_not_called()

    @pytest.mark.asyncio
    async def test_network_info_public_uses_asn_service(self, mock_client):
        lookup = IPLookup("8.8.8.8", mock_client, asn_service="hackertarget")
        info = await lookup.network_info()

        assert info["network_range"] == "8.8.8.0/24"
        assert info["asn"] == "AS15169"
        mock_client.fetch_asn_summary.assert_called_once_with("8.8.8.8", service="hackertarget")
        mock_client.fetch_announced_prefixes.assert_called_once_with("AS15169")

    @pytest.mark.asyncio
    async def test_network_info_unexpected_error(self, mock_client):
        mock_client.fetch_asn_summary.side_effect = RuntimeError("boom")

        info = await IPLookup("8.8.8.8", mock_client).network_info()

        assert info == {"error": "Failed to get network info: boom"}

    @pytest.mark.asyncio
    async def test_geolocation(self, mock_client):
        geo = await IPLookup("8.8.8.8", mock_client, geo_service="ipinfo").geolocation()

        assert geo["city"] == "Ashburn"
        assert "lat" not in geo
        mock_client.geolocate.assert_called_once_with("8.8.8.8", service="ipinfo")

    @pytest.mark.asyncio
    async def test_geolocation_failure(self, mock_client):
        mock_client.geolocate.side_effect = LookupFailed("Rate limit exceeded", status_code=429)

        geo = await IPLookup("8.8.8.8", mock_client).geolocation()

        assert geo["error"].startswith("Geolocation lookup failed: Rate limit exceeded")

    @pytest.mark.asyncio
    async def test_asn_info(self, mock_client):
        asn = await IPLookup("8.8.8.8", mock_client).asn_info()

        assert asn["as_number"] == "AS15169"
        assert "error" not in asn

    @pytest.mark.asyncio
    async def test_asn_info_summary_error(self, mock_client):
        mock_client.fetch_asn_summary.return_value = AsnSummary(error="reserved range")

        asn = await IPLookup("127.0.0.1", mock_client).asn_info()

        assert asn == {"error": "ASN lookup failed: reserved range"}

    @pytest.mark.asyncio
    async def test_whois_failure(self, mock_client):
        mock_client.whois.side_effect = LookupFailed("Not found", status_code=404)

        whois = await IPLookup("8.8.8.8", mock_client).whois_info()

        assert "WHOIS lookup failed" in whois["error"]

    @pytest.mark.asyncio
    async def test_datacenter_info(self, mock_client):
        info = await IPLookup("8.8.8.8", mock_client).datacenter_info()

        assert info["is_datacenter"] is True
        assert info["isp"] == "Google LLC"

    @pytest.mark.asyncio
    async def test_datacenter_info_falls_back(self, mock_client):
        mock_client.geolocate.side_effect = LookupFailed("Server error", status_code=503)

        info = await IPLookup("8.8.8.8", mock_client).datacenter_info()

        assert info == {"is_datacenter": False}

    @pytest.mark.asyncio
    async def test_all_info_default_sections(self, mock_client):
        info = await IPLookup("8.8.8.8", mock_client).all_info()

        assert info["ip_address"] == "8.8.8.8"
        assert set(info) == {"ip_address", "basic_info", "network_info", "geolocation", "asn", "whois"}
        assert "datacenter" not in DEFAULT_SECTIONS

    @pytest.mark.asyncio
    async def test_all_info_selected_sections(self, mock_client):
        info = await IPLookup("8.8.8.8", mock_client).all_info(["basic", "datacenter"])

        assert set(info) == {"ip_address", "basic_info", "datacenter"}
        mock_client.whois.assert_not_called()

    @pytest.mark.asyncio
    async def test_all_info_unknown_section(self, mock_client):
        with pytest.raises(ValueError, match="Unknown section"):
            await IPLookup("8.8.8.8", mock_client).all_info(["basic", "reputation"])

    @pytest.mark.asyncio
    async def test_section_unknown(self, mock_client):
        with pytest.raises(ValueError):
            await IPLookup("8.8.8.8", mock_client).section("reputation")


class TestIPLookupOverHTTP:
    """Test IPLookup against IPDataClient with the HTTP layer mocked."""

    @pytest.mark.asyncio
    async def test_null_bodies_do_not_abort_all_info(self, settings):
        with patch('httpx.AsyncClient') as mock_client_class:
            mock_client = AsyncMock()
            mock_client_class.return_value = mock_client
            response = MagicMock()
            response.status_code = 200
            response.json.return_value = None
            mock_client.request.return_value = response

            async with IPDataClient(settings) as client:
                info = await IPLookup("8.8.8.8", client).all_info()

        assert info["basic_info"]["is_global"] is True
        assert info["network_info"]["error"].startswith("ASN lookup failed: Invalid response")
        assert info["geolocation"]["error"].startswith("Geolocation lookup failed: Invalid response")
        assert info["asn"]["error"].startswith("ASN lookup failed: Invalid response")
        assert info["whois"]["error"].startswith("WHOIS lookup failed: Invalid response")
