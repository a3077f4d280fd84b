"""Tests for the command-line interface."""

import json
import logging
import pytest
from unittest.mock import AsyncMock, MagicMock, patch

from mcp_ipnetinfo.cli import build_parser, configure_logging, main
from mcp_ipnetinfo.settings import Settings
from mcp_ipnetinfo.models import AsnSummary, GeolocationInfo, WhoisInfo


@pytest.fixture
def mock_client():
    """IPDataClient double usable in ``async with``."""
    client = MagicMock()
    client.__aenter__ = AsyncMock(return_value=client)
    client.__aexit__ = AsyncMock(return_value=None)
    client.fetch_asn_summary = AsyncMock(return_value=AsnSummary(as_number="AS15169", as_name="Google LLC"))
    client.fetch_announced_prefixes = AsyncMock(return_value=["8.8.8.0/24"])
    client.geolocate = AsyncMock(return_value=GeolocationInfo(city="Ashburn", isp="Google LLC"))
    client.whois = AsyncMock(return_value=WhoisInfo(target="8.8.8.8"))
    return client


@pytest.fixture
def patched_client(mock_client):
    with patch("mcp_ipnetinfo.cli.IPDataClient", return_value=mock_client):
        yield mock_client


class TestParser:
    """Test cases for argument parsing."""

    def test_only_flags_are_exclusive(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["8.8.8.8", "--asn-only", "--geo-only"])

    def test_service_choices(self):
        with pytest.raises(SystemExit):
            build_parser().parse_args(["8.8.8.8", "--geo-service", "hackertarget"])

        args = build_parser().parse_args(["8.8.8.8", "--asn-service", "hackertarget"])
        assert args.asn_service == "hackertarget"


class TestMain:
    """Test cases for the CLI entry point."""

    def test_no_arguments_prints_help(self, capsys):
        assert main([]) == 0
        assert "usage: ipnetinfo" in capsys.readouterr().out

    def test_network_only(self, patched_client, capsys):
        assert main(["192.168.1.1", "--network-only"]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output["network_range"] == "192.168.0.0/16"
        patched_client.fetch_asn_summary.assert_not_called()

    def test_full_report(self, patched_client, capsys):
        assert main(["8.8.8.8"]) == 0

        output = json.loads(capsys.readouterr().out)
        assert output["ip_address"] == "8.8.8.8"
        assert output["network_info"]["network_range"] == "8.8.8.0/24"
        assert output["geolocation"]["city"] == "Ashburn"

    def test_asn_service_passed_through(self, patched_client, capsys):
        assert main(["8.8.8.8", "--asn-only", "--asn-service", "ipinfo"]) == 0

        patched_client.fetch_asn_summary.assert_called_once_with("8.8.8.8", service="ipinfo")
        assert json.loads(capsys.readouterr().out)["as_number"] == "AS15169"

    def test_invalid_address(self, patched_client, capsys):
        assert main(["8.8.8.256"]) == 1
        assert "Error: Invalid IP address: 8.8.8.256" in capsys.readouterr().err

    def test_file_input_with_output(self, patched_client, tmp_path, capsys):
        input_file = tmp_path / "ips.txt"
        input_file.write_text("10.0.0.1\n\nnot-an-ip\n172.16.0.9\n")
        output_file = tmp_path / "out.json"

        assert main(["-f", str(input_file), "-o", str(output_file), "--basic-only", "--verbose"]) == 0

        captured = capsys.readouterr()
        assert f"Results saved to {output_file}" in captured.out
        assert "Skipping invalid IP: not-an-ip" in captured.err

        results = json.loads(output_file.read_text())
        assert [r["private_class"] for r in results] == ["ClassA", "ClassB"]

    def test_missing_file(self, patched_client, tmp_path, capsys):
        assert main(["-f", str(tmp_path / "missing.txt")]) == 1
        assert "File not found" in capsys.readouterr().err

    def test_empty_file(self, patched_client, tmp_path, capsys):
        input_file = tmp_path / "empty.txt"
        input_file.write_text("\n\n")

        assert main(["-f", str(input_file)]) == 1
        assert "No IP addresses found in file" in capsys.readouterr().err

    def test_quiet_suppresses_errors(self, patched_client, capsys):
        assert main(["bad", "--quiet"]) == 1
        assert capsys.readouterr().err == ""


class TestConfigureLogging:
    """Test cases for CLI log level selection."""

    @pytest.mark.parametrize("log_level,expected", [
        ("DEBUG", logging.DEBUG),
        ("INFO", logging.INFO),
        ("ERROR", logging.ERROR),
    ])
    def test_uses_configured_level(self, log_level, expected):
        args = build_parser().parse_args(["8.8.8.8"])

        with patch("mcp_ipnetinfo.cli.logging.basicConfig") as mock_basic_config:
            configure_logging(args, Settings(log_level=log_level))

        assert mock_basic_config.call_args[1]["level"] == expected

    def test_verbose_and_quiet_override(self):
        settings = Settings(log_level="WARNING")

        with patch("mcp_ipnetinfo.cli.logging.basicConfig") as mock_basic_config:
            configure_logging(build_parser().parse_args(["8.8.8.8", "--verbose"]), settings)
            assert mock_basic_config.call_args[1]["level"] == logging.DEBUG

            configure_logging(build_parser().parse_args(["8.8.8.8", "--quiet"]), settings)
            assert mock_basic_config.call_args[1]["level"] == logging.ERROR
