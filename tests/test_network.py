"""Tests for network blocks and first-match prefix lookup."""

import pytest

from mcp_ipnetinfo.models import InvalidFormat, InvalidPrefixLength
from mcp_ipnetinfo.network import (
    NetworkBlock,
    find_containing,
    parse_network_block,
    parse_network_blocks,
)
from mcp_ipnetinfo.utils.conversion import parse_address


class TestNetworkBlock:
    """Test cases for NetworkBlock derived attributes."""

    def test_class_c_private_block(self):
        """Test 192.168.0.0/16 broadcast and host counts."""
        block = parse_network_block("192.168.0.0/16")

        assert str(block.broadcast_address) == "192.168.255.255"
        assert block.total_addresses == 65536
        assert block.usable_addresses == 65534
        assert str(block.mask) == "255.255.0.0"
        assert block.cidr == "192.168.0.0/16"

    def test_slash_24(self):
        block = parse_network_block("203.0.113.0/24")

        assert str(block.broadcast_address) == "203.0.113.255"
        assert block.total_addresses == 256
        assert block.usable_addresses == 254

    def test_slash_31_and_32_reserve_nothing(self):
        """Test point-to-point and host routes count every address as usable."""
        assert parse_network_block("10.0.0.0/31").usable_addresses == 2
        assert parse_network_block("10.0.0.1/32").usable_addresses == 1

    def test_slash_30(self):
        assert parse_network_block("10.0.0.0/30").usable_addresses == 2

    def test_slash_0(self):
        block = parse_network_block("0.0.0.0/0")

        assert block.total_addresses == 2 ** 32
        assert str(block.broadcast_address) == "255.255.255.255"

    def test_summary_fields(self):
        """Test summary carries the network record fields."""
        summary = parse_network_block("172.16.0.0/12").summary()

        assert summary == {
            "network_address": "172.16.0.0",
            "subnet_mask": "255.240.0.0",
            "subnet_mask_cidr": "/12",
            "broadcast_address": "172.31.255.255",
            "total_addresses": 1048576,
            "usable_addresses": 1048574,
            "prefix_length": 12,
            "network_range": "172.16.0.0/12",
        }

    def test_normalized_clears_host_bits(self):
        block = parse_network_block("192.168.1.77/24")

        assert block.cidr == "192.168.1.77/24"
        assert block.normalized().cidr == "192.168.1.0/24"

    def test_prefix_length_bounds(self):
        with pytest.raises(ValueError):
            NetworkBlock(network_address=parse_address("1.2.3.4"), prefix_length=33)

    def test_contains(self):
        block = parse_network_block("8.8.8.0/24")

        assert block.contains(parse_address("8.8.8.8")) is True
        assert block.contains(parse_address("8.8.9.8")) is False


class TestParseNetworkBlock:
    """Test cases for CIDR parsing."""

    @pytest.mark.parametrize("text", ["8.8.8.0", "8.8.8.0/24/1", "", "8.8.8/24"])
    def test_invalid_format(self, text):
        with pytest.raises(InvalidFormat):
            parse_network_block(text)

    @pytest.mark.parametrize("text", ["8.8.8.0/33", "8.8.8.0/", "8.8.8.0/x"])
    def test_invalid_prefix(self, text):
        with pytest.raises(InvalidPrefixLength):
            parse_network_block(text)

    def test_parse_network_blocks_drops_unparseable(self):
        """Test IPv6 and malformed prefixes are skipped."""
        blocks = parse_network_blocks(["8.8.8.0/24", "2001:4860::/32", "garbage", "8.0.0.0/8"])

        assert [b.cidr for b in blocks] == ["8.8.8.0/24", "8.0.0.0/8"]


class TestFindContaining:
    """Test cases for first-match prefix lookup."""

    def test_first_match_in_supplied_order(self):
        """Test the first containing block wins even if a later one is more specific."""
        match = find_containing("8.8.8.8", ["8.8.8.0/24", "8.0.0.0/8"])
        assert match.cidr == "8.8.8.0/24"

        match = find_containing("8.8.8.8", ["8.0.0.0/8", "8.8.8.0/24"])
        assert match.cidr == "8.0.0.0/8"

    def test_no_match(self):
        assert find_containing("1.1.1.1", ["8.8.8.0/24", "8.0.0.0/8"]) is None

    def test_empty_blocks(self):
        assert find_containing("1.1.1.1", []) is None

    def test_accepts_parsed_blocks(self):
        blocks = [parse_network_block("10.0.0.0/8")]
        assert find_containing(parse_address("10.9.8.7"), blocks) is blocks[0]

    def test_block_with_host_bits(self):
        """Test blocks are compared under their mask."""
        assert find_containing("8.8.8.8", ["8.8.8.200/24"]).cidr == "8.8.8.200/24"

    def test_skips_malformed_text(self):
        assert find_containing("8.8.8.8", ["bogus", "2001:db8::/32", "8.8.8.0/24"]).cidr == "8.8.8.0/24"

    def test_invalid_address(self):
        with pytest.raises(InvalidFormat):
            find_containing("8.8.8", ["8.8.8.0/24"])
