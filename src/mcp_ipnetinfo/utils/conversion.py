"""Dotted-quad codec and subnet mask conversions."""

from __future__ import annotations

from typing import Any, Tuple

from pydantic import BaseModel, Field

from ..models import InvalidFormat, InvalidPrefixLength, NonCanonicalMask

IPV4_MAX = (1 << 32) - 1


class Address(BaseModel):
    """An IPv4 address held as a 32-bit unsigned integer."""

    value: int = Field(ge=0, le=IPV4_MAX)

    model_config = {"frozen": True}

    @classmethod
    def parse(cls, text: Any) -> "Address":
        return parse_address(text)

    @property
    def octets(self) -> Tuple[int, int, int, int]:
        v = self.value
        return ((v >> 24) & 0xFF, (v >> 16) & 0xFF, (v >> 8) & 0xFF, v & 0xFF)

    def __int__(self) -> int:
        return self.value

    def __str__(self) -> str:
        return address_to_text(self)


def _parse_octet(token: str) -> int:
    # ASCII digits only; str.isdigit() also accepts e.g. superscripts
    if not token or len(token) > 3 or not all("0" <= ch <= "9" for ch in token):
        raise ValueError(token)
    if len(token) > 1 and token[0] == "0":
        raise ValueError(token)
    octet = int(token)
    if octet > 255:
        raise ValueError(token)
    return octet


def parse_address(text: Any) -> Address:
    """Parse dotted-quad text into an :class:`Address`.

    Exactly four decimal tokens in [0, 255] are accepted. Whitespace, signs,
    empty tokens and leading zeros are rejected so that the canonical text of
    the result is always equal to the input.

    Raises:
        InvalidFormat: ``text`` is not a valid IPv4 address.
    """
    if not isinstance(text, str):
        raise InvalidFormat(text)

    parts = text.split(".")
    if len(parts) != 4:
        raise InvalidFormat(text)

    value = 0
    for part in parts:
        try:
            octet = _parse_octet(part)
        except ValueError:
            raise InvalidFormat(text) from None
        value = (value << 8) | octet
    return Address(value=value)


def address_to_text(address: Address | int) -> str:
    """Return the canonical dotted-quad form of ``address``."""
    value = int(address)
    return ".".join(str((value >> shift) & 0xFF) for shift in (24, 16, 8, 0))


def is_valid_address(text: Any) -> bool:
    try:
        parse_address(text)
    except InvalidFormat:
        return False
    return True


def mask_for_prefix(prefix_length: int) -> Address:
    """Subnet mask with ``prefix_length`` leading one bits.

    Raises:
        InvalidPrefixLength: ``prefix_length`` is not an integer in [0, 32].
    """
    if isinstance(prefix_length, bool) or not isinstance(prefix_length, int):
        raise InvalidPrefixLength(prefix_length)
    if not 0 <= prefix_length <= 32:
        raise InvalidPrefixLength(prefix_length)
    return Address(value=(IPV4_MAX << (32 - prefix_length)) & IPV4_MAX)


def host_mask_for_prefix(prefix_length: int) -> int:
    return IPV4_MAX ^ mask_for_prefix(prefix_length).value


def prefix_for_mask(mask: Address | str) -> int:
    """Prefix length of a contiguous subnet mask.

    Raises:
        InvalidFormat: ``mask`` is text that does not parse.
        NonCanonicalMask: a zero bit is followed by a one bit.
    """
    if isinstance(mask, str):
        mask = parse_address(mask)

    value = int(mask)
    inverted = IPV4_MAX ^ value
    # Host part must be of the form 0...01...1
    if inverted & (inverted + 1):
        raise NonCanonicalMask(address_to_text(value))
    return 32 - inverted.bit_length()


def parse_prefix_length(text: Any) -> int:
    """Parse a prefix length written as ``"24"`` or ``"/24"``."""
    if isinstance(text, bool):
        raise InvalidPrefixLength(text)
    if isinstance(text, int):
        mask_for_prefix(text)
        return text
    if not isinstance(text, str):
        raise InvalidPrefixLength(text)

    token = text[1:] if text.startswith("/") else text
    if not token or len(token) > 2 or not all("0" <= ch <= "9" for ch in token):
        raise InvalidPrefixLength(text)
    prefix_length = int(token)
    mask_for_prefix(prefix_length)
    return prefix_length
