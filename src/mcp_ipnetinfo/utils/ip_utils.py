"""IP address classification helpers."""

from __future__ import annotations

from enum import Enum
from typing import Optional, Union

from pydantic import BaseModel

from .conversion import Address, parse_address

AddressLike = Union[Address, str]


class PrivateClass(str, Enum):
    """RFC 1918 block an address belongs to."""
    CLASS_A = "ClassA"
    CLASS_B = "ClassB"
    CLASS_C = "ClassC"


class Classification(BaseModel):
    """Scope facts about a single address."""
    is_private: bool
    is_global: bool
    is_loopback: bool
    is_multicast: bool
    is_link_local: bool
    is_reserved: bool
    private_class: Optional[PrivateClass] = None

    model_config = {"frozen": True}


def _octets(ip: AddressLike) -> tuple[int, int, int, int]:
    if isinstance(ip, str):
        ip = parse_address(ip)
    return ip.octets


def private_class(ip: AddressLike) -> Optional[PrivateClass]:
    """Return the private sub-class of *ip*, or None for non-private addresses."""
    a, b, _, _ = _octets(ip)
    if a == 10:
        return PrivateClass.CLASS_A
    if a == 172 and 16 <= b <= 31:
        return PrivateClass.CLASS_B
    if a == 192 and b == 168:
        return PrivateClass.CLASS_C
    return None


def is_private_ip(ip: AddressLike) -> bool:
    """Return True if *ip* is inside 10/8, 172.16/12 or 192.168/16."""
    return private_class(ip) is not None


def is_loopback(ip: AddressLike) -> bool:
    return _octets(ip)[0] == 127


def is_multicast(ip: AddressLike) -> bool:
    return 224 <= _octets(ip)[0] <= 239


def is_link_local(ip: AddressLike) -> bool:
    a, b, _, _ = _octets(ip)
    return a == 169 and b == 254


def is_reserved(ip: AddressLike) -> bool:
    a = _octets(ip)[0]
    return a == 0 or 240 <= a <= 255


def is_special(ip: AddressLike) -> bool:
    """Return True for 0/8, loopback, link-local, multicast and 240/4."""
    return is_reserved(ip) or is_loopback(ip) or is_link_local(ip) or is_multicast(ip)


def is_global(ip: AddressLike) -> bool:
    """Approximate public reachability: neither private nor special-purpose."""
    return not is_private_ip(ip) and not is_special(ip)


def classify(ip: AddressLike) -> Classification:
    """Classify *ip*; raises InvalidFormat only when given unparseable text."""
    if isinstance(ip, str):
        ip = parse_address(ip)
    sub_class = private_class(ip)
    return Classification(
        is_private=sub_class is not None,
        is_global=is_global(ip),
        is_loopback=is_loopback(ip),
        is_multicast=is_multicast(ip),
        is_link_local=is_link_local(ip),
        is_reserved=is_reserved(ip),
        private_class=sub_class,
    )
