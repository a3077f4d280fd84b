"""Pydantic models for upstream responses, resolver output and error types."""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class AsnSummary(BaseModel):
    """Owning autonomous system for an address, as reported by a provider."""
    as_number: str = ""
    as_name: str = ""
    isp: Optional[str] = None
    org: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    service: Optional[str] = None
    error: Optional[str] = None


class AnnouncedPrefixes(BaseModel):
    """Prefixes an ASN currently announces, in provider order."""
    as_number: str
    prefixes: List[str] = Field(default_factory=list)


class GeolocationInfo(BaseModel):
    """Geolocation data for an address."""
    ip: Optional[str] = None
    hostname: Optional[str] = None
    country: Optional[str] = None
    country_code: Optional[str] = None
    region: Optional[str] = None
    region_name: Optional[str] = None
    city: Optional[str] = None
    zip: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None
    timezone: Optional[str] = None
    isp: Optional[str] = None
    org: Optional[str] = None
    as_: Optional[str] = Field(default=None, alias="as")
    status: Optional[str] = None
    service: Optional[str] = None

    model_config = {"populate_by_name": True}


class WhoisInfo(BaseModel):
    """WHOIS-style ownership record for an address."""
    target: str
    asn: Optional[str] = None
    asn_description: Optional[str] = None
    asn_country_code: Optional[str] = None
    org: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    postal_code: Optional[str] = None
    country: Optional[str] = None
    status: Optional[str] = None


class NetworkInfo(BaseModel):
    """Enclosing network for an address.

    Which fields are populated depends on the branch that produced the record
    (private, matched public, unmatched public, unresolved public). Use
    :meth:`to_dict` to serialise without the absent fields.
    """
    ip_address: Optional[str] = None
    asn: Optional[str] = None
    asn_name: Optional[str] = None
    network_address: Optional[str] = None
    subnet_mask: Optional[str] = None
    subnet_mask_cidr: Optional[str] = None
    broadcast_address: Optional[str] = None
    total_addresses: Optional[int] = None
    usable_addresses: Optional[int] = None
    prefix_length: Optional[int] = None
    network_range: Optional[str] = None
    is_private: bool
    ip_type: str
    note: Optional[str] = None
    source: Optional[str] = None
    error: Optional[str] = None
    asn_networks_error: Optional[str] = None

    model_config = {"frozen": True}

    @property
    def has_network(self) -> bool:
        return self.network_range is not None

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


class BulkNetworkResult(BaseModel):
    """Result for a single address in a bulk resolution."""
    ip_address: str
    success: bool
    data: Optional[NetworkInfo] = None
    error: Optional[str] = None


class AddressError(ValueError):
    """Base class for local address validation failures."""

    def __init__(self, message: str, value: Any = None) -> None:
        self.value = value
        super().__init__(message)


class InvalidFormat(AddressError):
    """Text is not a dotted-quad IPv4 address."""

    def __init__(self, text: Any) -> None:
        super().__init__(f"Invalid IP address: {text}", value=text)


class InvalidPrefixLength(AddressError):
    """Prefix length outside [0, 32]."""

    def __init__(self, prefix_length: Any) -> None:
        super().__init__(f"Invalid prefix length: {prefix_length} (must be between 0 and 32)", value=prefix_length)


class NonCanonicalMask(AddressError):
    """Subnet mask whose one bits are not a contiguous leading run."""

    def __init__(self, mask: Any) -> None:
        super().__init__(f"Non-canonical subnet mask: {mask}", value=mask)


class LookupFailed(Exception):
    """Exception raised when an upstream provider lookup fails."""

    def __init__(
        self,
        error: str,
        *,
        status_code: int = 0,
        details: Optional[str] = None,
        retryable: bool = False,
    ) -> None:
        self.error = error
        self.status_code = status_code
        self.details = details
        self.retryable = retryable
        message = error
        if details:
            message = f"{message}: {details}"
        if status_code:
            message = f"{message} (status_code={status_code})"
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Return a serialisable representation of the error."""
        return {
            "error": self.error,
            "details": self.details,
            "status_code": self.status_code,
            "retryable": self.retryable,
        }
