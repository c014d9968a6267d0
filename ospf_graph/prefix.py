import ipaddress
from typing import Union

AddressLike = Union[bytes, bytearray, ipaddress.IPv4Address]


def _packed(value: AddressLike) -> bytes:
    if isinstance(value, ipaddress.IPv4Address):
        return value.packed
    if len(value) != 4:
        raise ValueError(f"Expected 4 bytes, got {len(value)}.")
    return bytes(value)


def prefix_length(mask: AddressLike) -> int:
    """
    Counts the set bits of a subnet mask.

    Non-contiguous masks are not rejected, each 1-bit simply counts.

    Args:
        mask: The four mask bytes.

    Returns:
        An integer between 0 and 32.
    """
    return sum(bin(octet).count("1") for octet in _packed(mask))


def apply_mask(address: AddressLike, mask: AddressLike) -> bytes:
    """Returns the bitwise AND of an address and a mask, byte by byte."""
    return bytes(a & m for a, m in zip(_packed(address), _packed(mask)))


def prefix_matches(address: AddressLike, network_prefix: AddressLike, network_mask: AddressLike) -> bool:
    """Checks whether address falls inside network_prefix/network_mask."""
    return apply_mask(address, network_mask) == _packed(network_prefix)


def format_prefix(address: AddressLike, mask: AddressLike) -> str:
    # The address is used as given, stub link IDs are already network numbers
    # "10.0.0.0/24"
    return f"{ipaddress.IPv4Address(_packed(address))}/{prefix_length(mask)}"
