"""Bech32 address encoding (BIP-173) for Cosmos SDK accounts.

Cosmos account addresses are the classic Bech32 encoding of the 20-byte
account id, RIPEMD160(SHA256(compressed secp256k1 public key)), under a
chain-specific human readable prefix ("cosmos", "osmo", ...).

Usage:
    addr = encode_address("cosmos", account_id)   # "cosmos1..."
    prefix, account_id = decode_address(addr)
"""

from collections.abc import Sequence

CHARSET = "qpzry9x8gf2tvdw0s3jn54khce6mua7l"
CHARSET_REV = {c: i for i, c in enumerate(CHARSET)}

_GENERATORS = (0x3B6A57B2, 0x26508E6D, 0x1EA119FA, 0x3D4233DD, 0x2A1462B3)
_MAX_LENGTH = 90


class Bech32Error(ValueError):
    """Raised when a string is not valid Bech32."""

    pass


def _polymod(values: Sequence[int]) -> int:
    chk = 1
    for v in values:
        top = chk >> 25
        chk = ((chk & 0x1FFFFFF) << 5) ^ v
        for i in range(5):
            if (top >> i) & 1:
                chk ^= _GENERATORS[i]
    return chk


def _hrp_expand(hrp: str) -> list[int]:
    return [ord(x) >> 5 for x in hrp] + [0] + [ord(x) & 31 for x in hrp]


def _create_checksum(hrp: str, data: Sequence[int]) -> list[int]:
    polymod = _polymod(_hrp_expand(hrp) + list(data) + [0] * 6) ^ 1
    return [(polymod >> 5 * (5 - i)) & 31 for i in range(6)]


def convertbits(
    data: Sequence[int], from_bits: int, to_bits: int, pad: bool = True
) -> list[int]:
    """Regroup a sequence of from_bits-wide integers into to_bits-wide integers.

    Raises:
        Bech32Error: If a value is out of range or padding is invalid.
    """
    acc = 0
    bits = 0
    ret: list[int] = []
    maxv = (1 << to_bits) - 1
    max_acc = (1 << (from_bits + to_bits - 1)) - 1
    for value in data:
        if value < 0 or value >> from_bits:
            raise Bech32Error(f"Value {value} does not fit in {from_bits} bits")
        acc = ((acc << from_bits) | value) & max_acc
        bits += from_bits
        while bits >= to_bits:
            bits -= to_bits
            ret.append((acc >> bits) & maxv)
    if pad:
        if bits:
            ret.append((acc << (to_bits - bits)) & maxv)
    elif bits >= from_bits or ((acc << (to_bits - bits)) & maxv):
        raise Bech32Error("Invalid padding in bech32 data")
    return ret


def bech32_encode(hrp: str, data: Sequence[int]) -> str:
    """Encode a prefix and 5-bit data words into a Bech32 string."""
    if not hrp or any(ord(c) < 33 or ord(c) > 126 for c in hrp):
        raise Bech32Error(f"Invalid human readable prefix: {hrp!r}")
    hrp = hrp.lower()
    combined = list(data) + _create_checksum(hrp, data)
    return hrp + "1" + "".join(CHARSET[d] for d in combined)


def bech32_decode(bech: str) -> tuple[str, list[int]]:
    """Decode a Bech32 string into its prefix and 5-bit data words.

    Raises:
        Bech32Error: If the string is malformed or the checksum fails.
    """
    if len(bech) > _MAX_LENGTH:
        raise Bech32Error("Bech32 string too long")
    if bech.lower() != bech and bech.upper() != bech:
        raise Bech32Error("Mixed-case bech32 string")
    bech = bech.lower()

    pos = bech.rfind("1")
    if pos < 1 or pos + 7 > len(bech):
        raise Bech32Error("Invalid separator position")

    hrp = bech[:pos]
    if any(ord(c) < 33 or ord(c) > 126 for c in hrp):
        raise Bech32Error("Invalid human readable prefix characters")

    try:
        data = [CHARSET_REV[c] for c in bech[pos + 1 :]]
    except KeyError as e:
        raise Bech32Error(f"Invalid bech32 character: {e.args[0]!r}") from e

    if _polymod(_hrp_expand(hrp) + data) != 1:
        raise Bech32Error("Invalid bech32 checksum")
    return hrp, data[:-6]


def encode_address(prefix: str, account_id: bytes) -> str:
    """Encode a raw account id as a bech32 address."""
    return bech32_encode(prefix, convertbits(account_id, 8, 5))


def decode_address(address: str) -> tuple[str, bytes]:
    """Decode a bech32 address into (prefix, raw account id)."""
    prefix, data = bech32_decode(address)
    return prefix, bytes(convertbits(data, 5, 8, pad=False))


def check_address(address: str, prefix: str) -> str:
    """Return address unchanged if it decodes under the given prefix.

    Raises:
        Bech32Error: If the address is malformed, has a bad checksum, does
            not hold a 20-byte account id, or carries another prefix.
    """
    decoded_prefix, account_id = decode_address(address)
    if decoded_prefix != prefix:
        raise Bech32Error(f"Expected {prefix!r} address, got {decoded_prefix!r}: {address}")
    if len(account_id) != 20:
        raise Bech32Error(f"Address must hold a 20-byte account id: {address}")
    return address
