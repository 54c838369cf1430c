"""
Deterministic address derivation.

Every entity is addressed by hashing its creator's address with a seed:
collections by ``(owner address, collection name)``, entities by
``(collection address, entity name)``. Existence checks are lookups by
these addresses, so the functions here must stay pure.
"""
import hashlib
import re

from .errors import InvalidInput

ADDRESS_LENGTH = 32

# Domain separator appended to every derivation seed.
OBJECT_FROM_SEED_SCHEME = b'\xfe'

_HEX_RE = re.compile(r'^[0-9a-f]+$')


def normalize_address(value: str) -> str:
    """Return ``value`` as a lowercase, zero-padded 0x-prefixed address."""
    if not isinstance(value, str):
        raise InvalidInput(f"Address must be a string, got {type(value).__name__}")

    raw = value.strip().lower()
    if raw.startswith('0x'):
        raw = raw[2:]

    if not raw or len(raw) > ADDRESS_LENGTH * 2 or not _HEX_RE.match(raw):
        raise InvalidInput(f"Invalid address: {value!r}")

    return '0x' + raw.rjust(ADDRESS_LENGTH * 2, '0')


def address_bytes(address: str) -> bytes:
    return bytes.fromhex(normalize_address(address)[2:])


def derive_address(source: str, seed: bytes) -> str:
    digest = hashlib.sha3_256(address_bytes(source) + seed + OBJECT_FROM_SEED_SCHEME).digest()
    return '0x' + digest.hex()


def collection_address(owner: str, collection_name: str) -> str:
    return derive_address(owner, collection_name.encode('utf-8'))


def entity_address(collection_addr: str, entity_name: str) -> str:
    return derive_address(collection_addr, entity_name.encode('utf-8'))


def rating_collection_name(namespace: str) -> str:
    return f"{namespace} Ratings"


def match_collection_name(namespace: str) -> str:
    return f"{namespace} Matches"


def match_entity_name(sequence: int) -> str:
    return f"Match #{sequence}"
