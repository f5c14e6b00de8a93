"""EIP-712 struct hashing.

A struct hash is ``keccak(typeHash || encode(field1) || ...)``. Dynamic
``string`` and ``bytes`` fields are hashed before being folded in. A domain
separator is the struct hash of the domain's own present fields, and the
final digest is ``keccak(0x1901 || domainSeparator || structHash)``.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from eth_utils import keccak

from ..errors import EncodingError
from .abi import abi_encode
from .utils import checksum, to_bytes


EIP191_PREFIX = b"\x19\x01"
PERSONAL_MESSAGE_PREFIX = b"\x19Ethereum Signed Message:\n32"


@dataclass(frozen=True)
class EIP712Struct:
    """A named struct type with an ordered field list."""

    name: str
    fields: Tuple[Tuple[str, str], ...]

    @classmethod
    def from_types(cls, name: str, types: Sequence[Dict[str, str]]) -> "EIP712Struct":
        """Build from eth_account style ``[{"name": ..., "type": ...}]`` lists."""
        return cls(name=name, fields=tuple((t["name"], t["type"]) for t in types))

    def type_string(self) -> str:
        members = ",".join(f"{type_} {name}" for name, type_ in self.fields)
        return f"{self.name}({members})"

    def type_hash(self) -> bytes:
        return keccak(text=self.type_string())

    def encode_data(self, values: Mapping[str, Any]) -> bytes:
        """ABI-encode the field values in declared order (without the type hash)."""
        missing = [name for name, _ in self.fields if name not in values]
        if missing:
            raise EncodingError(f"{self.name} is missing fields: {', '.join(missing)}")

        types: List[str] = []
        encoded: List[Any] = []
        for name, type_ in self.fields:
            value = values[name]
            if type_ == "string":
                if not isinstance(value, str):
                    raise EncodingError(f"{self.name}.{name} must be a string")
                types.append("bytes32")
                encoded.append(keccak(text=value))
            elif type_ == "bytes":
                types.append("bytes32")
                encoded.append(keccak(to_bytes(value)))
            else:
                types.append(type_)
                encoded.append(value)
        return abi_encode(types, encoded)

    def hash_struct(self, values: Mapping[str, Any]) -> bytes:
        return keccak(self.type_hash() + self.encode_data(values))


@dataclass(frozen=True)
class EIP712Domain:
    """EIP-712 domain. Only the fields that are set take part in the hash."""

    name: Optional[str] = None
    version: Optional[str] = None
    chain_id: Optional[int] = None
    verifying_contract: Optional[str] = None

    def _present(self) -> List[Tuple[str, str, Any]]:
        fields = [
            ("name", "string", self.name),
            ("version", "string", self.version),
            ("chainId", "uint256", self.chain_id),
            ("verifyingContract", "address", self.verifying_contract),
        ]
        return [field for field in fields if field[2] is not None]

    def struct(self) -> EIP712Struct:
        return EIP712Struct(
            name="EIP712Domain",
            fields=tuple((name, type_) for name, type_, _ in self._present()),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Domain in eth_account's ``domain_data`` shape."""
        return {name: value for name, _, value in self._present()}

    def separator(self) -> bytes:
        values = self.to_dict()
        if "verifyingContract" in values:
            values["verifyingContract"] = checksum(values["verifyingContract"])
        return self.struct().hash_struct(values)


def eip712_digest(domain_separator: bytes, struct_hash: bytes) -> bytes:
    """Final signable digest: ``keccak(0x1901 || domainSeparator || structHash)``."""
    if len(domain_separator) != 32 or len(struct_hash) != 32:
        raise EncodingError("Domain separator and struct hash must be 32 bytes each")
    return keccak(EIP191_PREFIX + domain_separator + struct_hash)


def hash_typed_data(
    domain: EIP712Domain, struct: EIP712Struct, values: Mapping[str, Any]
) -> bytes:
    """Hash a struct against a domain in one step."""
    return eip712_digest(domain.separator(), struct.hash_struct(values))


def personal_message_hash(digest: bytes) -> bytes:
    """EIP-191 personal message hash of a 32-byte digest."""
    if len(digest) != 32:
        raise EncodingError(f"Digest must be 32 bytes, got {len(digest)}")
    return keccak(PERSONAL_MESSAGE_PREFIX + digest)


__all__ = [
    "EIP712Struct",
    "EIP712Domain",
    "eip712_digest",
    "hash_typed_data",
    "personal_message_hash",
]
