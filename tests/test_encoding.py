"""Tests for packed, ABI and EIP-712 encoding."""

import pytest
from eth_account.messages import encode_typed_data
from eth_utils import keccak

from polymarket_sdk.encoding import (
    EIP712Domain,
    EIP712Struct,
    abi_encode,
    checksum,
    eip712_digest,
    encode_function_call,
    encode_packed,
    function_selector,
    hash_typed_data,
    personal_message_hash,
    to_bytes,
)
from polymarket_sdk.errors import EncodingError


ADDRESS = "0x4bFb41d5B3570DeFd03C39a9A4D8dE6Bd8B8982E"


class TestPackedEncoding:
    """Tests for tight packing."""

    def test_packed_layout(self):
        """Test that packed fields carry no padding."""
        packed = encode_packed(
            ["uint8", "address", "uint256", "bytes"],
            [1, ADDRESS, 5, b"\xaa\xbb"],
        )

        assert len(packed) == 1 + 20 + 32 + 2
        assert packed[0] == 1
        assert packed[1:21] == to_bytes(ADDRESS)
        assert int.from_bytes(packed[21:53], "big") == 5
        assert packed[53:] == b"\xaa\xbb"

    def test_packed_rejects_arrays(self):
        """Test that array tags are not accepted for packing."""
        with pytest.raises(EncodingError):
            encode_packed(["uint256[]"], [[1, 2]])

    def test_unsupported_type_tag(self):
        """Test that unknown or malformed tags are rejected."""
        for tag in ("uint7", "uint264", "bytes33", "tuple", "fixed128x18"):
            with pytest.raises(EncodingError):
                encode_packed([tag], [1])

    def test_fixed_bytes_width_mismatch(self):
        """Test that bytesN values must have exactly N bytes."""
        with pytest.raises(EncodingError, match="expected 32"):
            abi_encode(["bytes32"], [b"\x01" * 31])
        with pytest.raises(EncodingError):
            encode_packed(["bytes4"], ["0x0102030405"])

    def test_integer_overflow(self):
        """Test that an integer too wide for its tag is rejected."""
        with pytest.raises(EncodingError):
            encode_packed(["uint8"], [256])
        with pytest.raises(EncodingError):
            abi_encode(["uint256"], [-1])

    def test_bool_is_not_an_integer(self):
        """Test that True is not accepted as a uint."""
        with pytest.raises(EncodingError):
            abi_encode(["uint256"], [True])

    def test_count_mismatch(self):
        """Test that types and values must line up."""
        with pytest.raises(EncodingError, match="mismatch"):
            abi_encode(["uint256", "address"], [1])

    def test_invalid_address(self):
        """Test that a malformed address is rejected."""
        with pytest.raises(EncodingError, match="Invalid address"):
            abi_encode(["address"], ["0x1234"])

    def test_malformed_hex(self):
        """Test that non-hex strings fail to convert."""
        with pytest.raises(EncodingError, match="Malformed hex"):
            to_bytes("0xzz")


class TestAbiEncoding:
    """Tests for 32-byte ABI encoding and call data."""

    def test_address_left_padded(self):
        """Test that an address occupies a left-padded 32-byte word."""
        encoded = abi_encode(["address"], [ADDRESS])

        assert len(encoded) == 32
        assert encoded[:12] == b"\x00" * 12
        assert encoded[12:] == to_bytes(ADDRESS)

    def test_function_selector(self):
        """Test well-known selectors."""
        assert function_selector("approve(address,uint256)").hex() == "095ea7b3"
        assert function_selector("transfer(address,uint256)").hex() == "a9059cbb"

    def test_encode_function_call(self):
        """Test that call data is selector followed by the arguments."""
        data = encode_function_call(
            "approve(address,uint256)", ["address", "uint256"], [ADDRESS, 10]
        )

        assert data.startswith("0x095ea7b3")
        assert len(to_bytes(data)) == 4 + 64
        assert int(data[-64:], 16) == 10

    def test_checksum(self):
        """Test address checksumming."""
        assert checksum(ADDRESS.lower()) == ADDRESS
        with pytest.raises(EncodingError):
            checksum("not-an-address")


class TestEIP712:
    """Tests for struct hashing, cross-checked against eth_account."""

    MAIL_TYPES = [
        {"name": "from", "type": "address"},
        {"name": "contents", "type": "string"},
        {"name": "payload", "type": "bytes"},
        {"name": "amount", "type": "uint256"},
    ]

    def _message(self):
        return {
            "from": ADDRESS,
            "contents": "Hello, Bob!",
            "payload": b"\x01\x02\x03",
            "amount": 42,
        }

    def test_type_string(self):
        """Test the canonical type string."""
        struct = EIP712Struct.from_types("Mail", self.MAIL_TYPES)

        assert struct.type_string() == (
            "Mail(address from,string contents,bytes payload,uint256 amount)"
        )

    def test_matches_eth_account(self):
        """Test that separator and struct hash agree with eth_account."""
        domain = EIP712Domain(
            name="Test", version="1", chain_id=137, verifying_contract=ADDRESS
        )
        struct = EIP712Struct.from_types("Mail", self.MAIL_TYPES)

        signable = encode_typed_data(
            full_message={
                "types": {
                    "EIP712Domain": [
                        {"name": "name", "type": "string"},
                        {"name": "version", "type": "string"},
                        {"name": "chainId", "type": "uint256"},
                        {"name": "verifyingContract", "type": "address"},
                    ],
                    "Mail": self.MAIL_TYPES,
                },
                "primaryType": "Mail",
                "domain": domain.to_dict(),
                "message": self._message(),
            }
        )

        assert signable.header == domain.separator()
        assert signable.body == struct.hash_struct(self._message())
        assert hash_typed_data(domain, struct, self._message()) == keccak(
            b"\x19" + signable.version + signable.header + signable.body
        )

    def test_domain_without_version(self):
        """Test that absent domain fields are left out of the type string."""
        domain = EIP712Domain(name="Gnosis Safe", chain_id=137, verifying_contract=ADDRESS)

        assert domain.struct().type_string() == (
            "EIP712Domain(string name,uint256 chainId,address verifyingContract)"
        )

    def test_missing_field(self):
        """Test that a missing struct field is an encoding error."""
        struct = EIP712Struct.from_types("Mail", self.MAIL_TYPES)
        message = self._message()
        del message["amount"]

        with pytest.raises(EncodingError, match="amount"):
            struct.hash_struct(message)

    def test_digest_requires_32_byte_inputs(self):
        """Test that short separators are rejected."""
        with pytest.raises(EncodingError):
            eip712_digest(b"\x00" * 31, b"\x00" * 32)

    def test_personal_message_hash(self):
        """Test the EIP-191 personal message prefix."""
        digest = b"\x11" * 32

        assert personal_message_hash(digest) == keccak(
            b"\x19Ethereum Signed Message:\n32" + digest
        )
        with pytest.raises(EncodingError):
            personal_message_hash(b"\x11" * 31)
