"""Tests for Safe address derivation and meta-transaction requests."""

import pytest
from eth_account import Account
from eth_account.messages import encode_defunct, encode_typed_data
from eth_utils import keccak

from polymarket_sdk.config import SAFE_FACTORY_NAME, ZERO_ADDRESS
from polymarket_sdk.encoding import function_selector, to_bytes
from polymarket_sdk.errors import (
    EncodingError,
    SignatureError,
    UnsupportedSignerError,
    ValidationError,
)
from polymarket_sdk.safe import (
    CREATE_PROXY_TYPES,
    OperationType,
    SafeCreateTransactionArgs,
    SafeTransaction,
    SafeTransactionArgs,
    TransactionType,
    aggregate_transaction,
    build_safe_create_transaction_request,
    build_safe_transaction_request,
    create_erc1155_approve_transactions,
    create_usdc_approve_transactions,
    create_usdc_transfer_transaction,
    decode_multisend_transaction,
    derive_safe_address,
    encode_multisend_payload,
    encode_redeem_positions,
    encode_split_position,
    outcome_token_operators,
    safe_transaction_digest,
    split_and_pack_sig,
    to_usdc_base_units,
    usdc_spenders,
)


OWNER = "0x6e0c0ce2e0b2b1e6f6d0ded1be7f0dd1a0a3c1b2"
CONDITION_ID = "0x" + "12" * 32


def _call(to_byte: str, data: str = "0x1234") -> SafeTransaction:
    return SafeTransaction(to="0x" + to_byte * 20, data=data)


class TestDeriveSafeAddress:
    """Tests for CREATE2 Safe address derivation."""

    def test_deterministic(self, contracts):
        """Test that the same owner always maps to the same Safe."""
        first = derive_safe_address(OWNER, contracts.safe_factory)

        assert first == derive_safe_address(OWNER.lower(), contracts.safe_factory)
        assert first != derive_safe_address("0x" + "11" * 20, contracts.safe_factory)
        assert first.startswith("0x") and len(first) == 42

    def test_matches_create2(self, contracts):
        """Test against an explicit CREATE2 computation."""
        salt = keccak(b"\x00" * 12 + to_bytes(OWNER))
        raw = keccak(
            b"\xff"
            + to_bytes(contracts.safe_factory)
            + salt
            + to_bytes("0x2bce2127ff07fb632d16c8347c4ebf501f4841168bed00d9e6ef715ddb6fcecf")
        )

        assert derive_safe_address(OWNER, contracts.safe_factory).lower() == (
            "0x" + raw[12:].hex()
        )

    def test_zero_owner(self, contracts):
        """Test that the zero owner yields the zero address."""
        assert derive_safe_address(ZERO_ADDRESS, contracts.safe_factory) == ZERO_ADDRESS


class TestMultisend:
    """Tests for call aggregation."""

    def test_single_call_passthrough(self, contracts):
        """Test that one call is returned unchanged."""
        call = _call("11")

        assert aggregate_transaction([call], contracts.safe_multisend) is call

    def test_empty(self, contracts):
        """Test that there must be at least one call."""
        with pytest.raises(ValidationError):
            aggregate_transaction([], contracts.safe_multisend)

    def test_payload_layout(self):
        """Test the packed layout of one multisend entry."""
        payload = encode_multisend_payload([_call("11", "0xdeadbeef")])

        assert len(payload) == 1 + 20 + 32 + 32 + 4
        assert payload[0] == 0
        assert payload[1:21] == b"\x11" * 20
        assert int.from_bytes(payload[21:53], "big") == 0
        assert int.from_bytes(payload[53:85], "big") == 4
        assert payload[85:] == b"\xde\xad\xbe\xef"

    def test_two_calls_delegate_to_multisend(self, contracts):
        """Test that two calls become a DELEGATE_CALL to multiSend and decode back."""
        calls = [_call("11", "0xdeadbeef"), _call("22", "0x")]

        txn = aggregate_transaction(calls, contracts.safe_multisend)

        assert txn.to == contracts.safe_multisend
        assert txn.operation is OperationType.DELEGATE_CALL
        assert txn.value == "0"
        assert to_bytes(txn.data)[:4] == function_selector("multiSend(bytes)")

        decoded = decode_multisend_transaction(txn.data)
        assert [d.to.lower() for d in decoded] == [c.to for c in calls]
        assert [d.data for d in decoded] == ["0xdeadbeef", "0x"]
        assert all(d.operation is OperationType.CALL for d in decoded)

    def test_decode_rejects_other_calls(self):
        """Test that non-multisend data is rejected."""
        with pytest.raises(EncodingError, match="multiSend"):
            decode_multisend_transaction("0x095ea7b3" + "00" * 64)

    def test_invalid_value(self):
        """Test that a non-decimal value is rejected."""
        with pytest.raises(ValidationError, match="invalid value"):
            encode_multisend_payload([SafeTransaction(to="0x" + "11" * 20, data="0x", value="1.5")])


class TestSignaturePacking:
    """Tests for the Safe signature layout."""

    @pytest.mark.parametrize("v,expected", [(0, 31), (1, 32), (27, 31), (28, 32)])
    def test_v_mapping(self, v, expected):
        """Test that v is shifted into the eth_sign range."""
        packed = to_bytes(split_and_pack_sig(b"\x01" * 32 + b"\x02" * 32 + bytes([v])))

        assert len(packed) == 65
        assert packed[:32] == b"\x01" * 32
        assert packed[32:64] == b"\x02" * 32
        assert packed[64] == expected

    def test_bad_signature(self):
        """Test length and v validation."""
        with pytest.raises(SignatureError, match="length"):
            split_and_pack_sig(b"\x01" * 64)
        with pytest.raises(SignatureError, match="invalid v"):
            split_and_pack_sig(b"\x01" * 64 + bytes([30]))


class TestSafeTransactionRequest:
    """Tests for SAFE relayer requests."""

    def _args(self, signer, contracts):
        return SafeTransactionArgs(
            from_address=signer.address,
            nonce=7,
            chain_id=137,
            transactions=create_usdc_approve_transactions(contracts, usdc_spenders(contracts)),
        )

    async def test_request(self, custodial_signer, contracts):
        """Test the request envelope and signature."""
        args = self._args(custodial_signer, contracts)

        request = await build_safe_transaction_request(
            custodial_signer, args, contracts, "approve"
        )

        safe = derive_safe_address(custodial_signer.address, contracts.safe_factory)
        assert request.type is TransactionType.SAFE
        assert request.proxy_wallet == safe
        assert request.to == contracts.safe_multisend
        assert request.nonce == "7"
        assert request.signature_params.operation == "1"

        body = request.to_dict()
        assert body["type"] == "SAFE"
        assert body["from"] == custodial_signer.address
        assert body["metadata"] == "approve"
        assert list(body["signatureParams"]) == [
            "gasPrice",
            "operation",
            "safeTxnGas",
            "baseGas",
            "gasToken",
            "refundReceiver",
        ]

        digest = safe_transaction_digest(
            chain_id=137,
            safe=safe,
            to=request.to,
            value=0,
            data=request.data,
            operation=OperationType.DELEGATE_CALL,
            nonce=7,
        )
        signature = to_bytes(request.signature)
        assert signature[64] in (31, 32)
        recovered = Account.recover_message(
            encode_defunct(primitive=digest),
            signature=signature[:64] + bytes([signature[64] - 4]),
        )
        assert recovered == custodial_signer.address

    async def test_digest_binds_nonce(self, custodial_signer, contracts):
        """Test that a different nonce changes the digest."""
        kwargs = dict(
            chain_id=137,
            safe=OWNER,
            to=contracts.collateral,
            value="0",
            data="0x1234",
            operation=0,
        )

        assert safe_transaction_digest(nonce=1, **kwargs) != safe_transaction_digest(
            nonce=2, **kwargs
        )

    def test_digest_uses_named_safe_domain(self, contracts):
        """Test the SafeTx digest against the named Gnosis Safe domain."""
        signable = encode_typed_data(
            full_message={
                "types": {
                    "EIP712Domain": [
                        {"name": "name", "type": "string"},
                        {"name": "chainId", "type": "uint256"},
                        {"name": "verifyingContract", "type": "address"},
                    ],
                    "SafeTx": [
                        {"name": "to", "type": "address"},
                        {"name": "value", "type": "uint256"},
                        {"name": "data", "type": "bytes"},
                        {"name": "operation", "type": "uint8"},
                        {"name": "safeTxGas", "type": "uint256"},
                        {"name": "baseGas", "type": "uint256"},
                        {"name": "gasPrice", "type": "uint256"},
                        {"name": "gasToken", "type": "address"},
                        {"name": "refundReceiver", "type": "address"},
                        {"name": "nonce", "type": "uint256"},
                    ],
                },
                "primaryType": "SafeTx",
                "domain": {
                    "name": "Gnosis Safe",
                    "chainId": 137,
                    "verifyingContract": OWNER,
                },
                "message": {
                    "to": contracts.collateral,
                    "value": 0,
                    "data": bytes.fromhex("1234"),
                    "operation": 1,
                    "safeTxGas": 0,
                    "baseGas": 0,
                    "gasPrice": 0,
                    "gasToken": ZERO_ADDRESS,
                    "refundReceiver": ZERO_ADDRESS,
                    "nonce": 7,
                },
            }
        )

        digest = safe_transaction_digest(
            chain_id=137,
            safe=OWNER,
            to=contracts.collateral,
            value="0",
            data="0x1234",
            operation=1,
            nonce=7,
        )

        assert digest == keccak(b"\x19" + signable.version + signable.header + signable.body)

    async def test_local_signer_rejected(self, local_signer, contracts):
        """Test that local keys cannot authorize Safe transactions."""
        with pytest.raises(UnsupportedSignerError, match="not yet supported"):
            await build_safe_transaction_request(
                local_signer, self._args(local_signer, contracts), contracts
            )


class TestSafeCreateRequest:
    """Tests for SAFE-CREATE relayer requests."""

    async def test_create_request(self, local_signer, contracts):
        """Test that the CreateProxy signature verifies against the factory domain."""
        request = await build_safe_create_transaction_request(
            local_signer,
            SafeCreateTransactionArgs(from_address=local_signer.address, chain_id=137),
            contracts,
        )

        assert request.type is TransactionType.SAFE_CREATE
        assert request.to == contracts.safe_factory
        assert request.data == "0x"
        assert request.proxy_wallet == derive_safe_address(
            local_signer.address, contracts.safe_factory
        )
        assert request.to_dict()["signatureParams"] == {
            "paymentToken": ZERO_ADDRESS,
            "payment": "0",
            "paymentReceiver": ZERO_ADDRESS,
        }

        signable = encode_typed_data(
            full_message={
                "types": {
                    "EIP712Domain": [
                        {"name": "name", "type": "string"},
                        {"name": "chainId", "type": "uint256"},
                        {"name": "verifyingContract", "type": "address"},
                    ],
                    **CREATE_PROXY_TYPES,
                },
                "primaryType": "CreateProxy",
                "domain": {
                    "name": SAFE_FACTORY_NAME,
                    "chainId": 137,
                    "verifyingContract": contracts.safe_factory,
                },
                "message": {
                    "paymentToken": ZERO_ADDRESS,
                    "payment": 0,
                    "paymentReceiver": ZERO_ADDRESS,
                },
            }
        )
        assert (
            Account.recover_message(signable, signature=request.signature)
            == local_signer.address
        )


class TestCallBuilders:
    """Tests for the approval, transfer and position call data."""

    def test_approval_targets(self, contracts):
        """Test that approvals cover every trading contract."""
        approvals = create_usdc_approve_transactions(contracts, usdc_spenders(contracts))
        operators = create_erc1155_approve_transactions(
            contracts, outcome_token_operators(contracts)
        )

        assert len(approvals) == 4
        assert all(txn.to == contracts.collateral for txn in approvals)
        assert all(txn.data.startswith("0x095ea7b3") for txn in approvals)
        assert len(operators) == 3
        assert all(txn.to == contracts.conditional_tokens for txn in operators)
        assert all(txn.data.startswith("0xa22cb465") for txn in operators)

    def test_usdc_transfer(self, contracts):
        """Test that the transfer amount is shifted by 6 decimals."""
        txn = create_usdc_transfer_transaction(contracts, OWNER, "1.5")

        assert txn.to == contracts.collateral
        assert txn.data.startswith("0xa9059cbb")
        assert int(txn.data[-64:], 16) == 1_500_000

    def test_usdc_transfer_zero_target(self, contracts):
        """Test that a target address is required."""
        with pytest.raises(ValidationError, match="target address"):
            create_usdc_transfer_transaction(contracts, ZERO_ADDRESS, "1")

    def test_to_usdc_base_units(self):
        """Test truncation and rejection of dust."""
        assert to_usdc_base_units("1.0000019") == 1_000_001
        assert to_usdc_base_units(2) == 2_000_000
        with pytest.raises(ValidationError, match="too small"):
            to_usdc_base_units("0.0000001")
        with pytest.raises(ValidationError):
            to_usdc_base_units("-1")
        with pytest.raises(ValidationError, match="numeric"):
            to_usdc_base_units("lots")

    def test_position_calls(self, contracts):
        """Test CTF position call data and its validation."""
        redeem = encode_redeem_positions(contracts.collateral, CONDITION_ID, [1, 2])
        split = encode_split_position(contracts.collateral, CONDITION_ID, [1, 2], 10)

        assert to_bytes(redeem)[:4] == function_selector(
            "redeemPositions(address,bytes32,bytes32,uint256[])"
        )
        assert to_bytes(split)[:4] == function_selector(
            "splitPosition(address,bytes32,bytes32,uint256[],uint256)"
        )
        with pytest.raises(ValidationError, match="indexSets"):
            encode_redeem_positions(contracts.collateral, CONDITION_ID, [])
        with pytest.raises(ValidationError, match="conditionId"):
            encode_redeem_positions(contracts.collateral, "0x" + "00" * 32, [1])
        with pytest.raises(ValidationError, match="amount"):
            encode_split_position(contracts.collateral, CONDITION_ID, [1, 2], 0)
