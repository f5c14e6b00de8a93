"""Safe meta-transaction requests for the relayer.

Two request kinds are built here:

- ``SAFE``: executes one call (or a multisend batch) through an existing
  Safe. The SafeTx digest is signed as a personal message and the
  signature is repacked with the Safe's ``v + 4`` convention.
- ``SAFE-CREATE``: deploys the Safe. The ``CreateProxy`` digest is signed
  against the Safe factory's domain.
"""

from typing import Any

import structlog

from ..config import SAFE_DOMAIN_NAME, SAFE_FACTORY_NAME, ZERO_ADDRESS, ContractConfig
from ..encoding import (
    EIP712Domain,
    EIP712Struct,
    checksum,
    eip712_digest,
    encode_packed,
    prepend_0x,
    to_bytes,
    to_hex,
)
from ..errors import STAGE_HASHING, SignatureError, UnsupportedSignerError, ValidationError
from ..signer import Signer
from .derive import derive_safe_address
from .multisend import aggregate_transaction
from .types import (
    SafeCreateTransactionArgs,
    SafeTransactionArgs,
    SignatureParams,
    TransactionRequest,
    TransactionType,
)


logger = structlog.get_logger("polymarket_sdk.safe.builder")

SAFE_TX_TYPES = {
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
    ]
}

CREATE_PROXY_TYPES = {
    "CreateProxy": [
        {"name": "paymentToken", "type": "address"},
        {"name": "payment", "type": "uint256"},
        {"name": "paymentReceiver", "type": "address"},
    ]
}

SAFE_TX_STRUCT = EIP712Struct.from_types("SafeTx", SAFE_TX_TYPES["SafeTx"])
CREATE_PROXY_STRUCT = EIP712Struct.from_types(
    "CreateProxy", CREATE_PROXY_TYPES["CreateProxy"]
)


def _uint(name: str, value: Any) -> int:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    if isinstance(value, str) and value.isdigit():
        return int(value)
    raise ValidationError(f"invalid {name}: {value}", stage=STAGE_HASHING)


def safe_transaction_digest(
    chain_id: int,
    safe: str,
    to: str,
    value: Any,
    data: str,
    operation: int,
    nonce: Any,
    safe_tx_gas: Any = 0,
    base_gas: Any = 0,
    gas_price: Any = 0,
    gas_token: str = ZERO_ADDRESS,
    refund_receiver: str = ZERO_ADDRESS,
) -> bytes:
    """EIP-712 digest of a SafeTx against ``{"Gnosis Safe", chainId, safe}``."""
    domain = EIP712Domain(
        name=SAFE_DOMAIN_NAME, chain_id=chain_id, verifying_contract=safe
    )
    struct_hash = SAFE_TX_STRUCT.hash_struct(
        {
            "to": to,
            "value": _uint("value", value),
            "data": to_bytes(data),
            "operation": int(operation),
            "safeTxGas": _uint("safeTxGas", safe_tx_gas),
            "baseGas": _uint("baseGas", base_gas),
            "gasPrice": _uint("gasPrice", gas_price),
            "gasToken": gas_token,
            "refundReceiver": refund_receiver,
            "nonce": _uint("nonce", nonce),
        }
    )
    return eip712_digest(domain.separator(), struct_hash)


def safe_create_digest(
    safe_factory: str,
    chain_id: int,
    payment_token: str = ZERO_ADDRESS,
    payment: Any = "0",
    payment_receiver: str = ZERO_ADDRESS,
) -> bytes:
    """EIP-712 digest of ``CreateProxy`` against the Safe factory domain."""
    domain = EIP712Domain(
        name=SAFE_FACTORY_NAME, chain_id=chain_id, verifying_contract=safe_factory
    )
    struct_hash = CREATE_PROXY_STRUCT.hash_struct(
        {
            "paymentToken": payment_token,
            "payment": _uint("payment", payment),
            "paymentReceiver": payment_receiver,
        }
    )
    return eip712_digest(domain.separator(), struct_hash)


def split_and_pack_sig(signature: Any) -> str:
    """Repack a 65-byte signature as ``r || s || v`` with the Safe's v (31/32).

    Raises:
        SignatureError: If the signature is not 65 bytes or v is not 0, 1, 27 or 28
    """
    raw = to_bytes(signature)
    if len(raw) != 65:
        raise SignatureError(f"invalid signature length: {len(raw)}")

    v = raw[64]
    if v in (0, 1):
        v += 31
    elif v in (27, 28):
        v += 4
    else:
        raise SignatureError(f"invalid v: {v}")

    packed = encode_packed(
        ["uint256", "uint256", "uint8"],
        [int.from_bytes(raw[:32], "big"), int.from_bytes(raw[32:64], "big"), v],
    )
    return to_hex(packed)


async def build_safe_transaction_request(
    signer: Signer,
    args: SafeTransactionArgs,
    contracts: ContractConfig,
    metadata: str = "",
) -> TransactionRequest:
    """Build and sign a ``SAFE`` relayer request.

    ``args.nonce`` must be the Safe's current on-chain nonce.

    Raises:
        UnsupportedSignerError: If the signer cannot authorize Safe transactions
    """
    if not signer.supports_safe_transactions:
        raise UnsupportedSignerError(
            f"Safe transactions with {type(signer).__name__} are not yet supported"
        )

    safe = derive_safe_address(args.from_address, contracts.safe_factory)
    txn = aggregate_transaction(args.transactions, contracts.safe_multisend)
    gas = "0"

    digest = safe_transaction_digest(
        chain_id=args.chain_id,
        safe=safe,
        to=txn.to,
        value=txn.value,
        data=txn.data,
        operation=txn.operation,
        nonce=args.nonce,
    )
    signature = split_and_pack_sig(await signer.sign_personal_digest(digest))

    logger.info(
        "safe_builder.safe_transaction_signed",
        safe=safe,
        nonce=args.nonce,
        calls=len(args.transactions),
        operation=int(txn.operation),
    )

    return TransactionRequest(
        type=TransactionType.SAFE,
        from_address=checksum(args.from_address),
        to=checksum(txn.to),
        proxy_wallet=safe,
        data=prepend_0x(txn.data),
        signature=signature,
        signature_params=SignatureParams(
            gas_price=gas,
            operation=str(int(txn.operation)),
            safe_txn_gas=gas,
            base_gas=gas,
            gas_token=ZERO_ADDRESS,
            refund_receiver=ZERO_ADDRESS,
        ),
        value=txn.value,
        nonce=str(args.nonce),
        metadata=metadata,
    )


async def build_safe_create_transaction_request(
    signer: Signer,
    args: SafeCreateTransactionArgs,
    contracts: ContractConfig,
) -> TransactionRequest:
    """Build and sign a ``SAFE-CREATE`` relayer request."""
    safe = derive_safe_address(args.from_address, contracts.safe_factory)
    digest = safe_create_digest(
        contracts.safe_factory,
        args.chain_id,
        args.payment_token,
        args.payment,
        args.payment_receiver,
    )
    signature = await signer.sign_digest(digest)

    logger.info("safe_builder.safe_create_signed", safe=safe, owner=args.from_address)

    return TransactionRequest(
        type=TransactionType.SAFE_CREATE,
        from_address=checksum(args.from_address),
        to=checksum(contracts.safe_factory),
        proxy_wallet=safe,
        data="0x",
        signature=to_hex(signature),
        signature_params=SignatureParams(
            payment_token=checksum(args.payment_token),
            payment=args.payment,
            payment_receiver=checksum(args.payment_receiver),
        ),
    )


__all__ = [
    "SAFE_TX_TYPES",
    "CREATE_PROXY_TYPES",
    "SAFE_TX_STRUCT",
    "CREATE_PROXY_STRUCT",
    "safe_transaction_digest",
    "safe_create_digest",
    "split_and_pack_sig",
    "build_safe_transaction_request",
    "build_safe_create_transaction_request",
]
