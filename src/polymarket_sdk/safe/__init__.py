"""Safe Meta-Transaction Builder.

Derives Safe addresses, aggregates calls into multisend batches and builds
signed relayer requests.

Example usage:
    ```python
    from polymarket_sdk.config import get_contract_config
    from polymarket_sdk.safe import (
        SafeTransactionArgs,
        build_safe_transaction_request,
        create_usdc_transfer_transaction,
    )

    contracts = get_contract_config(137)
    request = await build_safe_transaction_request(
        signer,
        SafeTransactionArgs(
            from_address=signer.address,
            nonce=onchain_nonce,
            chain_id=137,
            transactions=[create_usdc_transfer_transaction(contracts, "0x...", "1.5")],
        ),
        contracts,
    )
    ```
"""

from .builder import (
    CREATE_PROXY_STRUCT,
    CREATE_PROXY_TYPES,
    SAFE_TX_STRUCT,
    SAFE_TX_TYPES,
    build_safe_create_transaction_request,
    build_safe_transaction_request,
    safe_create_digest,
    safe_transaction_digest,
    split_and_pack_sig,
)
from .calls import (
    USDC_ALLOWANCE_THRESHOLD,
    create_erc1155_approve_transactions,
    create_usdc_approve_transactions,
    create_usdc_transfer_transaction,
    encode_erc20_approve,
    encode_erc20_transfer,
    encode_erc1155_set_approval_for_all,
    encode_merge_positions,
    encode_redeem_positions,
    encode_split_position,
    outcome_token_operators,
    to_usdc_base_units,
    usdc_spenders,
)
from .derive import derive_safe_address, get_create2_address
from .multisend import (
    aggregate_transaction,
    create_safe_multisend_transaction,
    decode_multisend_transaction,
    encode_multisend_payload,
)
from .types import (
    OperationType,
    RelayerTransactionResponse,
    RelayerTransactionState,
    SafeCreateTransactionArgs,
    SafeTransaction,
    SafeTransactionArgs,
    SignatureParams,
    TransactionRequest,
    TransactionType,
)

__all__ = [
    # Types
    "OperationType",
    "RelayerTransactionResponse",
    "RelayerTransactionState",
    "SafeCreateTransactionArgs",
    "SafeTransaction",
    "SafeTransactionArgs",
    "SignatureParams",
    "TransactionRequest",
    "TransactionType",
    # Derivation
    "derive_safe_address",
    "get_create2_address",
    # Multisend
    "aggregate_transaction",
    "create_safe_multisend_transaction",
    "decode_multisend_transaction",
    "encode_multisend_payload",
    # Calls
    "USDC_ALLOWANCE_THRESHOLD",
    "create_erc1155_approve_transactions",
    "create_usdc_approve_transactions",
    "create_usdc_transfer_transaction",
    "encode_erc20_approve",
    "encode_erc20_transfer",
    "encode_erc1155_set_approval_for_all",
    "encode_merge_positions",
    "encode_redeem_positions",
    "encode_split_position",
    "outcome_token_operators",
    "to_usdc_base_units",
    "usdc_spenders",
    # Builder
    "CREATE_PROXY_STRUCT",
    "CREATE_PROXY_TYPES",
    "SAFE_TX_STRUCT",
    "SAFE_TX_TYPES",
    "build_safe_create_transaction_request",
    "build_safe_transaction_request",
    "safe_create_digest",
    "split_and_pack_sig",
    "safe_transaction_digest",
]
