"""Call-data builders for the contracts a trading Safe interacts with."""

from decimal import ROUND_DOWN, Decimal, InvalidOperation
from typing import List, Sequence

from ..config import MAX_UINT256, USDC_DECIMALS, ZERO_ADDRESS, ContractConfig
from ..encoding import checksum, encode_function_call, to_bytes
from ..errors import STAGE_ENCODING, ValidationError
from .types import OperationType, SafeTransaction


# Allowance at or above this counts as approved (1e12 base units)
USDC_ALLOWANCE_THRESHOLD = 10**12

PARENT_COLLECTION_ID = b"\x00" * 32


def encode_erc20_approve(spender: str, amount: int) -> str:
    return encode_function_call(
        "approve(address,uint256)", ["address", "uint256"], [spender, amount]
    )


def encode_erc20_transfer(to: str, amount: int) -> str:
    return encode_function_call(
        "transfer(address,uint256)", ["address", "uint256"], [to, amount]
    )


def encode_erc1155_set_approval_for_all(operator: str, approved: bool) -> str:
    return encode_function_call(
        "setApprovalForAll(address,bool)", ["address", "bool"], [operator, approved]
    )


def _bytes32(value, name: str) -> bytes:
    raw = to_bytes(value)
    if len(raw) != 32:
        raise ValidationError(f"{name} must be 32 bytes", stage=STAGE_ENCODING)
    return raw


def _check_position_args(collateral: str, condition_id, indexes: Sequence[int], label: str):
    if checksum(collateral) == ZERO_ADDRESS:
        raise ValidationError("collateralToken is required", stage=STAGE_ENCODING)
    condition = _bytes32(condition_id, "conditionId")
    if condition == b"\x00" * 32:
        raise ValidationError("conditionId is required", stage=STAGE_ENCODING)
    if not indexes:
        raise ValidationError(f"{label} is required", stage=STAGE_ENCODING)
    return condition


def encode_redeem_positions(
    collateral: str,
    condition_id,
    index_sets: Sequence[int],
    parent_collection_id=PARENT_COLLECTION_ID,
) -> str:
    """``redeemPositions(address,bytes32,bytes32,uint256[])`` call data."""
    condition = _check_position_args(collateral, condition_id, index_sets, "indexSets")
    return encode_function_call(
        "redeemPositions(address,bytes32,bytes32,uint256[])",
        ["address", "bytes32", "bytes32", "uint256[]"],
        [collateral, _bytes32(parent_collection_id, "parentCollectionId"), condition, list(index_sets)],
    )


def _encode_partition_call(
    method: str, collateral, condition_id, partition, amount: int, parent_collection_id
) -> str:
    condition = _check_position_args(collateral, condition_id, partition, "partition")
    if amount <= 0:
        raise ValidationError("amount must be > 0", stage=STAGE_ENCODING)
    return encode_function_call(
        f"{method}(address,bytes32,bytes32,uint256[],uint256)",
        ["address", "bytes32", "bytes32", "uint256[]", "uint256"],
        [
            collateral,
            _bytes32(parent_collection_id, "parentCollectionId"),
            condition,
            list(partition),
            amount,
        ],
    )


def encode_split_position(
    collateral: str,
    condition_id,
    partition: Sequence[int],
    amount: int,
    parent_collection_id=PARENT_COLLECTION_ID,
) -> str:
    """``splitPosition(address,bytes32,bytes32,uint256[],uint256)`` call data."""
    return _encode_partition_call(
        "splitPosition", collateral, condition_id, partition, amount, parent_collection_id
    )


def encode_merge_positions(
    collateral: str,
    condition_id,
    partition: Sequence[int],
    amount: int,
    parent_collection_id=PARENT_COLLECTION_ID,
) -> str:
    """``mergePositions(address,bytes32,bytes32,uint256[],uint256)`` call data."""
    return _encode_partition_call(
        "mergePositions", collateral, condition_id, partition, amount, parent_collection_id
    )


def usdc_spenders(contracts: ContractConfig) -> List[str]:
    """Contracts that need a collateral allowance from the Safe."""
    return [
        contracts.conditional_tokens,
        contracts.neg_risk_adapter,
        contracts.exchange,
        contracts.neg_risk_exchange,
    ]


def outcome_token_operators(contracts: ContractConfig) -> List[str]:
    """Contracts that need ERC1155 operator approval from the Safe."""
    return [
        contracts.exchange,
        contracts.neg_risk_exchange,
        contracts.neg_risk_adapter,
    ]


def create_usdc_approve_transactions(
    contracts: ContractConfig, spenders: Sequence[str]
) -> List[SafeTransaction]:
    return [
        SafeTransaction(
            to=checksum(contracts.collateral),
            data=encode_erc20_approve(spender, MAX_UINT256),
            operation=OperationType.CALL,
        )
        for spender in spenders
    ]


def create_erc1155_approve_transactions(
    contracts: ContractConfig, operators: Sequence[str], approved: bool = True
) -> List[SafeTransaction]:
    return [
        SafeTransaction(
            to=checksum(contracts.conditional_tokens),
            data=encode_erc1155_set_approval_for_all(operator, approved),
            operation=OperationType.CALL,
        )
        for operator in operators
    ]


def to_usdc_base_units(amount) -> int:
    """Shift a collateral amount by 6 decimals, truncating the remainder.

    Raises:
        ValidationError: If the amount is not positive after truncation
    """
    try:
        value = Decimal(str(amount))
    except InvalidOperation as exc:
        raise ValidationError(f"amount must be numeric, got {amount!r}") from exc
    if not value.is_finite() or value <= 0:
        raise ValidationError(f"amount must be > 0, got {amount}")
    scaled = int(value.scaleb(USDC_DECIMALS).to_integral_value(rounding=ROUND_DOWN))
    if scaled <= 0:
        raise ValidationError(
            f"amount too small after truncation (USDC 6 decimals): {amount}"
        )
    return scaled


def create_usdc_transfer_transaction(
    contracts: ContractConfig, to: str, amount
) -> SafeTransaction:
    """Transfer collateral out of the Safe. ``amount`` is in whole USDC."""
    if checksum(to) == ZERO_ADDRESS:
        raise ValidationError("target address is required")
    return SafeTransaction(
        to=checksum(contracts.collateral),
        data=encode_erc20_transfer(to, to_usdc_base_units(amount)),
        operation=OperationType.CALL,
    )


__all__ = [
    "USDC_ALLOWANCE_THRESHOLD",
    "PARENT_COLLECTION_ID",
    "encode_erc20_approve",
    "encode_erc20_transfer",
    "encode_erc1155_set_approval_for_all",
    "encode_redeem_positions",
    "encode_split_position",
    "encode_merge_positions",
    "usdc_spenders",
    "outcome_token_operators",
    "create_usdc_approve_transactions",
    "create_erc1155_approve_transactions",
    "to_usdc_base_units",
    "create_usdc_transfer_transaction",
]
