"""On-chain reads through web3.

Only view calls are made here: the Safe nonce, collateral allowances and
ERC1155 operator approvals. Failures surface as ``ChainReadError``.
"""

from typing import Any, Awaitable, Optional

import structlog
from web3 import AsyncWeb3
from web3.providers import AsyncHTTPProvider

from ..errors import ChainReadError


logger = structlog.get_logger("polymarket_sdk.clients.chain")

# ── ABI fragments ────────────────────────────────────────────────────

SAFE_NONCE_ABI = [
    {
        "name": "nonce",
        "type": "function",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]

ERC20_ALLOWANCE_ABI = [
    {
        "name": "allowance",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "owner", "type": "address"},
            {"name": "spender", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]

ERC1155_APPROVAL_ABI = [
    {
        "name": "isApprovedForAll",
        "type": "function",
        "stateMutability": "view",
        "inputs": [
            {"name": "account", "type": "address"},
            {"name": "operator", "type": "address"},
        ],
        "outputs": [{"name": "", "type": "bool"}],
    },
]


class ChainReader:
    """Read-only view calls against a JSON-RPC endpoint.

    Values are read fresh on every call. Nothing is cached.
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        timeout: float = 10.0,
        w3: Optional[AsyncWeb3] = None,
    ):
        if w3 is None:
            if not rpc_url:
                raise ChainReadError("rpc url is empty")
            w3 = AsyncWeb3(AsyncHTTPProvider(rpc_url, request_kwargs={"timeout": timeout}))
        self._w3 = w3

    async def _call(self, what: str, call: Awaitable[Any]) -> Any:
        try:
            return await call
        except Exception as exc:
            logger.warning("chain_reader.call_failed", call=what, error=str(exc))
            raise ChainReadError(f"call {what} failed: {exc}") from exc

    async def get_safe_nonce(self, safe: str) -> int:
        """Current nonce of a deployed Safe."""
        contract = self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(safe), abi=SAFE_NONCE_ABI
        )
        nonce = await self._call("nonce", contract.functions.nonce().call())
        if nonce < 0:
            raise ChainReadError(f"nonce is negative: {nonce}")
        return int(nonce)

    async def get_allowance(self, token: str, owner: str, spender: str) -> int:
        """ERC20 allowance of ``spender`` over ``owner``'s tokens."""
        contract = self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(token), abi=ERC20_ALLOWANCE_ABI
        )
        return int(
            await self._call(
                "allowance",
                contract.functions.allowance(
                    AsyncWeb3.to_checksum_address(owner),
                    AsyncWeb3.to_checksum_address(spender),
                ).call(),
            )
        )

    async def is_approved_for_all(self, token: str, owner: str, operator: str) -> bool:
        """ERC1155 operator approval."""
        contract = self._w3.eth.contract(
            address=AsyncWeb3.to_checksum_address(token), abi=ERC1155_APPROVAL_ABI
        )
        return bool(
            await self._call(
                "isApprovedForAll",
                contract.functions.isApprovedForAll(
                    AsyncWeb3.to_checksum_address(owner),
                    AsyncWeb3.to_checksum_address(operator),
                ).call(),
            )
        )


__all__ = [
    "SAFE_NONCE_ABI",
    "ERC20_ALLOWANCE_ABI",
    "ERC1155_APPROVAL_ABI",
    "ChainReader",
]
