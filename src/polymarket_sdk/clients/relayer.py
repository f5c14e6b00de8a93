"""Relayer client: Safe deployment and gasless Safe execution.

The Safe nonce used for signing is always read on chain, never from the
relayer's ``/nonce`` endpoint and never from a cache.
"""

import asyncio
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

import httpx
import structlog

from ..auth import (
    BUILDER_AUTH_UNAVAILABLE,
    L1_AUTH_UNAVAILABLE,
    BuilderCredential,
    create_builder_headers,
)
from ..config import POLYGON, ContractConfig, get_contract_config
from ..errors import STAGE_ENCODING, PreconditionError, RelayerError, ValidationError
from ..orders import serialize_body
from ..safe import (
    USDC_ALLOWANCE_THRESHOLD,
    RelayerTransactionResponse,
    RelayerTransactionState,
    SafeCreateTransactionArgs,
    SafeTransaction,
    SafeTransactionArgs,
    TransactionRequest,
    build_safe_create_transaction_request,
    build_safe_transaction_request,
    create_erc1155_approve_transactions,
    create_usdc_approve_transactions,
    create_usdc_transfer_transaction,
    derive_safe_address,
    encode_merge_positions,
    encode_redeem_positions,
    encode_split_position,
    outcome_token_operators,
    usdc_spenders,
)
from ..safe.calls import PARENT_COLLECTION_ID
from ..signer import CustodialSigningBackend, Signer, signer_from_settings
from .chain import ChainReader
from .http import BaseHTTPClient


logger = structlog.get_logger("polymarket_sdk.clients.relayer")

# Endpoints
SUBMIT_TRANSACTION = "/submit"
GET_NONCE = "/nonce"
GET_DEPLOYED = "/deployed"
GET_TRANSACTION = "/transaction"
GET_TRANSACTIONS = "/transactions"

# Relayer metadata labels
METADATA_APPROVE_ALL = "Set all token approvals for trading"
METADATA_APPROVE_USDC = "approve USDC to polymarket contracts"
METADATA_REDEEM = "Redeem positions"
METADATA_SPLIT = "Split positions"
METADATA_MERGE = "Merge positions"


class RelayClient(BaseHTTPClient):
    """Async client for the Polymarket relayer.

    Example:
        ```python
        async with RelayClient(
            "https://relayer-v2.polymarket.com",
            chain_id=137,
            signer=RemoteCustodialSigner(backend, "0x..."),
            builder_creds=BuilderCredential("key", "secret", "passphrase"),
            chain_reader=ChainReader("https://polygon-rpc.com/"),
        ) as relayer:
            safe, response = await relayer.deploy()
            await relayer.approve_all_for_trading()
        ```
    """

    error_class = RelayerError

    def __init__(
        self,
        host: str,
        chain_id: int = POLYGON,
        signer: Optional[Signer] = None,
        builder_creds: Optional[BuilderCredential] = None,
        chain_reader: Optional[ChainReader] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = 15.0,
    ):
        super().__init__(host, http_client=http_client, timeout=timeout)
        self.chain_id = chain_id
        self._contracts: ContractConfig = get_contract_config(chain_id)
        self._signer = signer
        self._builder_creds = builder_creds
        self._chain_reader = chain_reader

    @classmethod
    def from_settings(
        cls,
        settings,
        backend: Optional[CustodialSigningBackend] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> "RelayClient":
        return cls(
            settings.relayer_host,
            chain_id=settings.chain_id,
            signer=signer_from_settings(settings, backend),
            builder_creds=settings.builder_credential(),
            chain_reader=ChainReader(settings.rpc_url, timeout=settings.http_timeout),
            http_client=http_client,
            timeout=settings.http_timeout,
        )

    @property
    def contracts(self) -> ContractConfig:
        return self._contracts

    def _require_signer(self) -> Signer:
        if self._signer is None:
            raise PreconditionError(L1_AUTH_UNAVAILABLE)
        return self._signer

    def _require_chain_reader(self) -> ChainReader:
        if self._chain_reader is None:
            raise PreconditionError("a chain reader (rpc url) is needed for on-chain reads")
        return self._chain_reader

    def safe_address(self) -> str:
        """Safe owned by the configured signer."""
        return derive_safe_address(
            self._require_signer().address, self._contracts.safe_factory
        )

    # ── Read endpoints ──────────────────────────────────────────────

    async def get_nonce(self, address: str, signer_type: str = "SAFE") -> int:
        """Nonce the relayer reports for ``address``. Informational only."""
        result = await self._request(
            "GET", GET_NONCE, params={"address": address, "type": signer_type}
        )
        return int(result["nonce"])

    async def is_deployed(self, safe: str) -> bool:
        result = await self._request("GET", GET_DEPLOYED, params={"address": safe})
        return bool(result["deployed"])

    async def get_transaction(self, transaction_id: str) -> List[Dict[str, Any]]:
        result = await self._request("GET", GET_TRANSACTION, params={"id": transaction_id})
        return result or []

    async def get_transactions(self) -> List[Dict[str, Any]]:
        """Recent transactions for the builder credential."""
        result = await self._request(
            "GET", GET_TRANSACTIONS, headers=self._builder_headers("GET", GET_TRANSACTIONS)
        )
        return result or []

    # ── Submission ──────────────────────────────────────────────────

    def _builder_headers(
        self, method: str, path: str, body: Optional[str] = None
    ) -> Dict[str, str]:
        if self._builder_creds is None or not self._builder_creds.is_valid():
            raise PreconditionError(BUILDER_AUTH_UNAVAILABLE)
        return create_builder_headers(self._builder_creds, method, path, body)

    async def submit(self, request: TransactionRequest) -> RelayerTransactionResponse:
        """POST a signed request. The body is serialized once and signed as sent."""
        body = serialize_body(request.to_dict())
        headers = self._builder_headers("POST", SUBMIT_TRANSACTION, body)
        result = await self._request(
            "POST", SUBMIT_TRANSACTION, headers=headers, content=body
        )
        response = RelayerTransactionResponse.from_response(result or {})
        logger.info(
            "relay_client.submitted",
            type=request.type.value,
            proxy_wallet=request.proxy_wallet,
            transaction_id=response.transaction_id,
        )
        return response

    async def execute(
        self, transactions: Sequence[SafeTransaction], metadata: str = ""
    ) -> RelayerTransactionResponse:
        """Sign and submit calls from the signer's Safe.

        Raises:
            PreconditionError: If the Safe is not deployed yet
        """
        signer = self._require_signer()
        if not transactions:
            raise ValidationError("at least one transaction is required", stage=STAGE_ENCODING)
        safe = self.safe_address()
        if not await self.is_deployed(safe):
            raise PreconditionError(f"safe {safe} is not deployed")

        nonce = await self._require_chain_reader().get_safe_nonce(safe)
        request = await build_safe_transaction_request(
            signer,
            SafeTransactionArgs(
                from_address=signer.address,
                nonce=nonce,
                chain_id=self.chain_id,
                transactions=list(transactions),
            ),
            self._contracts,
            metadata,
        )
        return await self.submit(request)

    async def deploy(self) -> Tuple[str, RelayerTransactionResponse]:
        """Deploy the signer's Safe. Returns the Safe address and the relayer response."""
        signer = self._require_signer()
        request = await build_safe_create_transaction_request(
            signer,
            SafeCreateTransactionArgs(from_address=signer.address, chain_id=self.chain_id),
            self._contracts,
        )
        return request.proxy_wallet, await self.submit(request)

    # ── Approvals ───────────────────────────────────────────────────

    async def check_all_approvals(self, safe: Optional[str] = None) -> Tuple[bool, bool]:
        """Return ``(usdc_approved, outcome_tokens_approved)`` for a Safe."""
        reader = self._require_chain_reader()
        safe = safe or self.safe_address()

        usdc_approved = True
        for spender in usdc_spenders(self._contracts):
            allowance = await reader.get_allowance(self._contracts.collateral, safe, spender)
            if allowance < USDC_ALLOWANCE_THRESHOLD:
                usdc_approved = False
                break

        tokens_approved = True
        for operator in outcome_token_operators(self._contracts):
            if not await reader.is_approved_for_all(
                self._contracts.conditional_tokens, safe, operator
            ):
                tokens_approved = False
                break

        logger.info(
            "relay_client.approvals_checked",
            safe=safe,
            usdc_approved=usdc_approved,
            tokens_approved=tokens_approved,
        )
        return usdc_approved, tokens_approved

    async def approve_all_for_trading(self) -> Optional[RelayerTransactionResponse]:
        """Grant every missing trading approval in one Safe transaction.

        Returns None when everything is already approved.
        """
        usdc_approved, tokens_approved = await self.check_all_approvals()
        if usdc_approved and tokens_approved:
            return None

        transactions: List[SafeTransaction] = []
        if not usdc_approved:
            transactions.extend(
                create_usdc_approve_transactions(
                    self._contracts, usdc_spenders(self._contracts)
                )
            )
        if not tokens_approved:
            transactions.extend(
                create_erc1155_approve_transactions(
                    self._contracts, outcome_token_operators(self._contracts)
                )
            )
        metadata = METADATA_APPROVE_USDC if tokens_approved else METADATA_APPROVE_ALL
        return await self.execute(transactions, metadata)

    # ── Collateral and positions ────────────────────────────────────

    async def transfer_usdc(
        self, to: str, amount: Union[str, int, float]
    ) -> RelayerTransactionResponse:
        """Transfer whole-USDC ``amount`` out of the Safe."""
        txn = create_usdc_transfer_transaction(self._contracts, to, amount)
        return await self.execute([txn], f"Transfer USDC.e to {to}")

    def _ctf_call(self, data: str) -> SafeTransaction:
        return SafeTransaction(to=self._contracts.conditional_tokens, data=data)

    async def redeem_positions(
        self,
        condition_id,
        index_sets: Sequence[int],
        collateral: Optional[str] = None,
        parent_collection_id=PARENT_COLLECTION_ID,
    ) -> RelayerTransactionResponse:
        data = encode_redeem_positions(
            collateral or self._contracts.collateral,
            condition_id,
            index_sets,
            parent_collection_id,
        )
        return await self.execute([self._ctf_call(data)], METADATA_REDEEM)

    async def split_position(
        self,
        condition_id,
        partition: Sequence[int],
        amount: int,
        collateral: Optional[str] = None,
        parent_collection_id=PARENT_COLLECTION_ID,
    ) -> RelayerTransactionResponse:
        """Split ``amount`` collateral base units into a full set of positions."""
        data = encode_split_position(
            collateral or self._contracts.collateral,
            condition_id,
            partition,
            amount,
            parent_collection_id,
        )
        return await self.execute([self._ctf_call(data)], METADATA_SPLIT)

    async def merge_positions(
        self,
        condition_id,
        partition: Sequence[int],
        amount: int,
        collateral: Optional[str] = None,
        parent_collection_id=PARENT_COLLECTION_ID,
    ) -> RelayerTransactionResponse:
        data = encode_merge_positions(
            collateral or self._contracts.collateral,
            condition_id,
            partition,
            amount,
            parent_collection_id,
        )
        return await self.execute([self._ctf_call(data)], METADATA_MERGE)

    # ── Polling ─────────────────────────────────────────────────────

    async def poll_until_state(
        self,
        transaction_id: str,
        states: Sequence[Union[RelayerTransactionState, str]],
        fail_state: Optional[Union[RelayerTransactionState, str]] = None,
        max_polls: int = 10,
        poll_interval: float = 2.0,
    ) -> Optional[Dict[str, Any]]:
        """Poll a transaction until it reaches one of ``states``.

        Returns the transaction, or None on ``fail_state`` or after
        ``max_polls`` attempts.
        """
        wanted = {RelayerTransactionState(state).value for state in states}
        failed = RelayerTransactionState(fail_state).value if fail_state else None

        for attempt in range(max_polls):
            txns = await self.get_transaction(transaction_id)
            if txns:
                txn = txns[0]
                state = txn.get("state")
                if state in wanted:
                    return txn
                if failed is not None and state == failed:
                    logger.warning(
                        "relay_client.transaction_failed",
                        transaction_id=transaction_id,
                        state=state,
                    )
                    return None
            if attempt < max_polls - 1:
                await asyncio.sleep(poll_interval)

        logger.warning(
            "relay_client.poll_timeout", transaction_id=transaction_id, polls=max_polls
        )
        return None


__all__ = [
    "RelayClient",
    "METADATA_APPROVE_ALL",
    "METADATA_APPROVE_USDC",
    "METADATA_REDEEM",
    "METADATA_SPLIT",
    "METADATA_MERGE",
]
