"""Shared fixtures for the SDK tests."""

import base64

import pytest
from eth_account import Account

from polymarket_sdk.config import get_contract_config
from polymarket_sdk.signer import LocalKeySigner, RemoteCustodialSigner


# Test wallets (DO NOT use in production)
TEST_PRIVATE_KEY = "0x" + "ab" * 32
CUSTODIAL_PRIVATE_KEY = "0x" + "cd" * 32


class FakeCustodialBackend:
    """Custodial signing service backed by a local key."""

    def __init__(self, private_key: str = CUSTODIAL_PRIVATE_KEY, recovery_offset: int = 0):
        self.account = Account.from_key(private_key)
        self.recovery_offset = recovery_offset
        self.calls = []

    async def sign_raw_payload(self, sign_with: str, payload_b64: str):
        self.calls.append((sign_with, payload_b64))
        digest = base64.b64decode(payload_b64)
        signed = self.account.unsafe_sign_hash(digest)
        raw = bytes(signed.signature)
        # Some services report v as a bare recovery id
        return "0x" + (raw[:64] + bytes([raw[64] - self.recovery_offset])).hex()


@pytest.fixture
def contracts():
    return get_contract_config(137)


@pytest.fixture
def local_signer():
    return LocalKeySigner(TEST_PRIVATE_KEY)


@pytest.fixture
def custodial_backend():
    return FakeCustodialBackend()


@pytest.fixture
def custodial_signer(custodial_backend):
    return RemoteCustodialSigner(custodial_backend, custodial_backend.account.address)
