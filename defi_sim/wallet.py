"""Mock wallet and connection for the dashboard's wallet and faucet flows.

Nothing here talks to a network or signs anything: public keys, balances and
transaction signatures are random. Pass a seeded ``random.Random`` to make
them reproducible.
"""

from __future__ import annotations

import random
import string
import time
from typing import Protocol, runtime_checkable

import structlog

from defi_sim.constants import AIRDROP_AMOUNT_SOL, LAMPORTS_PER_SOL

logger = structlog.get_logger()

_KEY_ALPHABET = string.ascii_lowercase + string.digits


class WalletNotConnected(Exception):
    """Operation needs a connected wallet."""

    pass


class MockPublicKey:
    """Opaque public key wrapper."""

    def __init__(self, key: str) -> None:
        self._key = key

    def __str__(self) -> str:
        return self._key

    def __repr__(self) -> str:
        return f"MockPublicKey({self._key!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, MockPublicKey):
            return self._key == other._key
        return NotImplemented

    def __hash__(self) -> int:
        return hash(self._key)

    def to_base58(self) -> str:
        """Address string as shown in the wallet button."""
        return self._key


class MockConnection:
    """Stand-in for an RPC connection.

    Args:
        endpoint: Cluster URL, informational only
        rng: Random source for balances and signatures
        latency: Seconds to sleep per airdrop/confirmation, simulating
            network delay (default: none)
    """

    def __init__(
        self,
        endpoint: str = "https://api.devnet.solana.com",
        rng: random.Random | None = None,
        latency: float = 0.0,
    ) -> None:
        self.endpoint = endpoint
        self.rng = rng or random.Random()
        self.latency = latency

    def get_balance(self, public_key: MockPublicKey) -> float:
        """Random balance between 0.5 and 5 SOL."""
        return self.rng.random() * 4.5 + 0.5

    def request_airdrop(self, public_key: MockPublicKey, lamports: int) -> str:
        """Pretend to airdrop lamports and return a mock signature.

        Raises:
            ValueError: If lamports is not positive
        """
        if lamports <= 0:
            raise ValueError(f"Airdrop amount must be positive, got {lamports}")
        if self.latency:
            time.sleep(self.latency)
        suffix = "".join(self.rng.choices(_KEY_ALPHABET, k=9))
        signature = f"mock_signature_{int(time.time() * 1000)}_{suffix}"
        logger.info(
            "airdrop_requested",
            public_key=public_key.to_base58(),
            lamports=lamports,
            signature=signature,
        )
        return signature

    def confirm_transaction(self, signature: str) -> None:
        if self.latency:
            time.sleep(self.latency)
        logger.debug("transaction_confirmed", signature=signature)


@runtime_checkable
class WalletConnector(Protocol):
    """Capability the dashboard needs from a wallet."""

    @property
    def connected(self) -> bool: ...

    def connect(self) -> MockPublicKey: ...

    def disconnect(self) -> None: ...

    def get_balance(self) -> float: ...


class MockWallet:
    """Demo wallet that connects to a random ``Demo...`` address."""

    def __init__(self, connection: MockConnection | None = None) -> None:
        self.connection = connection or MockConnection()
        self.public_key: MockPublicKey | None = None

    @property
    def connected(self) -> bool:
        return self.public_key is not None

    def connect(self) -> MockPublicKey:
        if self.public_key is None:
            suffix = "".join(self.connection.rng.choices(_KEY_ALPHABET, k=40))
            self.public_key = MockPublicKey("Demo" + suffix)
            logger.info("wallet_connected", public_key=self.public_key.to_base58())
        return self.public_key

    def disconnect(self) -> None:
        if self.public_key is not None:
            logger.info("wallet_disconnected", public_key=self.public_key.to_base58())
        self.public_key = None

    def _require_key(self) -> MockPublicKey:
        if self.public_key is None:
            raise WalletNotConnected("Connect a wallet first")
        return self.public_key

    def get_balance(self) -> float:
        """Balance in SOL.

        Raises:
            WalletNotConnected: If the wallet is not connected
        """
        return self.connection.get_balance(self._require_key())

    def request_airdrop(self, sol: int = AIRDROP_AMOUNT_SOL) -> str:
        """Devnet faucet: request ``sol`` SOL and wait for confirmation.

        Raises:
            WalletNotConnected: If the wallet is not connected
        """
        key = self._require_key()
        signature = self.connection.request_airdrop(key, sol * LAMPORTS_PER_SOL)
        self.connection.confirm_transaction(signature)
        return signature


__all__ = [
    "MockConnection",
    "MockPublicKey",
    "MockWallet",
    "WalletConnector",
    "WalletNotConnected",
]
