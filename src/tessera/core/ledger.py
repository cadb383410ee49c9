"""Ledger value types and the RPC boundary consumed by the core.

The core never decodes account bytes, signs anything or talks to the network
itself. It only moves these values between handlers, builders and an
``RpcClient`` supplied by the caller.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol, runtime_checkable

from tessera.core.settings import Commitment

PublicKey = str
"""Base58 ledger address."""


@runtime_checkable
class Signer(Protocol):
    """Anything able to sign for ``public_key``; signing itself happens in the RPC layer."""

    @property
    def public_key(self) -> PublicKey: ...


@dataclass(frozen=True)
class AccountMeta:
    """An account referenced by an instruction."""

    pubkey: PublicKey
    is_signer: bool = False
    is_writable: bool = False


@dataclass(frozen=True)
class Instruction:
    """One program instruction. ``data`` is opaque to the core."""

    program_id: PublicKey
    accounts: tuple[AccountMeta, ...] = ()
    data: bytes = b""


@dataclass
class InstructionWithSigners:
    """A builder step: an instruction, the signers it requires and an optional key."""

    instruction: Any
    signers: list[Signer] = field(default_factory=list)
    key: str | None = None


@dataclass(frozen=True)
class TransactionOptions:
    """Blockhash options used when compiling a transaction."""

    blockhash: str
    last_valid_block_height: int


@dataclass
class Transaction:
    """An unsigned, compiled transaction ready for the RPC boundary."""

    instructions: list[Any]
    fee_payer: PublicKey | None = None
    recent_blockhash: str | None = None
    last_valid_block_height: int | None = None


@dataclass(frozen=True)
class ConfirmOptions:
    """How a submission is sent and confirmed."""

    commitment: Commitment | None = None
    preflight_commitment: Commitment | None = None
    skip_preflight: bool = False
    max_retries: int | None = None


@dataclass(frozen=True)
class SendAndConfirmResponse:
    """What the RPC boundary reports for a confirmed submission."""

    signature: str
    confirmation: dict[str, Any] = field(default_factory=dict)
    block_height: int | None = None


@dataclass(frozen=True)
class RawAccount:
    """Undecoded account as returned by the RPC boundary."""

    address: PublicKey
    exists: bool
    data: bytes = b""
    owner: PublicKey | None = None
    lamports: int = 0
    executable: bool = False

    @classmethod
    def missing(cls, address: PublicKey) -> RawAccount:
        return cls(address=address, exists=False)


class RpcClient(Protocol):
    """Consumed RPC collaborator."""

    async def get_account(self, address: PublicKey, commitment: Commitment | None = None) -> RawAccount: ...

    async def get_multiple_accounts(
        self,
        addresses: list[PublicKey],
        commitment: Commitment | None = None,
    ) -> list[RawAccount]: ...

    async def send_and_confirm_transaction(
        self,
        transaction: Transaction,
        signers: list[Signer],
        options: ConfirmOptions | None = None,
    ) -> SendAndConfirmResponse: ...


def is_signer(value: Any) -> bool:
    """Check whether a value can stand in as a signer."""
    return isinstance(value, Signer)
