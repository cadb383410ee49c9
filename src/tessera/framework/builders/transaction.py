"""
Transaction builder.

Accumulates an ordered list of instructions with the signers each one
requires, plus one fee payer and one free-form context value, and compiles
them into a single submittable transaction.

Manifesto:
    Feature handlers compose sub-transactions without knowing about each
    other's internals: a handler returns a builder, another handler splices
    it into its own with ``add``. Order is exactly the order of ``add``
    calls; reordering is the handler's job, never the builder's.

    - **Mutable and chainable:** every mutator returns the same builder
    - **Flat splicing:** adding a builder appends its steps, not the builder
    - **Context stays local:** ``add(other)`` never imports other's context
    - **No size validation:** oversized transactions fail at submission

Examples:
    >>> builder = (
    ...     TransactionBuilder.make()
    ...     .set_fee_payer(payer)
    ...     .add(InstructionWithSigners(create_ix, [payer, mint], key="createAccount"))
    ...     .when(print_receipt, lambda b: b.add(receipt_step))
    ...     .set_context({"mint": mint.public_key})
    ... )
    >>> confirmed = await builder.send_and_confirm(rpc)

Tags:
    transaction-builder, composition, signers, tessera-core

Doc-Types:
    api-reference
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, Generic, TypeVar, Union

from tessera.core.ledger import (
    ConfirmOptions,
    InstructionWithSigners,
    PublicKey,
    RpcClient,
    SendAndConfirmResponse,
    Signer,
    Transaction,
    TransactionOptions,
)
from tessera.core.logging import log_step

C = TypeVar("C")

BuilderItem = Union[InstructionWithSigners, "TransactionBuilder[Any]"]


@dataclass(frozen=True)
class ConfirmedTransaction(Generic[C]):
    """Outcome of ``send_and_confirm``: the ledger response and the builder context."""

    response: SendAndConfirmResponse
    context: C | None = None

    @property
    def signature(self) -> str:
        return self.response.signature


class TransactionBuilder(Generic[C]):
    """Ordered, composable accumulator of instructions and signers."""

    def __init__(self, transaction_options: TransactionOptions | None = None) -> None:
        self._records: list[InstructionWithSigners] = []
        self._transaction_options = transaction_options
        self._fee_payer: Signer | None = None
        self._context: C | None = None

    @classmethod
    def make(cls, transaction_options: TransactionOptions | None = None) -> TransactionBuilder[C]:
        """Empty builder: no steps, no fee payer, no context."""
        return cls(transaction_options)

    # ── Composition ─────────────────────────────────────────────

    def add(self, *items: BuilderItem) -> TransactionBuilder[C]:
        """Append steps and/or other builders' steps, in order."""
        return self.append(*items)

    def append(self, *items: BuilderItem) -> TransactionBuilder[C]:
        self._records.extend(self._flatten(items))
        return self

    def prepend(self, *items: BuilderItem) -> TransactionBuilder[C]:
        self._records[:0] = self._flatten(items)
        return self

    def when(
        self,
        condition: bool,
        callback: Callable[[TransactionBuilder[C]], TransactionBuilder[C]],
    ) -> TransactionBuilder[C]:
        """Apply ``callback`` only if ``condition`` holds; its return value becomes the builder."""
        return callback(self) if condition else self

    def unless(
        self,
        condition: bool,
        callback: Callable[[TransactionBuilder[C]], TransactionBuilder[C]],
    ) -> TransactionBuilder[C]:
        return self.when(not condition, callback)

    def split_using_key(self, key: str, include: bool = True) -> tuple[TransactionBuilder[Any], TransactionBuilder[Any]]:
        """
        Split the steps around the first step named ``key``.

        With ``include`` the keyed step ends the first builder, otherwise it
        starts the second one. If no step has that key, every step goes to the
        first builder and the second is empty. Context and fee payer are not
        carried over.
        """
        first: TransactionBuilder[Any] = TransactionBuilder(self._transaction_options)
        second: TransactionBuilder[Any] = TransactionBuilder(self._transaction_options)

        position = next((i for i, record in enumerate(self._records) if record.key == key), None)
        if position is None:
            first.add(self)
            return first, second

        if include:
            position += 1
        first.add(*self._records[:position])
        second.add(*self._records[position:])
        return first, second

    def split_before_key(self, key: str) -> tuple[TransactionBuilder[Any], TransactionBuilder[Any]]:
        return self.split_using_key(key, include=False)

    def split_after_key(self, key: str) -> tuple[TransactionBuilder[Any], TransactionBuilder[Any]]:
        return self.split_using_key(key, include=True)

    # ── Inspection ──────────────────────────────────────────────

    def get_instructions_with_signers(self) -> list[InstructionWithSigners]:
        return list(self._records)

    def get_instructions(self) -> list[Any]:
        return [record.instruction for record in self._records]

    def get_instruction_count(self) -> int:
        return len(self._records)

    def is_empty(self) -> bool:
        """True iff no step was added; a fee payer alone does not count."""
        return not self._records

    def get_signers(self) -> list[Signer]:
        """
        Every required signer exactly once, fee payer first.

        Signers are identified by public key; the first occurrence wins.
        """
        candidates: list[Signer] = [] if self._fee_payer is None else [self._fee_payer]
        for record in self._records:
            candidates.extend(record.signers)

        seen: set[PublicKey] = set()
        signers: list[Signer] = []
        for signer in candidates:
            if signer.public_key in seen:
                continue
            seen.add(signer.public_key)
            signers.append(signer)
        return signers

    # ── Options, fee payer, context ─────────────────────────────

    def set_transaction_options(self, transaction_options: TransactionOptions) -> TransactionBuilder[C]:
        self._transaction_options = transaction_options
        return self

    def get_transaction_options(self) -> TransactionOptions | None:
        return self._transaction_options

    def set_fee_payer(self, fee_payer: Signer) -> TransactionBuilder[C]:
        self._fee_payer = fee_payer
        return self

    def get_fee_payer(self) -> Signer | None:
        return self._fee_payer

    def set_context(self, context: C) -> TransactionBuilder[C]:
        self._context = context
        return self

    def get_context(self) -> C | None:
        return self._context

    # ── Compilation and submission ──────────────────────────────

    def to_transaction(self) -> Transaction:
        """Compile the steps into one unsigned transaction."""
        options = self._transaction_options
        return Transaction(
            instructions=self.get_instructions(),
            fee_payer=None if self._fee_payer is None else self._fee_payer.public_key,
            recent_blockhash=None if options is None else options.blockhash,
            last_valid_block_height=None if options is None else options.last_valid_block_height,
        )

    async def send_and_confirm(
        self,
        rpc: RpcClient,
        confirm_options: ConfirmOptions | None = None,
    ) -> ConfirmedTransaction[C]:
        """
        Submit the compiled transaction and wait for its confirmation.

        Errors from the RPC boundary propagate unchanged.
        """
        transaction = self.to_transaction()
        signers = self.get_signers()

        with log_step(
            "transaction.send",
            instructions=len(transaction.instructions),
            signers=len(signers),
            keys=[record.key for record in self._records if record.key],
        ) as timer:
            response = await rpc.send_and_confirm_transaction(transaction, signers, confirm_options)
            timer.add_metric("signature", response.signature)

        return ConfirmedTransaction(response=response, context=self._context)

    @staticmethod
    def _flatten(items: tuple[BuilderItem, ...]) -> list[InstructionWithSigners]:
        records: list[InstructionWithSigners] = []
        for item in items:
            if isinstance(item, TransactionBuilder):
                records.extend(item.get_instructions_with_signers())
            else:
                records.append(item)
        return records

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(instructions={len(self._records)}, fee_payer={self._fee_payer is not None})"
