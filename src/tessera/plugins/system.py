"""
System plugin: account reads and lamport transfers.

The smallest complete feature module. It shows the shape every feature takes:
declare operations with ``use_operation``, write one handler per operation,
keep transaction assembly in a builder function that returns a
``TransactionBuilder``, and install everything on a client through a plugin.

Architecture:
    ::

        SystemPlugin.install(client)
          ├── registers FindAccountByAddress       -> RawAccount
          ├── registers FindAccountsByAddressList  -> list[RawAccount]
          ├── registers TransferLamports           -> TransferLamportsOutput
          └── client.set_system_client(SystemClient(client))

Examples:
    >>> client = Tessera(rpc, identity=wallet).use(SystemPlugin())
    >>> output = await client.system().transfer(TransferLamportsInput(to=bob, lamports=5_000))
    >>> output.signature
    '5x...'

Tags:
    plugin, system-program, transfer, accounts

Doc-Types:
    - API Reference
"""

from __future__ import annotations

import struct
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from tessera.core.errors import AccountNotFoundError, ExpectedSignerError
from tessera.core.ledger import (
    AccountMeta,
    Instruction,
    InstructionWithSigners,
    PublicKey,
    RawAccount,
    SendAndConfirmResponse,
    Signer,
    is_signer,
)
from tessera.core.logging import get_logger
from tessera.core.scope import Scope
from tessera.core.task import Task
from tessera.framework.builders import GmaBuilder, TransactionBuilder
from tessera.framework.operations import Operation, OperationOptions, OperationScope, use_operation

if TYPE_CHECKING:
    from tessera.client import Tessera

log = get_logger(__name__)

SYSTEM_PROGRAM_ID: PublicKey = "11111111111111111111111111111111"
MEMO_PROGRAM_ID: PublicKey = "MemoSq4gqABAXKb96qnH8TysNcWxMyWCqXgDLGmfcHr"

# System program instruction index for Transfer.
TRANSFER_INSTRUCTION_INDEX = 2


# =============================================================================
# INPUTS AND OUTPUTS
# =============================================================================


@dataclass(frozen=True)
class FindAccountByAddressInput:
    address: PublicKey


@dataclass(frozen=True)
class FindAccountsByAddressListInput:
    addresses: list[PublicKey]


@dataclass(frozen=True)
class TransferLamportsInput:
    """
    Attributes:
        to: Recipient address
        lamports: Amount to move; zero means there is nothing to send
        from_: Signer debited (defaults to the operation payer)
        memo: Optional memo recorded alongside the transfer
        instruction_key: Key of the transfer step inside the builder
    """

    to: PublicKey
    lamports: int
    from_: Signer | None = None
    memo: str | None = None
    instruction_key: str = "transferLamports"


@dataclass(frozen=True)
class TransferLamportsContext:
    from_address: PublicKey
    to_address: PublicKey
    lamports: int


@dataclass(frozen=True)
class TransferLamportsOutput:
    """``response`` is None when the transfer had nothing to do."""

    response: SendAndConfirmResponse | None
    context: TransferLamportsContext | None = None

    @property
    def signature(self) -> str | None:
        return None if self.response is None else self.response.signature


find_account_by_address_operation = use_operation("FindAccountByAddress")
find_accounts_by_address_list_operation = use_operation("FindAccountsByAddressList")
transfer_lamports_operation = use_operation("TransferLamports")


# =============================================================================
# BUILDERS
# =============================================================================


def transfer_instruction(from_: PublicKey, to: PublicKey, lamports: int) -> Instruction:
    return Instruction(
        program_id=SYSTEM_PROGRAM_ID,
        accounts=(
            AccountMeta(from_, is_signer=True, is_writable=True),
            AccountMeta(to, is_signer=False, is_writable=True),
        ),
        data=struct.pack("<IQ", TRANSFER_INSTRUCTION_INDEX, lamports),
    )


def memo_instruction(signer: PublicKey, memo: str) -> Instruction:
    return Instruction(
        program_id=MEMO_PROGRAM_ID,
        accounts=(AccountMeta(signer, is_signer=True, is_writable=False),),
        data=memo.encode("utf-8"),
    )


def transfer_lamports_builder(
    client: Tessera,
    params: TransferLamportsInput,
    payer: Signer | None = None,
) -> TransactionBuilder[TransferLamportsContext]:
    """
    Build the transfer without sending it.

    A zero amount yields an empty builder. Raises ExpectedSignerError when no
    payer can be resolved, and ValueError for a negative amount, before any
    network call.
    """
    payer = payer or client.identity()
    if not is_signer(payer):
        raise ExpectedSignerError("payer", type(payer).__name__)
    from_ = params.from_ or payer
    if not is_signer(from_):
        raise ExpectedSignerError("from", type(from_).__name__)
    if params.lamports < 0:
        raise ValueError(f"lamports must be >= 0, got {params.lamports}")

    context = TransferLamportsContext(
        from_address=from_.public_key,
        to_address=params.to,
        lamports=params.lamports,
    )
    builder: TransactionBuilder[TransferLamportsContext] = (
        TransactionBuilder.make().set_fee_payer(payer).set_context(context)
    )
    return builder.when(
        params.lamports > 0,
        lambda b: b.add(
            InstructionWithSigners(
                transfer_instruction(from_.public_key, params.to, params.lamports),
                signers=[from_],
                key=params.instruction_key,
            )
        ).when(
            params.memo is not None,
            lambda b: b.add(
                InstructionWithSigners(
                    memo_instruction(from_.public_key, params.memo or ""),
                    signers=[from_],
                    key="addMemo",
                )
            ),
        ),
    )


# =============================================================================
# HANDLERS
# =============================================================================


async def find_account_by_address_handler(
    operation: Operation[FindAccountByAddressInput, RawAccount],
    client: Tessera,
    scope: OperationScope,
) -> RawAccount:
    address = operation.input.address
    account = await client.rpc().get_account(address, scope.commitment)
    scope.throw_if_canceled()
    if not account.exists:
        raise AccountNotFoundError(address)
    return account


async def find_accounts_by_address_list_handler(
    operation: Operation[FindAccountsByAddressListInput, list[RawAccount]],
    client: Tessera,
    scope: OperationScope,
) -> list[RawAccount]:
    return await GmaBuilder.make(
        client.rpc(),
        operation.input.addresses,
        chunk_size=client.settings.gma_chunk_size,
        commitment=scope.commitment,
        scope=scope,
    ).get()


async def transfer_lamports_handler(
    operation: Operation[TransferLamportsInput, TransferLamportsOutput],
    client: Tessera,
    scope: OperationScope,
) -> TransferLamportsOutput:
    builder = transfer_lamports_builder(client, operation.input, scope.payer)
    if builder.is_empty():
        log.info("transfer.nothing_to_send", to=operation.input.to)
        return TransferLamportsOutput(response=None, context=builder.get_context())

    scope.throw_if_canceled()
    confirmed = await builder.send_and_confirm(client.rpc(), scope.confirm_options)
    scope.throw_if_canceled()
    return TransferLamportsOutput(response=confirmed.response, context=confirmed.context)


# =============================================================================
# CLIENT ACCESSOR AND PLUGIN
# =============================================================================


class SystemBuildersClient:
    """Builder-only access: assemble without sending."""

    def __init__(self, client: Tessera) -> None:
        self._client = client

    def transfer(
        self,
        params: TransferLamportsInput,
        payer: Signer | None = None,
    ) -> TransactionBuilder[TransferLamportsContext]:
        return transfer_lamports_builder(self._client, params, payer)


class SystemClient:
    """Convenience accessor returned by ``client.system()``."""

    def __init__(self, client: Tessera) -> None:
        self._client = client

    def builders(self) -> SystemBuildersClient:
        return SystemBuildersClient(self._client)

    async def find_account(
        self,
        address: PublicKey,
        scope: Scope | None = None,
        options: OperationOptions | None = None,
        fail_silently: bool | None = None,
    ) -> RawAccount | None:
        return await self._client.operations().execute(
            find_account_by_address_operation(FindAccountByAddressInput(address)),
            scope,
            options=options,
            fail_silently=fail_silently,
        )

    async def find_accounts(
        self,
        addresses: list[PublicKey],
        scope: Scope | None = None,
        options: OperationOptions | None = None,
        fail_silently: bool | None = None,
    ) -> list[RawAccount] | None:
        return await self._client.operations().execute(
            find_accounts_by_address_list_operation(FindAccountsByAddressListInput(list(addresses))),
            scope,
            options=options,
            fail_silently=fail_silently,
        )

    async def transfer(
        self,
        params: TransferLamportsInput,
        scope: Scope | None = None,
        options: OperationOptions | None = None,
        fail_silently: bool | None = None,
    ) -> TransferLamportsOutput | None:
        return await self._client.operations().execute(
            transfer_lamports_operation(params),
            scope,
            options=options,
            fail_silently=fail_silently,
        )

    async def account_tasks(
        self,
        addresses: list[PublicKey],
        scope: Scope | None = None,
    ) -> dict[PublicKey, Task[Any]]:
        """
        One task per address, preloaded from a single batched read.

        Tasks for existing accounts are already successful. Tasks for missing
        accounts stay pending; running one performs a single-account read
        that fails with AccountNotFoundError if the account is still absent.
        The batched read always raises on failure, whatever the client's
        ``fail_silently`` setting.
        """
        accounts = await self.find_accounts(addresses, scope, fail_silently=False)
        dispatcher = self._client.operations()
        tasks: dict[PublicKey, Task[Any]] = {}
        for address, account in zip(addresses, accounts):
            task = dispatcher.get_task(find_account_by_address_operation(FindAccountByAddressInput(address)))
            if account.exists:
                task.load_with(account)
            tasks[address] = task
        return tasks


class SystemPlugin:
    """Installs the system operations and ``client.system()``."""

    def install(self, client: Tessera) -> None:
        client.operations().register(find_account_by_address_operation, find_account_by_address_handler)
        client.operations().register(find_accounts_by_address_list_operation, find_accounts_by_address_list_handler)
        client.operations().register(transfer_lamports_operation, transfer_lamports_handler)
        client.set_system_client(SystemClient(client))
