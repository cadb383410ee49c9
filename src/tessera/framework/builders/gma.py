"""Batched multi-account reads.

``GmaBuilder`` splits a list of addresses into chunks, issues one
``get_multiple_accounts`` round trip per chunk concurrently, and returns the
accounts in the order of the requested addresses. Missing accounts come back
as ``RawAccount(exists=False)``; RPC failures propagate.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable
from typing import TypeVar

from tessera.core.ledger import PublicKey, RawAccount, RpcClient
from tessera.core.logging import get_logger
from tessera.core.scope import Scope
from tessera.core.settings import Commitment

T = TypeVar("T")

DEFAULT_CHUNK_SIZE = 100

log = get_logger(__name__)


def chunk(items: list[T], size: int) -> list[list[T]]:
    """Split ``items`` into consecutive lists of at most ``size`` elements."""
    return [items[i : i + size] for i in range(0, len(items), size)]


class GmaBuilder:
    """
    Chunked reader over ``RpcClient.get_multiple_accounts``.

    Usage:
        accounts = await GmaBuilder.make(rpc, addresses, chunk_size=50).get()
        first_page = await GmaBuilder.make(rpc, addresses).get_page(1, per_page=10)
    """

    def __init__(
        self,
        rpc: RpcClient,
        addresses: list[PublicKey],
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        commitment: Commitment | None = None,
        scope: Scope | None = None,
    ) -> None:
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be >= 1, got {chunk_size}")
        self._rpc = rpc
        self._addresses = list(addresses)
        self._chunk_size = chunk_size
        self._commitment = commitment
        self._scope = scope

    @classmethod
    def make(
        cls,
        rpc: RpcClient,
        addresses: list[PublicKey],
        *,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        commitment: Commitment | None = None,
        scope: Scope | None = None,
    ) -> GmaBuilder:
        return cls(rpc, addresses, chunk_size=chunk_size, commitment=commitment, scope=scope)

    def chunk_by(self, n: int) -> GmaBuilder:
        if n < 1:
            raise ValueError(f"chunk_size must be >= 1, got {n}")
        self._chunk_size = n
        return self

    def add_addresses(self, addresses: list[PublicKey]) -> GmaBuilder:
        self._addresses.extend(addresses)
        return self

    def get_addresses(self) -> list[PublicKey]:
        return list(self._addresses)

    def get_unique_addresses(self) -> list[PublicKey]:
        """Addresses without duplicates, first occurrence order."""
        return list(dict.fromkeys(self._addresses))

    async def get(self) -> list[RawAccount]:
        return await self._get_chunks(self._addresses)

    async def get_first(self, n: int = 1) -> list[RawAccount]:
        return await self._get_chunks(self._addresses[: self._bound_number(n)])

    async def get_last(self, n: int = 1) -> list[RawAccount]:
        bound = self._bound_number(n)
        if bound == 0:
            return []
        return await self._get_chunks(self._addresses[-bound:])

    async def get_between(self, start: int, end: int) -> list[RawAccount]:
        """Accounts for addresses ``[start, end)``; bounds are clamped and swapped if reversed."""
        start, end = self._bound_number(start), self._bound_number(end)
        if start > end:
            start, end = end, start
        return await self._get_chunks(self._addresses[start:end])

    async def get_page(self, page: int, per_page: int) -> list[RawAccount]:
        """1-based page of ``per_page`` accounts."""
        return await self.get_between((page - 1) * per_page, page * per_page)

    async def get_and_map(self, callback: Callable[[RawAccount], T]) -> list[T]:
        return [callback(account) for account in await self.get()]

    async def _get_chunks(self, addresses: list[PublicKey]) -> list[RawAccount]:
        if not addresses:
            return []

        # Duplicates are fetched once and fanned back out in request order.
        unique = list(dict.fromkeys(addresses))
        chunks = chunk(unique, self._chunk_size)
        log.debug("gma.fetch", addresses=len(addresses), unique=len(unique), chunks=len(chunks))

        results = await asyncio.gather(*(self._get_chunk(c) for c in chunks))
        if self._scope is not None:
            self._scope.throw_if_canceled()

        by_address: dict[PublicKey, RawAccount] = {}
        for chunk_addresses, accounts in zip(chunks, results):
            for address, account in zip(chunk_addresses, accounts):
                by_address[address] = account
        return [by_address.get(address) or RawAccount.missing(address) for address in addresses]

    async def _get_chunk(self, addresses: list[PublicKey]) -> list[RawAccount]:
        return await self._rpc.get_multiple_accounts(addresses, self._commitment)

    def _bound_number(self, n: int) -> int:
        return max(0, min(n, len(self._addresses)))
