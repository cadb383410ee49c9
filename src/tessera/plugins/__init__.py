"""Feature plugins installable with ``client.use(...)``."""

from tessera.plugins.system import (
    SystemClient,
    SystemPlugin,
    TransferLamportsInput,
    TransferLamportsOutput,
    transfer_lamports_builder,
)

__all__ = [
    "SystemClient",
    "SystemPlugin",
    "TransferLamportsInput",
    "TransferLamportsOutput",
    "transfer_lamports_builder",
]
