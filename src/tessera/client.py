"""The top-level client object.

A ``Tessera`` instance is constructed once and passed by reference to every
operation handler. It owns the operation registry, the RPC collaborator, the
current identity and the settings, so two clients in one process stay fully
isolated.

Usage:
    client = Tessera(rpc, identity=wallet).use(SystemPlugin())
    output = await client.operations().execute(transfer_lamports_operation(params))
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol

from tessera.core.errors import PluginNotInstalledError
from tessera.core.ledger import RpcClient, Signer
from tessera.core.logging import get_logger
from tessera.core.settings import TesseraSettings
from tessera.framework.dispatcher import OperationDispatcher
from tessera.framework.registry import OperationRegistry

if TYPE_CHECKING:
    from tessera.plugins.system import SystemClient

log = get_logger(__name__)


class Plugin(Protocol):
    """Anything that can install operations or accessors onto a client."""

    def install(self, client: Tessera) -> Any: ...


class Tessera:
    """SDK client: registry, RPC boundary, identity and settings in one place."""

    def __init__(
        self,
        rpc: RpcClient,
        *,
        identity: Signer | None = None,
        settings: TesseraSettings | None = None,
    ) -> None:
        self._rpc = rpc
        self._identity = identity
        self.settings = settings if settings is not None else TesseraSettings()
        self._operations = OperationDispatcher(self, OperationRegistry())
        self._system: SystemClient | None = None

    def use(self, plugin: Plugin) -> Tessera:
        """Install a plugin and return the client for chaining."""
        plugin.install(self)
        log.debug("plugin.installed", plugin=type(plugin).__name__)
        return self

    def operations(self) -> OperationDispatcher:
        return self._operations

    def rpc(self) -> RpcClient:
        return self._rpc

    def identity(self) -> Signer | None:
        return self._identity

    def set_identity(self, identity: Signer) -> Tessera:
        self._identity = identity
        return self

    def system(self) -> SystemClient:
        """Accessor installed by SystemPlugin."""
        if self._system is None:
            raise PluginNotInstalledError("SystemPlugin")
        return self._system

    def set_system_client(self, system: SystemClient) -> None:
        self._system = system
