"""Transaction and multi-account read builders."""

from tessera.framework.builders.gma import GmaBuilder
from tessera.framework.builders.transaction import ConfirmedTransaction, TransactionBuilder

__all__ = ["ConfirmedTransaction", "GmaBuilder", "TransactionBuilder"]
