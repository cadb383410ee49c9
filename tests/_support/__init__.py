"""
Test support utilities for tessera tests.

Ledger fakes that don't fit as pytest fixtures but are constructed directly
by several test modules.
"""

from tests._support.ledger import FakeSigner, InMemoryRpc

__all__ = ["FakeSigner", "InMemoryRpc"]
