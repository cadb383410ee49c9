"""SDK settings.

``TesseraSettings`` collects the few knobs the core needs (log output,
default commitment, preflight behavior, batch size for multi-account reads)
and reads them from ``TESSERA_`` prefixed environment variables or a ``.env``
file.

Manifesto:
    Configuration should be explicit, validated, and environment-driven.

    - **Pydantic validation:** Type-checked at construction
    - **Environment-driven:** Reads from env vars and .env files
    - **Per-client:** Each client holds its own instance; nothing global is mutated

Examples:
    >>> from tessera.core.settings import TesseraSettings
    >>> settings = TesseraSettings(commitment="finalized")
    >>> settings.gma_chunk_size
    100

Tags:
    settings, configuration, pydantic, environment, tessera-core
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

Commitment = Literal["processed", "confirmed", "finalized"]


class TesseraSettings(BaseSettings):
    """Settings shared by every client.

    Fields
    ──────
    log_level           : Structlog log level
    log_format          : "console" or "json"
    log_operation_debug : Comma-separated operation names logged at DEBUG
    commitment          : Default commitment for reads and confirmations
    skip_preflight      : Default preflight behavior for submissions
    gma_chunk_size      : Addresses per multi-account read round trip
    fail_silently       : Default "fail silently" option for executed operations
    """

    model_config = SettingsConfigDict(
        env_prefix="TESSERA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # ── Observability ────────────────────────────────────────────
    log_level: str = "INFO"
    log_format: Literal["console", "json"] = "console"
    log_operation_debug: str = ""

    # ── Ledger ───────────────────────────────────────────────────
    commitment: Commitment = "confirmed"
    skip_preflight: bool = False
    gma_chunk_size: int = Field(default=100, ge=1, description="Addresses per getMultipleAccounts call")

    # ── Execution ────────────────────────────────────────────────
    fail_silently: bool = False


@lru_cache(maxsize=1)
def get_settings() -> TesseraSettings:
    """Return settings built from the environment (cached)."""
    return TesseraSettings()
