"""Runtime configuration loaded from the environment or a .env file."""

import logging
from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings for proving and tree construction.

    Every field can be overridden with an ``OWSHEN_`` environment variable,
    e.g. ``OWSHEN_PARAMS_FILE=/srv/coin_withdraw.zkey``.
    """

    model_config = SettingsConfigDict(
        env_prefix="OWSHEN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    params_file: Path = Field(
        default=Path("contracts/circuits/coin_withdraw_0001.zkey"),
        description="Groth16 proving key matching the on-chain verifier",
    )
    witness_wasm: Path = Field(
        default=Path("contracts/circuits/coin_withdraw_js/coin_withdraw.wasm"),
        description="Compiled witness calculator for the withdrawal circuit",
    )
    snarkjs_bin: str = Field(default="snarkjs", description="snarkjs executable")
    tree_depth: int = Field(default=32, ge=1, le=256, description="Depth baked into the circuit")
    prove_timeout: float = Field(default=300.0, gt=0, description="Seconds before proving is abandoned")
    log_level: str = Field(default="INFO")


@lru_cache(maxsize=None)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


def configure_logging(level: Optional[str] = None) -> None:
    """Configure root logging for applications embedding the core."""
    logging.basicConfig(
        level=(level or get_settings().log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
