"""
Configuration parameters for fusion.

Defines chain identity and operational settings. Values can be
overridden through FUSION_* environment variables or a .env file.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

# Hardhat / anvil default chain id
DEFAULT_CHAIN_ID = 31337


@dataclass
class FusionConfig:
    """Runtime configuration"""

    # Chain identity bound into signed token messages
    chain_id: int = DEFAULT_CHAIN_ID

    # Logging
    log_level: int = logging.INFO
    log_dir: Path = Path("logs")
    log_to_file: bool = False

    def __post_init__(self):
        if self.chain_id <= 0:
            raise ValueError(f"chain_id must be positive, got {self.chain_id}")


# Global config instance (can be overridden)
config = FusionConfig()


def _env_flag(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(env_path: Optional[str] = None) -> FusionConfig:
    """
    Load configuration from the environment.

    Reads FUSION_CHAIN_ID, FUSION_LOG_LEVEL, FUSION_LOG_DIR and
    FUSION_LOG_TO_FILE. Variables from `env_path` (or a .env file
    in the working directory) are loaded first without overriding
    variables already set.

    Args:
        env_path: Optional path to a .env file

    Returns:
        FusionConfig instance
    """
    load_dotenv(dotenv_path=env_path, override=False)

    cfg = FusionConfig()

    chain_id = os.getenv("FUSION_CHAIN_ID")
    if chain_id:
        cfg.chain_id = int(chain_id, 0)
        if cfg.chain_id <= 0:
            raise ValueError(f"FUSION_CHAIN_ID must be positive, got {chain_id}")

    log_level = os.getenv("FUSION_LOG_LEVEL")
    if log_level:
        level = logging.getLevelName(log_level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown FUSION_LOG_LEVEL: {log_level}")
        cfg.log_level = level

    log_dir = os.getenv("FUSION_LOG_DIR")
    if log_dir:
        cfg.log_dir = Path(log_dir)

    log_to_file = os.getenv("FUSION_LOG_TO_FILE")
    if log_to_file:
        cfg.log_to_file = _env_flag(log_to_file)

    return cfg
