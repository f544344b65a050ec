"""
Deployer configuration
"""

import logging
import os
import sys
from dataclasses import dataclass, field
from typing import Optional, Tuple

from dotenv import load_dotenv

from .constants import ChainId, DEFAULT_GAS_BUFFER_PERCENT, DEFAULT_TOKEN_DECIMALS

LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


@dataclass
class DeployerConfig:
    """Settings shared by every deployment a TemplateDeployer performs"""
    supported_chain_ids: Tuple[int, ...] = field(
        default_factory=lambda: tuple(ChainId.all())
    )
    gas_buffer_percent: int = DEFAULT_GAS_BUFFER_PERCENT
    token_decimals: int = DEFAULT_TOKEN_DECIMALS
    strict_binding: bool = False
    network_settle_delay: float = 2.0
    receipt_timeout: int = 120
    compiler_url: Optional[str] = None
    rpc_url: Optional[str] = None

    @classmethod
    def from_env(cls, dotenv_path: Optional[str] = None) -> "DeployerConfig":
        """
        Build a configuration from DEPLOYER_* environment variables

        Args:
            dotenv_path: Optional .env file to load first

        Returns:
            DeployerConfig
        """
        load_dotenv(dotenv_path)
        config = cls()

        chains = os.getenv("DEPLOYER_SUPPORTED_CHAIN_IDS")
        if chains:
            config.supported_chain_ids = tuple(
                int(c) for c in chains.split(",") if c.strip()
            )

        buffer = os.getenv("DEPLOYER_GAS_BUFFER_PERCENT")
        if buffer:
            config.gas_buffer_percent = int(buffer)

        decimals = os.getenv("DEPLOYER_TOKEN_DECIMALS")
        if decimals:
            config.token_decimals = int(decimals)

        strict = os.getenv("DEPLOYER_STRICT_BINDING")
        if strict:
            config.strict_binding = strict.strip().lower() in ("1", "true", "yes", "on")

        delay = os.getenv("DEPLOYER_NETWORK_SETTLE_DELAY")
        if delay:
            config.network_settle_delay = float(delay)

        timeout = os.getenv("DEPLOYER_RECEIPT_TIMEOUT")
        if timeout:
            config.receipt_timeout = int(timeout)

        config.compiler_url = os.getenv("DEPLOYER_COMPILER_URL") or config.compiler_url
        config.rpc_url = os.getenv("DEPLOYER_RPC_URL") or config.rpc_url
        return config


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """
    Attach a console handler to the package logger

    The library itself never installs handlers; applications call this once.
    """
    logger = logging.getLogger("template_deployer")
    logger.setLevel(level)

    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    logger.addHandler(handler)
    return logger
