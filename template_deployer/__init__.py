"""
Template Deployer
Deploy smart contracts from prebuilt templates on Cronos

Usage:
    from template_deployer import TemplateDeployer, JsonTemplateStore, Web3Wallet

    deployer = TemplateDeployer(
        templates=JsonTemplateStore("templates/"),
        wallet=Web3Wallet(rpc_url="https://evm.cronos.org", private_key="YOUR_PRIVATE_KEY")
    )

    outcome = await deployer.deploy_from_template("erc20-token", {"name": "Troll", "symbol": "TROLL"})
"""

from .binder import ParameterBinder
from .client import TemplateDeployer
from .config import DeployerConfig, setup_logging
from .constants import ChainId, ContractCategory, PoolStatus
from .events import DeploymentEvent, DeploymentEvents
from .exceptions import (
    DeployerError,
    TemplateNotFoundError,
    CompilationError,
    UnsupportedNetworkError,
    BindingError,
    GasPlanningError,
    InsufficientFundsError,
    NetworkChangedError,
    TransactionFailedError
)
from .models import (
    ContractTemplate,
    DeploymentOutcome,
    DeploymentRecord,
    PoolRegistrationResult,
    SubPoolSpec
)
from .services import (
    HttpCompilerService,
    InMemoryRecordStore,
    InMemoryTemplateStore,
    JsonRecordStore,
    JsonTemplateStore,
    SolcCompilerService
)
from .wallet import Web3Wallet

__version__ = "1.0.0"
__all__ = [
    "TemplateDeployer",
    "ParameterBinder",
    "DeployerConfig",
    "setup_logging",
    "ChainId",
    "ContractCategory",
    "PoolStatus",
    "DeploymentEvent",
    "DeploymentEvents",
    "DeployerError",
    "TemplateNotFoundError",
    "CompilationError",
    "UnsupportedNetworkError",
    "BindingError",
    "GasPlanningError",
    "InsufficientFundsError",
    "NetworkChangedError",
    "TransactionFailedError",
    "ContractTemplate",
    "DeploymentOutcome",
    "DeploymentRecord",
    "PoolRegistrationResult",
    "SubPoolSpec",
    "HttpCompilerService",
    "InMemoryRecordStore",
    "InMemoryTemplateStore",
    "JsonRecordStore",
    "JsonTemplateStore",
    "SolcCompilerService",
    "Web3Wallet"
]
