"""
Template Deployer Exceptions
"""

from typing import Optional

from web3 import Web3


class DeployerError(Exception):
    """Base exception for the template deployer"""
    pass


class TemplateNotFoundError(DeployerError):
    """Raised when the template store has no such template"""

    def __init__(self, template_id: str):
        self.template_id = template_id
        super().__init__(f"Template with ID {template_id} not found")


class CompilationError(DeployerError):
    """Raised when a template cannot be compiled"""
    pass


class WalletNotConnectedError(DeployerError):
    """Raised when no account is connected"""

    def __init__(self):
        super().__init__("Wallet not connected")


class ProviderUnavailableError(DeployerError):
    """Raised when no provider is available"""

    def __init__(self):
        super().__init__(
            "Provider not available. Please make sure your wallet is connected."
        )


class UnsupportedNetworkError(DeployerError):
    """Raised when the wallet is connected to an unsupported chain"""

    def __init__(self, chain_id: int, supported: tuple):
        self.chain_id = chain_id
        self.supported = supported
        supported_text = ", ".join(str(c) for c in supported)
        super().__init__(
            f"Unsupported network. Please switch to a Cronos network "
            f"(chain ID {supported_text}). Current chain ID: {chain_id}"
        )


class SignerMismatchError(DeployerError):
    """Raised when the signer does not belong to the connected account"""

    def __init__(self, signer: str, account: str):
        self.signer = signer
        self.account = account
        super().__init__("Signer address does not match connected account")


class BindingError(DeployerError):
    """Raised in strict mode when a configuration value cannot be bound"""

    def __init__(self, parameter: str, abi_type: str, value):
        self.parameter = parameter
        self.abi_type = abi_type
        self.value = value
        super().__init__(
            f"Invalid value for parameter '{parameter}' ({abi_type}): {value!r}"
        )


class GasPlanningError(DeployerError):
    """Raised when gas cannot be planned; deployment falls back to wallet defaults"""
    pass


class InsufficientFundsError(DeployerError):
    """Raised when the funding account cannot cover the estimated cost"""

    def __init__(self, required: int, available: int):
        self.required = required
        self.available = available
        self.shortfall = required - available
        super().__init__(
            f"Insufficient balance. Need at least {_format_cro(required)} CRO, "
            f"but have {_format_cro(available)} CRO"
        )


class NetworkChangedError(DeployerError):
    """Raised when the wallet switches network while a transaction is pending"""

    def __init__(self, message: Optional[str] = None):
        super().__init__(
            message
            or "Network changed during deployment. Reconnect your wallet to a "
            "Cronos network and retry."
        )


class TransactionFailedError(DeployerError):
    """Raised when a transaction fails"""

    def __init__(self, message: str, tx_hash: str = None):
        self.tx_hash = tx_hash
        super().__init__(message)


class PoolRegistrationError(DeployerError):
    """Raised when a vault sub-pool cannot be registered"""

    def __init__(self, index: int, message: str):
        self.index = index
        super().__init__(f"Pool {index} registration failed: {message}")


class PersistenceError(DeployerError):
    """Raised when a deployment record cannot be saved"""
    pass


def _format_cro(wei: int) -> str:
    return str(Web3.from_wei(wei, "ether"))
