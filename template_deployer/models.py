"""
Template Deployer data models
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .constants import ContractCategory, MIN_BYTECODE_LENGTH, NEEDS_COMPILATION, PoolStatus


@dataclass(frozen=True)
class ContractTemplate:
    """Prebuilt contract a deployment starts from"""
    id: str
    category: str
    abi: List[Dict[str, Any]]
    bytecode: str
    version: str = "1.0.0"
    name: str = ""
    description: str = ""
    source_code: str = ""
    contract_name: Optional[str] = None
    enabled: bool = True

    @property
    def needs_compilation(self) -> bool:
        return (
            not self.bytecode
            or self.bytecode == NEEDS_COMPILATION
            or len(self.bytecode) < MIN_BYTECODE_LENGTH
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContractTemplate":
        """Build a template from a stored (camelCase) document"""
        return cls(
            id=data["id"],
            category=ContractCategory.normalize(data.get("category", "")),
            abi=list(data.get("abi") or []),
            bytecode=data.get("bytecode") or "",
            version=str(data.get("version") or "1.0.0"),
            name=data.get("name") or "",
            description=data.get("description") or "",
            source_code=data.get("sourceCode") or data.get("source_code") or "",
            contract_name=data.get("contractName") or data.get("contract_name"),
            enabled=bool(data.get("enabled", True))
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "category": self.category,
            "version": self.version,
            "sourceCode": self.source_code,
            "contractName": self.contract_name,
            "bytecode": self.bytecode,
            "abi": self.abi,
            "enabled": self.enabled,
        }


@dataclass
class CompiledContract:
    """Compiler output"""
    abi: List[Dict[str, Any]]
    bytecode: str


@dataclass(frozen=True)
class SubPoolSpec:
    """Lock-period tier registered on a vault after deployment"""
    multiplier: int
    lock_period_seconds: int

    @classmethod
    def from_config(cls, data: Any) -> Optional["SubPoolSpec"]:
        """
        Parse one stakingPools entry

        Returns None when the multiplier or lock period is missing or zero.
        """
        if not isinstance(data, dict):
            return None

        lock_period = data.get("lockPeriod", data.get("lockPeriodSeconds"))
        try:
            multiplier = int(data.get("multiplier") or 0)
            lock_period = int(lock_period or 0)
        except (TypeError, ValueError):
            return None

        if multiplier <= 0 or lock_period <= 0:
            return None
        return cls(multiplier=multiplier, lock_period_seconds=lock_period)


@dataclass
class PoolRegistrationResult:
    """Outcome of one sub-pool registration"""
    index: int
    spec: SubPoolSpec
    status: str
    transaction_hash: Optional[str] = None
    error: Optional[str] = None

    @property
    def registered(self) -> bool:
        return self.status == PoolStatus.REGISTERED

    def to_dict(self) -> Dict[str, Any]:
        return {
            "index": self.index,
            "multiplier": self.spec.multiplier,
            "lockPeriod": self.spec.lock_period_seconds,
            "status": self.status,
            "transactionHash": self.transaction_hash,
            "error": self.error,
        }


@dataclass
class DeploymentOutcome:
    """Result of one deployment attempt"""
    success: bool
    contract_address: Optional[str] = None
    transaction_hash: Optional[str] = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    gas_plan: Optional[Any] = None
    pool_registrations: List[PoolRegistrationResult] = field(default_factory=list)
    record_id: Optional[str] = None

    @classmethod
    def failure(cls, exc: BaseException, **kwargs) -> "DeploymentOutcome":
        return cls(
            success=False,
            error=str(exc) or exc.__class__.__name__,
            error_type=exc.__class__.__name__,
            **kwargs
        )

    def to_dict(self) -> Dict[str, Any]:
        result = {"success": self.success}
        if self.contract_address:
            result["contractAddress"] = self.contract_address
        if self.transaction_hash:
            result["transactionHash"] = self.transaction_hash
        if self.error:
            result["error"] = self.error
        if self.pool_registrations:
            result["poolRegistrations"] = [p.to_dict() for p in self.pool_registrations]
        return result


@dataclass
class DeploymentRecord:
    """Bookkeeping document saved after a successful deployment"""
    contract_type: str
    contract_address: str
    chain_id: int
    owner_address: str
    parameters: Dict[str, Any]
    transaction_hash: str
    created_at: str
    enabled_for_staking: bool
    staking_metadata: Dict[str, Any] = field(default_factory=dict)
    template_id: Optional[str] = None
    name: str = ""
    collection: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return {
            "templateId": self.template_id,
            "name": self.name,
            "contractType": self.contract_type,
            "contractAddress": self.contract_address,
            "chainId": self.chain_id,
            "ownerAddress": self.owner_address,
            "parameters": self.parameters,
            "transactionHash": self.transaction_hash,
            "createdAt": self.created_at,
            "enabledForStaking": self.enabled_for_staking,
            "stakingMetadata": self.staking_metadata,
        }
