"""
Deployment classification and record building
"""

import logging
import time
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Mapping, Optional

from .constants import (
    ContractCategory,
    DEFAULT_RECORDS_COLLECTION,
    SECONDS_PER_DAY,
    StakingKind
)
from .exceptions import PersistenceError
from .models import ContractTemplate, DeploymentRecord

logger = logging.getLogger(__name__)

DEFAULT_LOCK_DAYS = 30


@dataclass
class Classification:
    """Category-shaped staking metadata for a deployment"""
    kind: str
    enabled_for_staking: bool
    staking_metadata: Dict[str, Any] = field(default_factory=dict)


def staking_kind(template: ContractTemplate) -> str:
    """Pick the record shape from the template category and id"""
    category = ContractCategory.normalize(template.category)
    template_id = (template.id or "").lower()

    if category == ContractCategory.LP_STAKING:
        return StakingKind.LP_STAKING
    if category == ContractCategory.VAULT:
        return StakingKind.TOKEN_VAULT
    if category == ContractCategory.STAKING:
        if "smartchef" in template_id:
            return StakingKind.SMARTCHEF
        if "nft" in template_id:
            return StakingKind.NFT_STAKING
        return StakingKind.TOKEN_STAKING
    if category == ContractCategory.NFT and "staking" in template_id:
        return StakingKind.NFT_STAKING
    return StakingKind.NONE


def _lock_period(days: Any, apr: Any, **extra) -> Dict[str, Any]:
    try:
        days = int(days or DEFAULT_LOCK_DAYS)
    except (TypeError, ValueError):
        days = DEFAULT_LOCK_DAYS
    period = {"period": f"{days} Days", "days": days, "apr": str(apr)}
    period.update(extra)
    return period


class DeploymentClassifier:
    """Builds the stakingMetadata document for a deployed contract"""

    def __init__(self, clock: Optional[Callable[[], float]] = None):
        self.clock = clock or time.time

    def classify(
        self,
        template: ContractTemplate,
        contract_address: str,
        parameters: Mapping[str, Any]
    ) -> Classification:
        kind = staking_kind(template)
        params = parameters or {}

        builders = {
            StakingKind.TOKEN_STAKING: self._token_staking,
            StakingKind.NFT_STAKING: self._nft_staking,
            StakingKind.LP_STAKING: self._lp_staking,
            StakingKind.TOKEN_VAULT: self._token_vault,
            StakingKind.SMARTCHEF: self._smartchef,
        }
        builder = builders.get(kind)
        if builder is None:
            return Classification(kind=StakingKind.NONE, enabled_for_staking=False)

        return Classification(
            kind=kind,
            enabled_for_staking=True,
            staking_metadata=builder(contract_address, params)
        )

    def _token_staking(self, contract_address: str, params: Mapping[str, Any]) -> Dict[str, Any]:
        apr = params.get("apr") or "10"
        return {
            "name": params.get("contractName") or "Token Staking Contract",
            "description": params.get("description") or "Stake tokens and earn rewards",
            "tokenAddress": params.get("tokenAddress") or "",
            "tokenSymbol": params.get("tokenSymbol") or "TOKEN",
            "apr": apr,
            "minStake": params.get("minStake") or "100",
            "lockPeriods": [_lock_period(params.get("lockupPeriod"), apr)],
            "logoUrl": params.get("logoUrl") or "",
            "socialLinks": params.get("socialLinks") or {},
        }

    def _nft_staking(self, contract_address: str, params: Mapping[str, Any]) -> Dict[str, Any]:
        collections = params.get("collections") or []
        first = collections[0] if isinstance(collections, list) and collections else {}
        token_address = first.get("address", "") if isinstance(first, dict) else str(first)

        return {
            "name": params.get("contractName") or "NFT Staking Contract",
            "description": params.get("description") or "Stake NFTs and earn rewards",
            "contractAddress": contract_address,
            "tokenAddress": token_address,
            "rewardTokenAddress": params.get("rewardTokenAddress") or "",
            "rewardRate": params.get("rewardRate") or "10",
            "lockPeriods": [_lock_period(DEFAULT_LOCK_DAYS, "10")],
        }

    def _lp_staking(self, contract_address: str, params: Mapping[str, Any]) -> Dict[str, Any]:
        return {
            "name": params.get("contractName") or "LP Staking Contract",
            "description": params.get("description") or "Stake LP tokens and earn rewards",
            "contractAddress": contract_address,
            "tokenAddress": params.get("lpTokenAddress") or "",
            "tokenSymbol": params.get("lpTokenSymbol") or "LP",
            "rewardTokenAddress": params.get("rewardTokenAddress") or params.get("rewardToken") or "",
            "rewardRate": params.get("rewardPerBlock") or "0.1",
            "apr": "25",
            "minStake": "0.1",
            "lockPeriods": [_lock_period(DEFAULT_LOCK_DAYS, "25")],
        }

    def _token_vault(self, contract_address: str, params: Mapping[str, Any]) -> Dict[str, Any]:
        now = int(self.clock())
        return {
            "name": params.get("contractName") or "Token Vault Staking",
            "description": params.get("description")
            or "Stake tokens with multiple lock periods and multipliers",
            "contractAddress": contract_address,
            "tokenAddress": params.get("stakeToken") or params.get("depositToken") or "",
            "tokenSymbol": params.get("tokenSymbol") or "TOKEN",
            "rewardTokenAddress": params.get("rewardToken") or "",
            "rewardRate": params.get("rewardPerSecond") or "0.1",
            "minStake": "0",
            "lockPeriods": params.get("lockPeriods")
            or [_lock_period(DEFAULT_LOCK_DAYS, "10", multiplier="100")],
            "rewardStartTimestamp": params.get("rewardStartTimestamp") or now,
            "rewardEndTimestamp": params.get("rewardEndTimestamp")
            or now + DEFAULT_LOCK_DAYS * SECONDS_PER_DAY,
            "contractType": "TokenVault",
        }

    def _smartchef(self, contract_address: str, params: Mapping[str, Any]) -> Dict[str, Any]:
        min_period = params.get("minStakingPeriod") or DEFAULT_LOCK_DAYS
        return {
            "name": params.get("contractName") or "SmartChef Staking",
            "description": params.get("description") or "Stake tokens with flexible parameters",
            "contractAddress": contract_address,
            "tokenAddress": params.get("stakedToken") or "",
            "tokenSymbol": params.get("tokenSymbol") or "TOKEN",
            "rewardTokenAddress": params.get("rewardToken") or "",
            "rewardRate": params.get("rewardPerBlock") or "0.1",
            "minStake": params.get("minStake") or "0",
            "lockPeriods": [_lock_period(min_period, "10")],
            "startBlock": params.get("startBlock") or 0,
            "bonusEndBlock": params.get("bonusEndBlock") or 0,
            "poolLimitPerUser": params.get("poolLimitPerUser") or "0",
            "minStakingPeriod": min_period,
            "useInitialLockPeriod": bool(params.get("useInitialLockPeriod")),
            "contractType": "Smartchef",
        }


def collection_for(classification: Classification) -> str:
    if classification.enabled_for_staking:
        return f"user-{classification.kind}-contracts"
    return DEFAULT_RECORDS_COLLECTION


class RecordBuilder:
    """Assembles the DeploymentRecord persisted after a successful deployment"""

    def __init__(
        self,
        classifier: Optional[DeploymentClassifier] = None,
        now: Optional[Callable[[], datetime]] = None
    ):
        self.classifier = classifier or DeploymentClassifier()
        self.now = now or (lambda: datetime.now(timezone.utc))

    def build(
        self,
        template: ContractTemplate,
        contract_address: str,
        transaction_hash: str,
        chain_id: int,
        owner_address: str,
        parameters: Mapping[str, Any]
    ) -> DeploymentRecord:
        classification = self.classifier.classify(template, contract_address, parameters)
        logger.debug("Classified %s as %r", template.id, classification.kind or "plain")

        return DeploymentRecord(
            contract_type=template.category,
            contract_address=contract_address,
            chain_id=int(chain_id),
            owner_address=(owner_address or "").lower(),
            parameters=dict(parameters or {}),
            transaction_hash=transaction_hash,
            created_at=self.now().isoformat(),
            enabled_for_staking=classification.enabled_for_staking,
            staking_metadata=classification.staking_metadata,
            template_id=template.id,
            name=template.name,
            collection=collection_for(classification)
        )

    async def persist(self, store, record: DeploymentRecord) -> str:
        """
        Save a record through the persistence collaborator

        Raises:
            PersistenceError: when the store rejects the record
        """
        try:
            record_id = await store.save(record)
        except Exception as exc:
            raise PersistenceError(f"Failed to save deployment record: {exc}") from exc

        if not record_id:
            raise PersistenceError("Failed to save deployment record: store returned no id")
        return record_id
