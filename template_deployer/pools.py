"""
Vault sub-pool registration

Vault templates expose add(_multiplier, _lockPeriod). After deployment each
configured pool is registered with its own transaction, strictly in order,
because pool ids are assigned by registration order.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional

from .coercion import classify_input, AbiInputKind, strip_parameter_name
from .constants import PoolStatus
from .events import DeploymentEvents
from .exceptions import PoolRegistrationError
from .gas import GasPlanner
from .models import PoolRegistrationResult, SubPoolSpec
from .wallet import WalletProvider

logger = logging.getLogger(__name__)

REGISTRATION_METHOD = "add"
REGISTRATION_INPUTS = ("multiplier", "lockperiod")


def find_pool_registration(abi: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Locate add(uint _multiplier, uint _lockPeriod), if the ABI has one"""
    for entry in abi or []:
        if entry.get("type") != "function" or entry.get("name") != REGISTRATION_METHOD:
            continue

        inputs = entry.get("inputs") or []
        if len(inputs) != 2:
            continue

        names = tuple(strip_parameter_name(i.get("name", "")).lower() for i in inputs)
        kinds = [classify_input(i.get("type", "")) for i in inputs]
        if names == REGISTRATION_INPUTS and all(k is AbiInputKind.UINT_SCALAR for k in kinds):
            return entry
    return None


def parse_pool_specs(parameters: Mapping[str, Any]) -> List[SubPoolSpec]:
    """Read stakingPools from the configuration, skipping incomplete entries"""
    raw = parameters.get("stakingPools") if isinstance(parameters, Mapping) else None
    if not isinstance(raw, (list, tuple)):
        return []

    specs = []
    for entry in raw:
        spec = SubPoolSpec.from_config(entry)
        if spec is None:
            logger.warning("Skipping incomplete staking pool entry: %r", entry)
            continue
        specs.append(spec)
    return specs


class PoolInitializer:
    """
    Registers vault sub-pools one transaction at a time

    Stops at the first failure: earlier pools stay registered, later ones are
    reported as skipped. Registration failures never fail the deployment.
    """

    def __init__(
        self,
        planner: Optional[GasPlanner] = None,
        events: Optional[DeploymentEvents] = None
    ):
        self.events = events or DeploymentEvents()
        self.planner = planner or GasPlanner(events=self.events)

    async def register(
        self,
        wallet: WalletProvider,
        contract_address: str,
        abi: List[Dict[str, Any]],
        specs: Iterable[SubPoolSpec],
        gas_price: Optional[int] = None
    ) -> List[PoolRegistrationResult]:
        """
        Register sub-pools on a deployed vault

        Args:
            wallet: Wallet substrate (same signer as the deployment)
            contract_address: Confirmed vault address
            abi: Vault ABI
            specs: Pools in registration order
            gas_price: Gas price of the deployment plan, if one was used

        Returns:
            One PoolRegistrationResult per spec
        """
        specs = list(specs)
        results: List[PoolRegistrationResult] = []
        failed = False

        for index, spec in enumerate(specs):
            if failed:
                results.append(
                    PoolRegistrationResult(index=index, spec=spec, status=PoolStatus.SKIPPED)
                )
                continue

            try:
                tx_hash = await self._register_one(
                    wallet, contract_address, abi, index, spec, gas_price
                )
            except Exception as exc:
                failed = True
                error = PoolRegistrationError(index, str(exc))
                self.events.error(
                    "pool.failed",
                    index=index,
                    multiplier=spec.multiplier,
                    lock_period=spec.lock_period_seconds,
                    error=str(exc)
                )
                results.append(
                    PoolRegistrationResult(
                        index=index, spec=spec, status=PoolStatus.FAILED, error=str(error)
                    )
                )
                continue

            results.append(
                PoolRegistrationResult(
                    index=index,
                    spec=spec,
                    status=PoolStatus.REGISTERED,
                    transaction_hash=tx_hash
                )
            )

        return results

    async def _register_one(
        self,
        wallet: WalletProvider,
        contract_address: str,
        abi: List[Dict[str, Any]],
        index: int,
        spec: SubPoolSpec,
        gas_price: Optional[int]
    ) -> str:
        args = [spec.multiplier, spec.lock_period_seconds]

        estimate = await wallet.estimate_call_gas(contract_address, abi, REGISTRATION_METHOD, args)
        gas_opts = {"gas": self.planner.buffer(estimate)}
        if gas_price is not None:
            gas_opts["gasPrice"] = gas_price

        pending = await wallet.call(contract_address, abi, REGISTRATION_METHOD, args, gas_opts)
        await pending.wait()

        self.events.info(
            "pool.registered",
            index=index,
            multiplier=spec.multiplier,
            lock_period=spec.lock_period_seconds,
            transaction_hash=pending.transaction_hash
        )
        return pending.transaction_hash
