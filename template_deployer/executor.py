"""
Deployment executor

Submits the contract-creation transaction. The planned path uses the gas
planner's limit and price; when planning is infeasible the transaction is
sent without gas settings so the wallet applies its own defaults.
"""

import logging
from typing import Any, Dict, List, Optional

from .binder import find_initializer, uses_initializer
from .events import DeploymentEvents
from .exceptions import GasPlanningError, NetworkChangedError
from .gas import GasPlan, GasPlanner
from .models import DeploymentOutcome
from .wallet import PendingTransaction, WalletProvider

logger = logging.getLogger(__name__)

NETWORK_ERROR_CODE = "NETWORK_ERROR"


def is_network_change(exc: BaseException) -> bool:
    """True for errors raised because the wallet switched networks mid-flight"""
    if isinstance(exc, NetworkChangedError):
        return True
    if getattr(exc, "code", None) == NETWORK_ERROR_CODE:
        return True
    return "underlying network changed" in str(exc).lower()


class DeploymentExecutor:
    """
    Deploys a bound contract and waits for confirmation

    Never raises: every failure is returned as an unsuccessful
    DeploymentOutcome.
    """

    def __init__(
        self,
        planner: Optional[GasPlanner] = None,
        events: Optional[DeploymentEvents] = None
    ):
        self.events = events or DeploymentEvents()
        self.planner = planner or GasPlanner(events=self.events)

    async def execute(
        self,
        wallet: WalletProvider,
        abi: List[Dict[str, Any]],
        bytecode: str,
        args: List[Any],
        funder: str
    ) -> DeploymentOutcome:
        """
        Deploy a contract

        Args:
            wallet: Wallet substrate
            abi: Contract ABI
            bytecode: Creation bytecode
            args: Bound arguments (initialize() arguments for proxy-style templates)
            funder: Address paying for the deployment

        Returns:
            DeploymentOutcome
        """
        initializer = uses_initializer(abi)
        constructor_args = [] if initializer else list(args)
        pending: Optional[PendingTransaction] = None

        try:
            try:
                plan = await self.planner.plan(wallet, abi, bytecode, constructor_args, funder)
            except GasPlanningError as exc:
                self.events.warning("gas.fallback", reason=str(exc))
                plan = None

            if plan is not None:
                pending = await wallet.deploy(
                    abi, bytecode, constructor_args, plan.to_gas_options()
                )
            else:
                pending = await wallet.deploy(abi, bytecode, constructor_args)

            self.events.info("deploy.submitted", transaction_hash=pending.transaction_hash)
            receipt = await pending.wait()
        except Exception as exc:
            return self._failure(
                exc, transaction_hash=pending.transaction_hash if pending else None
            )

        address = receipt.contract_address
        self.events.info(
            "deploy.confirmed",
            contract_address=address,
            transaction_hash=pending.transaction_hash,
            block_number=receipt.block_number
        )

        outcome = DeploymentOutcome(
            success=True,
            contract_address=address,
            transaction_hash=pending.transaction_hash,
            gas_plan=plan
        )

        if initializer:
            try:
                await self._initialize(wallet, address, abi, list(args), plan)
            except Exception as exc:
                # The contract exists but is unusable until initialize() succeeds
                failed = self._failure(exc)
                failed.contract_address = address
                failed.transaction_hash = pending.transaction_hash
                failed.gas_plan = plan
                return failed

        return outcome

    async def _initialize(
        self,
        wallet: WalletProvider,
        address: str,
        abi: List[Dict[str, Any]],
        args: List[Any],
        plan: Optional[GasPlan]
    ) -> None:
        entry = find_initializer(abi)
        self.events.info("initialize.started", contract_address=address, inputs=len(entry["inputs"]))

        gas_opts = None
        if plan is not None:
            estimate = await wallet.estimate_call_gas(address, abi, "initialize", args)
            gas_opts = {"gas": self.planner.buffer(estimate), "gasPrice": plan.gas_price}

        pending: PendingTransaction = await wallet.call(address, abi, "initialize", args, gas_opts)
        await pending.wait()
        self.events.info("initialize.confirmed", transaction_hash=pending.transaction_hash)

    def _failure(self, exc: Exception, transaction_hash: Optional[str] = None) -> DeploymentOutcome:
        if is_network_change(exc):
            network_error = exc if isinstance(exc, NetworkChangedError) else NetworkChangedError()
            self.events.error("deploy.network_changed", error=str(exc))
            return DeploymentOutcome.failure(network_error, transaction_hash=transaction_hash)

        logger.debug("Deployment failed", exc_info=exc)
        self.events.error("deploy.failed", error=str(exc), error_type=exc.__class__.__name__)
        return DeploymentOutcome.failure(exc, transaction_hash=transaction_hash)
