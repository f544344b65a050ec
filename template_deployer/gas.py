"""
Gas planning for contract creation
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from web3 import Web3

from .constants import DEFAULT_GAS_BUFFER_PERCENT
from .events import DeploymentEvents
from .exceptions import GasPlanningError, InsufficientFundsError
from .wallet import WalletProvider

logger = logging.getLogger(__name__)


@dataclass
class GasPlan:
    """Gas settings for a single transaction"""
    gas_limit: int
    gas_price: int
    estimated_cost: int

    def to_gas_options(self) -> Dict[str, int]:
        return {"gas": self.gas_limit, "gasPrice": self.gas_price}


class GasPlanner:
    """
    Estimates gas, applies the safety buffer and checks the funder's balance

    Raises GasPlanningError when the node cannot produce a plan (the caller
    then deploys without explicit gas settings) and InsufficientFundsError
    when a plan exists but the funder cannot pay for it.
    """

    def __init__(
        self,
        buffer_percent: int = DEFAULT_GAS_BUFFER_PERCENT,
        events: Optional[DeploymentEvents] = None
    ):
        self.buffer_percent = buffer_percent
        self.events = events or DeploymentEvents()

    def buffer(self, estimate: int) -> int:
        """Apply the safety buffer, rounding down to a whole gas unit"""
        return int(estimate) * self.buffer_percent // 100

    async def plan(
        self,
        wallet: WalletProvider,
        abi: List[Dict[str, Any]],
        bytecode: str,
        args: List[Any],
        funder: str
    ) -> GasPlan:
        """
        Plan gas for a contract creation

        Args:
            wallet: Wallet substrate
            abi: Contract ABI
            bytecode: Creation bytecode
            args: Bound constructor arguments
            funder: Address paying for the deployment

        Returns:
            GasPlan
        """
        try:
            estimate = await wallet.estimate_deploy_gas(abi, bytecode, args)
            gas_limit = self.buffer(estimate)
            gas_price = await wallet.get_gas_price()
            estimated_cost = gas_limit * gas_price
            balance = await wallet.get_balance(funder)
        except Exception as exc:
            raise GasPlanningError(f"Gas planning failed: {exc}") from exc

        self.events.info(
            "gas.planned",
            estimate=estimate,
            gas_limit=gas_limit,
            gas_price_gwei=str(Web3.from_wei(gas_price, "gwei")),
            estimated_cost_cro=str(Web3.from_wei(estimated_cost, "ether"))
        )

        if balance < estimated_cost:
            raise InsufficientFundsError(required=estimated_cost, available=balance)

        return GasPlan(gas_limit=gas_limit, gas_price=gas_price, estimated_cost=estimated_cost)
