"""
Template Deployer client
Deploys contracts from prebuilt templates on Cronos
"""

import asyncio
import logging
from typing import Any, Dict, Mapping, Optional

from web3 import Web3

from .binder import ParameterBinder, uses_initializer
from .config import DeployerConfig
from .constants import ChainId, ContractCategory
from .events import DeploymentEvents
from .exceptions import (
    PersistenceError,
    ProviderUnavailableError,
    SignerMismatchError,
    TemplateNotFoundError,
    UnsupportedNetworkError,
    WalletNotConnectedError
)
from .executor import DeploymentExecutor
from .gas import GasPlanner
from .models import ContractTemplate, DeploymentOutcome
from .pools import PoolInitializer, find_pool_registration, parse_pool_specs
from .records import RecordBuilder
from .services import (
    CompilerService,
    HttpCompilerService,
    RecordStore,
    TemplateStore,
    ensure_compiled
)
from .wallet import WalletAccount, WalletProvider, Web3Wallet

logger = logging.getLogger(__name__)


class TemplateDeployer:
    """
    Main entry point for template deployments

    Example:
        deployer = TemplateDeployer(
            templates=JsonTemplateStore("templates/"),
            wallet=Web3Wallet(rpc_url="https://evm-t3.cronos.org", private_key="0x..."),
            records=JsonRecordStore("records/")
        )

        outcome = await deployer.deploy_from_template(
            "token-vault",
            {"stakeToken": "0x...", "rewardToken": "0x...", "rewardPerSecond": "0.1"}
        )
    """

    def __init__(
        self,
        templates: TemplateStore,
        wallet: Optional[WalletProvider],
        records: Optional[RecordStore] = None,
        compiler: Optional[CompilerService] = None,
        config: Optional[DeployerConfig] = None,
        events: Optional[DeploymentEvents] = None
    ):
        """
        Initialize the deployer

        Args:
            templates: Template store
            wallet: Connected wallet/provider
            records: Store receiving deployment records (optional)
            compiler: Compiler for templates shipped without bytecode (optional)
            config: Deployer settings
            events: Event channel; subscribe to it to follow progress
        """
        self.templates = templates
        self.wallet = wallet
        self.records = records
        self.config = config or DeployerConfig()
        self.compiler = compiler
        if self.compiler is None and self.config.compiler_url:
            self.compiler = HttpCompilerService(self.config.compiler_url)
        self.events = events or DeploymentEvents()

        planner = GasPlanner(self.config.gas_buffer_percent, events=self.events)
        self.binder = ParameterBinder(
            strict=self.config.strict_binding,
            decimals=self.config.token_decimals
        )
        self.executor = DeploymentExecutor(planner, events=self.events)
        self.pool_initializer = PoolInitializer(planner, events=self.events)
        self.record_builder = RecordBuilder()

    @classmethod
    def from_rpc(
        cls,
        rpc_url: Optional[str],
        private_key: str,
        templates: TemplateStore,
        records: Optional[RecordStore] = None,
        config: Optional[DeployerConfig] = None,
        **kwargs
    ) -> "TemplateDeployer":
        """Build a deployer signing locally through a JSON-RPC endpoint

        rpc_url falls back to config.rpc_url (DEPLOYER_RPC_URL) when not given.
        """
        config = config or DeployerConfig()
        wallet = Web3Wallet(
            rpc_url=rpc_url or config.rpc_url,
            private_key=private_key,
            receipt_timeout=config.receipt_timeout
        )
        return cls(templates, wallet, records=records, config=config, **kwargs)

    # ==================== Deployment ====================

    async def deploy_from_template(
        self,
        template_id: str,
        parameters: Optional[Mapping[str, Any]] = None
    ) -> DeploymentOutcome:
        """
        Deploy a contract from a template

        Args:
            template_id: Template identifier
            parameters: Configuration values entered by the operator

        Returns:
            DeploymentOutcome; failures are reported, never raised
        """
        parameters = dict(parameters) if isinstance(parameters, Mapping) else {}
        self.events.info("deployment.started", template_id=template_id)

        try:
            template = await self._load_template(template_id)
            account = await self._connected_account()
            args = self.binder.bind(template.abi, parameters)
        except Exception as exc:
            self.events.error(
                "deployment.rejected", error=str(exc), error_type=exc.__class__.__name__
            )
            return DeploymentOutcome.failure(exc)

        if uses_initializer(template.abi):
            self.events.info("binder.initializer", template_id=template.id)
        self.events.debug("binder.bound", arguments=len(args))

        if self.config.network_settle_delay > 0:
            await asyncio.sleep(self.config.network_settle_delay)

        outcome = await self.executor.execute(
            self.wallet, template.abi, template.bytecode, args, account.address
        )
        if not outcome.success:
            return outcome

        if self._registers_pools(template):
            specs = parse_pool_specs(parameters)
            if specs:
                gas_price = outcome.gas_plan.gas_price if outcome.gas_plan else None
                outcome.pool_registrations = await self.pool_initializer.register(
                    self.wallet, outcome.contract_address, template.abi, specs, gas_price
                )

        outcome.record_id = await self._save_record(template, outcome, account, parameters)

        self.events.info(
            "deployment.completed",
            contract_address=outcome.contract_address,
            transaction_hash=outcome.transaction_hash
        )
        return outcome

    async def _load_template(self, template_id: str) -> ContractTemplate:
        template = await self.templates.get_template(template_id)
        if template is None:
            raise TemplateNotFoundError(template_id)
        return await ensure_compiled(template, self.compiler)

    async def _connected_account(self) -> WalletAccount:
        """Validate wallet, network and signer before anything is sent"""
        if self.wallet is None:
            raise ProviderUnavailableError()

        account = await self.wallet.get_account()
        if not account or not account.address:
            raise WalletNotConnectedError()

        chain_id = await self.wallet.get_chain_id()
        supported = tuple(self.config.supported_chain_ids)
        if chain_id not in supported:
            raise UnsupportedNetworkError(chain_id, supported)

        signer = await self.wallet.get_signer_address()
        if (signer or "").lower() != account.address.lower():
            raise SignerMismatchError(signer, account.address)

        self.events.info(
            "network.validated",
            chain_id=chain_id,
            network=ChainId.get_name(chain_id),
            address=account.address
        )
        return WalletAccount(address=account.address, chain_id=chain_id)

    def _registers_pools(self, template: ContractTemplate) -> bool:
        return (
            ContractCategory.normalize(template.category) == ContractCategory.VAULT
            and find_pool_registration(template.abi) is not None
        )

    async def _save_record(
        self,
        template: ContractTemplate,
        outcome: DeploymentOutcome,
        account: WalletAccount,
        parameters: Dict[str, Any]
    ) -> Optional[str]:
        if self.records is None:
            return None

        try:
            record = self.record_builder.build(
                template,
                outcome.contract_address,
                outcome.transaction_hash,
                account.chain_id,
                account.address,
                parameters
            )
            record_id = await self.record_builder.persist(self.records, record)
        except PersistenceError as exc:
            logger.error("Error saving deployed contract record: %s", exc)
            self.events.error("record.failed", error=str(exc))
            return None
        except Exception as exc:
            logger.exception("Unexpected error building deployment record")
            self.events.error("record.failed", error=str(exc))
            return None

        self.events.info("record.saved", record_id=record_id, collection=record.collection)
        return record_id

    # ==================== Utility Functions ====================

    async def get_network_info(self) -> Dict[str, Any]:
        """
        Get network information

        Returns:
            Dictionary with chain_id, network name, supported flag and gas price
        """
        if self.wallet is None:
            raise ProviderUnavailableError()

        chain_id = await self.wallet.get_chain_id()
        gas_price = await self.wallet.get_gas_price()
        return {
            "chain_id": chain_id,
            "network": ChainId.get_name(chain_id),
            "supported": chain_id in tuple(self.config.supported_chain_ids),
            "gas_price_gwei": Web3.from_wei(gas_price, "gwei")
        }
