"""Shared pytest fixtures for template-deployer tests."""

from typing import Any, Dict, List, Optional

import pytest

from template_deployer.config import DeployerConfig
from template_deployer.constants import ContractCategory
from template_deployer.events import DeploymentEvent, DeploymentEvents
from template_deployer.models import CompiledContract, ContractTemplate
from template_deployer.services import InMemoryRecordStore, InMemoryTemplateStore
from template_deployer.wallet import PendingTransaction, TransactionReceipt, WalletAccount

from abis import (
    ERC20_TOKEN_ABI,
    LP_STAKING_ABI,
    SMARTCHEF_ABI,
    TOKEN_STAKING_ABI,
    TOKEN_VAULT_ABI,
)

OWNER = "0x1111111111111111111111111111111111111111"
TOKEN = "0x2222222222222222222222222222222222222222"
REWARD_TOKEN = "0x3333333333333333333333333333333333333333"
CONTRACT = "0x4444444444444444444444444444444444444444"

BYTECODE = "0x" + "60" * 120
GWEI = 10**9
CRO = 10**18


class FakeWallet:
    """In-memory WalletProvider recording every call it receives"""

    def __init__(
        self,
        address: str = OWNER,
        chain_id: int = 338,
        balance: int = 100 * CRO,
        gas_estimate: int = 1_000_000,
        gas_price: int = 5000 * GWEI,
        contract_address: str = CONTRACT
    ):
        self.address = address
        self.signer = address
        self.chain_id = chain_id
        self.balance = balance
        self.gas_estimate = gas_estimate
        self.gas_price = gas_price
        self.contract_address = contract_address

        self.estimate_error: Optional[Exception] = None
        self.gas_price_error: Optional[Exception] = None
        self.balance_error: Optional[Exception] = None
        self.deploy_error: Optional[Exception] = None
        self.wait_error: Optional[Exception] = None
        # call number (0-based) -> exception raised when that call is submitted
        self.call_errors: Dict[int, Exception] = {}

        self.log: List[str] = []
        self.deployments: List[Dict[str, Any]] = []
        self.transactions: List[Dict[str, Any]] = []
        self._tx_counter = 0

    def _next_hash(self) -> str:
        self._tx_counter += 1
        return "0x" + f"{self._tx_counter:064x}"

    async def get_account(self) -> WalletAccount:
        self.log.append("get_account")
        return WalletAccount(address=self.address, chain_id=self.chain_id)

    async def get_chain_id(self) -> int:
        self.log.append("get_chain_id")
        return self.chain_id

    async def get_signer_address(self) -> str:
        self.log.append("get_signer_address")
        return self.signer

    async def estimate_deploy_gas(self, abi, bytecode, args) -> int:
        self.log.append("estimate_deploy_gas")
        if self.estimate_error:
            raise self.estimate_error
        return self.gas_estimate

    async def estimate_call_gas(self, address, abi, method, args) -> int:
        self.log.append("estimate_call_gas")
        return 100_000

    async def get_gas_price(self) -> int:
        self.log.append("get_gas_price")
        if self.gas_price_error:
            raise self.gas_price_error
        return self.gas_price

    async def get_balance(self, address) -> int:
        self.log.append("get_balance")
        if self.balance_error:
            raise self.balance_error
        return self.balance

    async def deploy(self, abi, bytecode, args, gas_opts=None) -> PendingTransaction:
        self.log.append("deploy")
        if self.deploy_error:
            raise self.deploy_error

        tx_hash = self._next_hash()
        self.deployments.append({"args": list(args), "gas_opts": gas_opts, "hash": tx_hash})

        async def wait() -> TransactionReceipt:
            if self.wait_error:
                raise self.wait_error
            return TransactionReceipt(
                transaction_hash=tx_hash,
                contract_address=self.contract_address,
                block_number=1,
                status=1
            )

        return PendingTransaction(transaction_hash=tx_hash, wait=wait)

    async def call(self, address, abi, method, args, gas_opts=None) -> PendingTransaction:
        self.log.append("call")
        number = len(self.transactions)
        self.transactions.append(
            {"address": address, "method": method, "args": list(args), "gas_opts": gas_opts}
        )
        if number in self.call_errors:
            raise self.call_errors[number]

        tx_hash = self._next_hash()

        async def wait() -> TransactionReceipt:
            return TransactionReceipt(
                transaction_hash=tx_hash, contract_address=None, block_number=2, status=1
            )

        return PendingTransaction(transaction_hash=tx_hash, wait=wait)

    @property
    def submitted(self) -> bool:
        return "deploy" in self.log or "call" in self.log


class EventRecorder:
    """Subscriber that keeps every event it receives"""

    def __init__(self):
        self.events: List[DeploymentEvent] = []

    def __call__(self, event: DeploymentEvent) -> None:
        self.events.append(event)

    @property
    def names(self) -> List[str]:
        return [event.name for event in self.events]


class FailingRecordStore:
    """Record store that always rejects"""

    def __init__(self):
        self.attempts = 0

    async def save(self, record) -> str:
        self.attempts += 1
        raise ConnectionError("firestore unavailable")


class FakeCompiler:
    """Compiler returning a fixed artifact"""

    def __init__(self, abi, bytecode: str = BYTECODE):
        self.abi = abi
        self.bytecode = bytecode
        self.requests = []

    async def compile(self, source_code, contract_name=None):
        self.requests.append((source_code, contract_name))
        return CompiledContract(abi=self.abi, bytecode=self.bytecode)


def make_template(template_id: str, category: str, abi, bytecode: str = BYTECODE, **kwargs):
    return ContractTemplate(id=template_id, category=category, abi=abi, bytecode=bytecode, **kwargs)


@pytest.fixture
def wallet() -> FakeWallet:
    return FakeWallet()


@pytest.fixture
def events() -> DeploymentEvents:
    return DeploymentEvents()


@pytest.fixture
def recorder(events: DeploymentEvents) -> EventRecorder:
    recorder = EventRecorder()
    events.subscribe(recorder)
    return recorder


@pytest.fixture
def config() -> DeployerConfig:
    return DeployerConfig(network_settle_delay=0)


@pytest.fixture
def templates() -> InMemoryTemplateStore:
    return InMemoryTemplateStore([
        make_template("erc20-token", ContractCategory.TOKEN, ERC20_TOKEN_ABI, name="ERC20 Token"),
        make_template("token-staking", ContractCategory.STAKING, TOKEN_STAKING_ABI),
        make_template("lp-staking", ContractCategory.LP_STAKING, LP_STAKING_ABI),
        make_template("token-vault", ContractCategory.VAULT, TOKEN_VAULT_ABI, name="Token Vault"),
        make_template("smartchef", ContractCategory.STAKING, SMARTCHEF_ABI),
    ])


@pytest.fixture
def records() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def vault_parameters() -> Dict[str, Any]:
    return {
        "stakeToken": TOKEN,
        "rewardToken": REWARD_TOKEN,
        "rewardPerSecond": 1000,
        "rewardStartTimestamp": 1_700_000_000,
        "rewardEndTimestamp": 1_800_000_000,
        "stakingPools": [
            {"multiplier": 100, "lockPeriod": 2_592_000},
            {"multiplier": 150, "lockPeriod": 7_776_000},
            {"multiplier": 200, "lockPeriod": 15_552_000},
        ],
    }
