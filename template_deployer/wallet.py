"""
Wallet / provider substrate

WalletProvider is the interface the deployment engine drives. Web3Wallet
implements it over web3.py's AsyncWeb3 with a local eth_account signer.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Protocol

from eth_account import Account
from web3 import AsyncWeb3, Web3

from .exceptions import (
    NetworkChangedError,
    ProviderUnavailableError,
    TransactionFailedError,
    WalletNotConnectedError
)

logger = logging.getLogger(__name__)

GasOptions = Dict[str, int]


@dataclass
class WalletAccount:
    """Connected account"""
    address: str
    chain_id: int


@dataclass
class TransactionReceipt:
    """Confirmed transaction"""
    transaction_hash: str
    contract_address: Optional[str]
    block_number: Optional[int]
    status: int


@dataclass
class PendingTransaction:
    """Submitted transaction; await wait() for inclusion"""
    transaction_hash: str
    wait: Callable[[], Awaitable[TransactionReceipt]]


class WalletProvider(Protocol):
    async def get_account(self) -> WalletAccount:
        ...

    async def get_chain_id(self) -> int:
        ...

    async def get_signer_address(self) -> str:
        ...

    async def estimate_deploy_gas(self, abi: List[Dict], bytecode: str, args: List[Any]) -> int:
        ...

    async def estimate_call_gas(
        self, address: str, abi: List[Dict], method: str, args: List[Any]
    ) -> int:
        ...

    async def get_gas_price(self) -> int:
        ...

    async def get_balance(self, address: str) -> int:
        ...

    async def deploy(
        self,
        abi: List[Dict],
        bytecode: str,
        args: List[Any],
        gas_opts: Optional[GasOptions] = None
    ) -> PendingTransaction:
        ...

    async def call(
        self,
        address: str,
        abi: List[Dict],
        method: str,
        args: List[Any],
        gas_opts: Optional[GasOptions] = None
    ) -> PendingTransaction:
        ...


class Web3Wallet:
    """
    WalletProvider backed by AsyncWeb3 and a private key

    Example:
        wallet = Web3Wallet(
            rpc_url="https://evm-t3.cronos.org",
            private_key="0x..."
        )
        account = await wallet.get_account()
    """

    def __init__(
        self,
        rpc_url: Optional[str] = None,
        private_key: Optional[str] = None,
        w3: Optional[AsyncWeb3] = None,
        receipt_timeout: int = 120
    ):
        """
        Initialize the wallet

        Args:
            rpc_url: JSON-RPC endpoint URL
            private_key: Private key for signing transactions
            w3: Preconfigured AsyncWeb3 instance (overrides rpc_url)
            receipt_timeout: Seconds to wait for a receipt
        """
        if w3 is None and rpc_url:
            w3 = AsyncWeb3(AsyncWeb3.AsyncHTTPProvider(rpc_url))
        self.w3 = w3

        self.account = None
        if private_key:
            self.account = Account.from_key(private_key)

        self.receipt_timeout = receipt_timeout

    @property
    def address(self) -> str:
        """Get current account address"""
        if not self.account:
            raise WalletNotConnectedError()
        return self.account.address

    def _require_provider(self) -> AsyncWeb3:
        if self.w3 is None:
            raise ProviderUnavailableError()
        return self.w3

    async def get_account(self) -> WalletAccount:
        return WalletAccount(address=self.address, chain_id=await self.get_chain_id())

    async def get_chain_id(self) -> int:
        return int(await self._require_provider().eth.chain_id)

    async def get_signer_address(self) -> str:
        return self.address

    async def estimate_deploy_gas(self, abi: List[Dict], bytecode: str, args: List[Any]) -> int:
        factory = self._require_provider().eth.contract(abi=abi, bytecode=bytecode)
        return int(await factory.constructor(*args).estimate_gas({"from": self.address}))

    async def estimate_call_gas(
        self, address: str, abi: List[Dict], method: str, args: List[Any]
    ) -> int:
        func = self._function(address, abi, method, args)
        return int(await func.estimate_gas({"from": self.address}))

    async def get_gas_price(self) -> int:
        return int(await self._require_provider().eth.gas_price)

    async def get_balance(self, address: str) -> int:
        return int(
            await self._require_provider().eth.get_balance(Web3.to_checksum_address(address))
        )

    async def deploy(
        self,
        abi: List[Dict],
        bytecode: str,
        args: List[Any],
        gas_opts: Optional[GasOptions] = None
    ) -> PendingTransaction:
        factory = self._require_provider().eth.contract(abi=abi, bytecode=bytecode)
        tx = await factory.constructor(*args).build_transaction(
            await self._tx_params(gas_opts)
        )
        return await self._send(tx)

    async def call(
        self,
        address: str,
        abi: List[Dict],
        method: str,
        args: List[Any],
        gas_opts: Optional[GasOptions] = None
    ) -> PendingTransaction:
        func = self._function(address, abi, method, args)
        tx = await func.build_transaction(await self._tx_params(gas_opts))
        return await self._send(tx)

    def _function(self, address: str, abi: List[Dict], method: str, args: List[Any]):
        contract = self._require_provider().eth.contract(
            address=Web3.to_checksum_address(address),
            abi=abi
        )
        return getattr(contract.functions, method)(*args)

    async def _tx_params(self, gas_opts: Optional[GasOptions]) -> Dict[str, Any]:
        """Build transaction parameters; web3 fills gas fields that are left out"""
        params = {
            "from": self.address,
            "nonce": await self._require_provider().eth.get_transaction_count(
                self.address, "pending"
            ),
        }
        if gas_opts:
            params.update(gas_opts)
        return params

    async def _send(self, tx: Dict[str, Any]) -> PendingTransaction:
        """Sign and send transaction"""
        w3 = self._require_provider()
        chain_id = await self.get_chain_id()

        signed = self.account.sign_transaction(tx)
        tx_hash = await w3.eth.send_raw_transaction(signed.raw_transaction)
        tx_hash_hex = Web3.to_hex(tx_hash)
        logger.debug("Sent transaction %s", tx_hash_hex)

        async def wait() -> TransactionReceipt:
            try:
                receipt = await w3.eth.wait_for_transaction_receipt(
                    tx_hash, timeout=self.receipt_timeout
                )
            except Exception as exc:
                if await self._network_changed(chain_id):
                    raise NetworkChangedError() from exc
                raise

            if receipt["status"] != 1:
                raise TransactionFailedError(
                    f"Transaction failed: {tx_hash_hex}", tx_hash=tx_hash_hex
                )

            return TransactionReceipt(
                transaction_hash=tx_hash_hex,
                contract_address=receipt.get("contractAddress"),
                block_number=receipt.get("blockNumber"),
                status=receipt["status"]
            )

        return PendingTransaction(transaction_hash=tx_hash_hex, wait=wait)

    async def _network_changed(self, expected_chain_id: int) -> bool:
        try:
            return await self.get_chain_id() != expected_chain_id
        except Exception:
            logger.debug("Could not re-read chain id after receipt failure", exc_info=True)
            return False
