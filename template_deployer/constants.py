"""
Template Deployer Constants
"""

ZERO_ADDRESS = "0x0000000000000000000000000000000000000000"

# Bytecode placeholder stored on templates that still have to be compiled
NEEDS_COMPILATION = "NEEDS_COMPILATION"
MIN_BYTECODE_LENGTH = 100

DEFAULT_GAS_BUFFER_PERCENT = 120
DEFAULT_TOKEN_DECIMALS = 18

SECONDS_PER_DAY = 24 * 60 * 60

# ABI parameter name -> configuration key
PARAMETER_ALIASES = {
    # LP staking (MasterChef style)
    "link": "rewardToken",
    "linkPerBlock": "rewardPerBlock",
    # Vaults
    "stakeToken": "depositToken",
}


class ChainId:
    """Supported networks"""
    CRONOS_MAINNET = 25
    CRONOS_TESTNET = 338

    @classmethod
    def get_name(cls, chain_id: int) -> str:
        """Get network name from chain id"""
        names = {
            25: "Cronos Mainnet",
            338: "Cronos Testnet"
        }
        return names.get(chain_id, "UNKNOWN")

    @classmethod
    def all(cls) -> list:
        """Get all supported chain ids"""
        return [cls.CRONOS_MAINNET, cls.CRONOS_TESTNET]


class ContractCategory:
    """Template categories"""
    TOKEN = "token"
    NFT = "nft"
    STAKING = "staking"
    LP_STAKING = "lp-staking"
    VAULT = "vault"
    OTHER = "other"

    @classmethod
    def all(cls) -> list:
        """Get all categories"""
        return [
            cls.TOKEN,
            cls.NFT,
            cls.STAKING,
            cls.LP_STAKING,
            cls.VAULT,
            cls.OTHER
        ]

    @classmethod
    def normalize(cls, category: str) -> str:
        """Map an arbitrary category string onto a known category"""
        value = (category or "").strip().lower()
        return value if value in cls.all() else cls.OTHER


class StakingKind:
    """Record shapes produced by the deployment classifier"""
    TOKEN_STAKING = "token-staking"
    NFT_STAKING = "nft-staking"
    LP_STAKING = "lp-staking"
    TOKEN_VAULT = "tokenvault"
    SMARTCHEF = "smartchef"
    NONE = ""


class PoolStatus:
    """Sub-pool registration status"""
    REGISTERED = "registered"
    FAILED = "failed"
    SKIPPED = "skipped"


class EventLevel:
    """Deployment event levels"""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


DEFAULT_RECORDS_COLLECTION = "user-deployed-contracts"
