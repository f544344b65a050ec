"""Unit tests for the parameter binder."""

import time

import pytest

from template_deployer.binder import (
    ParameterBinder,
    find_constructor,
    find_initializer,
    select_entry,
    uses_initializer,
)
from template_deployer.constants import ZERO_ADDRESS
from template_deployer.exceptions import BindingError

from abis import (
    ERC20_TOKEN_ABI,
    LP_STAKING_ABI,
    NFT_STAKING_ABI,
    SMARTCHEF_ABI,
    TOKEN_STAKING_ABI,
    TOKEN_VAULT_ABI,
)
from conftest import OWNER, REWARD_TOKEN, TOKEN

ALL_ABIS = [
    ERC20_TOKEN_ABI,
    TOKEN_STAKING_ABI,
    NFT_STAKING_ABI,
    LP_STAKING_ABI,
    TOKEN_VAULT_ABI,
    SMARTCHEF_ABI,
]


def _fixed_clock():
    return 1_700_000_000


class TestEntrySelection:
    """Test constructor and initializer lookup."""

    def test_constructor_preferred(self):
        entry = select_entry(TOKEN_VAULT_ABI)
        assert entry["type"] == "constructor"
        assert not uses_initializer(TOKEN_VAULT_ABI)

    def test_initializer_fallback(self):
        assert find_constructor(SMARTCHEF_ABI) is None
        entry = select_entry(SMARTCHEF_ABI)
        assert entry["name"] == "initialize"
        assert uses_initializer(SMARTCHEF_ABI)

    def test_payable_initialize_is_ignored(self):
        abi = [{
            "type": "function",
            "name": "initialize",
            "stateMutability": "payable",
            "inputs": [{"name": "_owner", "type": "address"}],
            "outputs": [],
        }]
        assert find_initializer(abi) is None
        assert select_entry(abi) is None

    def test_no_entry(self):
        assert select_entry([]) is None
        assert select_entry(None) is None


class TestBind:
    """Test argument vectors produced by ParameterBinder.bind."""

    @pytest.mark.parametrize("abi", ALL_ABIS)
    @pytest.mark.parametrize("parameters", [{}, None, "garbage", {"unrelated": 1}])
    def test_length_matches_inputs(self, abi, parameters):
        """Test one argument per declared input whatever the configuration."""
        args = ParameterBinder(clock=_fixed_clock).bind(abi, parameters)
        assert len(args) == len(select_entry(abi)["inputs"])

    def test_abi_without_entry_binds_nothing(self):
        abi = [{"type": "function", "name": "balanceOf", "inputs": [], "outputs": []}]
        assert ParameterBinder().bind(abi, {"owner": OWNER}) == []

    def test_erc20(self):
        args = ParameterBinder().bind(
            ERC20_TOKEN_ABI,
            {"name": "Troll", "symbol": "TROLL", "initialSupply": 1000, "owner": OWNER},
        )
        assert args == ["Troll", "TROLL", 1000 * 10**18, OWNER]

    def test_lp_staking_aliases(self):
        """Test rewardToken and rewardPerBlock feeding _link and _linkPerBlock."""
        args = ParameterBinder().bind(
            LP_STAKING_ABI,
            {"rewardToken": REWARD_TOKEN, "feeAddress": OWNER, "rewardPerBlock": "5"},
        )
        assert args == [REWARD_TOKEN, OWNER, 5]

    def test_vault_defaults_timestamps_from_clock(self):
        args = ParameterBinder(clock=_fixed_clock).bind(
            TOKEN_VAULT_ABI, {"stakeToken": TOKEN, "rewardToken": REWARD_TOKEN}
        )
        assert args == [TOKEN, REWARD_TOKEN, 0, 1_700_000_000, 1_700_000_000]

    def test_nft_staking_collections(self):
        args = ParameterBinder().bind(
            NFT_STAKING_ABI,
            {
                "collections": [{"address": TOKEN, "name": "Trolls"}],
                "ratios": ["2"],
                "rewardToken": REWARD_TOKEN,
                "rewardRate": "10",
                "enabled": True,
            },
        )
        assert args == [[TOKEN], [2], REWARD_TOKEN, 10, True]

    def test_smartchef_binds_initializer_inputs(self):
        args = ParameterBinder(clock=_fixed_clock).bind(SMARTCHEF_ABI, {"admin": "bad"})
        assert len(args) == len(find_initializer(SMARTCHEF_ABI)["inputs"])
        assert ZERO_ADDRESS in args

    def test_deterministic_with_fixed_clock(self):
        binder = ParameterBinder(clock=_fixed_clock)
        parameters = {"stakeToken": TOKEN, "rewardPerSecond": "7"}
        assert binder.bind(TOKEN_VAULT_ABI, parameters) == binder.bind(TOKEN_VAULT_ABI, parameters)

    def test_real_clock_timestamps_are_close(self):
        binder = ParameterBinder()
        first = binder.bind(TOKEN_VAULT_ABI, {})
        second = binder.bind(TOKEN_VAULT_ABI, {})
        assert abs(first[3] - second[3]) <= 2
        assert abs(first[3] - int(time.time())) <= 2

    def test_parameters_not_mutated(self):
        parameters = {"stakeToken": TOKEN.lower()}
        ParameterBinder().bind(TOKEN_VAULT_ABI, parameters)
        assert parameters == {"stakeToken": TOKEN.lower()}

    def test_strict_binding_raises(self):
        with pytest.raises(BindingError):
            ParameterBinder(strict=True).bind(ERC20_TOKEN_ABI, {"owner": "0xnope"})
