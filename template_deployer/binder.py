"""
Parameter binder

Turns a flat configuration mapping into the positional argument vector of a
template's constructor, or of its initialize() function for proxy-style
templates that take no constructor arguments.
"""

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional

from .coercion import coerce_input
from .constants import DEFAULT_TOKEN_DECIMALS

logger = logging.getLogger(__name__)

AbiEntry = Dict[str, Any]
BoundArguments = List[Any]


def find_constructor(abi: List[AbiEntry]) -> Optional[AbiEntry]:
    for entry in abi or []:
        if entry.get("type") == "constructor":
            return entry
    return None


def find_initializer(abi: List[AbiEntry]) -> Optional[AbiEntry]:
    for entry in abi or []:
        if (
            entry.get("type") == "function"
            and entry.get("name") == "initialize"
            and entry.get("stateMutability") == "nonpayable"
        ):
            return entry
    return None


def select_entry(abi: List[AbiEntry]) -> Optional[AbiEntry]:
    """Constructor first, then a nonpayable initialize() function"""
    return find_constructor(abi) or find_initializer(abi)


def uses_initializer(abi: List[AbiEntry]) -> bool:
    return find_constructor(abi) is None and find_initializer(abi) is not None


class ParameterBinder:
    """
    Binds configuration values to an ABI entry's inputs

    Example:
        binder = ParameterBinder()
        args = binder.bind(template.abi, {"rewardToken": "0x...", "rewardPerBlock": "0.5"})
    """

    def __init__(
        self,
        strict: bool = False,
        decimals: int = DEFAULT_TOKEN_DECIMALS,
        clock: Optional[Callable[[], float]] = None
    ):
        self.strict = strict
        self.decimals = decimals
        self.clock = clock

    def bind(self, abi: List[AbiEntry], parameters: Optional[Mapping[str, Any]]) -> BoundArguments:
        """
        Build constructor arguments

        Args:
            abi: Template ABI
            parameters: Configuration values keyed by parameter name

        Returns:
            One value per input of the selected entry, in declared order
        """
        entry = select_entry(abi)
        if entry is None:
            return []

        if not isinstance(parameters, Mapping):
            parameters = {}

        inputs = entry.get("inputs") or []
        args = [
            coerce_input(
                abi_input,
                parameters,
                strict=self.strict,
                decimals=self.decimals,
                clock=self.clock
            )
            for abi_input in inputs
        ]

        logger.debug(
            "Bound %d arguments for %s", len(args), entry.get("name") or entry.get("type")
        )
        return args
