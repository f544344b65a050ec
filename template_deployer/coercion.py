"""
Type coercion rules

Converts one loosely-typed configuration value into the EVM value implied by
an ABI input's declared type. Malformed values degrade to a type-appropriate
zero value unless strict mode is requested.
"""

import math
import re
import time
from datetime import datetime
from decimal import Decimal, InvalidOperation, localcontext
from enum import Enum
from typing import Any, Callable, Dict, Mapping, Optional

from eth_typing import ChecksumAddress
from eth_utils import is_0x_prefixed
from web3 import Web3

from .constants import DEFAULT_TOKEN_DECIMALS, PARAMETER_ALIASES, ZERO_ADDRESS
from .exceptions import BindingError

ADDRESS_PATTERN = re.compile(r"^0x[a-fA-F0-9]{40}$")

TOKEN_AMOUNT_MARKERS = ("amount", "supply", "balance")
UINT256_MAX = 2**256 - 1


class AbiInputKind(Enum):
    """Closed set of input shapes the binder knows how to fill"""
    ADDRESS = "address"
    ADDRESS_ARRAY = "address[]"
    UINT_SCALAR = "uint"
    UINT_ARRAY = "uint[]"
    STRING = "string"
    BOOL = "bool"
    OTHER = "other"


def classify_input(abi_type: str) -> AbiInputKind:
    """
    Classify a declared ABI type

    Matching is by substring since ABI types carry size suffixes
    (uint256, uint8[], address[2]).
    """
    declared = abi_type or ""

    if "[" in declared:
        if "address" in declared:
            return AbiInputKind.ADDRESS_ARRAY
        if "uint" in declared:
            return AbiInputKind.UINT_ARRAY
        return AbiInputKind.OTHER

    if "address" in declared:
        return AbiInputKind.ADDRESS
    if "uint" in declared:
        return AbiInputKind.UINT_SCALAR
    if "string" in declared:
        return AbiInputKind.STRING
    if "bool" in declared:
        return AbiInputKind.BOOL
    return AbiInputKind.OTHER


def strip_parameter_name(abi_name: str) -> str:
    """Drop one leading underscore (_rewardToken -> rewardToken)"""
    name = abi_name or ""
    return name[1:] if name.startswith("_") else name


def is_missing(value: Any) -> bool:
    return value is None or (isinstance(value, str) and value.strip() == "")


def resolve_value(parameters: Mapping[str, Any], abi_name: str) -> Any:
    """
    Look up the configuration value for an ABI input

    The alias key is tried first, then the parameter name itself.
    """
    name = strip_parameter_name(abi_name)
    alias = PARAMETER_ALIASES.get(name)

    if alias is not None and not is_missing(parameters.get(alias)):
        return parameters[alias]
    return parameters.get(name)


def coerce_value(
    name: str,
    abi_type: str,
    value: Any,
    strict: bool = False,
    decimals: int = DEFAULT_TOKEN_DECIMALS,
    clock: Optional[Callable[[], float]] = None
) -> Any:
    """
    Coerce a raw configuration value for one ABI input

    Args:
        name: Parameter name with any leading underscore removed
        abi_type: Declared ABI type
        value: Raw configuration value (None when absent)
        strict: Raise BindingError for malformed values instead of defaulting
        decimals: Token decimals used to scale amount-like values
        clock: Time source for defaulted timestamps

    Returns:
        A value web3 can encode for the declared type
    """
    kind = classify_input(abi_type)
    clock = clock or time.time

    if kind is AbiInputKind.ADDRESS:
        return _coerce_address(name, abi_type, value, strict)

    if kind is AbiInputKind.ADDRESS_ARRAY:
        if not isinstance(value, (list, tuple)):
            return []
        return [_coerce_address(name, abi_type, _unwrap_address(v), strict) for v in value]

    if kind is AbiInputKind.UINT_SCALAR:
        return _coerce_uint(name, abi_type, value, strict, decimals, clock)

    if kind is AbiInputKind.UINT_ARRAY:
        if not isinstance(value, (list, tuple)):
            return []
        return [_coerce_uint(name, abi_type, v, strict, decimals, clock) for v in value]

    if kind is AbiInputKind.STRING:
        if is_missing(value):
            return ""
        return value if isinstance(value, str) else str(value)

    if kind is AbiInputKind.BOOL:
        return bool(value)

    return None if is_missing(value) else value


def _unwrap_address(value: Any) -> Any:
    # Collection pickers hand over {"address": "0x..", "name": ..} objects
    if isinstance(value, Mapping):
        return value.get("address")
    return value


def _coerce_address(name: str, abi_type: str, value: Any, strict: bool) -> ChecksumAddress:
    if isinstance(value, str) and ADDRESS_PATTERN.match(value.strip()):
        return Web3.to_checksum_address(value.strip())

    if strict and not is_missing(value):
        raise BindingError(name, abi_type, value)
    return ChecksumAddress(ZERO_ADDRESS)


def _is_token_amount(lowered_name: str) -> bool:
    return any(marker in lowered_name for marker in TOKEN_AMOUNT_MARKERS)


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)


def _coerce_uint(
    name: str,
    abi_type: str,
    value: Any,
    strict: bool,
    decimals: int,
    clock: Callable[[], float]
) -> int:
    lowered = name.lower()

    if "timestamp" in lowered:
        if is_missing(value):
            return int(clock())
        if isinstance(value, datetime):
            return int(value.timestamp())

    if is_missing(value):
        return 0

    if _is_token_amount(lowered) and (
        _is_number(value) or (isinstance(value, str) and "." in value)
    ):
        unit_decimals = 0 if "wei" in lowered else decimals
        scaled = _scale_units(value, unit_decimals)
        if scaled is not None:
            return scaled
    else:
        parsed = _parse_uint(value)
        if parsed is not None:
            return parsed

    if strict:
        raise BindingError(name, abi_type, value)
    return 0


def _scale_units(value: Any, decimals: int) -> Optional[int]:
    """Decimal token amount -> integer base units, like parseUnits"""
    with localcontext() as ctx:
        ctx.prec = 999
        try:
            amount = Decimal(str(value).strip())
        except InvalidOperation:
            return None
        if not amount.is_finite():
            return None
        scaled = amount * (Decimal(10) ** decimals)
        # More fractional digits than the token has
        if scaled != scaled.to_integral_value():
            return None
        result = int(scaled)

    if result < 0 or result > UINT256_MAX:
        return None
    return result


def _parse_uint(value: Any) -> Optional[int]:
    result = None

    if isinstance(value, bool):
        result = int(value)
    elif isinstance(value, int):
        result = value
    elif isinstance(value, (float, Decimal)):
        if math.isfinite(value) and value == int(value):
            result = int(value)
    elif isinstance(value, str):
        text = value.strip()
        try:
            result = int(text, 16) if is_0x_prefixed(text) else int(text)
        except ValueError:
            result = None

    if result is None or result < 0 or result > UINT256_MAX:
        return None
    return result


def coerce_input(
    abi_input: Dict[str, Any],
    parameters: Mapping[str, Any],
    strict: bool = False,
    decimals: int = DEFAULT_TOKEN_DECIMALS,
    clock: Optional[Callable[[], float]] = None
) -> Any:
    """Resolve and coerce the configuration value for one ABI input descriptor"""
    abi_name = abi_input.get("name", "")
    value = resolve_value(parameters, abi_name)
    return coerce_value(
        strip_parameter_name(abi_name),
        abi_input.get("type", ""),
        value,
        strict=strict,
        decimals=decimals,
        clock=clock
    )
