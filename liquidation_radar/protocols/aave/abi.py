"""ABI encoding/decoding for the Aave V3 view methods — no I/O."""
from __future__ import annotations

from typing import Any, Sequence

from eth_abi import decode, encode
from eth_abi.exceptions import DecodingError, EncodingError
from eth_utils import function_signature_to_4byte_selector

from ...errors import GatewayError

# Pool
GET_USER_ACCOUNT_DATA = "getUserAccountData(address)"
GET_RESERVES_LIST = "getReservesList()"

# Pool data provider
GET_ALL_RESERVES_TOKENS = "getAllReservesTokens()"
GET_RESERVE_CONFIGURATION_DATA = "getReserveConfigurationData(address)"
GET_USER_RESERVE_DATA = "getUserReserveData(address,address)"
GET_RESERVE_TOKENS_ADDRESSES = "getReserveTokensAddresses(address)"
GET_RESERVE_DATA = "getReserveData(address)"

# Oracle
GET_ASSET_PRICE = "getAssetPrice(address)"
GET_ASSETS_PRICES = "getAssetsPrices(address[])"

# ERC-20
DECIMALS = "decimals()"
SYMBOL = "symbol()"
BALANCE_OF = "balanceOf(address)"
TOTAL_SUPPLY = "totalSupply()"

OUTPUT_TYPES: dict[str, tuple[str, ...]] = {
    GET_USER_ACCOUNT_DATA: ("uint256",) * 6,
    GET_RESERVES_LIST: ("address[]",),
    GET_ALL_RESERVES_TOKENS: ("(string,address)[]",),
    GET_RESERVE_CONFIGURATION_DATA: ("uint256",) * 5 + ("bool",) * 5,
    GET_USER_RESERVE_DATA: ("uint256",) * 7 + ("uint40", "bool"),
    GET_RESERVE_TOKENS_ADDRESSES: ("address",) * 3,
    GET_RESERVE_DATA: ("uint256",) * 11 + ("uint40",),
    GET_ASSET_PRICE: ("uint256",),
    GET_ASSETS_PRICES: ("uint256[]",),
    DECIMALS: ("uint8",),
    SYMBOL: ("string",),
    BALANCE_OF: ("uint256",),
    TOTAL_SUPPLY: ("uint256",),
}


def input_types(signature: str) -> list[str]:
    """Split the argument list out of a canonical signature.

    Examples:
        "balanceOf(address)" → ["address"]
        "getReservesList()" → []
    """
    args = signature[signature.index("(") + 1 : -1]
    return args.split(",") if args else []


def encode_call(signature: str, args: Sequence[Any] = ()) -> bytes:
    """Build calldata: 4-byte selector followed by ABI-encoded arguments."""
    selector = function_signature_to_4byte_selector(signature)
    types = input_types(signature)
    if len(types) != len(args):
        raise ValueError(
            f"{signature} takes {len(types)} arguments, got {len(args)}"
        )
    if not types:
        return selector
    try:
        return selector + encode(types, list(args))
    except EncodingError as e:
        raise ValueError(f"Cannot encode arguments for {signature}: {e}") from e


def decode_output(signature: str, data: bytes) -> tuple[Any, ...]:
    """Decode the return data of a view call.

    Raises:
        GatewayError: on empty or truncated return data (e.g. the target
            is not a contract) or a string field that is not valid UTF-8.
    """
    types = OUTPUT_TYPES[signature]
    try:
        return tuple(decode(list(types), data))
    except (DecodingError, UnicodeDecodeError) as e:
        raise GatewayError(f"Malformed response for {signature}: {e}") from e
