"""EVM JSON-RPC client."""
from .client import EvmClient

__all__ = ["EvmClient"]
