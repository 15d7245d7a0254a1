"""Protocol interfaces for the liquidation analytics engine."""
from .chain import ChainClient
from .gateway import LedgerGateway

__all__ = ["ChainClient", "LedgerGateway"]
