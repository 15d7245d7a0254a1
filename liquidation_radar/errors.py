"""Exception types raised by the analytics engine."""


class LiquidationRadarError(Exception):
    """Base class for engine errors."""


class GatewayError(LiquidationRadarError):
    """A read against the chain failed (transport, revert, malformed response)."""


class InvalidAddressError(LiquidationRadarError):
    """Input is not a syntactically valid 20-byte hex address."""

    def __init__(self, address: object) -> None:
        super().__init__(f"Invalid Ethereum address format: {address!r}")
        self.address = address
