"""Aave V3 protocol adapter."""
from .gateway import AaveGateway

__all__ = ["AaveGateway"]
