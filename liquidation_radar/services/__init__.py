"""Service modules"""
from .account_inspector import AccountInspector
from .batch_scheduler import BatchScheduler
from .engine import LiquidationEngine
from .opportunity_analyzer import OpportunityAnalyzer
from .reserve_registry import ReserveRegistry

__all__ = [
    "AccountInspector",
    "BatchScheduler",
    "LiquidationEngine",
    "OpportunityAnalyzer",
    "ReserveRegistry",
]
