"""
Batch orchestration over many independent targets.

Exports:
    - BatchOrchestrator: Drives a shared session over an ordered target list
    - CancelToken: Cooperative cancellation checked between items
"""

from src.batch.cancellation import CancelToken
from src.batch.orchestrator import BatchOrchestrator, ItemFn

__all__ = ["BatchOrchestrator", "CancelToken", "ItemFn"]
