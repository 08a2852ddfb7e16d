# =============================================================================
# aed_core/data/__init__.py
# Sample data for the simulated remote store
# =============================================================================

from .seed import SEED_INVENTORY, SEED_SUBMISSION_LOG

__all__ = ["SEED_INVENTORY", "SEED_SUBMISSION_LOG"]
