"""
FoodFlow: in-memory process/task runtime for food manufacturing with
HACCP checkpoint verification and LOT traceability.
"""
from foodflow.main import FoodProcessRuntime, build_runtime

__all__ = [
    "FoodProcessRuntime",
    "build_runtime",
]
