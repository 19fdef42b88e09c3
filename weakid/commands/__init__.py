from .check import check
from .renumber import renumber

__all__ = ["check", "renumber"]
