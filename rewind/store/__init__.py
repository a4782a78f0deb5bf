"""
Stores: the plain store contract and the history enhancer.
"""

from .base import PlainStore, MemoryStore, create_store
from .instrument import InstrumentedStore, instrument, unlift_state

__all__ = [
    "PlainStore",
    "MemoryStore",
    "create_store",
    "InstrumentedStore",
    "instrument",
    "unlift_state",
]
