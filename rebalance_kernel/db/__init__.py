"""Database base classes and engine management for the run ledger."""

from rebalance_kernel.db.base import Base, TrackedBase, UUIDString

__all__ = ["Base", "TrackedBase", "UUIDString"]
