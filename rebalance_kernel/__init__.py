"""
Rebalance Kernel -- shared foundations for the bucket rebalancer.

- Typed exception hierarchy with machine-readable codes
- Structured JSON logging
- Injectable clock
- Pure domain records (inventory, assignments, batches)
- SQLAlchemy declarative base and engine management
"""

__version__ = "0.1.0"
