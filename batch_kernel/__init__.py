"""
Batch Kernel - shared infrastructure for sliced batch jobs.

Provides:
- Typed exception hierarchy with machine-readable codes
- Structured JSON logging with context propagation
- Injectable clocks
- SQLAlchemy declarative base and engine helpers
"""

__version__ = "0.1.0"
