"""
batch_kernel.domain -- Pure value objects shared by batch packages.
"""

from batch_kernel.domain.clock import Clock, DeterministicClock, SystemClock

__all__ = [
    "Clock",
    "DeterministicClock",
    "SystemClock",
]
