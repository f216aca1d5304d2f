"""
Virtual-time execution context for deterministic tests.

Nothing runs until the clock is advanced; work is then executed in due-time
order, FIFO for equal due times. Time is expressed in seconds.

Usage:
    context = VirtualTimeContext()
    reactivex.timer(0.2, scheduler=context).subscribe(print)
    context.advance_by(0.2)  # prints 0
"""
from reactivex.scheduler import VirtualTimeScheduler

from .context import ExecutionContext


class VirtualTimeContext(VirtualTimeScheduler, ExecutionContext):
    """VirtualTimeScheduler usable as a primary context. Always current."""

    name = "virtual_time"

    def is_current(self) -> bool:
        return True

    @property
    def seconds(self) -> float:
        """Virtual time elapsed since the epoch of the clock, in seconds."""
        return self.to_seconds(self.now)
