"""SimulationClock — converts host frame time into whole ticks.

The engine has no timer or thread of its own.  The host loop measures
how much wall time passed since its last frame and asks the clock how
many ticks are due; fractional ticks carry over to the next frame.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class SimulationClock:
    """Fixed-rate tick accumulator.

    Attributes:
        ticks_per_second: Target simulation rate.
        max_ticks_per_frame: Cap on ticks returned by one ``advance``
            call so a long stall does not trigger a burst of catch-up
            work.
        paused: While True, ``advance`` returns 0 and accumulates nothing.
    """

    ticks_per_second: float = 30.0
    max_ticks_per_frame: int = 10
    paused: bool = False
    _accumulator: float = 0.0

    def advance(self, dt: float) -> int:
        """Account for ``dt`` seconds of wall time.

        Args:
            dt: Seconds since the previous call.

        Returns:
            Number of ticks the host should run now.

        Raises:
            ValueError: If ``dt`` is negative.
        """
        if dt < 0:
            msg = f"dt must not be negative ({dt})"
            raise ValueError(msg)
        if self.paused:
            return 0
        self._accumulator += self.ticks_per_second * dt
        steps = int(self._accumulator)
        self._accumulator -= steps
        if steps > self.max_ticks_per_frame:
            steps = self.max_ticks_per_frame
        return steps

    def reset(self) -> None:
        """Forget any partial tick."""
        self._accumulator = 0.0
