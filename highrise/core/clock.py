# core/clock.py — simulation time and speed control

from settings import SPEED_STEPS


class SimClock:
    """
    Converts real elapsed milliseconds into scaled simulation seconds.

    Each frame the real delta is multiplied by the speed step; the result is
    what the agent behaviour engine advances by. A paused clock yields 0.
    """

    def __init__(self, speed_index: int = 1) -> None:
        self._speed_index = speed_index
        self.elapsed: float = 0.0    # sim seconds since start
        self.frame: int = 0

    # --- Speed control ---

    @property
    def speed(self) -> int:
        return SPEED_STEPS[self._speed_index]

    @property
    def paused(self) -> bool:
        return self.speed == 0

    def cycle_speed(self) -> None:
        self._speed_index = (self._speed_index + 1) % len(SPEED_STEPS)

    def set_speed_index(self, index: int) -> None:
        if 0 <= index < len(SPEED_STEPS):
            self._speed_index = index

    # --- Tick ---

    def tick(self, dt_ms: float) -> float:
        """Advance one frame. dt_ms = real milliseconds since last frame."""
        self.frame += 1
        if self.paused:
            return 0.0

        dt = dt_ms / 1000.0 * self.speed
        self.elapsed += dt
        return dt
