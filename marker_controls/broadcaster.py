"""
Periodic transform broadcasting.

FrameBroadcaster publishes two time-varying frames relative to the base frame
on every tick: "moving_frame" oscillates along z and "rotating_frame" pitches
continuously. WallTimer drives the tick from a background thread.
"""

import math
import threading
import time
import logging
from typing import Callable, Optional, Tuple

from marker_controls.core.transforms import (
    Quaternion,
    TransformRecord,
    Vector3,
    quaternion_from_rpy,
)
from marker_controls.publisher import TransformBuffer, TransformPublisher

logger = logging.getLogger(__name__)

DEFAULT_BASE_FRAME = "base_link"
MOVING_FRAME = "moving_frame"
ROTATING_FRAME = "rotating_frame"

# Default tick period (seconds)
DEFAULT_TICK_PERIOD = 0.01

# Counter ticks per radian of phase
PHASE_DIVISOR = 140.0
OSCILLATION_AMPLITUDE = 2.0

# Counter is an unsigned 32-bit value. Wrapping only shifts the phase of
# periodic functions, so it is harmless.
COUNTER_MODULUS = 2 ** 32


def tick_phase(counter: int) -> float:
    """Phase angle (radians) for a counter value."""
    return counter / PHASE_DIVISOR


def moving_frame_transform(counter: int, stamp: float,
                           parent_frame_id: str = DEFAULT_BASE_FRAME) -> TransformRecord:
    """Frame oscillating along z with amplitude 2.0, no rotation."""
    z = OSCILLATION_AMPLITUDE * math.sin(tick_phase(counter))
    return TransformRecord(
        child_frame_id=MOVING_FRAME,
        parent_frame_id=parent_frame_id,
        stamp=stamp,
        translation=Vector3(0.0, 0.0, z),
        rotation=Quaternion.identity(),
    )


def rotating_frame_transform(counter: int, stamp: float,
                             parent_frame_id: str = DEFAULT_BASE_FRAME) -> TransformRecord:
    """Frame at the parent origin pitching about y."""
    return TransformRecord(
        child_frame_id=ROTATING_FRAME,
        parent_frame_id=parent_frame_id,
        stamp=stamp,
        translation=Vector3(0.0, 0.0, 0.0),
        rotation=quaternion_from_rpy(0.0, tick_phase(counter), 0.0),
    )


class FrameBroadcaster:
    """
    Owns the tick counter and publishes the animated frames.

    The output channel is created lazily on first use, so a broadcaster can be
    constructed before the transport exists.
    """

    def __init__(self, publisher: Optional[TransformPublisher] = None,
                 publisher_factory: Callable[[], TransformPublisher] = TransformBuffer,
                 clock: Callable[[], float] = time.time,
                 base_frame: str = DEFAULT_BASE_FRAME,
                 counter_start: int = 0):
        """
        Args:
            publisher: Output channel, or None to create it on first publish
            publisher_factory: Creates the channel when publisher is None
            clock: Time source for stamps (seconds)
            base_frame: Parent frame of the animated frames
            counter_start: Initial counter value
        """
        self._publisher = publisher
        self._publisher_factory = publisher_factory
        self._clock = clock
        self.base_frame = base_frame
        self._counter = counter_start % COUNTER_MODULUS
        self._lock = threading.Lock()
        self._channel_error: Optional[str] = None  # For log rate-limiting

    @property
    def counter(self) -> int:
        """Counter value the next tick will use."""
        return self._counter

    @property
    def initialized(self) -> bool:
        """True once the output channel exists."""
        return self._publisher is not None

    @property
    def channel(self) -> TransformPublisher:
        """Output channel, created on first access."""
        if self._publisher is None:
            with self._lock:
                if self._publisher is None:
                    self._publisher = self._publisher_factory()
                    logger.info("Transform broadcaster channel initialized")
        return self._publisher

    def now(self) -> float:
        return self._clock()

    def publish(self, record: TransformRecord) -> None:
        """Send a single record through the channel."""
        self.channel.send_transform(record)

    def on_tick(self) -> Tuple[TransformRecord, TransformRecord]:
        """
        Publish both animated frames for the current counter, then advance it.

        Each record is stamped when it is computed, so the pair may carry
        slightly different stamps. If the channel cannot be created, the
        records are computed but not sent and the counter still advances.

        Returns:
            (moving frame record, rotating frame record)
        """
        channel = self._channel_for_tick()
        counter = self._counter

        moving = moving_frame_transform(counter, self._clock(), self.base_frame)
        rotating = rotating_frame_transform(counter, self._clock(), self.base_frame)

        if channel is not None:
            logger.debug(f"Broadcasting TF: {moving.parent_frame_id} -> {moving.child_frame_id}")
            channel.send_transform(moving)
            channel.send_transform(rotating)

        self._counter = (counter + 1) % COUNTER_MODULUS
        return moving, rotating

    def _channel_for_tick(self) -> Optional[TransformPublisher]:
        """Channel for this tick, or None if creating it failed."""
        try:
            channel = self.channel
        except Exception as e:
            # First failure logs as ERROR, repeats as DEBUG
            if self._channel_error is None:
                logger.error(f"Transform channel unavailable, skipping publish: {e}")
            else:
                logger.debug(f"Transform channel still unavailable: {e}")
            self._channel_error = str(e)
            return None

        if self._channel_error is not None:
            logger.info("Transform channel recovered")
            self._channel_error = None
        return channel


class WallTimer:
    """
    Calls a callback at a fixed period on a background daemon thread.

    Ticks are never skipped: a slow callback simply delays the next one.
    Callback errors are logged and do not stop the timer.
    """

    def __init__(self, period: float, callback: Callable[[], object],
                 name: str = "wall-timer"):
        if period <= 0:
            raise ValueError(f"Timer period must be positive, got {period}")
        self.period = period
        self._callback = callback
        self._name = name

        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._lock = threading.Lock()

        self._tick_count: int = 0
        self._last_error: Optional[str] = None
        self._in_error_state: bool = False  # For log rate-limiting

    @property
    def tick_count(self) -> int:
        return self._tick_count

    def get_last_error(self) -> Optional[str]:
        return self._last_error

    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> bool:
        """Start the timer thread. Returns False if already running."""
        with self._lock:
            if self.is_running():
                logger.warning(f"Timer '{self._name}' already running, skipping start")
                return False
            self._stop_event.clear()
            self._thread = threading.Thread(target=self._run, name=self._name, daemon=True)
            self._thread.start()
        logger.info(f"Timer '{self._name}' started at {1.0 / self.period:.0f} Hz")
        return True

    def stop(self, timeout: float = 1.0) -> None:
        """Stop the timer thread and wait for it to finish."""
        with self._lock:
            self._stop_event.set()
            thread = self._thread
            self._thread = None
        if thread is not None:
            thread.join(timeout=timeout)
            logger.info(f"Timer '{self._name}' stopped after {self._tick_count} ticks")

    def _run(self):
        """Background thread: invoke the callback every period."""
        while not self._stop_event.is_set():
            try:
                self._callback()
                if self._in_error_state:
                    logger.info(f"Timer '{self._name}' recovered")
                    self._in_error_state = False
            except Exception as e:
                self._last_error = str(e)
                # First error logs as ERROR, subsequent as DEBUG
                if not self._in_error_state:
                    logger.error(f"Error in timer '{self._name}': {e}")
                    self._in_error_state = True
                else:
                    logger.debug(f"Error in timer '{self._name}' (repeated): {e}")
            self._tick_count += 1

            self._stop_event.wait(self.period)
