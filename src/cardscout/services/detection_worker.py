"""
Threaded detection worker for CardScout.

Runs nearby-card detection in a background thread so that reverse
geocoding never blocks the caller, and keeps results in request order.
"""

import logging
import queue
import threading
from typing import TYPE_CHECKING, Callable, Sequence

from ..core.models import RewardCard, UserLocation
from ..core.result import NearbyCardResult

if TYPE_CHECKING:
    from ..core.detector import NearbyCardDetector

logger = logging.getLogger(__name__)

_Request = tuple[int, UserLocation, Sequence[RewardCard]]


class DetectionWorker:
    """
    Background worker for running detection on location updates.

    Uses a producer-consumer pattern:
    - Caller submits location updates to the request queue
    - Worker thread runs detection and calls the result callback

    Every request is stamped with a sequence number. A result is delivered
    only if it is newer than the last delivered one, so a slow lookup
    finishing after a newer one cannot overwrite it.
    """

    def __init__(
        self,
        detector: "NearbyCardDetector",
        on_result: Callable[[int, NearbyCardResult], None],
        max_queue_size: int = 2,
    ):
        """
        Initialize the detection worker.

        Args:
            detector: NearbyCardDetector instance to run.
            on_result: Callback called with (sequence, result) for each delivered result.
            max_queue_size: Maximum pending requests (oldest dropped if full).
        """
        self.detector = detector
        self.on_result = on_result
        self.max_queue_size = max_queue_size

        self._queue: queue.Queue[_Request | None] = queue.Queue(maxsize=max_queue_size)
        self._worker_thread: threading.Thread | None = None
        self._running = False
        self._lock = threading.Lock()
        self._next_sequence = 0
        self._last_delivered = 0

        # Statistics
        self.requests_processed = 0
        self.requests_dropped = 0
        self.results_discarded = 0

    def start(self) -> None:
        """Start the detection worker thread."""
        if self._running:
            logger.warning("DetectionWorker already running")
            return

        self._running = True
        self._worker_thread = threading.Thread(
            target=self._worker_loop,
            name="DetectionWorker",
            daemon=True,
        )
        self._worker_thread.start()
        logger.info("DetectionWorker started")

    def stop(self) -> None:
        """Stop the detection worker thread."""
        if not self._running:
            return

        self._running = False

        try:
            self._queue.put_nowait(None)
        except queue.Full:
            pass

        if self._worker_thread is not None:
            self._worker_thread.join(timeout=2.0)
            self._worker_thread = None

        logger.info(
            f"DetectionWorker stopped: "
            f"processed={self.requests_processed}, "
            f"dropped={self.requests_dropped}, "
            f"discarded={self.results_discarded}"
        )

    def submit(self, location: UserLocation, cards: Sequence[RewardCard]) -> int | None:
        """
        Submit a location update for detection.

        If the queue is full, the oldest pending request is dropped.

        Args:
            location: Current GPS fix.
            cards: Cards to match, in insertion order.

        Returns:
            Sequence number of the request, or None if the worker is not running.
        """
        if not self._running:
            return None

        with self._lock:
            self._next_sequence += 1
            sequence = self._next_sequence

        request = (sequence, location, list(cards))
        try:
            self._queue.put_nowait(request)
        except queue.Full:
            try:
                self._queue.get_nowait()
                self.requests_dropped += 1
            except queue.Empty:
                pass
            try:
                self._queue.put_nowait(request)
            except queue.Full:
                return None
        return sequence

    def _deliver(self, sequence: int, result: NearbyCardResult) -> bool:
        """Deliver a result unless a newer one was already delivered."""
        with self._lock:
            if sequence <= self._last_delivered:
                self.results_discarded += 1
                logger.debug(f"Discarding stale detection result #{sequence}")
                return False
            self._last_delivered = sequence

        if self.on_result is not None:
            self.on_result(sequence, result)
        return True

    def _worker_loop(self) -> None:
        """Main worker loop - processes requests from queue."""
        logger.debug("DetectionWorker loop started")

        while self._running:
            try:
                request = self._queue.get(timeout=0.1)
            except queue.Empty:
                continue

            if request is None:
                break

            sequence, location, cards = request
            try:
                result = self.detector.detect(location, cards)
                self.requests_processed += 1
                self._deliver(sequence, result)
            except Exception as e:
                logger.error(f"Detection error: {e}")

        logger.debug("DetectionWorker loop exited")

    @property
    def is_running(self) -> bool:
        """Check if worker is running."""
        return self._running

    @property
    def queue_size(self) -> int:
        """Get current queue size."""
        return self._queue.qsize()

    @property
    def last_delivered(self) -> int:
        """Sequence number of the most recently delivered result."""
        return self._last_delivered
