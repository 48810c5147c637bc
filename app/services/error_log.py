import os
import tempfile
import threading
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence

from app.schemas.error_log import ErrorEvent, ErrorLogState
from app.utils.logging import get_logger

ERROR_WINDOW = timedelta(hours=24)


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def prune_events(
    events: Sequence[ErrorEvent], now: datetime, window: timedelta = ERROR_WINDOW
) -> List[ErrorEvent]:
    """Keep the events strictly newer than ``now - window``, in order."""
    cutoff = now - window
    return [event for event in events if event.timestamp > cutoff]


class ErrorLog:
    """Rolling record of upstream/internal failures plus the request counter.

    The whole aggregate is written to ``path`` after every mutation so the
    counter and recent errors survive a restart. Writes replace the file
    atomically; a failed write is logged and otherwise ignored.
    """

    def __init__(
        self,
        path: str,
        clock: Callable[[], datetime] = utcnow,
        window: timedelta = ERROR_WINDOW,
    ):
        self.path = path
        self.window = window
        self._clock = clock
        self._state = ErrorLogState()
        self._lock = threading.RLock()

    @property
    def events(self) -> List[ErrorEvent]:
        with self._lock:
            return list(self._state.errors)

    @property
    def total_requests(self) -> int:
        return self._state.total_requests

    def now(self) -> datetime:
        return self._clock()

    def initialize(self) -> None:
        logger = get_logger()
        with self._lock:
            state = self._load()
            if state is not None:
                self._state = state
                logger.info(
                    f"Error log loaded from {self.path}: "
                    f"{len(state.errors)} errors, {state.total_requests} requests"
                )
                return
            self._state = ErrorLogState()
            self.persist()

    def _load(self) -> Optional[ErrorLogState]:
        if not os.path.exists(self.path):
            return None
        logger = get_logger()
        try:
            with open(self.path, "rb") as fh:
                raw = fh.read()
            return ErrorLogState.model_validate_json(raw)
        # pydantic ValidationError and UnicodeDecodeError are both ValueErrors
        except (OSError, ValueError) as exc:
            logger.warning(f"Discarding unreadable error log {self.path}: {exc}")
            return None

    def increment_request_count(self) -> int:
        with self._lock:
            self._state.total_requests += 1
            return self._state.total_requests

    def log_error(self, error: BaseException) -> ErrorEvent:
        with self._lock:
            now = self._clock()
            event = ErrorEvent(timestamp=now, message=str(error))
            self._state.errors = prune_events(
                [*self._state.errors, event], now, self.window
            )
            self.persist()
            return event

    def recent_errors(self, now: Optional[datetime] = None) -> List[ErrorEvent]:
        with self._lock:
            return prune_events(self._state.errors, now or self._clock(), self.window)

    def persist(self) -> bool:
        with self._lock:
            payload = self._state.model_dump_json(by_alias=True)
            directory = os.path.dirname(os.path.abspath(self.path))
            try:
                fd, tmp_path = tempfile.mkstemp(
                    dir=directory, prefix=".error_log.", suffix=".tmp"
                )
                try:
                    with os.fdopen(fd, "w", encoding="utf-8") as fh:
                        fh.write(payload)
                    os.replace(tmp_path, self.path)
                except OSError:
                    if os.path.exists(tmp_path):
                        os.unlink(tmp_path)
                    raise
            except OSError as exc:
                get_logger().error(f"Failed to persist error log to {self.path}: {exc}")
                return False
            return True
