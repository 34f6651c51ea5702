"""
In-memory activity log.

Keeps the most recent human-readable messages about what the monitor did
(webhooks received, emails sent, rows recorded, failures). It is a bounded
buffer, not an audit trail: entries are lost on restart.
"""
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from typing import Deque, Dict, List

import structlog

logger = structlog.get_logger(__name__)

DEFAULT_CAPACITY = 100


@dataclass(frozen=True)
class ActivityEntry:
    """A single timestamped activity message."""

    time: str
    message: str

    def to_dict(self) -> Dict[str, str]:
        return asdict(self)


class ActivityLog:
    """
    Bounded FIFO buffer of activity entries.

    Appends and reads happen between await points of a single request, so the
    buffer needs no lock under the asyncio execution model.
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise ValueError("Activity log capacity must be positive")
        self.capacity = capacity
        self._entries: Deque[ActivityEntry] = deque(maxlen=capacity)

    def record(self, message: str) -> ActivityEntry:
        """
        Append a message stamped with the current UTC time.

        The oldest entry is evicted once the buffer is full.

        Args:
            message: Human-readable message

        Returns:
            ActivityEntry: The stored entry
        """
        entry = ActivityEntry(
            time=datetime.now(timezone.utc).isoformat(timespec="milliseconds"),
            message=message,
        )
        self._entries.append(entry)
        logger.info("activity_logged", activity=message, activity_time=entry.time)
        return entry

    def read_recent(self, n: int) -> List[ActivityEntry]:
        """Return the last ``n`` entries, oldest first."""
        if n <= 0:
            return []
        return list(self._entries)[-n:]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
