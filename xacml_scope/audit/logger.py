"""
Audit logging for scope validation.
"""

from abc import ABC, abstractmethod
from typing import List, Optional
from datetime import datetime
import asyncio
import json
import logging
from collections import deque

from .types import AuditEvent

logger = logging.getLogger(__name__)


class AuditLogger(ABC):
    """Abstract base class for audit logging"""

    @abstractmethod
    async def log(self, event: AuditEvent) -> None:
        """Log an audit event"""
        pass

    @abstractmethod
    async def get_events(
        self,
        client_id: Optional[str] = None,
        event_type: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        """Retrieve audit events with optional filtering"""
        pass

    async def close(self) -> None:
        """Close the audit logger and release resources"""
        pass


def _matches(event: AuditEvent, client_id: Optional[str], event_type: Optional[str],
             start_time: Optional[datetime], end_time: Optional[datetime]) -> bool:
    if client_id and event.client_id != client_id:
        return False
    if event_type and event.event_type != event_type:
        return False
    if start_time and event.timestamp < start_time:
        return False
    if end_time and event.timestamp > end_time:
        return False
    return True


class MemoryAuditLogger(AuditLogger):
    """In-memory audit logger for development and testing"""

    def __init__(self, max_entries: int = 1000):
        self.max_entries = max_entries
        self.events: deque = deque(maxlen=max_entries)
        self._lock = asyncio.Lock()

    async def log(self, event: AuditEvent) -> None:
        async with self._lock:
            self.events.append(event)

    async def get_events(
        self,
        client_id: Optional[str] = None,
        event_type: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        async with self._lock:
            return [
                event for event in self.events
                if _matches(event, client_id, event_type, start_time, end_time)
            ]


class FileAuditLogger(AuditLogger):
    """File-based audit logger writing one JSON object per line"""

    def __init__(self, file_path: str):
        self.file_path = file_path
        self._lock = asyncio.Lock()

    async def log(self, event: AuditEvent) -> None:
        async with self._lock:
            with open(self.file_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(event.to_dict()) + "\n")

    async def get_events(
        self,
        client_id: Optional[str] = None,
        event_type: Optional[str] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[AuditEvent]:
        events = []

        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                for line in f:
                    try:
                        event = AuditEvent.from_dict(json.loads(line.strip()))
                    except (json.JSONDecodeError, KeyError, ValueError):
                        logger.warning(f"Skipping malformed audit line in {self.file_path}")
                        continue

                    if _matches(event, client_id, event_type, start_time, end_time):
                        events.append(event)

        except FileNotFoundError:
            # Nothing logged yet
            pass

        return events


def create_audit_logger(logger_type: str = "memory", **kwargs) -> AuditLogger:
    """
    Factory function to create audit loggers

    Args:
        logger_type: Type of logger ("memory" or "file")
        **kwargs: Additional arguments for the logger

    Returns:
        AuditLogger instance
    """
    if logger_type == "memory":
        return MemoryAuditLogger(kwargs.get("max_entries", 1000))
    elif logger_type == "file":
        return FileAuditLogger(kwargs.get("file_path", "audit.log"))
    else:
        raise ValueError(f"Unknown logger type: {logger_type}")
