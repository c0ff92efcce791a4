"""
Audit event type for scope validation.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional


SCOPE_VALIDATION = "scope_validation"
POLICY_NOT_APPLICABLE = "policy_not_applicable"


@dataclass
class AuditEvent:
    """Audit event for a scope validation call"""
    event_type: str
    client_id: str
    details: Dict[str, Any] = field(default_factory=dict)
    principal: Optional[str] = None
    resource: Optional[str] = None
    event_id: str = ""
    timestamp: datetime = field(default_factory=datetime.now)

    def __post_init__(self):
        if not self.event_id:
            self.event_id = str(uuid.uuid4())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_id": self.event_id,
            "event_type": self.event_type,
            "client_id": self.client_id,
            "timestamp": self.timestamp.isoformat(),
            "details": self.details,
            "principal": self.principal,
            "resource": self.resource,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AuditEvent":
        return cls(
            event_id=data["event_id"],
            event_type=data["event_type"],
            client_id=data["client_id"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            details=data.get("details", {}),
            principal=data.get("principal"),
            resource=data.get("resource"),
        )
