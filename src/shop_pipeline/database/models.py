"""Data models for the database layer."""

import json
from dataclasses import dataclass
from datetime import datetime
from typing import Optional


@dataclass
class WorkOrder:
    id: Optional[str] = None
    client_name: str = ""
    vehicle: str = ""  # e.g. "Toyota Corolla (ABC-123)"
    service_requested: str = ""
    stage: str = "reception"
    status: str = "scheduled"
    diagnostic_data: str = "{}"    # JSON object recorded at intake
    linked_quote_ids: str = "[]"   # JSON array of quote ids
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @property
    def diagnostic_dict(self) -> dict:
        try:
            data = json.loads(self.diagnostic_data) if self.diagnostic_data else {}
        except (json.JSONDecodeError, TypeError):
            return {}
        return data if isinstance(data, dict) else {}

    @property
    def linked_quote_id_list(self) -> list[str]:
        try:
            ids = json.loads(self.linked_quote_ids) if self.linked_quote_ids else []
        except (json.JSONDecodeError, TypeError):
            return []
        if not isinstance(ids, list):
            return []
        return [str(i) for i in ids]

    @property
    def has_diagnostic(self) -> bool:
        return bool(self.diagnostic_dict)

    @property
    def is_canceled(self) -> bool:
        return self.status == "canceled" or self.stage == "canceled"


@dataclass
class Quote:
    id: Optional[str] = None
    work_order_id: Optional[str] = None
    status: str = "draft"
    total: float = 0.0
    notes: str = ""
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


@dataclass
class StageHistoryEntry:
    """One recorded stage transition of a work order."""
    id: Optional[int] = None
    work_order_id: str = ""
    stage: str = ""
    previous_stage: str = ""
    user_label: str = ""
    notes: str = ""
    created_at: Optional[datetime] = None


@dataclass
class Notification:
    id: Optional[int] = None
    work_order_id: Optional[str] = None
    title: str = ""
    message: str = ""
    severity: str = "info"
    source: str = "system"
    is_read: int = 0
    created_at: Optional[datetime] = None

