"""
Component Audit Service - append-only history of component changes

Every UPDATE or REPLACE request appends exactly one snapshot row. Rows are
never updated or deleted, and a failed write is raised to the caller so the
request reports the failure instead of silently losing history.
"""

import uuid
from datetime import date, datetime, timezone
from typing import TYPE_CHECKING, Any, Dict

from ...utils.async_utils import run_sync
from ...utils.logging_config import get_logger

if TYPE_CHECKING:
    from ...core.dependencies import CosmosService


class ComponentAuditService:
    """Writes component audit snapshots to the audit container"""

    def __init__(self, cosmos_service: "CosmosService"):
        self.cosmos = cosmos_service
        self.logger = get_logger(__name__)

    async def insert_component_audit_log(self, snapshot: Dict[str, Any]) -> Dict[str, Any]:
        """
        Append one audit row.

        Args:
            snapshot: Component values plus ``helper_column`` action tag

        Returns:
            The stored audit document
        """
        audit_entry = {
            key: value.isoformat() if isinstance(value, (datetime, date)) else value
            for key, value in snapshot.items()
        }
        audit_entry["id"] = str(uuid.uuid4())
        audit_entry["type"] = "component_audit"
        audit_entry.setdefault("timestamp", datetime.now(timezone.utc).isoformat())

        container = self.cosmos.get_container("component_audit_logs")
        try:
            stored = await run_sync(container.upsert_item, body=audit_entry)
        except Exception:
            self.logger.exception(
                "Failed to store component audit log",
                extra={"component_id": snapshot.get("component_id"), "action": snapshot.get("action")},
            )
            raise

        self.logger.info(
            f"✅ Audit log stored: {audit_entry.get('action')} for component {audit_entry.get('component_id')}"
        )
        return stored
