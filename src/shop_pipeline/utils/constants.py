"""Application-wide constants."""

APP_NAME = "Shop-Pipeline"
APP_VERSION = "1.0.0"

# ── Display labels ───────────────────────────────────────────────
# Keyed by the stored value of each enum member (see pipeline.stages)

STAGE_LABELS = {
    "reception": "Reception",
    "diagnostic": "Diagnostic",
    "pending_quote": "Pending Quote",
    "awaiting_approval": "Awaiting Approval",
    "attention_required": "Attention Required",
    "in_repair": "In Repair",
    "quality_control": "Quality Control",
    "ready_for_delivery": "Ready for Delivery",
    "delivered": "Delivered",
    "canceled": "Canceled",
}

WORK_ORDER_STATUS_LABELS = {
    "scheduled": "Scheduled",
    "in_progress": "In Progress",
    "awaiting_parts": "Awaiting Parts",
    "ready": "Ready for Delivery",
    "invoiced": "Invoiced",
    "canceled": "Canceled",
}

# Statuses that take a work order off the active board
CLOSED_WORK_ORDER_STATUSES = ["invoiced", "canceled"]

# ── Notifications ────────────────────────────────────────────────
NOTIFICATION_SEVERITIES = ["info", "warning", "critical"]
NOTIFICATION_SOURCE_RECONCILE = "reconcile"

# ── Record numbering ─────────────────────────────────────────────
# Sequential ids render as PREFIX-0001 up to this value, then
# PREFIX-<thousands>.<remainder>
SEQUENTIAL_ID_PAD_LIMIT = 9999

