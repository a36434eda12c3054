"""Service request domain types and normalization."""

from registrack.core.requests.normalizer import (
    DroppedRecord,
    NormalizationReport,
    RecordShape,
    active_requests,
    classify_status,
    find_request,
    is_terminal_status,
    normalize_service_requests,
    normalize_with_report,
    partition_by_status,
    sort_follow_ups,
    terminal_requests,
)
from registrack.core.requests.types import (
    TERMINAL_STATUSES,
    AvailableStatuses,
    Client,
    Employee,
    FollowUp,
    FollowUpCreate,
    Service,
    ServiceRequest,
    StatusKind,
)

__all__ = [
    "ServiceRequest",
    "FollowUp",
    "FollowUpCreate",
    "Client",
    "Employee",
    "Service",
    "AvailableStatuses",
    "StatusKind",
    "TERMINAL_STATUSES",
    "RecordShape",
    "DroppedRecord",
    "NormalizationReport",
    "normalize_service_requests",
    "normalize_with_report",
    "is_terminal_status",
    "classify_status",
    "partition_by_status",
    "active_requests",
    "terminal_requests",
    "find_request",
    "sort_follow_ups",
]
