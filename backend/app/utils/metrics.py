"""Prometheus metrics for the access-control core."""

from prometheus_client import Counter

pin_verifications_total = Counter(
    "pin_verifications_total",
    "Total PIN verification attempts",
    ["outcome"],
)

document_reads_total = Counter(
    "document_reads_total",
    "Total document read checks",
    ["action", "outcome"],
)

access_request_transitions_total = Counter(
    "access_request_transitions_total",
    "Total accepted access request status transitions",
    ["status"],
)

access_requests_created_total = Counter(
    "access_requests_created_total",
    "Total access requests submitted",
)
