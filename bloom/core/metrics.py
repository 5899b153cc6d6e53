"""
Prometheus metrics configuration
"""
import os

from prometheus_client import (CONTENT_TYPE_LATEST, Counter, Histogram,
                               generate_latest)
from prometheus_client.multiprocess import MultiProcessCollector
from prometheus_client.registry import REGISTRY, CollectorRegistry

if os.environ.get("PROMETHEUS_MULTIPROC_DIR"):
    _registry = CollectorRegistry()
    MultiProcessCollector(_registry)
else:
    _registry = REGISTRY

# ============================================================================
# HTTP Request Metrics
# ============================================================================

http_requests_total = Counter(
    "http_requests_total",
    "Total number of HTTP requests",
    ["method", "endpoint", "status_code"]
)

http_request_duration_seconds = Histogram(
    "http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint", "status_code"],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_errors_total = Counter(
    "http_errors_total",
    "Total number of HTTP errors",
    ["method", "endpoint", "status_code", "error_type"]
)

# ============================================================================
# Database Metrics
# ============================================================================

db_queries_total = Counter(
    "db_queries_total",
    "Total number of database queries",
    ["operation"]
)

db_query_duration_seconds = Histogram(
    "db_query_duration_seconds",
    "Database query duration in seconds",
    ["operation"],
    buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0)
)

# ============================================================================
# Coaching Metrics
# ============================================================================

coaching_resolutions_total = Counter(
    "coaching_resolutions_total",
    "Component resolutions by outcome",
    ["module_id", "outcome"]  # outcome: 'exercise', 'not_found', 'coming_soon'
)

coaching_completions_total = Counter(
    "coaching_completions_total",
    "Exercise completions recorded",
    ["module_id", "component_id"]
)

# ============================================================================
# Funnel Metrics
# ============================================================================

leads_captured_total = Counter(
    "leads_captured_total",
    "Lead captures",
    ["source", "outcome"]  # outcome: 'created', 'updated'
)

conversion_events_total = Counter(
    "conversion_events_total",
    "Conversion events recorded",
    ["event_type"]
)

nurture_emails_scheduled_total = Counter(
    "nurture_emails_scheduled_total",
    "Nurture emails scheduled",
    ["template_type"]
)

nurture_emails_processed_total = Counter(
    "nurture_emails_processed_total",
    "Nurture emails processed by the dispatcher",
    ["template_type", "status"]  # status: 'sent', 'skipped', 'failed'
)

email_send_duration_seconds = Histogram(
    "email_send_duration_seconds",
    "Time spent calling the email provider",
    buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)


def get_metrics() -> bytes:
    """Render all metrics in Prometheus text format"""
    return generate_latest(_registry)


def get_metrics_content_type() -> str:
    return CONTENT_TYPE_LATEST
