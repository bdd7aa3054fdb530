"""
Prometheus metrics configuration
"""
import os

from prometheus_client import (CONTENT_TYPE_LATEST, Counter, Histogram, Info,
                               generate_latest)
from prometheus_client.multiprocess import MultiProcessCollector
from prometheus_client.registry import REGISTRY

# Check if we're in multiprocess mode
if os.environ.get('PROMETHEUS_MULTIPROC_DIR'):
    MultiProcessCollector(REGISTRY)

# ============================================================================
# HTTP Request Metrics
# ============================================================================

http_requests_total = Counter(
    'http_requests_total',
    'Total number of HTTP requests',
    ['method', 'endpoint', 'status_code']
)

http_request_duration_seconds = Histogram(
    'http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint', 'status_code'],
    buckets=(0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0)
)

http_errors_total = Counter(
    'http_errors_total',
    'Total number of HTTP errors',
    ['method', 'endpoint', 'status_code', 'error_type']
)

# ============================================================================
# Database Metrics
# ============================================================================

db_queries_total = Counter(
    'db_queries_total',
    'Total number of database queries',
    ['operation']  # select, insert, update, delete
)

db_query_duration_seconds = Histogram(
    'db_query_duration_seconds',
    'Database query duration in seconds',
    ['operation'],
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0)
)

# ============================================================================
# Decision Lifecycle Metrics
# ============================================================================

decisions_created_total = Counter(
    'decisions_created_total',
    'Total number of decisions created',
    ['source', 'superseding']  # source: 'message', 'manual'
)

decision_status_changes_total = Counter(
    'decision_status_changes_total',
    'Total number of decision status transitions',
    ['status']
)

decisions_deleted_total = Counter(
    'decisions_deleted_total',
    'Total number of decisions deleted',
    ['via']  # via: 'delete', 'unmark'
)

decision_rule_violations_total = Counter(
    'decision_rule_violations_total',
    'Total number of rejected decision operations',
    ['error_type', 'operation']
)

classifier_verdicts_total = Counter(
    'classifier_verdicts_total',
    'Total number of classifier verdicts',
    ['suggest', 'category']
)

# ============================================================================
# Application Info
# ============================================================================

app_info = Info(
    'app',
    'Application information'
)

from decisionlog.core.config import get_settings

try:
    settings = get_settings()
    app_info.info({
        'app_name': settings.app_name,
        'app_env': settings.app_env,
        'version': '0.1.0'
    })
except Exception:
    pass  # Settings may not be available during import


def get_metrics():
    """
    Get Prometheus metrics in text format

    Returns:
        bytes: Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_metrics_content_type():
    """Get content type for Prometheus metrics"""
    return CONTENT_TYPE_LATEST
