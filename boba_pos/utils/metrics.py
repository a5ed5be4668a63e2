"""
Prometheus registry and the order/rewards counters recorded by the services.

The /metrics blueprint serves this registry; services import their counters
from here.
"""
import os

from prometheus_client import Counter, CollectorRegistry
from prometheus_client import multiprocess, REGISTRY

# Check if running in multi-process mode (Gunicorn)
MULTIPROCESS_MODE = os.environ.get('PROMETHEUS_MULTIPROC_DIR') is not None

# Use multiprocess registry in production with Gunicorn
if MULTIPROCESS_MODE:
    registry = CollectorRegistry()
    multiprocess.MultiProcessCollector(registry)
else:
    registry = REGISTRY

# Metrics register with the default registry in multi-process mode
metric_registry = registry if not MULTIPROCESS_MODE else None

# Order settlement metrics
orders_submitted_total = Counter(
    'pos_orders_submitted_total',
    'Orders persisted successfully',
    ['payment_method'],
    registry=metric_registry
)

order_failures_total = Counter(
    'pos_order_failures_total',
    'Settlements rejected before or during persistence',
    ['reason'],
    registry=metric_registry
)

rewards_accrual_failures_total = Counter(
    'pos_rewards_accrual_failures_total',
    'Orders that completed but whose rewards points were not recorded',
    registry=metric_registry
)
