"""Prometheus metrics for monitoring allowances, risk levels and kill-switch outcomes"""

from prometheus_client import Counter, Histogram

# Engine metrics
engine_run_counter = Counter(
    "spend_guard_engine_runs_total",
    "Total safe-to-spend computations",
    ["outcome"],  # ok | config_missing | data_unavailable
)

risk_score_histogram = Histogram(
    "spend_guard_risk_score",
    "Distribution of computed risk scores",
    buckets=[10, 25, 50, 75, 100],
)

# Kill-switch metrics
kill_switch_decision_counter = Counter(
    "spend_guard_kill_switch_decisions_total",
    "Kill-switch verdicts by level and status",
    ["level", "status"],  # GREEN..RED x ALLOWED | WARNING | BLOCKED
)

kill_switch_fail_open_counter = Counter(
    "kill_switch_fail_open_total",
    "Transactions allowed because the engine failed",
)

# Ledger metrics
ledger_read_failures_counter = Counter(
    "ledger_read_failures_total",
    "Failed ledger or config store reads",
)

# Service health
request_duration_histogram = Histogram(
    "http_request_duration_seconds",
    "HTTP request latency",
    ["method", "endpoint", "status"],
)


def record_engine_run(outcome: str, risk_score: int | None = None) -> None:
    """Record engine outcome and, when available, the risk score it produced"""
    engine_run_counter.labels(outcome=outcome).inc()
    if risk_score is not None:
        risk_score_histogram.observe(risk_score)


def record_kill_switch_decision(level: str, status: str) -> None:
    kill_switch_decision_counter.labels(level=level, status=status).inc()
