"""Prometheus exposition of the current session snapshot.

The collector reads the published snapshot at scrape time, so every scrape
renders one complete cycle and series for logged-out users vanish as soon
as a newer snapshot is published.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator

from prometheus_client.core import GaugeMetricFamily, Metric
from prometheus_client.registry import Collector, CollectorRegistry

from userexporter.sessions.models import AggregateSnapshot

SESSION_LABELS = ("username", "from", "tty", "login_time")


class SessionMetricsCollector(Collector):
    """Custom collector rendering an AggregateSnapshot as gauges."""

    def __init__(self, get_snapshot: Callable[[], AggregateSnapshot | None]) -> None:
        self._get_snapshot = get_snapshot

    def collect(self) -> Iterator[Metric]:
        snapshot = self._get_snapshot()

        total = GaugeMetricFamily(
            "unix_users_logged_in_total",
            "Total number of users currently logged in",
        )
        info = GaugeMetricFamily(
            "unix_user_session_info",
            "Information about user sessions",
            labels=SESSION_LABELS,
        )
        per_user = GaugeMetricFamily(
            "unix_user_session_count",
            "Number of sessions per user",
            labels=["username"],
        )
        per_origin = GaugeMetricFamily(
            "unix_user_session_by_ip",
            "Number of sessions per origin IP",
            labels=["ip"],
        )

        if snapshot is None:
            total.add_metric([], 0)
        else:
            total.add_metric([], snapshot.total_sessions)
            for fact in sorted(
                snapshot.sessions,
                key=lambda f: (f.user, f.origin, f.terminal, f.login_time),
            ):
                info.add_metric(
                    [fact.user, fact.origin, fact.terminal, fact.login_time], 1
                )
            for user, count in sorted(snapshot.per_user_count.items()):
                per_user.add_metric([user], count)
            for origin, count in sorted(snapshot.per_origin_count.items()):
                per_origin.add_metric([origin], count)

        yield total
        yield info
        yield per_user
        yield per_origin


def build_registry(
    get_snapshot: Callable[[], AggregateSnapshot | None],
) -> CollectorRegistry:
    """Private registry holding only the session collector."""
    registry = CollectorRegistry()
    registry.register(SessionMetricsCollector(get_snapshot))
    return registry
