from typing import List, Optional

from connection_stats import ConnectionStatistics, StatisticsSnapshot
from console import CYAN, paint


def _percent(value: Optional[float]) -> str:
    if value is None:
        return "n/a"
    return f"{value:.2f}%"


def _ms(seconds: float) -> str:
    return f"{seconds * 1000:.2f}ms"


def format_report(snapshot: StatisticsSnapshot) -> List[str]:
    lines = [
        "",
        "Connection statistics:",
        "Attempted = {}, Connected = {}, Failed = {} ({})".format(
            paint(snapshot.attempted, CYAN),
            paint(snapshot.connected, CYAN),
            paint(snapshot.failed, CYAN),
            paint(_percent(snapshot.success_rate), CYAN),
        ),
        "Completed = {}, success rate over completed probes = {}".format(
            paint(snapshot.completed, CYAN),
            paint(_percent(snapshot.completion_rate), CYAN),
        ),
        "Approximate connection times:",
    ]
    if snapshot.connected > 0:
        lines.append(
            " Minimum = {}, Maximum = {}, Average = {}".format(
                paint(_ms(snapshot.min_latency), CYAN),
                paint(_ms(snapshot.max_latency), CYAN),
                paint(_ms(snapshot.average_latency), CYAN),
            )
        )
        lines.append(" Average handshake = {}".format(paint(_ms(snapshot.average_handshake), CYAN)))
    return lines


def print_report(stats: ConnectionStatistics):
    # printed under the lock so probe lines cannot interleave with the report
    with stats.lock:
        for line in format_report(stats.snapshot(locked=True)):
            print(line)
