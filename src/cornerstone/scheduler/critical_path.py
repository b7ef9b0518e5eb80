"""Slack computation and critical path extraction."""

from .cpm import NodeTiming
from .dates import days_between


def compute_slack(timing: NodeTiming) -> int | None:
    """Total float in days: latest finish minus earliest finish.

    Negative float only arises when pinned dates contradict the dependency
    network; it is reported as zero so the node counts as critical.
    """
    if timing.earliest is None or timing.latest is None:
        return None
    return max(0, days_between(timing.earliest.finish, timing.latest.finish))


def extract_critical_path(order: list[str], timings: dict[str, NodeTiming]) -> list[str]:
    """Zero-slack nodes in topological order.

    Every zero-slack node is included, so disconnected critical chains all
    appear, interleaved according to ``order``.
    """
    return [node_id for node_id in order if compute_slack(timings[node_id]) == 0]
