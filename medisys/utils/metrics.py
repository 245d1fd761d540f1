"""
Per-turn performance metrics.
Tracks node latency and the token usage reported by the model gateway.
"""

import time
from typing import Any
from contextvars import ContextVar

from medisys.utils.logger import get_logger

logger = get_logger(__name__)

metrics_ctx: ContextVar[dict[str, Any] | None] = ContextVar("metrics", default=None)


class MetricsTracker:
    """
    Collects timings and token counts for a single conversation turn.
    Creating a tracker binds it to the current context, so graph nodes and
    the gateway can report into it without holding a reference.
    """

    def __init__(self):
        self.metrics = {
            "node_timings": {},
            "tokens": {"input": 0, "output": 0, "total": 0},
            "model_calls": 0,
            "total_time": 0.0,
            "start_time": time.time(),
        }
        metrics_ctx.set(self.metrics)

    def finalize(self) -> dict[str, Any]:
        """
        Computes totals, logs them and returns the collected metrics.
        """
        self.metrics["total_time"] = time.time() - self.metrics["start_time"]

        node_summary = {}
        for node_name, timings in self.metrics["node_timings"].items():
            total_time = sum(
                t["end"] - t["start"] for t in timings if t["end"] is not None
            )
            node_summary[node_name] = {
                "total_time": total_time,
                "call_count": len(timings),
            }
        self.metrics["node_summary"] = node_summary

        logger.info(
            "turn_metrics",
            total_time=self.metrics["total_time"],
            model_calls=self.metrics["model_calls"],
            total_tokens=self.metrics["tokens"]["total"],
            node_summary=node_summary,
        )
        return self.metrics


def get_metrics() -> dict[str, Any] | None:
    return metrics_ctx.get()


def start_node_timing(node_name: str) -> None:
    """Starts timing a graph node if a tracker is active."""
    metrics = metrics_ctx.get()
    if metrics is None:
        return
    metrics["node_timings"].setdefault(node_name, []).append(
        {"start": time.time(), "end": None}
    )


def end_node_timing(node_name: str) -> float | None:
    """
    Ends timing a graph node.

    Returns:
        Elapsed seconds, or None if no tracker or no open timing exists
    """
    metrics = metrics_ctx.get()
    if not metrics or node_name not in metrics["node_timings"]:
        return None

    timings = metrics["node_timings"][node_name]
    if not timings or timings[-1]["end"] is not None:
        return None

    timings[-1]["end"] = time.time()
    elapsed = timings[-1]["end"] - timings[-1]["start"]
    logger.info("node_completed", node=node_name, elapsed=elapsed)
    return elapsed


def record_model_call(input_tokens: int = 0, output_tokens: int = 0) -> None:
    """Adds one model call and its token usage to the active tracker."""
    metrics = metrics_ctx.get()
    if metrics is None:
        return
    metrics["model_calls"] += 1
    metrics["tokens"]["input"] += input_tokens
    metrics["tokens"]["output"] += output_tokens
    metrics["tokens"]["total"] += input_tokens + output_tokens
