from __future__ import annotations
from typing import Dict, List, Optional, Sequence, Tuple
import math
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib.figure import Figure

from impact_app.core.scoring import SCALE_MAX, DomainScoreSummary

LABEL_LIMIT = 20


def shorten_label(name: str, limit: int = LABEL_LIMIT) -> str:
    if len(name) <= limit:
        return name
    return name[: limit - 3] + "..."


def radar_points(
    summaries: Sequence[DomainScoreSummary],
    domain_names: Dict[str, str],
) -> List[Tuple[str, float]]:
    """(label, average) for each started domain, in summary order."""
    return [
        (shorten_label(domain_names.get(s.domain_id, s.domain_id)), s.average_score)
        for s in summaries
        if s.completed_count > 0
    ]


def radar_chart(
    summaries: Sequence[DomainScoreSummary],
    domain_names: Dict[str, str],
    scale_max: int = SCALE_MAX,
) -> Optional[Figure]:
    """Radar of started domains; None when nothing has been answered yet."""
    points = radar_points(summaries, domain_names)
    if not points:
        return None

    labels = [label for label, _ in points]
    values = [value for _, value in points]
    step = 2 * math.pi / len(points)
    angles = [i * step for i in range(len(points))]

    fig, ax = plt.subplots(figsize=(6, 6), subplot_kw={"projection": "polar"})
    ax.set_theta_offset(math.pi / 2)
    ax.set_theta_direction(-1)
    ax.set_xticks(angles)
    ax.set_xticklabels(labels)
    ax.set_ylim(0, scale_max)
    ax.set_rgrids(range(2, scale_max + 1, 2), color="#999999", fontsize=8)

    ring = angles + angles[:1]
    ax.plot(ring, values + values[:1], color="#2563eb", linewidth=2, marker="o")
    ax.fill(ring, values + values[:1], color="#3b82f6", alpha=0.3)
    return fig
