from __future__ import annotations
from typing import Dict, List, Optional
import matplotlib.pyplot as plt

from .range_map import Interval

def plot_domain_ranges(
    spans_dict: Dict[str, List[Interval]],
    title: str = "",
    show: bool = True,
    save_path: Optional[str] = None,
):
    """Draw each domain's ranges as a row of horizontal bars, first domain on top.
    Note: colors are left to Matplotlib defaults.
    """
    labels = list(spans_dict)
    fig, ax = plt.subplots(figsize=(12, 0.6 * max(len(labels), 1) + 1.5))
    for row, label in enumerate(labels):
        spans = spans_dict[label]
        if not spans:
            continue
        ax.broken_barh([(s, e - s) for (s, e) in spans], (row - 0.4, 0.8), alpha=0.6)
    ax.set_yticks(range(len(labels)))
    ax.set_yticklabels(labels)
    ax.invert_yaxis()
    ax.set_title(title)
    ax.set_xlabel("Value")
    fig.tight_layout()
    if save_path:
        fig.savefig(save_path, dpi=150, bbox_inches="tight")
    if show:
        plt.show()
    plt.close(fig)
