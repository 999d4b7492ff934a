from __future__ import annotations

from datetime import datetime
from pathlib import Path
from zoneinfo import ZoneInfo

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt
from matplotlib import font_manager
from matplotlib.ticker import MaxNLocator

from aocbot.models import RankedMember

GOLD = "#FFD700"
SILVER = "#9E9E9E"
BAR_COLOR = "#00A86B"


def _apply_font(font_path: str | None) -> None:
    if font_path:
        font_manager.fontManager.addfont(font_path)
        name = font_manager.FontProperties(fname=font_path).get_name()
        plt.rcParams["font.sans-serif"] = [name]
    plt.rcParams["axes.unicode_minus"] = False


def render_leaderboard_chart(
    output_path: Path,
    ranked: list[RankedMember],
    event: str,
    sort: str,
    generated_at: datetime,
    tz: ZoneInfo,
    font_path: str | None,
) -> Path:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    _apply_font(font_path)

    # Best rank at the top of the chart.
    rows = list(reversed(ranked))
    labels = [f"{len(ranked) - i}. {r.display_name}" for i, r in enumerate(rows)]
    if sort == "stars":
        values = [r.stars for r in rows]
        xlabel = "Stars"
    else:
        values = [r.local_score for r in rows]
        xlabel = "Local Score"

    fig, ax = plt.subplots(figsize=(12, max(3.0, 0.45 * len(rows) + 1.5)))
    fig.suptitle(
        f"Advent of Code {event} Leaderboard ({generated_at.astimezone(tz).strftime('%Y-%m-%d %H:%M %Z')})",
        fontsize=14,
    )

    if rows:
        colors = [BAR_COLOR] * len(rows)
        colors[-1] = GOLD
        if len(rows) > 1:
            colors[-2] = SILVER
        bars = ax.barh(labels, values, color=colors, alpha=0.9)
        for bar, r, value in zip(bars, rows, values, strict=False):
            ax.text(
                bar.get_width() + 0.2,
                bar.get_y() + bar.get_height() / 2,
                f"{value} ({r.stars}*)" if sort != "stars" else str(value),
                va="center",
                fontsize=8,
            )
        ax.set_xlim(0, max(values + [0]) * 1.15 + 1)
    else:
        ax.text(0.5, 0.5, "No data", ha="center", va="center", transform=ax.transAxes)
        ax.axis("off")

    ax.set_xlabel(xlabel)
    ax.xaxis.set_major_locator(MaxNLocator(integer=True))
    fig.tight_layout()
    fig.savefig(output_path, dpi=150)
    plt.close(fig)
    return output_path
