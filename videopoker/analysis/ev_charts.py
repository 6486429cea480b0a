"""Interactive Plotly charts and pandas tables for the trainer.

Four public functions:

    build_ev_figure(analysis, top_n)
        — Horizontal bar chart of hold patterns by expected value, with the
          optimal and player holds highlighted.
    build_pay_table_figure(table)
        — Heatmap of the pay table, hand category × bet size.
    ev_table(analysis)
        — pandas DataFrame of every hold, best first.
    save_figure_html(fig, path)
        — Export any figure to a self-contained HTML file.

Hovering a bar shows the kept cards, the number of cards drawn and whether
the value is exact or sampled.
"""

from __future__ import annotations

import math

import pandas as pd
import plotly.graph_objects as go

from videopoker.engine.cards import hand_to_str
from videopoker.engine.hand_evaluator import HandType
from videopoker.engine.pay_table import JACKS_OR_BETTER_9_6, MAX_BET, PayTable
from videopoker.solvers.ev_calculator import EVAnalysis

# ─── Constants ────────────────────────────────────────────────────────────────

_COLOR_OPTIMAL: str = "#2ca02c"
_COLOR_PLAYER: str = "#d62728"
_COLOR_BOTH: str = "#1f77b4"
_COLOR_OTHER: str = "#b0b0b0"


# ─── EV chart ─────────────────────────────────────────────────────────────────


def _bar_color(index: int, player_index: int | None) -> str:
    if index == 0 and player_index == 0:
        return _COLOR_BOTH
    if index == 0:
        return _COLOR_OPTIMAL
    if index == player_index:
        return _COLOR_PLAYER
    return _COLOR_OTHER


def build_ev_figure(analysis: EVAnalysis, top_n: int | None = 10) -> go.Figure:
    """Bar chart of the ``top_n`` best holds (all when None), best at the top.

    The player's hold is always shown, appended below the cut if it ranks
    outside ``top_n``.
    """
    combos = list(analysis.combinations)
    player_index = analysis.player_rank - 1 if analysis.player_rank is not None else None

    shown = list(range(len(combos) if top_n is None else min(top_n, len(combos))))
    if player_index is not None and player_index not in shown:
        shown.append(player_index)

    labels, values, colors, hovers = [], [], [], []
    for i in shown:
        combo = combos[i]
        labels.append(f"#{i + 1} {combo.description}")
        values.append(combo.expected_value)
        colors.append(_bar_color(i, player_index))
        hovers.append(
            f"Keep: {hand_to_str(combo.kept_cards) or '(nothing)'}<br>"
            f"Draw: {combo.discard_count}<br>"
            f"EV: {combo.expected_value:.4f}<br>"
            f"{'exact' if combo.is_exact else 'sampled'}"
        )

    fig = go.Figure(
        go.Bar(
            x=values,
            y=labels,
            orientation="h",
            marker_color=colors,
            hovertext=hovers,
            hoverinfo="text",
        )
    )
    title = f"Hold EV for {hand_to_str(analysis.hand)} (bet {analysis.bet})"
    if not analysis.is_complete:
        title += " (estimate)"
    fig.update_layout(
        title=title,
        xaxis_title="Expected payout (credits)",
        yaxis=dict(autorange="reversed"),
        height=max(300, 32 * len(shown) + 120),
        margin=dict(l=220),
    )
    return fig


# ─── Pay table chart ──────────────────────────────────────────────────────────


def build_pay_table_figure(table: PayTable = JACKS_OR_BETTER_9_6) -> go.Figure:
    """Heatmap of payouts; colour is log-scaled so the royal does not wash out the rest."""
    rows = sorted(table, key=lambda t: HandType(t).value, reverse=True)
    payouts = [list(table[t]) for t in rows]
    fig = go.Figure(
        go.Heatmap(
            z=[[math.log10(max(v, 1)) for v in row] for row in payouts],
            x=[f"{b} credit{'s' if b > 1 else ''}" for b in range(1, MAX_BET + 1)],
            y=[HandType(t).label for t in rows],
            text=payouts,
            texttemplate="%{text}",
            colorscale="YlGn",
            showscale=False,
            hovertemplate="%{y} at %{x}: %{text}<extra></extra>",
        )
    )
    fig.update_layout(
        title="Pay table",
        yaxis=dict(autorange="reversed"),
        height=420,
    )
    return fig


def save_figure_html(fig: go.Figure, path: str) -> None:
    """Write ``fig`` to a standalone HTML file (Plotly JS loaded from CDN)."""
    fig.write_html(path, include_plotlyjs="cdn")


# ─── Tables ───────────────────────────────────────────────────────────────────


def ev_table(analysis: EVAnalysis) -> pd.DataFrame:
    """One row per hold pattern, best first, for st.dataframe or export."""
    player = analysis.player_choice.holds if analysis.player_choice is not None else None
    rows = []
    for rank, combo in enumerate(analysis.combinations, start=1):
        rows.append(
            {
                "Rank": rank,
                "Hold": combo.description,
                "Kept": hand_to_str(combo.kept_cards),
                "Draw": combo.discard_count,
                "EV": round(combo.expected_value, 4),
                "Exact": combo.is_exact,
                "Yours": combo.holds == player,
            }
        )
    return pd.DataFrame(rows)
