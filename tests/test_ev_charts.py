"""Tests for videopoker/analysis/ev_charts.py — Plotly figures and the EV table."""

from __future__ import annotations

import plotly.graph_objects as go
import pytest

from tests.conftest import hand
from videopoker.analysis.ev_charts import (
    build_ev_figure,
    build_pay_table_figure,
    ev_table,
    save_figure_html,
)
from videopoker.solvers.ev_calculator import analyze

HOLDS_DISCARD_ALL = (False,) * 5


@pytest.fixture(scope="module")
def analysis():
    return analyze(
        hand("10H", "JH", "QH", "KH", "3C"), 1,
        player_choice=HOLDS_DISCARD_ALL, sample_size=100, rng=0,
    )


class TestEVFigure:
    def test_returns_bar_figure(self, analysis):
        fig = build_ev_figure(analysis)
        assert isinstance(fig, go.Figure)
        assert fig.data[0].type == "bar"
        assert fig.data[0].orientation == "h"

    def test_top_n_plus_player(self, analysis):
        fig = build_ev_figure(analysis, top_n=3)
        labels = list(fig.data[0].y)
        if analysis.player_rank > 3:
            assert len(labels) == 4
            assert labels[-1].startswith(f"#{analysis.player_rank} ")
        else:
            assert len(labels) == 3

    def test_all_patterns(self, analysis):
        assert len(build_ev_figure(analysis, top_n=None).data[0].x) == 32

    def test_optimal_highlighted(self, analysis):
        colors = list(build_ev_figure(analysis).data[0].marker.color)
        assert colors[0] in ("#2ca02c", "#1f77b4")

    def test_estimate_in_title(self, analysis):
        assert "(estimate)" in build_ev_figure(analysis).layout.title.text


class TestPayTableFigure:
    def test_heatmap_shape(self):
        fig = build_pay_table_figure()
        trace = fig.data[0]
        assert trace.type == "heatmap"
        assert len(trace.y) == 9
        assert len(trace.x) == 5
        assert trace.y[0] == "Royal Flush"
        assert trace.text[0][4] == 4000


class TestEVTable:
    def test_one_row_per_pattern(self, analysis):
        df = ev_table(analysis)
        assert len(df) == 32
        assert list(df.columns) == ["Rank", "Hold", "Kept", "Draw", "EV", "Exact", "Yours"]
        assert df["Rank"].tolist() == list(range(1, 33))

    def test_marks_player_choice(self, analysis):
        df = ev_table(analysis)
        assert df["Yours"].sum() == 1
        assert df.loc[df["Yours"], "Hold"].item() == "Discard all"

    def test_sorted_by_ev(self, analysis):
        evs = ev_table(analysis)["EV"].tolist()
        assert evs == sorted(evs, reverse=True)


class TestSaveHtml:
    def test_writes_file(self, tmp_path, analysis):
        path = tmp_path / "ev.html"
        save_figure_html(build_ev_figure(analysis), str(path))
        assert path.exists()
        assert "plotly" in path.read_text(encoding="utf-8").lower()
