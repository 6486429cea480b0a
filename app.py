"""Jacks or Better Trainer — Streamlit front-end.

Five tabs:
  Tab 1 — Play              (deal, hold, draw; your hold scored against the EV engine)
  Tab 2 — Hand Analyzer     (all 32 holds for any hand, Plotly chart + table)
  Tab 3 — Bankroll          (Monte Carlo variance, horizon and session bankroll)
  Tab 4 — Advisor Report    (random hands where the advisor is not optimal)
  Tab 5 — Pay Table

All game logic lives in the videopoker package; this file only renders.

Run:
    streamlit run app.py
"""

from __future__ import annotations

import contextlib
import io

import pandas as pd
import streamlit as st

from videopoker.engine.cards import card_to_pretty, parse_hand
from videopoker.engine.game_state import DEFAULT_CREDITS, Phase
from videopoker.engine.hand_evaluator import classify, winning_positions
from videopoker.engine.pay_table import MAX_BET, MIN_BET, RETURN_TO_PLAYER_9_6
from videopoker.trainer import Trainer

# ─── Page config ──────────────────────────────────────────────────────────────

st.set_page_config(
    page_title="Jacks or Better Trainer",
    page_icon="🃏",
    layout="wide",
)

# ─── Cached computations ──────────────────────────────────────────────────────


@st.cache_resource
def _analyze(hand_text: str, bet: int):
    """Exact analysis of a typed-in hand (cached per hand text and bet)."""
    from videopoker.solvers.ev_calculator import analyze

    return analyze(parse_hand(hand_text), bet)


@st.cache_resource
def _simulate(n_hands: int, bet: int):
    from videopoker.analysis.simulator import advisor_strategy, simulate_hands

    return simulate_hands(advisor_strategy, n_hands=n_hands, bet=bet, seed=42, return_payouts=True)


def _trainer() -> Trainer:
    if "trainer" not in st.session_state:
        st.session_state["trainer"] = Trainer()
    return st.session_state["trainer"]


def _render_cards(hand, highlight=()) -> None:
    cols = st.columns(len(hand))
    for i, (col, card) in enumerate(zip(cols, hand)):
        label = f"**{card_to_pretty(card)}**" if i in highlight else card_to_pretty(card)
        col.markdown(f"### {label}")


# ─── Sidebar controls ─────────────────────────────────────────────────────────

trainer = _trainer()

with st.sidebar:
    st.title("🃏 Jacks or Better 9/6")
    st.markdown("---")

    st.metric("Credits", trainer.state.credits)
    bet = st.select_slider(
        "Bet (credits)",
        options=list(range(MIN_BET, MAX_BET + 1)),
        value=trainer.state.bet,
        disabled=trainer.state.phase == Phase.DEALT,
    )
    if bet != trainer.state.bet and trainer.state.phase != Phase.DEALT:
        try:
            trainer.set_bet(bet)
        except ValueError as exc:
            st.error(str(exc))

    st.markdown("---")
    stats = trainer.stats
    st.metric("Decision accuracy", f"{stats.accuracy:.1f}%")
    st.caption(f"{stats.correct_decisions} optimal of {stats.total_hands} hands")

    st.markdown("---")
    start_credits = st.number_input(
        "Starting credits", min_value=MAX_BET, value=DEFAULT_CREDITS, step=100
    )
    if st.button("New session"):
        trainer.close()
        st.session_state["trainer"] = Trainer(credits=int(start_credits))
        st.rerun()

# ─── Tabs ─────────────────────────────────────────────────────────────────────

tab1, tab2, tab3, tab4, tab5 = st.tabs(
    ["Play", "Hand Analyzer", "Bankroll", "Advisor Report", "Pay Table"]
)

# ── Tab 1: Play ───────────────────────────────────────────────────────────────

with tab1:
    state = trainer.state

    if state.phase == Phase.DEALT:
        st.subheader(f"Round {state.round_id}: choose your holds")
        cols = st.columns(len(state.hand))
        holds = []
        for i, (col, card) in enumerate(zip(cols, state.hand)):
            col.markdown(f"### {card_to_pretty(card)}")
            holds.append(col.checkbox("Hold", key=f"hold_{state.round_id}_{i}"))

        with st.expander("Advisor hint"):
            advice = trainer.advise()
            st.write(f"**{advice.pattern}**: {advice.explanation}")
            st.caption(f"Typical EV ≈ {advice.expected_value:.2f} per credit")

        if st.button("Draw", type="primary"):
            trainer.set_holds(holds)
            with st.spinner("Drawing and scoring your hold …"):
                trainer.draw()
            st.rerun()
    else:
        if st.button("Deal", type="primary"):
            try:
                trainer.deal_round()
            except ValueError as exc:
                st.error(str(exc))
            else:
                st.rerun()

        if state.phase == Phase.DRAWN and trainer.last_draw is not None:
            result = trainer.last_draw
            _render_cards(result.final_hand, winning_positions(result.final_hand))
            if result.payout:
                st.success(f"{result.hand_result.description}: paid {result.payout}")
            else:
                st.info(f"{result.hand_result.description}: no win")

            analysis = trainer.last_analysis
            if analysis is not None:
                from videopoker.analysis.ev_charts import build_ev_figure, ev_table

                st.markdown("---")
                st.subheader("Your hold vs the best hold")
                col1, col2, col3 = st.columns(3)
                col1.metric("Your hold", analysis.player_choice.description)
                col2.metric("Best hold", analysis.optimal_choice.description)
                col3.metric("EV lost", f"{analysis.ev_loss:.4f}")
                st.caption(
                    f"Your hold ranked {analysis.player_rank} of {len(analysis.combinations)}"
                    + ("" if analysis.is_complete else " (estimate)")
                )
                st.plotly_chart(build_ev_figure(analysis), use_container_width=True)
                st.dataframe(ev_table(analysis), use_container_width=True, hide_index=True)
        elif state.phase == Phase.INITIAL:
            st.info("Press **Deal** to start a round.")

# ── Tab 2: Hand Analyzer ──────────────────────────────────────────────────────

with tab2:
    st.header("Hand Analyzer")
    st.caption("Cards as rank + suit, e.g. 10H JH QH KH 3C. Every hold is enumerated exactly.")

    col1, col2 = st.columns([3, 1])
    hand_text = col1.text_input("Hand", value="10H JH QH KH 3C")
    analyzer_bet = col2.selectbox("Bet", options=list(range(MIN_BET, MAX_BET + 1)), index=0)

    try:
        parsed = parse_hand(hand_text)
        with st.spinner("Enumerating all draws …"):
            analysis = _analyze(hand_text, analyzer_bet)
    except ValueError as exc:
        st.error(str(exc))
    else:
        from videopoker.analysis.ev_charts import build_ev_figure, ev_table
        from videopoker.solvers.strategy import advise

        _render_cards(parsed, winning_positions(parsed))
        advice = advise(parsed)
        col1, col2 = st.columns(2)
        col1.metric("Dealt hand", classify(parsed).description)
        col2.metric("Best hold", analysis.optimal_choice.description,
                    f"EV {analysis.optimal_choice.expected_value:.4f}")
        st.caption(f"Advisor: {advice.pattern} ({advice.explanation})")
        st.plotly_chart(build_ev_figure(analysis, top_n=None), use_container_width=True)
        st.dataframe(ev_table(analysis), use_container_width=True, hide_index=True)

# ── Tab 3: Bankroll ───────────────────────────────────────────────────────────

with tab3:
    from videopoker.analysis.bankroll import (
        compute_horizon_projections,
        compute_variance_stats,
        net_results,
        print_variance_report,
        session_bankroll,
    )

    st.header("Bankroll Analysis")
    st.caption("Advisor strategy simulated at the selected bet. Net result = payout − bet.")

    n_mc_hands = st.slider("Simulated hands", min_value=1_000, max_value=50_000,
                           value=2_000, step=1_000)
    with st.spinner(f"Simulating {n_mc_hands:,} hands …"):
        sim = _simulate(n_mc_hands, trainer.state.bet)
    net = net_results(sim.payouts, sim.bet)
    vs = compute_variance_stats(net)

    col1, col2, col3, col4 = st.columns(4)
    col1.metric("Return", f"{sim.return_pct:.2f}%")
    col2.metric("Std dev / hand", f"{vs.std:.2f}")
    col3.metric("Skewness", f"{vs.skewness:.2f}")
    col4.metric("Optimal play", f"{RETURN_TO_PLAYER_9_6:.2f}%")

    counts = pd.DataFrame(
        [{"Hand": t.label, "Count": n} for t, n in sorted(sim.hand_counts.items(), reverse=True)]
    )
    st.dataframe(counts, use_container_width=True, hide_index=True)

    proj = compute_horizon_projections(vs.mean, vs.std)
    sessions = [session_bankroll(net, hands, n_sessions=300) for hands in (500, 1_000, 5_000)]
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        print_variance_report(vs, proj, sessions, label=f"advisor, bet {sim.bet}")
    st.code(buf.getvalue(), language=None)

# ── Tab 4: Advisor Report ─────────────────────────────────────────────────────

with tab4:
    st.header("Advisor vs EV Engine")
    st.caption(
        "The quick advisor follows a fixed pattern list. Hands where its hold is "
        "not the best hold are listed with the EV it gives up."
    )
    n_report = st.number_input("Random hands", min_value=10, max_value=500, value=50, step=10)
    if st.button("Compare"):
        from videopoker.analysis.strategy_report import find_disagreements, print_disagreement_report

        with st.spinner(f"Analysing {n_report} hands exactly …"):
            found = find_disagreements(int(n_report))
        buf = io.StringIO()
        with contextlib.redirect_stdout(buf):
            print_disagreement_report(found, n_hands=int(n_report))
        st.code(buf.getvalue(), language=None)

# ── Tab 5: Pay Table ──────────────────────────────────────────────────────────

with tab5:
    from videopoker.analysis.ev_charts import build_pay_table_figure

    st.header("9/6 Jacks or Better")
    st.caption(
        f"Long-run return with optimal max-coin play: {RETURN_TO_PLAYER_9_6:.2f}%. "
        "The royal flush pays 4000 at five credits."
    )
    st.plotly_chart(build_pay_table_figure(), use_container_width=True)
