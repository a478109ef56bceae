"""
Balatro Engine Web App
Streamlit interface for playing a run and for running simulations.
"""

import pandas as pd
import streamlit as st

from balatro_engine.engine.game import GameController
from balatro_engine.engine.hand_detector import HandType, hand_type_name
from balatro_engine.engine.jokers import joker_effect_description
from balatro_engine.engine.scoring import score_display_lines
from balatro_engine.engine.state import GamePhase
from balatro_engine.engine.strategy import BasicStrategy
from balatro_engine.presets import PRESETS, build_controller
from balatro_engine.simulator import Simulator

# Page config
st.set_page_config(
    page_title="Balatro Engine",
    page_icon="🃏",
    layout="wide"
)

st.title("🃏 Balatro Engine")
st.markdown("*Poker-hand scoring roguelike*")


# Initialize simulator (cached)
@st.cache_resource
def get_simulator():
    return Simulator()


sim = get_simulator()

# Sidebar for settings
st.sidebar.header("Settings")

preset_options = list(PRESETS.keys())
selected_preset = st.sidebar.selectbox(
    "Preset",
    options=preset_options,
    format_func=lambda x: PRESETS[x].name
)
preset = PRESETS[selected_preset]
st.sidebar.markdown(f"*{preset.description}*")

seed = st.sidebar.number_input("Seed", min_value=0, value=42, step=1)
mode = st.sidebar.radio("Mode", ["Play", "Single Run", "Batch Runs"])

if mode == "Batch Runs":
    num_runs = st.sidebar.slider("Number of Runs", min_value=10, max_value=500, value=100, step=10)

st.divider()


def hand_scores_chart(rows: list[dict]):
    if not rows:
        return
    chart_data = pd.DataFrame(rows)
    chart_data.index = range(1, len(chart_data) + 1)
    chart_data.index.name = "Hand"
    st.bar_chart(chart_data[["score"]])


def render_play(game: GameController):
    s = game.state

    col1, col2, col3, col4, col5 = st.columns(5)
    col1.metric("Round", f"{s.current_round}/{game.config.max_rounds}")
    col2.metric("Score", f"{s.current_score:,} / {s.target_score:,}")
    col3.metric("Money", f"${s.money}")
    col4.metric("Hands", s.hands_left)
    col5.metric("Discards", s.discards_left)

    if s.jokers:
        st.subheader("🃏 Jokers")
        for joker in s.jokers:
            c1, c2 = st.columns([5, 1])
            c1.markdown(f"**{joker.name}** ({joker.rarity.value}): {joker_effect_description(joker)}")
            if c2.button(f"Sell ${joker.sell_value}", key=f"sell-{joker.id}"):
                game.sell_joker(joker.id)
                st.rerun()

    if s.phase == GamePhase.PLAYING:
        st.subheader("✋ Hand")
        cols = st.columns(max(1, len(s.hand)))
        for col, card in zip(cols, s.hand):
            label = f"[{card.display_name}]" if card.is_selected else card.display_name
            if col.button(label, key=f"card-{card.id}"):
                if card.is_selected:
                    game.deselect_card(card.id)
                else:
                    game.select_card(card.id)
                st.rerun()

        preview = game.preview_score()
        if preview:
            st.code("\n".join(score_display_lines(preview)))

        c1, c2, c3, c4 = st.columns(4)
        if c1.button("Play Hand", type="primary", disabled=not s.selected_cards):
            game.play_hand()
            st.rerun()
        if c2.button("Discard", disabled=not s.selected_cards or s.discards_left == 0):
            game.discard_cards()
            st.rerun()
        if c3.button("Suggest"):
            game.apply_recommendation(BasicStrategy().select_cards_to_play(game))
            st.rerun()
        if c4.button("Clear"):
            game.clear_selection()
            st.rerun()

    elif s.phase == GamePhase.SHOP:
        st.subheader("🛒 Shop")
        for item in s.shop_items:
            c1, c2 = st.columns([5, 1])
            c1.markdown(f"**{item.name}**: {item.description}")
            if c2.button(f"Buy ${item.cost}", key=f"buy-{item.id}", disabled=s.money < item.cost):
                game.buy_shop_item(item.id)
                st.rerun()

        with st.expander("📈 Upgrade a hand type"):
            for hand_type in HandType:
                cfg = s.hand_type_configs[hand_type]
                c1, c2 = st.columns([5, 1])
                c1.markdown(f"{hand_type_name(hand_type)} Lv.{cfg.level}: "
                            f"{cfg.base_chips} Chips x {cfg.base_multiplier} Mult")
                if c2.button(f"${cfg.upgrade_cost}", key=f"up-{hand_type.value}",
                             disabled=s.money < cfg.upgrade_cost):
                    game.upgrade_hand_type(hand_type)
                    st.rerun()

        c1, c2 = st.columns(2)
        if c1.button(f"Reroll (${s.shop_refresh_cost})", disabled=s.money < s.shop_refresh_cost):
            game.refresh_shop()
            st.rerun()
        if c2.button("Next Round", type="primary"):
            game.exit_shop()
            st.rerun()

    elif s.phase == GamePhase.GAME_OVER:
        st.error(f"💀 DEFEAT in round {s.current_round}")
    elif s.phase == GamePhase.GAME_COMPLETED:
        st.success("🏆 VICTORY!")

    st.subheader("Hand Scores")
    hand_scores_chart(game.history.get_hand_scores())

    st.download_button("Download save", game.save_game(), file_name="balatro_save.json")


if mode == "Play":
    if "game" not in st.session_state or st.sidebar.button("New Game"):
        game = build_controller(selected_preset, seed=int(seed))
        game.start_game()
        st.session_state.game = game

    render_play(st.session_state.game)

elif mode == "Single Run":
    if st.button("🎲 Run Simulation", type="primary", use_container_width=True):
        with st.spinner("Running simulation..."):
            result = sim.run(selected_preset, seed=int(seed))

        if result.victory:
            st.success("🏆 VICTORY!")
        else:
            st.error("💀 DEFEAT")

        col1, col2, col3, col4 = st.columns(4)
        with col1:
            st.metric("Round Reached", result.round_reached)
        with col2:
            st.metric("Rounds Won", f"{result.rounds_won}/{result.max_rounds}")
        with col3:
            st.metric("Final Money", f"${result.final_money}")
        with col4:
            st.metric("Best Hand", f"{result.best_hand_score:,}")

        st.subheader("📜 Run Timeline")
        for detail in result.round_history:
            icon = "✅" if detail.success else "❌"
            margin_str = f"+{detail.margin_pct:.0f}%" if detail.margin_pct > 0 else f"{detail.margin_pct:.0f}%"
            with st.expander(f"{icon} Round {detail.round} ({detail.score:,} / {detail.required:,}) {margin_str}"):
                col1, col2, col3 = st.columns(3)
                with col1:
                    st.write(f"**Hands Used:** {detail.hands_used}")
                with col2:
                    st.write(f"**Discards Used:** {detail.discards_used}")
                with col3:
                    st.write(f"**Money Earned:** ${detail.money_earned}")
                for row in (h for h in result.hand_scores if h["round"] == detail.round):
                    score_bar = "█" * min(20, max(1, row["score"] // 100))
                    st.code(f"{row['hand_type']:20} {row['score']:>8,} {score_bar}")

        st.subheader("Hand Scores")
        hand_scores_chart(result.hand_scores)

        col1, col2 = st.columns(2)
        with col1:
            st.subheader("🃏 Jokers")
            if result.jokers_collected:
                for joker in result.jokers_collected:
                    st.markdown(f"- {joker}")
            else:
                st.markdown("*None collected*")
        with col2:
            st.subheader("📈 Hand Levels")
            leveled = {k: v for k, v in result.hand_levels.items() if v > 1}
            if leveled:
                for hand, level in sorted(leveled.items(), key=lambda x: -x[1])[:8]:
                    st.markdown(f"**{hand}:** Lv.{level} {'▓' * (level - 1)}")
            else:
                st.markdown("*No upgrades*")

else:  # Batch mode
    if st.button("🎲 Run Simulation", type="primary", use_container_width=True):
        with st.spinner(f"Running {num_runs} simulations..."):
            result = sim.run_batch(selected_preset, runs=num_runs, seed=int(seed))

        st.subheader(f"Results ({num_runs} runs)")
        if result.win_rate > 50:
            st.success(f"🏆 Win Rate: {result.wins}/{result.runs} ({result.win_rate:.1f}%)")
        elif result.win_rate > 0:
            st.warning(f"Win Rate: {result.wins}/{result.runs} ({result.win_rate:.1f}%)")
        else:
            st.error(f"Win Rate: {result.wins}/{result.runs} ({result.win_rate:.1f}%)")

        col1, col2, col3, col4 = st.columns(4)
        with col1:
            st.metric("Avg Rounds Won", f"{result.avg_rounds:.1f}")
        with col2:
            st.metric("Max Round", result.max_round)
        with col3:
            st.metric("Avg Money", f"${result.avg_money:.0f}")
        with col4:
            st.metric("Avg Jokers", f"{result.avg_jokers:.1f}")

        st.subheader("Round Distribution")
        chart_data = pd.DataFrame({
            'Round': list(result.round_distribution.keys()),
            'Runs': list(result.round_distribution.values())
        }).sort_values('Round')
        st.bar_chart(chart_data.set_index('Round'))

# Footer
st.divider()
st.markdown("*Built with the Balatro engine*")
