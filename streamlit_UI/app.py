"""Streamlit front-end for the awakening enhancement simulator."""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional

import altair as alt
import pandas as pd
import streamlit as st

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from awakening_core import (
    DEFAULT_PRICES,
    Distribution,
    MarketPrices,
    MonteCarloSummary,
    PercentileStats,
    ResourceLimits,
    SimulationConfig,
    SimulationResult,
    StrategyResult,
    format_number,
    format_silver,
    load_price_presets,
    roman,
    run_hepta_okta_strategy,
    run_monte_carlo,
    run_restoration_strategy,
    save_price_presets,
    simulate_single,
)

LEVEL_OPTIONS = list(range(0, 11))
PRESET_CUSTOM_LABEL = "Custom"
PRICE_PRESET_PATH = Path(__file__).resolve().parent / "price_presets.json"
PRICE_LABELS = {
    "crystal_price": "Pristine Black Crystal",
    "restoration_bundle_price": "Restoration Scrolls (per 1000)",
    "valks10_price": "Valks +10%",
    "valks50_price": "Valks +50%",
    "valks100_price": "Valks +100%",
}
LIMIT_LABELS = {
    "crystals": "Crystals",
    "scrolls": "Restoration scrolls",
    "valks10": "Valks +10%",
    "valks50": "Valks +50%",
    "valks100": "Valks +100%",
    "exquisite": "Exquisite crystals",
}


def reset_results() -> None:
    """Clear cached results so the UI reflects new inputs."""

    st.session_state.single_result = None
    st.session_state.monte_carlo_result = None
    st.session_state.strategy_results = None
    st.session_state.sim_error = None


def ensure_session_state_defaults() -> None:
    """Populate Streamlit session state with expected default entries."""

    st.session_state.setdefault("single_result", None)
    st.session_state.setdefault("monte_carlo_result", None)
    st.session_state.setdefault("strategy_results", None)
    st.session_state.setdefault("sim_error", None)
    st.session_state.setdefault("start_level", 0)
    st.session_state.setdefault("target_level", 9)
    st.session_state.setdefault("restoration_from", 6)
    st.session_state.setdefault("valks10_from", 1)
    st.session_state.setdefault("valks50_from", 3)
    st.session_state.setdefault("valks100_from", 5)
    st.session_state.setdefault("use_hepta", False)
    st.session_state.setdefault("use_okta", False)
    st.session_state.setdefault("simulation_runs_input", 10_000)
    st.session_state.setdefault("simulation_seed_input", 42)
    st.session_state.setdefault("selected_price_preset", PRESET_CUSTOM_LABEL)
    for name, value in DEFAULT_PRICES.items():
        st.session_state.setdefault(f"price_{name}", value)
    for name in LIMIT_LABELS:
        st.session_state.setdefault(f"limit_{name}_enabled", False)
        st.session_state.setdefault(f"limit_{name}", 0)


def level_selectbox(label: str, key: str, allow_never: bool = False) -> None:
    st.selectbox(
        label,
        options=LEVEL_OPTIONS,
        key=key,
        format_func=lambda level: "Never" if allow_never and level == 0 else roman(level),
        on_change=reset_results,
    )


def render_configuration() -> None:
    """Render the awakening configuration inputs."""

    with st.container(border=True):
        st.markdown("**Awakening configuration**")
        col_start, col_target = st.columns(2)
        with col_start:
            level_selectbox("Start level", "start_level")
        with col_target:
            level_selectbox("Target level", "target_level")

        level_selectbox("Restoration from", "restoration_from", allow_never=True)

        st.caption("Valks' Advice (all eligible Valks stack)")
        col_10, col_50, col_100 = st.columns(3)
        with col_10:
            level_selectbox("+10% from", "valks10_from", allow_never=True)
        with col_50:
            level_selectbox("+50% from", "valks50_from", allow_never=True)
        with col_100:
            level_selectbox("+100% from", "valks100_from", allow_never=True)

        col_hepta, col_okta = st.columns(2)
        col_hepta.checkbox("Use Hepta (VII→VIII)", key="use_hepta", on_change=reset_results)
        col_okta.checkbox("Use Okta (VIII→IX)", key="use_okta", on_change=reset_results)


def apply_price_preset() -> None:
    selected = st.session_state.selected_price_preset
    presets = load_price_presets(PRICE_PRESET_PATH)
    if selected not in presets:
        return
    for name, value in presets[selected].items():
        st.session_state[f"price_{name}"] = value
    reset_results()


def save_current_prices(name: str) -> None:
    presets = load_price_presets(PRICE_PRESET_PATH)
    presets[name] = {key: int(st.session_state[f"price_{key}"]) for key in PRICE_LABELS}
    save_price_presets(presets, PRICE_PRESET_PATH)


def render_prices() -> MarketPrices:
    """Render market price inputs and return the resulting price table."""

    with st.container(border=True):
        st.markdown("**Market prices (silver)**")
        presets = load_price_presets(PRICE_PRESET_PATH)
        st.selectbox(
            "Price preset",
            options=[PRESET_CUSTOM_LABEL] + sorted(presets),
            key="selected_price_preset",
            on_change=apply_price_preset,
        )
        for name, label in PRICE_LABELS.items():
            st.number_input(
                label,
                min_value=0,
                step=1_000_000,
                key=f"price_{name}",
                on_change=reset_results,
            )
        col_name, col_save = st.columns([3, 1])
        preset_name = col_name.text_input("Save current prices as", key="new_preset_name")
        if col_save.button("Save preset") and preset_name.strip():
            save_current_prices(preset_name.strip())
            st.success(f"Saved preset '{preset_name.strip()}'.")
    return MarketPrices(**{name: int(st.session_state[f"price_{name}"]) for name in PRICE_LABELS})


def render_limits() -> Optional[ResourceLimits]:
    """Render optional resource caps; returns ``None`` when nothing is capped."""

    with st.expander("Resource limits"):
        caps: dict[str, Optional[int]] = {}
        for name, label in LIMIT_LABELS.items():
            enabled_col, value_col = st.columns([1.0, 1.4])
            enabled = enabled_col.checkbox(label, key=f"limit_{name}_enabled")
            value_col.number_input(
                label,
                min_value=0,
                step=1,
                key=f"limit_{name}",
                disabled=not enabled,
                label_visibility="collapsed",
            )
            caps[name] = int(st.session_state[f"limit_{name}"]) if enabled else None
    limits = ResourceLimits(**caps)
    return None if limits.is_unlimited() else limits


def build_config(prices: MarketPrices) -> SimulationConfig:
    state = st.session_state
    return SimulationConfig(
        start_level=int(state.start_level),
        target_level=int(state.target_level),
        restoration_from=int(state.restoration_from),
        use_hepta=bool(state.use_hepta),
        use_okta=bool(state.use_okta),
        valks10_from=int(state.valks10_from),
        valks50_from=int(state.valks50_from),
        valks100_from=int(state.valks100_from),
        prices=prices,
    )


def steps_dataframe(result: SimulationResult) -> pd.DataFrame:
    """Return the step history of a recorded run as a table."""

    rows = []
    for index, step in enumerate(result.steps or (), start=1):
        if step.is_hepta_okta:
            action = f"{step.path_name} {step.sub_progress} (pity {step.sub_pity})"
        else:
            action = f"{roman(step.starting_level)} → {roman(step.starting_level + 1)}"
        rows.append(
            {
                "#": index,
                "Attempt": action,
                "Result": "Success" if step.success else "Fail",
                "Anvil": "✓" if step.anvil_triggered else "",
                "Valks": step.valks_used or "",
                "Restoration": (
                    ("Saved" if step.restoration_success else "Failed")
                    if step.restoration_attempted
                    else ""
                ),
                "Level": roman(step.ending_level),
            }
        )
    return pd.DataFrame(rows)


def render_single_result(result: SimulationResult) -> None:
    with st.container(border=True):
        st.markdown("**Single run**")
        cols = st.columns(3)
        cols[0].metric("Attempts", f"{result.attempts:,}")
        cols[1].metric("Crystals", f"{result.crystals:,}")
        cols[2].metric("Scrolls", f"{result.scrolls:,}")
        cols = st.columns(3)
        cols[0].metric("Silver", format_number(result.silver))
        cols[1].metric("Level drops", f"{result.level_drops:,}")
        cols[2].metric("Anvil triggers", f"{result.anvil_triggers:,}")
        st.dataframe(steps_dataframe(result), hide_index=True, use_container_width=True)


def percentile_table(summary: MonteCarloSummary) -> pd.DataFrame:
    rows: dict[str, PercentileStats] = {
        "Silver": summary.silver,
        "Crystals": summary.crystals,
        "Scrolls": summary.scrolls,
        "Exquisite": summary.exquisite,
        "Attempts": summary.attempts,
        "Level drops": summary.level_drops,
        "Anvil triggers": summary.anvil_triggers,
    }
    return pd.DataFrame(
        [
            {
                "Resource": name,
                "Average": format_number(stats.average),
                "P50": format_number(stats.p50),
                "P90": format_number(stats.p90),
                "P99": format_number(stats.p99),
                "Worst": format_number(stats.worst),
            }
            for name, stats in rows.items()
        ]
    )


def histogram_chart(distribution: Distribution, color: str = "#6366f1") -> alt.Chart:
    chart_data = pd.DataFrame(
        {
            "bin_start": [bucket.min for bucket in distribution.buckets],
            "bin_end": [bucket.max for bucket in distribution.buckets],
            "probability": [bucket.percentage / 100 for bucket in distribution.buckets],
            "cumulative": [bucket.cumulative_percentage / 100 for bucket in distribution.buckets],
        }
    )
    histogram = alt.Chart(chart_data).mark_bar(color=color, opacity=0.9).encode(
        x=alt.X("bin_start:Q", title="Silver"),
        x2="bin_end:Q",
        y=alt.Y("probability:Q", title="Probability", axis=alt.Axis(format=".0%")),
        tooltip=[
            alt.Tooltip("bin_start:Q", title="From", format=",.0f"),
            alt.Tooltip("bin_end:Q", title="To", format=",.0f"),
            alt.Tooltip("probability:Q", title="Probability", format=".2%"),
            alt.Tooltip("cumulative:Q", title="Cumulative", format=".2%"),
        ],
    )
    return histogram.properties(height=240).configure_view(strokeOpacity=0)


def render_monte_carlo(summary: MonteCarloSummary) -> None:
    """Render aggregate metrics, the cost histogram and the survival curve."""

    with st.container(border=True):
        st.markdown("**Monte Carlo results**")
        cols = st.columns(3)
        cols[0].metric("Success rate", f"{summary.success_rate * 100:.2f}%")
        cols[1].metric("Cost per success", format_number(summary.expected_cost_per_success))
        cols[2].metric("Attempts to succeed", f"{summary.expected_attempts_to_succeed:.2f}")
        st.dataframe(percentile_table(summary), hide_index=True, use_container_width=True)
        st.caption(f"{summary.num_simulations:,} runs in {summary.compute_seconds:.2f} s")

        if summary.distribution is not None:
            st.markdown("**Silver distribution**")
            st.altair_chart(histogram_chart(summary.distribution), use_container_width=True)
        if summary.failed_distribution is not None and summary.failed_distribution.buckets:
            st.markdown("**Silver spent by failed runs**")
            st.altair_chart(
                histogram_chart(summary.failed_distribution, color="#ef4444"),
                use_container_width=True,
            )
        if summary.survival_curve:
            curve = pd.DataFrame(
                {
                    "silver": [point.silver for point in summary.survival_curve],
                    "success": [point.success_rate / 100 for point in summary.survival_curve],
                }
            )
            st.markdown("**Success probability by budget**")
            st.altair_chart(
                alt.Chart(curve)
                .mark_line(color="#10b981")
                .encode(
                    x=alt.X("silver:Q", title="Budget (silver)"),
                    y=alt.Y("success:Q", title="Success", axis=alt.Axis(format=".0%")),
                    tooltip=[
                        alt.Tooltip("silver:Q", title="Budget", format=",.0f"),
                        alt.Tooltip("success:Q", title="Success", format=".1%"),
                    ],
                )
                .properties(height=200),
                use_container_width=True,
            )


def strategy_dataframe(results: list[StrategyResult]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Strategy": result.label,
                "P50 silver": format_silver(result.p50.silver),
                "P90 silver": format_silver(result.p90.silver),
                "Worst silver": format_silver(result.worst.silver),
                "P50 crystals": result.p50.crystals,
                "P50 exquisite": result.p50.exquisite,
                "Success": f"{result.success_rate * 100:.1f}%",
                "": result.recommendation or ("" if result.feasible else "Infeasible"),
            }
            for result in results
        ]
    )


def main() -> None:
    """Entry point used by Streamlit."""

    st.set_page_config(page_title="Awakening Simulator", layout="centered")
    ensure_session_state_defaults()
    st.title("Awakening Enhancement Simulator")

    render_configuration()
    prices = render_prices()
    limits = render_limits()

    with st.container(border=True):
        st.markdown("**Monte Carlo settings**")
        col_runs, col_seed = st.columns(2)
        col_runs.number_input("Runs", min_value=1, max_value=1_000_000, step=1000, key="simulation_runs_input")
        col_seed.number_input("Seed", min_value=0, step=1, key="simulation_seed_input")
        buttons = st.columns(4)
        run_single = buttons[0].button("Single run")
        run_batch = buttons[1].button("Monte Carlo", type="primary")
        run_restoration = buttons[2].button("Restoration finder")
        run_hepta_okta = buttons[3].button("Hepta/Okta finder")

    try:
        config = build_config(prices)
        seed = int(st.session_state.simulation_seed_input)
        runs = int(st.session_state.simulation_runs_input)
        if run_single:
            st.session_state.single_result = simulate_single(config, seed=seed)
        if run_batch:
            bar = st.progress(0.0)
            with st.spinner("Running simulations…"):
                st.session_state.monte_carlo_result = run_monte_carlo(
                    config,
                    runs=runs,
                    seed=seed,
                    limits=limits,
                    progress=lambda pct: bar.progress(min(1.0, pct / 100)),
                )
        if run_restoration:
            with st.spinner("Comparing restoration levels…"):
                st.session_state.strategy_results = run_restoration_strategy(
                    config, runs, seed=seed, limits=limits
                )
        if run_hepta_okta:
            with st.spinner("Comparing Hepta/Okta plans…"):
                st.session_state.strategy_results = run_hepta_okta_strategy(
                    config, runs, seed=seed, limits=limits
                )
    except ValueError as exc:
        st.session_state.sim_error = str(exc)

    if st.session_state.sim_error:
        st.error(f"Simulation failed: {st.session_state.sim_error}")
    if isinstance(st.session_state.single_result, SimulationResult):
        render_single_result(st.session_state.single_result)
    if isinstance(st.session_state.monte_carlo_result, MonteCarloSummary):
        render_monte_carlo(st.session_state.monte_carlo_result)
    if st.session_state.strategy_results:
        with st.container(border=True):
            st.markdown("**Strategy finder**")
            st.dataframe(
                strategy_dataframe(st.session_state.strategy_results),
                hide_index=True,
                use_container_width=True,
            )


if __name__ == "__main__":
    main()
