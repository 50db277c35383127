import time
from pathlib import Path

import streamlit as st

from climate_story.config import PLAY_PERIOD_MS, SCENARIO_LABELS, DataPaths
from climate_story.controls import Button, CheckboxGroup, ControlRegistry, SearchInput, Slider
from climate_story.data import DataLoadError, load_geometry
from climate_story.panels import (
    Co2LinesPanel,
    CountryLinesPanel,
    ScatterPanel,
    ScenarioStoryPanel,
    SeaIcePanel,
    StripesMapPanel,
)

DATA_ROOT = Path("data")
GEOJSON = Path("world.geojson")

PAGE_CSS = """
<style>
.block-container { max-width: 1100px !important; }
.story-step { font-size: 1.05rem; padding: 12px 16px; border-left: 3px solid #888; margin: 8px 0; }
</style>
"""

st.set_page_config(page_title="ClimateStory", page_icon="🌍", layout="wide")
st.markdown(PAGE_CSS, unsafe_allow_html=True)


@st.cache_data(show_spinner=False)
def load_region_names(geojson_path: Path) -> list:
    try:
        regions = load_geometry(geojson_path)
    except DataLoadError as e:
        print(f"[WARN] country list unavailable: {e}")
        return []
    return sorted({r.name for r in regions if r.name})


def _registry() -> ControlRegistry:
    return ControlRegistry([
        CheckboxGroup("ssp-options"),
        CheckboxGroup("country-options"),
        SearchInput("country-search"),
        Button("select-all", "Select all"),
        Button("clear-all", "Clear"),
        Button("play-btn", "Play"),
        Button("reset-btn", "Reset"),
        Slider("year-slider"),
        Slider("map-year-slider"),
    ])


def _build_panels() -> dict:
    paths = DataPaths.from_root(DATA_ROOT, GEOJSON)
    reg = _registry()
    panels = {
        "co2": Co2LinesPanel("linechart", paths.co2_historical, paths.co2_predictions, reg),
        "story": ScenarioStoryPanel("scenario-story", paths.scenario_temps, reg),
        "countries": CountryLinesPanel("country-lines", paths.country_temps, reg),
        "scatter": ScatterPanel("scatter", paths.co2_vs_temp, reg),
        "stripes": StripesMapPanel("stripe-container", "map-container", paths.global_stripes,
                                   paths.country_anomalies, paths.world_geojson, reg),
        "ice": SeaIcePanel("sea-ice", paths.sea_ice, reg, period_ms=PLAY_PERIOD_MS),
    }
    loaded = [name for name, p in panels.items() if p.load()]
    print(f"[OK] panels loaded: {loaded}")
    return {"registry": reg, "panels": panels}


if "climate_story" not in st.session_state:
    st.session_state["climate_story"] = _build_panels()
state = st.session_state["climate_story"]
reg: ControlRegistry = state["registry"]
panels = state["panels"]


def _picked(event) -> list:
    if not event:
        return []
    return [dict(p) for p in event.selection.get("points", [])]


def _chart(panel, key: str) -> None:
    """Draw a panel figure; a newly clicked point is routed to the panel's `on_select`."""
    fig = panel.figure()
    if fig is None:
        st.info(f"{panel.container_id}: data not available")
        return
    event = st.plotly_chart(fig, use_container_width=True, key=key, on_select="rerun",
                            selection_mode="points", config={"displayModeBar": False})
    points = _picked(event)
    seen = [(p.get("curve_number"), p.get("point_index")) for p in points]
    last = st.session_state.get(f"{key}-picked", [])
    st.session_state[f"{key}-picked"] = seen
    # a redrawn figure comes back with an empty selection, which must not undo the click
    if points and seen != last:
        panel.on_select(points)
        st.rerun()


def _unpin(panel, key: str) -> None:
    if panel.crosshair is not None and panel.crosshair.tooltip.visible:
        if st.button("Hide tooltip", key=f"{key}-unpin"):
            panel.on_select([])
            st.rerun()


def _pull_boxes(boxes, prefix: str) -> None:
    # widget values from the previous interaction flow into the controls first
    for box in boxes:
        k = f"{prefix}-{box.value}"
        if k in st.session_state:
            box.set_checked(st.session_state[k])


def _box_widget(box, prefix: str, label: str) -> None:
    k = f"{prefix}-{box.value}"
    st.session_state[k] = box.checked
    st.checkbox(label, key=k)


st.title("Warming, told in six charts")
st.caption("Hover a chart for values; click a point to pin its tooltip.")

# ---- CO2 scenarios ----
st.header("CO₂ in the atmosphere")
co2 = panels["co2"]
if co2.ready:
    group: CheckboxGroup = reg.get("ssp-options")
    _pull_boxes(group.boxes, "ssp")
    cols = st.columns(len(group.boxes) or 1)
    for col, box in zip(cols, group.boxes):
        with col:
            _box_widget(box, "ssp", SCENARIO_LABELS.get(box.value, box.label))
_chart(co2, "co2-chart")
_unpin(co2, "co2")

# ---- scenario story (scroll steps) ----
st.header("Where the pathways lead")
story = panels["story"]
if story.ready:
    regions = story.machine.regions
    end = int(regions[-1][0] + regions[-1][1])
    scroll = st.slider("Scroll through the story", 0, end, 0, step=50, key="story-scroll")
    story.on_scroll(scroll)
    st.markdown(f'<div class="story-step">{story.step_text}</div>', unsafe_allow_html=True)
_chart(story, "story-chart")
_unpin(story, "story")

# ---- countries ----
st.header("Country by country")
countries = panels["countries"]
if countries.ready:
    options: CheckboxGroup = reg.get("country-options")
    _pull_boxes(options.boxes, "country")
    search: SearchInput = reg.get("country-search")
    text = st.text_input("Search countries", value=search.text, key="country-search-box")
    if text != search.text:
        search.set_text(text)
    b1, b2 = st.columns(2)
    if b1.button("Select all", key="country-all"):
        reg.get("select-all").click()
    if b2.button("Clear", key="country-clear"):
        reg.get("clear-all").click()
    with st.expander("Countries", expanded=False):
        for box in options.boxes:
            if box.display != "none":
                _box_widget(box, "country", box.label)
_chart(countries, "country-chart")
_unpin(countries, "countries")

# ---- scatter ----
st.header("More CO₂, warmer planet")
scatter = panels["scatter"]
_chart(scatter, "scatter-chart")
_unpin(scatter, "scatter")

# ---- stripes + map ----
st.header("Warming stripes")
stripes = panels["stripes"]
if stripes.ready:
    slider: Slider = reg.get("map-year-slider")
    if st.session_state.get("map-year") != slider.value:
        st.session_state["map-year"] = slider.value
    year = st.slider("Map year", slider.min, slider.max, key="map-year")
    if year != slider.value:
        slider.set_value(year)
_chart(stripes, "stripes-chart")
if stripes.ready:
    st.markdown(stripes.info_text, unsafe_allow_html=True)
    st.subheader(stripes.map_title)
    st.plotly_chart(stripes.map_figure(), use_container_width=True, config={"displayModeBar": False})
    names = load_region_names(GEOJSON)
    pick = st.selectbox("Country details", ["—"] + names, key="country-card")
    if pick != "—":
        st.markdown(stripes.country_summary(pick), unsafe_allow_html=True)
        st.plotly_chart(stripes.country_figure(pick), use_container_width=True,
                        config={"displayModeBar": False})

# ---- sea ice playback ----
st.header("Arctic sea ice")
ice = panels["ice"]
if ice.ready:
    ice.scheduler.pump(time.monotonic() * 1000.0)
    ys: Slider = reg.get("year-slider")
    picked = st.session_state.get("ice-year")
    # only a value the user moved differs from what was last drawn
    if picked is not None and picked != st.session_state.get("ice-year-drawn") and not ice.animator.playing:
        ys.set_value(picked)
    play: Button = reg.get("play-btn")
    c1, c2 = st.columns(2)
    if c1.button(play.label, key="ice-play"):
        play.click()
    if c2.button("Reset", key="ice-reset"):
        reg.get("reset-btn").click()
    st.session_state["ice-year"] = st.session_state["ice-year-drawn"] = ys.value
    st.slider("Jump to year", ys.min, ys.max, key="ice-year", disabled=ice.animator.playing)


@st.fragment(run_every=PLAY_PERIOD_MS / 1000.0)
def _ice_frame():
    if ice.ready and ice.animator.playing:
        ice.scheduler.pump(time.monotonic() * 1000.0)
    _chart(ice, "ice-chart")


_ice_frame()
