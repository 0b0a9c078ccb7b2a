# popup_placer/ui/app.py
"""
Streamlit viewer: sidebar options and camera controls; each interaction is one
viewport event, i.e. one PopupManager.update(). Shows the frame and the diff table.
Run: streamlit run popup_placer/ui/app.py
"""

from __future__ import annotations

import io
import logging

import pandas as pd
import streamlit as st

from popup_placer.core.config import (
    APP_CLASSES,
    APP_LAYERS,
    APP_POPUP_ANCHOR,
    APP_POPUP_SIZE_PX,
    DEFAULT_CENTER_LONLAT,
    DEFAULT_PAN_STEP_PX,
    DEFAULT_VIEWPORT_PX,
    DEFAULT_ZOOM,
    LOG_LEVEL,
    POPUP_ANCHORS,
    SEED,
    SYNTHETIC_N_PLACES,
)
from popup_placer.core.engine import PopupManager
from popup_placer.core.error_codes import (
    ADAPTER_UNAVAILABLE,
    MALFORMED_CANDIDATE,
    NO_VISIBLE_CANDIDATES,
    user_message,
)
from popup_placer.core.mapview import StaticMapView
from popup_placer.core.render import render_frame
from popup_placer.core.session import visible_points_xy
from popup_placer.core.synthetic import SyntheticWeather, synthetic_places
from popup_placer.core.types import PopupManagerOptions, PopupStatus
from popup_placer.core.weather import PopupHandle, weather_popup_layer

logging.basicConfig(level=getattr(logging, LOG_LEVEL, logging.INFO))

st.set_page_config(page_title="Popup placer", layout="wide")


def _status_rows(status: PopupStatus, handles: dict[int, PopupHandle]) -> list[dict]:
    rows = []
    for kind, group in (("new", status.new), ("updated", status.updated), ("removed", status.removed)):
        for p in group.values():
            handle = handles.get(p.id) if kind != "removed" else None
            rows.append({
                "status": kind,
                "id": p.id,
                "name": str(p.feature.properties.get("name", "")),
                "class": p.feature.feature_class or "",
                "rank": p.feature.rank,
                "x": round(p.position[0], 1),
                "y": round(p.position[1], 1),
                "icon": handle.content.icon if handle is not None else "",
                "temperature": handle.content.temperature_text if handle is not None else "",
            })
    return rows


with st.sidebar:
    st.header("Places")
    n_places = st.number_input("Synthetic places", min_value=10, max_value=5000, value=SYNTHETIC_N_PLACES, step=50)
    seed = st.number_input("Seed", min_value=0, value=SEED or 0, step=1)
    st.header("Popups")
    classes = st.multiselect("Classes", options=list(APP_CLASSES), default=list(APP_CLASSES))
    anchor = st.selectbox("Anchor", options=list(POPUP_ANCHORS), index=list(POPUP_ANCHORS).index(APP_POPUP_ANCHOR))
    width = st.number_input("Width (px)", min_value=10.0, value=float(APP_POPUP_SIZE_PX[0]), step=10.0)
    height = st.number_input("Height (px)", min_value=10.0, value=float(APP_POPUP_SIZE_PX[1]), step=10.0)
    max_count = st.number_input("Max popups (0 = no cap)", min_value=0, value=0, step=1)

config_key = (int(n_places), int(seed), tuple(classes), anchor, float(width), float(height), int(max_count))
if st.session_state.get("config_key") != config_key:
    view = StaticMapView(
        synthetic_places(int(n_places), seed=int(seed)),
        width_px=DEFAULT_VIEWPORT_PX[0],
        height_px=DEFAULT_VIEWPORT_PX[1],
        center=DEFAULT_CENTER_LONLAT,
        zoom=DEFAULT_ZOOM,
    )
    options = PopupManagerOptions(
        layers=APP_LAYERS,
        classes=tuple(classes),
        popup_size=(float(width), float(height)),
        popup_anchor=anchor,
        max_count=int(max_count) or None,
    )
    st.session_state["view"] = view
    st.session_state["manager"] = PopupManager(view, options)
    st.session_state["layer"] = weather_popup_layer(SyntheticWeather(seed=int(seed)))
    st.session_state["config_key"] = config_key

view: StaticMapView = st.session_state["view"]
manager: PopupManager = st.session_state["manager"]
layer = st.session_state["layer"]

cols = st.columns(7)
step = DEFAULT_PAN_STEP_PX * 2
if cols[0].button("West"):
    view.pan_by(-step, 0)
if cols[1].button("East"):
    view.pan_by(step, 0)
if cols[2].button("North"):
    view.pan_by(0, -step)
if cols[3].button("South"):
    view.pan_by(0, step)
if cols[4].button("Zoom in"):
    view.zoom_by(0.5)
if cols[5].button("Zoom out"):
    view.zoom_by(-0.5)
if cols[6].button("Reset popups"):
    manager.reset()
    layer.clear()

status = manager.update()
layer.apply(status)
if status is None:
    st.info(user_message(ADAPTER_UNAVAILABLE))
    st.stop()

stats = manager.last_stats
st.caption(
    f"center {view.center[0]:.3f}, {view.center[1]:.3f}  zoom {view.zoom:.2f}  |  "
    f"queried {stats.n_queried}  accepted {stats.n_accepted}  collided {stats.n_collided}  capped {stats.n_capped}"
)
if stats.n_malformed:
    st.warning(user_message(MALFORMED_CANDIDATE))
if not stats.n_accepted:
    st.info(user_message(NO_VISIBLE_CANDIDATES))

buf = io.BytesIO()
render_frame(status, visible_points_xy(view, manager.options.layers), view.width_px, view.height_px, buf)
st.image(buf.getvalue())

rows = _status_rows(status, layer.handles)
if rows:
    df = pd.DataFrame(rows)
    st.dataframe(df, width="stretch", hide_index=True)
