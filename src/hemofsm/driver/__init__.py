"""Host-side drivers: injection panel, status rendering and trace replay."""

from hemofsm.driver.panel import (
    PANEL_LABELS,
    PanelKey,
    apply_panel_key,
    parse_panel_key,
    render_menu,
    render_status,
)
from hemofsm.driver.replay import (
    ReplayFrame,
    frames_from_trace,
    load_replay_frames,
    replay,
    timeline_to_jsonable,
)

__all__ = [
    "PANEL_LABELS",
    "PanelKey",
    "ReplayFrame",
    "apply_panel_key",
    "frames_from_trace",
    "load_replay_frames",
    "parse_panel_key",
    "render_menu",
    "render_status",
    "replay",
    "timeline_to_jsonable",
]
