"""
Search Widgets Component for the EHR Dashboard

Debounced patient search panel: the SearchPanel state machine that owns the
transient filter state, and the Streamlit widgets that feed it.
"""

import time
import logging
from datetime import date
from typing import Any, Callable, Dict, Optional

import streamlit as st

from ehr_dashboard.utils import helpers, validators
from ehr_dashboard.utils.helpers import FILTER_SENTINEL_ALL as ALL, normalize_filters

logger = logging.getLogger(__name__)

DEFAULT_DEBOUNCE_MS = 500
FILTER_KEYS = ('name', 'identifier', 'birthdate', 'gender', 'active')

GENDER_OPTIONS = [ALL, 'male', 'female', 'other', 'unknown']
STATUS_OPTIONS = {ALL: None, 'Active': True, 'Inactive': False}


class DebounceTimer:
    """
    A single-shot, restartable deadline.

    The timer does not run on its own: whoever owns it calls poll(), which
    fires the callback once the deadline has passed. Restarting or
    cancelling always discards the previous deadline.
    """

    def __init__(self, delay_ms: int, callback: Callable[[], None],
                 clock: Callable[[], float] = time.monotonic):
        self.delay = delay_ms / 1000.0
        self.callback = callback
        self.clock = clock
        self._deadline: Optional[float] = None

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    @property
    def remaining(self) -> float:
        """Seconds until the deadline, 0 when idle or already due."""
        if self._deadline is None:
            return 0.0
        return max(0.0, self._deadline - self.clock())

    def start(self) -> None:
        self._deadline = self.clock() + self.delay

    def cancel(self) -> None:
        self._deadline = None

    def poll(self) -> bool:
        if self._deadline is None or self.clock() < self._deadline:
            return False
        self._deadline = None
        self.callback()
        return True


class SearchPanel:
    """
    Filter state with a debounced search callback.

    Every mutation restarts the debounce window. When a window elapses
    without further changes the normalized filters go to on_search, or
    on_clear is called if nothing is left. Construction never fires a
    callback, whatever the initial values, and after close() nothing fires
    at all.

    Usable as a context manager; leaving the block closes the panel.
    """

    def __init__(self, on_search: Callable[[Dict[str, Any]], None],
                 on_clear: Optional[Callable[[], None]] = None,
                 debounce_ms: int = DEFAULT_DEBOUNCE_MS,
                 initial: Optional[Dict[str, Any]] = None,
                 clock: Callable[[], float] = time.monotonic):
        self.on_search = on_search
        self.on_clear = on_clear
        self.debounce_ms = debounce_ms
        self._filters: Dict[str, Any] = dict(initial or {})
        self._timer = DebounceTimer(debounce_ms, self._settle, clock=clock)
        self._closed = False

    def __enter__(self) -> "SearchPanel":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    @property
    def filters(self) -> Dict[str, Any]:
        return dict(self._filters)

    @property
    def active_filters(self) -> Dict[str, Any]:
        return normalize_filters(self._filters)

    @property
    def pending(self) -> bool:
        return self._timer.pending

    @property
    def remaining(self) -> float:
        return self._timer.remaining

    @property
    def closed(self) -> bool:
        return self._closed

    def _changed(self) -> None:
        self._timer.cancel()
        self._timer.start()

    def set_filter(self, key: str, value: Any) -> None:
        if self._closed:
            return
        self._filters[key] = value
        self._changed()

    def update(self, **changes: Any) -> None:
        if self._closed:
            return
        self._filters.update(changes)
        self._changed()

    def remove_filter(self, key: str) -> None:
        if self._closed:
            return
        self._filters[key] = None
        self._changed()

    def clear(self) -> None:
        if self._closed:
            return
        self._filters = {}
        self._changed()

    def replace(self, filters: Dict[str, Any]) -> bool:
        """Swap in a whole filter dict; only a change to the active filters restarts the timer."""
        if self._closed:
            return False
        changed = normalize_filters(filters) != normalize_filters(self._filters)
        self._filters = dict(filters)
        if changed:
            self._changed()
        return changed

    def poll(self) -> bool:
        """Fire the debounced callback if the window has elapsed."""
        if self._closed:
            return False
        return self._timer.poll()

    def close(self) -> None:
        self._timer.cancel()
        self._closed = True

    def _settle(self) -> None:
        filtered = normalize_filters(self._filters)
        if filtered:
            logger.debug(f"[SearchPanel] debounced on_search {filtered}")
            self.on_search(filtered)
        else:
            logger.debug("[SearchPanel] debounced on_clear")
            if self.on_clear:
                self.on_clear()


def _widget_key(key: str, field: str) -> str:
    return f"{key}_{field}"


WIDGET_DEFAULTS = {'name': "", 'identifier': "", 'birthdate': None, 'gender': ALL, 'active': ALL}


def _init_widgets(key: str) -> None:
    for field, default in WIDGET_DEFAULTS.items():
        if _widget_key(key, field) not in st.session_state:
            st.session_state[_widget_key(key, field)] = default


def _reset_widgets(key: str, fields=FILTER_KEYS) -> None:
    for field in fields:
        st.session_state[_widget_key(key, field)] = WIDGET_DEFAULTS[field]


def collect_filters(key: str) -> Dict[str, Any]:
    state = st.session_state
    birthdate = state.get(_widget_key(key, 'birthdate'))
    filters = {
        'name': (state.get(_widget_key(key, 'name')) or "").strip() or None,
        'identifier': state.get(_widget_key(key, 'identifier')) or None,
        'birthdate': birthdate.isoformat() if isinstance(birthdate, date) else None,
        'gender': state.get(_widget_key(key, 'gender'), ALL),
        'active': STATUS_OPTIONS.get(state.get(_widget_key(key, 'active'), ALL)),
    }
    return filters


def render_search_panel(panel: SearchPanel, key: str = "patient_search", loading: bool = False) -> None:
    """
    Render the patient search panel and push widget changes into the panel

    Args:
        panel: SearchPanel owning the filter state
        key: Unique key prefix for the widgets
        loading: Disables the quick search box while a request is in flight
    """
    try:
        _init_widgets(key)

        with st.container(border=True):
            st.markdown("#### Patient Search")

            search_col, clear_col = st.columns([6, 1])
            with search_col:
                st.text_input(
                    "Quick search",
                    placeholder="Search by name, ID, or identifier...",
                    key=_widget_key(key, 'name'),
                    disabled=loading,
                    label_visibility="collapsed",
                )
            with clear_col:
                st.button(
                    "✕",
                    key=_widget_key(key, 'clear'),
                    on_click=_reset_widgets,
                    args=(key,),
                    disabled=not panel.active_filters,
                    help="Clear all filters",
                )

            with st.expander("Advanced", expanded=False):
                col1, col2 = st.columns(2)
                with col1:
                    st.text_input("ID/Identifier", placeholder="Patient ID, MRN, etc.",
                                  key=_widget_key(key, 'identifier'))
                    st.date_input("Birth Date", min_value=date(1900, 1, 1),
                                  key=_widget_key(key, 'birthdate'))
                with col2:
                    st.selectbox("Gender", GENDER_OPTIONS, key=_widget_key(key, 'gender'),
                                 format_func=lambda g: g.title())
                    st.selectbox("Status", list(STATUS_OPTIONS), key=_widget_key(key, 'active'),
                                 format_func=lambda s: s.title())

            panel.replace(collect_filters(key))

            active = panel.active_filters
            if active:
                _, errors = validators.validate_search_criteria(active)
                for error in errors:
                    st.caption(f"⚠️ {error}")
                _render_active_filters(active, key)

    except Exception as e:
        logger.error(f"Error rendering search panel: {e}")
        st.error("Error displaying search panel")


def _render_active_filters(active: Dict[str, Any], key: str) -> None:
    st.caption(f"Active filters: {helpers.create_filter_summary(active)}")
    cols = st.columns(len(active))
    for col, field in zip(cols, active):
        with col:
            st.button(
                f"✕ {field}",
                key=_widget_key(key, f"remove_{field}"),
                on_click=_reset_widgets,
                args=(key, (field,)),
            )


def wait_for_debounce(panel: SearchPanel, tick: float = 0.05) -> None:
    """
    Block the current script run until the panel's debounce window settles

    Each tick touches a placeholder, which hands control back to Streamlit so
    a newer widget change interrupts this run instead of letting the stale
    window fire. Reruns the script once the callback has fired.
    """
    heartbeat = st.empty()
    while panel.pending:
        time.sleep(min(tick, panel.remaining))
        heartbeat.empty()
        if panel.poll():
            st.rerun()
