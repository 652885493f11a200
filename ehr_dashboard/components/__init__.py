"""
Components Module for the EHR Dashboard

This module contains reusable UI components that can be used across different pages.

Components:
- search_widgets: Debounced patient search panel
- patient_cards: Patient information display cards
- appointment_timeline: Day-grouped appointment schedule
- analytics_widgets: Stats cards and recent activity
"""

from .search_widgets import SearchPanel, DebounceTimer, render_search_panel, wait_for_debounce
from .patient_cards import render_patient_card, render_patient_list, render_patient_details
from .appointment_timeline import render_timeline, render_appointment_details
from .analytics_widgets import render_metric_card, render_stats_cards, render_recent_activity

__all__ = [
    'SearchPanel',
    'DebounceTimer',
    'render_search_panel',
    'wait_for_debounce',
    'render_patient_card',
    'render_patient_list',
    'render_patient_details',
    'render_timeline',
    'render_appointment_details',
    'render_metric_card',
    'render_stats_cards',
    'render_recent_activity'
]
