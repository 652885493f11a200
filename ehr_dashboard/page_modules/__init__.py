"""
Pages Module for the EHR Dashboard

Each page is a self-contained module exposing render(), called by main.py.

Pages:
- dashboard: Headline counts, today's schedule and recent activity
- patients: Patient listing with debounced search
- appointments: Day-grouped appointment schedule
"""

from .dashboard import render_dashboard
from .patients import render_patients
from .appointments import render_appointments

__all__ = [
    'render_dashboard',
    'render_patients',
    'render_appointments'
]
