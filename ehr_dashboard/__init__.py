"""HealthCare EHR dashboard: Streamlit pages over a FHIR-style API."""

__version__ = "1.0.0"
