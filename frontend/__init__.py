"""Streamlit client for the expense tracker API."""
