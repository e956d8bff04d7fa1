"""Spreadsheet loading and the Streamlit front end for the localization exporter."""
