"""Streamlit front end for Bisca."""
