"""salary_insights package initializer.

This package contains the ingestion and aggregation modules used by the
Shiny salary dashboard.  Modules include raw input fetching, record
loading, the aggregation engine, session management and plotting
helpers.  See individual module docstrings for details.
"""
