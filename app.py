import logging
from typing import Optional

import pandas as pd
from shiny import reactive, render, req
from shiny.express import input, ui
from shinywidgets import render_plotly

# Import organized modules
from salary_insights.config import DEFAULT_SORT, LOG_LEVEL, SUMMARY_SORT_OPTIONS
from salary_insights.data_manager import shared_session
from salary_insights.plotting import (
    create_jobs_trend_plot,
    create_title_breakdown_plot,
    format_usd,
)

logging.basicConfig(level=getattr(logging, LOG_LEVEL.upper(), logging.INFO))

# Helpers for UI mapping
SUMMARY_LABELS = {value: label for label, value in SUMMARY_SORT_OPTIONS}

# ======================================================
#  REACTIVE STATE
# ======================================================
# Loaded once per process; year clicks are answered from memory.
dataset = shared_session()
data_version = reactive.Value(0)


@reactive.calc
def summary() -> Optional[pd.DataFrame]:
    data_version.get()
    if not dataset.available:
        return None
    return dataset.engine.yearly_summary().sort_values(DEFAULT_SORT, ignore_index=True)


@reactive.calc
def selected_year() -> Optional[int]:
    # The only UI state this page owns: which summary row is selected.
    if summary() is None:
        return None
    selected = summary_table.data_view(selected=True)
    if selected.empty:
        return None
    return int(selected[SUMMARY_LABELS["year"]].iloc[0])


@reactive.calc
def breakdown() -> Optional[pd.DataFrame]:
    year = selected_year()
    if year is None or not dataset.available:
        return None
    return dataset.engine.job_title_breakdown(year).sort_values(
        ["total_jobs", "job_title"], ascending=[False, True], ignore_index=True
    )


# ======================================================
#  UI LAYOUT
# ======================================================
ui.page_opts(
    title="ML Engineer Salary Data",
    fillable=False,
    fillable_mobile=True,
    full_width=True,
    id="page",
    lang="en",
)

with ui.sidebar(open="always", position="right"):

    @render.ui
    def data_status():
        data_version.get()
        if not dataset.available:
            return ui.div(
                ui.h5("No data"),
                ui.p(str(dataset.error or "Salary data has not been loaded.")),
                class_="alert alert-danger",
            )
        engine = dataset.engine
        return ui.div(
            ui.p(f"{engine.record_count:,} records loaded"),
            ui.p(f"{engine.skipped_rows:,} rows skipped", class_="text-muted"),
        )

    ui.input_action_button("reload", "Reload data", class_="btn-primary mt-3")


@reactive.effect
@reactive.event(input.reload)
def _reload_data():
    dataset.reload()
    data_version.set(data_version.get() + 1)


with ui.card():
    ui.card_header("Jobs and average salary per year")

    @render.data_frame
    def summary_table():
        df = summary()
        req(df is not None)
        table = df.assign(average_salary=df["average_salary"].round(2)).rename(
            columns=SUMMARY_LABELS
        )
        return render.DataGrid(table, selection_mode="row", width="100%")


with ui.card():

    @render_plotly
    def jobs_trend():
        df = summary()
        req(df is not None)
        return create_jobs_trend_plot(df)


with ui.card():

    @render.ui
    def breakdown_status():
        if summary() is None:
            return None
        year = selected_year()
        if year is None:
            return ui.p("Select a year in the table to see its job titles.")
        df = breakdown()
        if df is None or df.empty:
            return ui.p(f"No jobs recorded for {year}.")
        row = summary().loc[lambda s: s["year"] == year].iloc[0]
        return ui.h5(
            f"Job titles in {year}: {int(row['total_jobs']):,} jobs, "
            f"average salary {format_usd(row['average_salary'])}"
        )

    @render.data_frame
    def breakdown_table():
        df = breakdown()
        req(df is not None and not df.empty)
        return render.DataGrid(
            df.rename(columns={"job_title": "Job Title", "total_jobs": "Number of Jobs"}),
            width="100%",
        )

    @render_plotly
    def breakdown_plot():
        df = breakdown()
        req(df is not None and not df.empty)
        return create_title_breakdown_plot(df, selected_year())
