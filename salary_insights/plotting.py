import pandas as pd
import plotly.graph_objects as go

from .config import TOP_TITLES


# ============================================================
# Configuration / constants
# ============================================================

LINE_COLOR: str = "#1f77b4"
BAR_COLOR: str = "#2ca02c"

HOVER_TEMPLATE_TREND = (
    "Year: %{x}<br>"
    "Number of Total Jobs: %{y:,}<br>"
    "Average Salary (USD): %{customdata}<extra></extra>"
)

HOVER_TEMPLATE_TITLES = (
    "Job Title: %{y}<br>"
    "Number of Jobs: %{x:,}<extra></extra>"
)


# ============================================================
# Helper functions
# ============================================================


def format_usd(value: float | None) -> str:
    """
    Format a raw USD amount for display, e.g. ``150000.0 -> "$150,000"``.
    """
    if value is None or pd.isna(value):
        return "-"
    return f"${value:,.0f}"


def _base_layout(fig: go.Figure, title: str) -> go.Figure:
    fig.update_layout(
        title=dict(text=f"<b>{title}</b>", x=0.5, xanchor="center"),
        margin=dict(t=80, l=50, r=40, b=40),
        plot_bgcolor="#f5f7fb",
        showlegend=False,
    )
    return fig


# ============================================================
# Main plotting functions
# ============================================================


def create_jobs_trend_plot(summary: pd.DataFrame) -> go.Figure:
    """
    Line chart of job counts over time.

    Parameters
    ----------
    summary : pd.DataFrame
        Output of ``SalaryEngine.yearly_summary()`` with columns 'year',
        'total_jobs' and 'average_salary'.

    Returns
    -------
    go.Figure
        One line, x = year, y = total_jobs, one marker per year in
        ascending order.  An empty figure when ``summary`` has no rows.
    """
    if summary.empty:
        return go.Figure()

    df_plot = summary.sort_values("year")

    fig = go.Figure(
        go.Scatter(
            x=df_plot["year"],
            y=df_plot["total_jobs"],
            mode="lines+markers",
            line=dict(width=3, color=LINE_COLOR),
            marker=dict(size=9, color=LINE_COLOR),
            name="Total jobs",
            hovertemplate=HOVER_TEMPLATE_TREND,
            customdata=[format_usd(v) for v in df_plot["average_salary"]],
        )
    )
    fig.update_xaxes(title_text="Year", tickmode="linear", dtick=1)
    fig.update_yaxes(title_text="Number of Total Jobs", tickformat=",", rangemode="tozero")
    return _base_layout(fig, "Jobs per Year")


def create_title_breakdown_plot(
    breakdown: pd.DataFrame, year: int, *, top_n: int = TOP_TITLES
) -> go.Figure:
    """
    Horizontal bar chart of the most frequent job titles in ``year``.

    Titles beyond ``top_n`` are left out of the chart; the table shows them
    all.
    """
    if breakdown.empty:
        return go.Figure()

    # Largest bar on top
    df_plot = (
        breakdown.sort_values(["total_jobs", "job_title"], ascending=[False, True])
        .head(top_n)
        .iloc[::-1]
    )

    fig = go.Figure(
        go.Bar(
            x=df_plot["total_jobs"],
            y=df_plot["job_title"],
            orientation="h",
            marker=dict(color=BAR_COLOR),
            hovertemplate=HOVER_TEMPLATE_TITLES,
        )
    )
    fig.update_xaxes(title_text="Number of Jobs", tickformat=",", rangemode="tozero")
    fig.update_yaxes(title_text="")
    fig.update_layout(height=max(300, 28 * len(df_plot) + 120))
    return _base_layout(fig, f"Job Titles in {year}")
