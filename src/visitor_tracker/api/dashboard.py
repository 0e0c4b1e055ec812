"""Analytics dashboard - server-rendered HTML view of the analytics summary."""

from html import escape
from typing import Dict

from visitor_tracker.api.schemas import AnalyticsSummary


def _rows(counts: Dict[str, int]) -> str:
    if not counts:
        return '<tr><td colspan="2" class="empty">No data yet</td></tr>'
    return "\n".join(
        f"<tr><td>{escape(str(name))}</td><td>{count}</td></tr>"
        for name, count in counts.items()
    )


def _table(title: str, counts: Dict[str, int]) -> str:
    return f"""<div class="panel">
            <h3>{title}</h3>
            <table>{_rows(counts)}</table>
        </div>"""


def render_dashboard(summary: AnalyticsSummary) -> str:
    """Render the summary as a standalone HTML page."""
    cards = [
        (summary.total_visits, "Total Visits"),
        (summary.unique_visitors, "Unique Visitors"),
        (summary.returning_visitors, "Returning Visitors"),
        (f"{summary.return_rate}%", "Return Rate"),
    ]
    card_html = "\n".join(
        f"""<div class="stat-card">
                <div class="stat-number">{value}</div>
                <div class="stat-label">{label}</div>
            </div>"""
        for value, label in cards
    )
    
    return f"""<!DOCTYPE html>
<html lang="en">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>Visitor Analytics Dashboard</title>
    <style>
        * {{ margin: 0; padding: 0; box-sizing: border-box; }}
        body {{ font-family: 'Segoe UI', Tahoma, Geneva, Verdana, sans-serif; background: #f5f5f5; }}
        .dashboard {{ max-width: 1200px; margin: 20px auto; padding: 20px; }}
        .header {{ background: linear-gradient(135deg, #667eea 0%, #764ba2 100%); color: white; padding: 30px; border-radius: 10px; margin-bottom: 20px; text-align: center; }}
        .stats-grid {{ display: grid; grid-template-columns: repeat(auto-fit, minmax(250px, 1fr)); gap: 20px; margin-bottom: 30px; }}
        .stat-card, .panel {{ background: white; padding: 25px; border-radius: 10px; box-shadow: 0 4px 6px rgba(0,0,0,0.1); }}
        .stat-card {{ text-align: center; }}
        .stat-number {{ font-size: 2.5rem; font-weight: bold; color: #667eea; margin-bottom: 10px; }}
        .stat-label {{ color: #666; font-size: 0.9rem; text-transform: uppercase; letter-spacing: 1px; }}
        .panel {{ margin-bottom: 20px; }}
        table {{ width: 100%; border-collapse: collapse; margin-top: 10px; }}
        td {{ padding: 6px 0; border-bottom: 1px solid #eee; }}
        td.empty {{ color: #999; }}
    </style>
</head>
<body>
    <div class="dashboard">
        <div class="header">
            <h1>🔥 Visitor Analytics</h1>
            <p>Last updated {escape(summary.last_updated)}</p>
        </div>
        <div class="stats-grid">
            {card_html}
        </div>
        {_table("🌍 Top Countries", summary.top_countries)}
        {_table("🌐 Top Browsers", summary.top_browsers)}
        {_table("💻 Top Operating Systems", summary.top_os)}
        {_table("📱 Device Types", summary.device_types)}
        {_table("🔐 Threat Levels", summary.threat_levels)}
    </div>
</body>
</html>
"""
