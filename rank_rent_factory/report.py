"""HTML dashboard + WeasyPrint PDF for a generated business plan."""

from html import escape
from pathlib import Path

from .models import BusinessPlan, LANGUAGE_NAMES


def _format_number(n: float) -> str:
    """Format number with commas: 1420 -> '1,420'."""
    return f"{n:,.0f}"


def _format_money(n: float) -> str:
    """Two decimals with commas: 1420.5 -> '1,420.50'."""
    return f"{n:,.2f}"


def _list_items(values: list[str]) -> str:
    return "".join(f"<li>{escape(v)}</li>" for v in values)


def _pill(value: str) -> str:
    return f'<span class="pill pill-{escape(value.lower())}">{escape(value)}</span>'


def render_plan_html(plan: BusinessPlan) -> str:
    """
    Render the plan dashboard as a self-contained HTML page.

    All provider-generated text is escaped; site asset contents are listed by
    path only.
    """
    keyword_rows = ""
    for kw in plan.keywords:
        keyword_rows += f"""
        <tr>
            <td>{escape(kw.keyword)}</td>
            <td class="num">{_format_number(kw.avg_monthly_searches)}/mo</td>
            <td class="center">{_pill(kw.competition)}</td>
            <td class="num">{_format_money(kw.cpc_low)} - {_format_money(kw.cpc_high)}</td>
        </tr>"""

    geo_rows = ""
    for point in plan.geo_grid_strategy:
        geo_rows += f"""
        <tr>
            <td>{escape(point.name)}</td>
            <td>{escape(point.type)}</td>
            <td class="center">{_pill(point.target_value)}</td>
        </tr>"""

    competitor_blocks = ""
    for comp in plan.competitor_analysis:
        competitor_blocks += f"""
        <div class="item">
            <h3>{escape(comp.name)}</h3>
            <p><strong>Weakness:</strong> {escape(comp.weakness)}</p>
            <ul>{_list_items(comp.content_gap)}</ul>
        </div>"""

    question_blocks = ""
    for q in plan.lead_funnel.questions:
        question_blocks += f"""
        <div class="item">
            <h3>{escape(q.question)}</h3>
            <ul>{_list_items(q.options)}</ul>
            <p class="muted">{escape(q.rationale)}</p>
        </div>"""

    silo_rows = ""
    for silo in plan.website_structure.service_silos:
        silo_rows += f"""
        <tr>
            <td>{escape(silo.page_title)}</td>
            <td><code>{escape(silo.url_slug)}</code></td>
            <td>{escape(silo.target_keyword)}</td>
            <td>{escape(silo.content_focus)}</td>
        </tr>"""

    ad_groups = ""
    for group in plan.google_ads_plan.ad_groups:
        ad_groups += f"""
        <div class="item">
            <h3>{escape(group.name)}</h3>
            <ul>{_list_items(group.target_keywords)}</ul>
        </div>"""

    asset_rows = ""
    for asset in plan.site_assets:
        asset_rows += f"""
        <tr>
            <td><code>{escape(asset.path)}</code></td>
            <td>{escape(asset.language)}</td>
            <td>{escape(asset.description)}</td>
        </tr>"""

    ad = plan.google_ads_plan.example_ad
    profit = plan.profit_projection
    stack = plan.astro_stack
    domain = plan.domain_strategy

    return f"""<!DOCTYPE html>
<html lang="{escape(plan.language)}">
<head>
<meta charset="utf-8">
<title>{escape(plan.niche)} in {escape(plan.location)} - Business Plan</title>
<style>
    @page {{
        size: A4;
        margin: 30px;
    }}

    * {{
        margin: 0;
        padding: 0;
        box-sizing: border-box;
    }}

    body {{
        font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, 'Helvetica Neue', Arial, sans-serif;
        background: #f0f2f5;
        color: #1a1a2e;
        font-size: 13px;
        line-height: 1.6;
    }}

    .container {{
        max-width: 780px;
        margin: 0 auto;
    }}

    .top-bar {{
        height: 5px;
        background: linear-gradient(90deg, #10b981, #06b6d4);
    }}

    header {{
        padding: 32px 32px 8px 32px;
    }}

    .eyebrow {{
        font-size: 11px;
        font-weight: 700;
        letter-spacing: 0.1em;
        text-transform: uppercase;
        color: #059669;
    }}

    h1 {{
        font-size: 28px;
        margin: 4px 0;
    }}

    h2 {{
        font-size: 18px;
        margin-bottom: 12px;
    }}

    h3 {{
        font-size: 14px;
        margin-bottom: 4px;
    }}

    section {{
        background: white;
        margin: 16px 32px;
        padding: 20px 24px;
        border-radius: 8px;
        page-break-inside: avoid;
    }}

    .summary {{
        border-left: 4px solid #10b981;
    }}

    table {{
        width: 100%;
        border-collapse: collapse;
    }}

    th {{
        text-align: left;
        text-transform: uppercase;
        font-size: 10px;
        color: #8b95a5;
        letter-spacing: 0.05em;
        padding: 0 8px 8px 8px;
        border-bottom: 1px solid #e8eaed;
    }}

    td {{
        padding: 8px;
        border-bottom: 1px solid #e8eaed;
        vertical-align: top;
    }}

    .num {{ text-align: right; white-space: nowrap; }}
    .center {{ text-align: center; }}
    .muted {{ color: #6b7280; }}
    .item {{ margin-bottom: 12px; }}
    ul {{ padding-left: 18px; }}

    .pill {{
        display: inline-block;
        font-size: 11px;
        font-weight: 600;
        padding: 2px 10px;
        border-radius: 20px;
        color: white;
        background: #1a3a4a;
    }}

    .pill-high {{ background: #e11d48; }}
    .pill-medium {{ background: #d97706; }}
    .pill-low {{ background: #059669; }}

    .grid {{
        display: flex;
        gap: 16px;
    }}

    .stat {{
        flex: 1;
        background: #f8fafc;
        border-radius: 6px;
        padding: 12px;
    }}

    .stat .value {{
        font-size: 18px;
        font-weight: 700;
    }}

    .ad {{
        border: 1px solid #e8eaed;
        border-radius: 6px;
        padding: 12px;
    }}

    .ad .headline {{
        color: #1a0dab;
        font-size: 15px;
    }}
</style>
</head>
<body>
<div class="container">
<div class="top-bar"></div>
<header>
    <div class="eyebrow">Rank &amp; Rent Blueprint &middot; {escape(LANGUAGE_NAMES[plan.language])}</div>
    <h1>{escape(plan.niche)} &middot; {escape(plan.location)}</h1>
</header>

<section class="summary">
    <h2>Executive Summary</h2>
    <p>{escape(plan.executive_summary)}</p>
</section>

<section>
    <h2>Google Business Profile</h2>
    <p><strong>Primary category:</strong> {escape(plan.gmb_analysis.primary_category)}</p>
    <ul>{_list_items(plan.gmb_analysis.secondary_categories)}</ul>
</section>

<section>
    <h2>Profit Projection</h2>
    <div class="grid">
        <div class="stat"><div class="muted">Ad spend</div><div class="value">{_format_money(profit.estimated_ad_spend)}</div></div>
        <div class="stat"><div class="muted">Price per lead</div><div class="value">{_format_money(profit.target_sale_price_per_lead)}</div></div>
        <div class="stat"><div class="muted">Leads</div><div class="value">{_format_number(profit.leads_count)}</div></div>
        <div class="stat"><div class="muted">Revenue</div><div class="value">{_format_money(profit.total_potential_revenue)}</div></div>
        <div class="stat"><div class="muted">Net profit</div><div class="value">{_format_money(profit.net_profit)}</div></div>
    </div>
</section>

<section>
    <h2>Keywords</h2>
    <table>
        <thead><tr><th>Keyword</th><th class="num">Searches</th><th class="center">Competition</th><th class="num">CPC</th></tr></thead>
        <tbody>{keyword_rows}</tbody>
    </table>
</section>

<section>
    <h2>Geo-Grid</h2>
    <table>
        <thead><tr><th>Area</th><th>Type</th><th class="center">Value</th></tr></thead>
        <tbody>{geo_rows}</tbody>
    </table>
</section>

<section>
    <h2>Competitors</h2>
    {competitor_blocks}
</section>

<section>
    <h2>Domain</h2>
    <p><strong>{escape(domain.selected_domain)}</strong> ({escape(domain.domain_type)})</p>
    <p>{escape(domain.rationale)}</p>
    <ul>{_list_items(domain.alternatives)}</ul>
</section>

<section>
    <h2>Lead Funnel</h2>
    <p>{escape(plan.lead_funnel.strategy)}</p>
    {question_blocks}
</section>

<section>
    <h2>Website Structure</h2>
    <p>{escape(plan.website_structure.strategy)}</p>
    <table>
        <thead><tr><th>Page</th><th>Slug</th><th>Keyword</th><th>Focus</th></tr></thead>
        <tbody>{silo_rows}</tbody>
    </table>
</section>

<section>
    <h2>Google Ads</h2>
    {ad_groups}
    <div class="ad">
        <div class="headline">{escape(ad.headline1)} | {escape(ad.headline2)}</div>
        <p>{escape(ad.description)}</p>
    </div>
</section>

<section>
    <h2>Stack</h2>
    <p>{escape(stack.framework)} &middot; {escape(stack.styling)} &middot; {escape(stack.deployment)} &middot; {escape(stack.cms)}</p>
    <p class="muted">Template: {escape(stack.template_repo)}</p>
    <p>{escape(stack.rationale)}</p>
</section>

<section>
    <h2>Site Assets</h2>
    <table>
        <thead><tr><th>Path</th><th>Language</th><th>Description</th></tr></thead>
        <tbody>{asset_rows}</tbody>
    </table>
</section>
</div>
</body>
</html>
"""


def generate_plan_pdf(plan: BusinessPlan, output_path: Path) -> Path:
    """
    Render the plan dashboard to a PDF.

    Returns:
        Path to the generated PDF
    """
    from weasyprint import HTML

    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    HTML(string=render_plan_html(plan)).write_pdf(str(output_path))
    return output_path
