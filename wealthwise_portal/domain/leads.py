"""Campaign leads report - sample leads, KPI totals and CSV export"""

import csv
import io
import re
from datetime import datetime, timedelta, timezone
from typing import List
from urllib.parse import quote

from wealthwise_portal.domain.models import Lead, LeadTotals

LEAD_NAMES = ["Alex Johnson", "Maria Gomez", "John Smith", "Sofia Lee", "Carlos Diaz", "Emma Wilson"]
LEAD_SOURCES = ["facebook", "google", "tiktok", "organic"]
LEAD_STATUSES = ["new", "contacted", "qualified", "won", "lost"]
LEAD_COSTS = [8.5, 12.0, 14.5, 18.75, 9.99, 22.3]
LEADS_PER_CAMPAIGN = 12

CSV_HEADER = "id,name,email,phone,status,source,cost,created_at"


def generate_leads(campaign_id: str, now: datetime | None = None) -> List[Lead]:
    """
    Build the sample lead list for a campaign.

    Lead ids, names, sources, statuses and costs depend only on the campaign
    id, so repeated calls agree. Lead i was created i days before ``now``.
    """
    if now is None:
        now = datetime.now(timezone.utc)

    base = campaign_id[:8]
    leads = []
    for i in range(LEADS_PER_CAMPAIGN):
        name = LEAD_NAMES[i % len(LEAD_NAMES)]
        email = re.sub(r"\s+", ".", name.lower()) + f"{i}@example.com"
        leads.append(
            Lead(
                id=f"{base}-{i}",
                name=name,
                email=email,
                phone=f"+1 (555) 01{i + 10:02d}-{100 + i}",
                status=LEAD_STATUSES[i % len(LEAD_STATUSES)],
                source=LEAD_SOURCES[i % len(LEAD_SOURCES)],
                cost=LEAD_COSTS[i % len(LEAD_COSTS)],
                created_at=now - timedelta(days=i),
            )
        )
    return leads


def summarize_leads(leads: List[Lead]) -> LeadTotals:
    """Count won/qualified leads and compute spend and cost per lead"""
    total = len(leads)
    spend = sum(lead.cost for lead in leads)
    return LeadTotals(
        total=total,
        won=sum(1 for lead in leads if lead.status == "won"),
        qualified=sum(1 for lead in leads if lead.status == "qualified"),
        spend=round(spend, 2),
        cost_per_lead=round(spend / total, 2) if total else 0.0,
    )


def leads_to_csv(leads: List[Lead]) -> str:
    """Render leads as CSV with an unquoted header and fully quoted rows"""
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    for lead in leads:
        writer.writerow([
            lead.id,
            lead.name,
            lead.email,
            lead.phone or "",
            lead.status,
            lead.source,
            f"{lead.cost:.2f}",
            lead.created_at.isoformat(),
        ])
    rows = buffer.getvalue().rstrip("\n")
    return f"{CSV_HEADER}\n{rows}" if rows else CSV_HEADER


def leads_filename(campaign_name: str) -> str:
    """Download name for a campaign's leads export"""
    return re.sub(r"\s+", "_", campaign_name) + "_leads.csv"


def leads_content_disposition(campaign_name: str) -> str:
    """
    Content-Disposition value for the CSV download.

    ``filename`` carries an ASCII fallback (non-ASCII, quotes and backslashes
    replaced with "_"); ``filename*`` carries the UTF-8 name per RFC 5987.
    """
    filename = leads_filename(campaign_name)
    fallback = re.sub(r'[^\x20-\x7e]|["\\]', "_", filename)
    return f"attachment; filename=\"{fallback}\"; filename*=UTF-8''{quote(filename, safe='')}"
