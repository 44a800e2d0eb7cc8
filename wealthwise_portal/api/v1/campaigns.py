"""Campaign endpoints - list, create, preview and leads report"""

import time
import logging
from typing import List
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from wealthwise_portal.api.v1.schemas import (
    CampaignCreateResponse,
    CampaignFormRequest,
    CampaignItem,
    CampaignPreviewResponse,
    CampaignsResponse,
    LeadItem,
    LeadsResponse,
    LeadTotalsSchema,
)
from wealthwise_portal.api.dependencies import get_client_context, get_request_id
from wealthwise_portal.domain.exceptions import (
    CampaignValidationError,
    InsufficientFundsError,
    InvalidRecordError,
    StoreError,
)
from wealthwise_portal.domain.leads import (
    generate_leads,
    leads_content_disposition,
    leads_to_csv,
    summarize_leads,
)
from wealthwise_portal.domain.models import CampaignInput, CampaignRecord, ClientContext
from wealthwise_portal.domain.validation import preview_campaign
from wealthwise_portal.domain.workflow import CampaignWorkflow
from wealthwise_portal.infrastructure.database.ledger import BalanceQuery, CampaignWriter
from wealthwise_portal.infrastructure.database.repositories import CampaignRepository
from wealthwise_portal.infrastructure.database.session import get_db
from wealthwise_portal.infrastructure.observability.logging import log_campaign_created
from wealthwise_portal.infrastructure.observability.metrics import record_campaign_submission

router = APIRouter()


def _to_input(body: CampaignFormRequest) -> CampaignInput:
    return CampaignInput(
        name=body.name,
        description=body.description,
        investment_amount=body.investment_amount,
        duration_days=body.duration_days,
        roi_percentage=body.roi_percentage,
    )


@router.get("/campaigns", response_model=CampaignsResponse)
def list_campaigns(
    context: ClientContext = Depends(get_client_context),
    db: Session = Depends(get_db),
):
    """Client's campaigns, newest first"""
    try:
        campaigns = CampaignRepository(db).get_campaigns_by_client(context.client.id)
    except (SQLAlchemyError, InvalidRecordError) as e:
        db.rollback()
        logging.error(f"Error fetching campaigns: {e}")
        raise HTTPException(status_code=503, detail="Data store unavailable")

    return CampaignsResponse(
        client_id=context.client.id,
        campaigns=[CampaignItem.from_record(c) for c in campaigns],
    )


@router.post("/campaigns", response_model=CampaignCreateResponse, status_code=201)
def create_campaign(
    body: CampaignFormRequest,
    request: Request,
    context: ClientContext = Depends(get_client_context),
    db: Session = Depends(get_db),
):
    """
    Create an investment campaign funded from the client's balance.

    Flow:
    1. Fetch current balance (skipped check if unavailable)
    2. Validate form fields and funds
    3. Insert campaign, then the matching debit transaction
    4. Return campaign and the collections to refresh
    """
    start_time = time.time()
    request_id = get_request_id(request)

    workflow = CampaignWorkflow(context, CampaignWriter(db), BalanceQuery(db))
    refresh: List[str] = []
    workflow.add_refresh_listener(refresh.extend)

    try:
        workflow.open()
        result = workflow.submit(_to_input(body))

    except InsufficientFundsError as e:
        record_campaign_submission("insufficient_funds")
        raise HTTPException(status_code=422, detail=str(e))

    except CampaignValidationError as e:
        record_campaign_submission("rejected")
        raise HTTPException(status_code=422, detail=str(e))

    except StoreError as e:
        record_campaign_submission("store_error")
        logging.error(f"Campaign insert failed: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=502, detail=str(e))

    except Exception as e:
        db.rollback()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    # Record metrics and logs
    duration_ms = (time.time() - start_time) * 1000
    ledger_recorded = result.transaction is not None
    record_campaign_submission("created", result.campaign.investment_amount)
    log_campaign_created(
        request_id,
        context.client.id,
        result.campaign.id,
        result.campaign.investment_amount,
        ledger_recorded,
        duration_ms,
    )

    return CampaignCreateResponse(
        state=workflow.state.value,
        campaign=CampaignItem.from_record(result.campaign),
        transaction_id=result.transaction.id if result.transaction else None,
        ledger_recorded=ledger_recorded,
        refresh=refresh,
    )


@router.post("/campaigns/preview", response_model=CampaignPreviewResponse)
def preview(body: CampaignFormRequest):
    """Daily ROI and projected total for the current form values (display only)"""
    result = preview_campaign(_to_input(body))
    return CampaignPreviewResponse(daily_roi=result.daily_roi, projected_total=result.projected_total)


def _load_campaign(campaign_id: str, context: ClientContext, db: Session) -> CampaignRecord:
    try:
        campaign = CampaignRepository(db).get_campaign_for_client(campaign_id, context.client.id)
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid campaign ID format")
    except (SQLAlchemyError, InvalidRecordError) as e:
        db.rollback()
        logging.error(f"Error fetching campaign: {e}")
        raise HTTPException(status_code=503, detail="Data store unavailable")

    if not campaign:
        raise HTTPException(status_code=404, detail="Campaign not found")
    return campaign


@router.get("/campaigns/{campaign_id}/leads", response_model=LeadsResponse)
def get_campaign_leads(
    campaign_id: str,
    context: ClientContext = Depends(get_client_context),
    db: Session = Depends(get_db),
):
    """Sample leads and KPI totals for one of the client's campaigns"""
    campaign = _load_campaign(campaign_id, context, db)
    leads = generate_leads(campaign.id)
    totals = summarize_leads(leads)

    return LeadsResponse(
        campaign_id=campaign.id,
        campaign_name=campaign.name,
        totals=LeadTotalsSchema(**totals.__dict__),
        leads=[LeadItem.from_record(lead) for lead in leads],
    )


@router.get("/campaigns/{campaign_id}/leads.csv")
def export_campaign_leads(
    campaign_id: str,
    context: ClientContext = Depends(get_client_context),
    db: Session = Depends(get_db),
):
    """Download the campaign's leads as CSV"""
    campaign = _load_campaign(campaign_id, context, db)
    csv_body = leads_to_csv(generate_leads(campaign.id))

    return Response(
        content=csv_body,
        media_type="text/csv; charset=utf-8",
        headers={"Content-Disposition": leads_content_disposition(campaign.name)},
    )
