"""
Partner Inquiry Routes

POST /partners - Submit a partnership inquiry (public)
GET /partners - List inquiries (admin only)
PUT /partners/{inquiry_id}/status - Update inquiry status (admin only)
"""

import logging

from fastapi import APIRouter, HTTPException, Depends
from typing import List

from app.core.auth import get_current_admin
from app.services.mongo_service import PartnerInquiryService
from app.schemas.schemas import (
    PartnerInquiryCreate, PartnerInquiryResponse, InquiryStatusUpdate
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/partners", tags=["Partners"])


@router.post("", response_model=PartnerInquiryResponse, status_code=201)
async def create_inquiry(data: PartnerInquiryCreate):
    inquiry = PartnerInquiryService().insert(data.model_dump(mode="json"))
    logger.info("Partner inquiry %s from %s", inquiry["id"], inquiry["organization_name"])
    return PartnerInquiryResponse(**inquiry)


@router.get("", response_model=List[PartnerInquiryResponse])
async def list_inquiries(admin: dict = Depends(get_current_admin)):
    return PartnerInquiryService().list_all()


@router.put("/{inquiry_id}/status", response_model=PartnerInquiryResponse)
async def update_inquiry_status(
    inquiry_id: str,
    update: InquiryStatusUpdate,
    admin: dict = Depends(get_current_admin)
):
    inquiry = PartnerInquiryService().update_status(inquiry_id, update.status.value)
    if not inquiry:
        raise HTTPException(status_code=404, detail="Inquiry not found")
    return PartnerInquiryResponse(**inquiry)
