"""
Company Routes

POST /companies - Create company (creator joins it)
GET /companies - List companies, optional ?keyword= name search
PUT /companies/join - Link own account to an existing company
GET /companies/{company_id} - Get company
PUT /companies/{company_id} - Update company (members only)
"""

import logging

from fastapi import APIRouter, HTTPException, Depends, Query
from pymongo.errors import DuplicateKeyError
from typing import List, Optional

from app.core.auth import get_current_user
from app.services.mongo_service import CompanyService, UserService
from app.schemas.schemas import (
    CompanyCreate, CompanyUpdate, CompanyResponse, JoinCompanyRequest, UserResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/companies", tags=["Companies"])


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(data: CompanyCreate, user: dict = Depends(get_current_user)):
    """Create a company and link the current account to it."""
    companies = CompanyService()
    if companies.get_by_name(data.name):
        raise HTTPException(status_code=400, detail="Company already exists")

    fields = data.model_dump(exclude_none=True, mode="json")
    try:
        company = companies.insert(fields)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Company already exists")

    UserService().update(user["id"], {"company_id": company["id"], "company_name": company["name"]})
    logger.info("Company %s created by user %s", company["id"], user["id"])
    return CompanyResponse(**company)


@router.get("", response_model=List[CompanyResponse])
async def list_companies(keyword: Optional[str] = Query(None, description="Case-insensitive name search")):
    """List companies sorted by name."""
    return CompanyService().list(keyword)


@router.put("/join", response_model=UserResponse)
async def join_company(data: JoinCompanyRequest, user: dict = Depends(get_current_user)):
    """Link the current account to an existing company."""
    company = CompanyService().get_by_id(data.company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")

    updated = UserService().update(user["id"], {"company_id": company["id"], "company_name": company["name"]})
    if not updated:
        raise HTTPException(status_code=404, detail="User not found")
    return UserResponse(**updated)


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(company_id: str):
    """Get company details."""
    company = CompanyService().get_by_id(company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")
    return CompanyResponse(**company)


@router.put("/{company_id}", response_model=CompanyResponse)
async def update_company(company_id: str, data: CompanyUpdate, user: dict = Depends(get_current_user)):
    """Update company. Only provided fields change."""
    companies = CompanyService()
    company = companies.get_by_id(company_id)
    if not company:
        raise HTTPException(status_code=404, detail="Company not found")

    if user.get("company_id") != company["id"]:
        raise HTTPException(status_code=403, detail="Not authorized to update this company")

    fields = data.model_dump(exclude_unset=True, exclude_none=True, mode="json")
    if not fields:
        return CompanyResponse(**company)

    try:
        updated = companies.update(company_id, fields)
    except DuplicateKeyError:
        raise HTTPException(status_code=400, detail="Company already exists")
    return CompanyResponse(**updated)
