from fastapi import APIRouter, Depends, Query, status

from prepdeck.dependencies import get_admin_identity, get_company_repo, get_current_identity
from prepdeck.repos import CompanyRepo
from prepdeck.schemas.requests import CompanyCreateRequest, DesignationAddRequest
from prepdeck.services.auth import Identity

router = APIRouter(prefix="/api/companies", tags=["companies"])


@router.get("/get-all")
def get_all_companies(companies: CompanyRepo = Depends(get_company_repo)):
    return [c.to_document() for c in companies.get_all()]


@router.get("/search")
def search_companies(
    search_query: str = Query(..., alias="searchQuery", min_length=1),
    companies: CompanyRepo = Depends(get_company_repo),
):
    """Case-insensitive match on name, description and industry."""
    return [c.to_document() for c in companies.search(search_query)]


@router.get("/designation")
def get_designations(
    company_id: str = Query(..., alias="companyId", min_length=1),
    companies: CompanyRepo = Depends(get_company_repo),
):
    return companies.get_designations(company_id)


@router.post("/designation")
def add_designations(
    request: DesignationAddRequest,
    identity: Identity = Depends(get_current_identity),
    companies: CompanyRepo = Depends(get_company_repo),
):
    designations = companies.add_designations(request.company_id, request.designations)
    return {"message": "Designation added to company", "designations": designations}


@router.post("", status_code=status.HTTP_201_CREATED)
def create_company(
    request: CompanyCreateRequest,
    identity: Identity = Depends(get_admin_identity),
    companies: CompanyRepo = Depends(get_company_repo),
):
    company = companies.create(request.model_dump(by_alias=True, exclude_none=True))
    return company.to_document()


@router.get("/{company_id}")
def get_company(company_id: str, companies: CompanyRepo = Depends(get_company_repo)):
    return companies.get_by_id(company_id).to_document()
