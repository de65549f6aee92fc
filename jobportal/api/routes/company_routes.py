"""
Company Routes

GET /companies - Active companies with their open job counts
GET /companies/{company_id} - Single company
"""

from typing import List, Optional

from fastapi import APIRouter, HTTPException, Query

from jobportal.db.postgres import execute_raw_sql
from jobportal.schemas.schemas import CompanyResponse

router = APIRouter(prefix="/companies", tags=["Companies"])

COMPANY_SQL = """
    SELECT c.id, c.name, c.description, c.website, c.industry, c.size,
           c.location_city, c.location_country,
           COUNT(j.id) FILTER (WHERE j.status = 'active' AND j.is_active = TRUE) AS open_jobs
    FROM companies c
    LEFT JOIN jobs j ON j.company_id = c.id
    WHERE c.is_active = TRUE
"""


@router.get("", response_model=List[CompanyResponse])
async def list_companies(
    search: Optional[str] = Query(None, description="Search in company name"),
    industry: Optional[str] = Query(None)
):
    """List active companies, most open jobs first."""
    sql = COMPANY_SQL
    params = {}
    if search:
        sql += " AND c.name ILIKE :search"
        params["search"] = f"%{search}%"
    if industry:
        sql += " AND c.industry ILIKE :industry"
        params["industry"] = industry
    sql += " GROUP BY c.id ORDER BY open_jobs DESC, c.name"

    return [CompanyResponse(**r) for r in execute_raw_sql(sql, params)]


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(company_id: int):
    """Get a company by id."""
    results = execute_raw_sql(COMPANY_SQL + " AND c.id = :cid GROUP BY c.id", {"cid": company_id})
    if not results:
        raise HTTPException(status_code=404, detail="Company not found")
    return CompanyResponse(**results[0])
