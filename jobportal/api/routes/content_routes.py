"""
Content Routes - fixed site content, no database access.

GET /content/blogs
GET /content/salaries
GET /content/pricing
GET /content/pages/{slug} - privacy, terms, cookies, about
"""

from fastapi import APIRouter, HTTPException

from jobportal.content import BLOG_POSTS, PRICING_PLANS, SALARY_GUIDE, get_page

router = APIRouter(prefix="/content", tags=["Content"])


@router.get("/blogs")
async def list_blogs():
    return {"posts": BLOG_POSTS}


@router.get("/salaries")
async def salary_guide():
    return SALARY_GUIDE


@router.get("/pricing")
async def pricing_plans():
    return {"plans": PRICING_PLANS}


@router.get("/pages/{slug}")
async def get_content_page(slug: str):
    page = get_page(slug)
    if page is None:
        raise HTTPException(status_code=404, detail="Page not found")
    return page
