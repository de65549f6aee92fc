"""
Static site content served by /api/content: blog posts, salary guide,
pricing plans and policy pages.
"""
from jobportal.content.pages import BLOG_POSTS, PAGES, PRICING_PLANS, SALARY_GUIDE, get_page

__all__ = ["BLOG_POSTS", "PAGES", "PRICING_PLANS", "SALARY_GUIDE", "get_page"]
