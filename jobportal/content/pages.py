"""Fixed content. No business logic lives here."""

from typing import Optional

BLOG_POSTS = [
    {
        "id": 1,
        "title": "Top 10 Interview Questions for Software Engineers",
        "excerpt": "Prepare for your next tech interview with these commonly asked questions and sample answers.",
        "date": "2024-12-01",
        "author": "JobPortal Team",
    },
    {
        "id": 2,
        "title": "Remote Work Best Practices in 2024",
        "excerpt": "Learn how to excel in remote work environments and maintain work-life balance.",
        "date": "2024-11-28",
        "author": "Career Expert",
    },
    {
        "id": 3,
        "title": "Salary Negotiation Strategies",
        "excerpt": "Master the art of salary negotiation and maximize your earning potential.",
        "date": "2024-11-25",
        "author": "HR Professional",
    },
]

# Annual ranges in lakh rupees (LPA)
SALARY_GUIDE = {
    "currency": "INR",
    "unit": "LPA",
    "note": "Salary ranges are approximate and may vary based on location, company size, and individual experience.",
    "fields": [
        {
            "field": "Software Engineering",
            "ranges": {"junior": [3, 8], "mid_level": [8, 18], "senior": [18, 35]},
        },
        {
            "field": "Data Science",
            "ranges": {"junior": [4, 10], "mid_level": [10, 20], "senior": [20, 40]},
        },
        {
            "field": "Product Management",
            "ranges": {"junior": [6, 12], "mid_level": [12, 25], "senior": [25, 50]},
        },
    ],
}

PRICING_PLANS = [
    {
        "id": "starter",
        "name": "Starter",
        "description": "Perfect for small businesses and startups",
        "monthly": 29,
        "annual": 290,
        "features": [
            "3 active job postings",
            "Standard job visibility",
            "Basic candidate filtering",
            "Email notifications",
            "Standard support",
            "30-day job listing duration",
        ],
        "limitations": ["No featured listings", "Limited analytics", "No priority support"],
        "popular": False,
    },
    {
        "id": "professional",
        "name": "Professional",
        "description": "Ideal for growing companies",
        "monthly": 99,
        "annual": 990,
        "features": [
            "10 active job postings",
            "3 featured listings/month",
            "Advanced candidate filtering",
            "Resume database access",
            "Priority email support",
            "Detailed analytics dashboard",
            "60-day job listing duration",
            "Company page customization",
        ],
        "limitations": ["No phone support", "Limited integrations"],
        "popular": True,
    },
    {
        "id": "enterprise",
        "name": "Enterprise",
        "description": "For large organizations with high-volume hiring",
        "monthly": 299,
        "annual": 2990,
        "features": [
            "Unlimited job postings",
            "Unlimited featured listings",
            "Advanced analytics & reporting",
            "Full resume database access",
            "Dedicated account manager",
            "Phone & priority support",
            "Custom integrations",
            "Bulk job posting",
            "Team collaboration tools",
            "White-label options",
        ],
        "limitations": [],
        "popular": False,
    },
]

PAGES = {
    "privacy": {
        "title": "Privacy Policy",
        "intro": "At JobPortal, we are committed to protecting your privacy and ensuring the security of your personal information.",
        "sections": [
            {
                "heading": "Information We Collect",
                "body": "We collect information you provide directly to us, such as when you create an account, apply for jobs, or contact us for support.",
            },
            {
                "heading": "How We Use Your Information",
                "body": "We use your information to provide and improve our services, match you with relevant job opportunities, and communicate with you about your account.",
            },
            {
                "heading": "Contact Us",
                "body": "If you have any questions about this Privacy Policy, please contact us at privacy@jobportal.com.",
            },
        ],
    },
    "terms": {
        "title": "Terms of Service",
        "intro": "Welcome to JobPortal. By using our services, you agree to these terms and conditions.",
        "sections": [
            {
                "heading": "Acceptance of Terms",
                "body": "By accessing and using JobPortal, you accept and agree to be bound by the terms and provision of this agreement.",
            },
            {
                "heading": "User Responsibilities",
                "body": "Users are responsible for maintaining the confidentiality of their account information and for all activities under their account.",
            },
            {
                "heading": "Contact Information",
                "body": "For questions about these Terms of Service, please contact us at legal@jobportal.com.",
            },
        ],
    },
    "cookies": {
        "title": "Cookie Policy",
        "intro": "This Cookie Policy explains how JobPortal uses cookies and similar technologies.",
        "sections": [
            {
                "heading": "What Are Cookies",
                "body": "Cookies are small text files that are stored on your device when you visit our website.",
            },
            {
                "heading": "How We Use Cookies",
                "body": "We use cookies to improve your experience, remember your preferences, and analyze website traffic.",
            },
            {
                "heading": "Managing Cookies",
                "body": "You can control cookies through your browser settings. Note that disabling cookies may affect website functionality.",
            },
        ],
    },
    "about": {
        "title": "Connecting Talent with Opportunity",
        "intro": "We're on a mission to transform the way people find jobs and companies discover talent through innovative technology and human-centered design.",
        "sections": [
            {
                "heading": "Our Mission",
                "body": "At JobPortal, we believe that finding the right job shouldn't be a matter of luck. "
                        "We're committed to making the job search process more efficient, transparent, "
                        "and successful for everyone involved.",
            },
        ],
    },
}


def get_page(slug: str) -> Optional[dict]:
    page = PAGES.get(slug)
    if page is None:
        return None
    return {"slug": slug, **page}
