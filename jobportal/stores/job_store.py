"""
Job search store - search filters, paging and the last result page.

Only the search preferences are persisted (key "job-search-store");
results, paging and loading flags live for the session only.
"""

import copy
from typing import Any, Dict, List, Optional

from jobportal.stores.base import PersistedStore

FILTER_OPTIONS = {
    "job_types": ["Full-time", "Part-time", "Contract", "Freelance", "Internship"],
    "categories": ["Technology", "Design", "Marketing", "Data Science", "Sales", "Finance", "HR"],
    "experience_levels": ["Entry Level", "Mid Level", "Senior Level", "Executive"],
    "salary_ranges": ["0-30k", "30k-50k", "50k-70k", "70k-90k", "90k-120k", "120k+"],
    "remote_types": ["Remote", "Hybrid", "On-site"],
}

SORT_OPTIONS = ["newest", "oldest", "salary-high", "salary-low", "relevance"]
DEFAULT_SORT = "newest"

# Fields cleared by clear_filters() and checked by has_active_filters()
FILTER_FIELDS = [
    "search_query",
    "location",
    "job_type",
    "salary_range",
    "experience_level",
    "category",
    "remote_type",
]


class JobSearchStore(PersistedStore):
    persist_name = "job-search-store"
    persisted_fields = {
        "search_query": "searchQuery",
        "location": "location",
        "job_type": "jobType",
        "salary_range": "salaryRange",
        "experience_level": "experienceLevel",
        "category": "category",
        "remote_type": "remoteType",
        "sort_by": "sortBy",
    }

    def __init__(self, storage=None):
        # Search and filter state
        self.search_query = ""
        self.location = ""
        self.job_type = ""
        self.salary_range = ""
        self.experience_level = ""
        self.category = ""
        self.remote_type = ""  # "remote", "hybrid", "onsite"
        self.sort_by = DEFAULT_SORT

        # Results state
        self.jobs: List[Dict[str, Any]] = []
        self.total_jobs = 0
        self.current_page = 1
        self.loading = False
        self.error: Optional[str] = None

        self.filter_options = copy.deepcopy(FILTER_OPTIONS)

        super().__init__(storage)

    # ----- setters ------------------------------------------------------

    def set_search_query(self, query: str):
        self.set_state(search_query=query)

    def set_location(self, location: str):
        self.set_state(location=location)

    def set_job_type(self, job_type: str):
        self.set_state(job_type=job_type)

    def set_salary_range(self, salary_range: str):
        self.set_state(salary_range=salary_range)

    def set_experience_level(self, level: str):
        self.set_state(experience_level=level)

    def set_category(self, category: str):
        self.set_state(category=category)

    def set_remote_type(self, remote_type: str):
        self.set_state(remote_type=remote_type)

    def set_sort_by(self, sort_by: str):
        self.set_state(sort_by=sort_by)

    def set_current_page(self, page: int):
        self.set_state(current_page=page)

    def set_jobs(self, jobs: List[Dict[str, Any]]):
        self.set_state(jobs=jobs)

    def set_total_jobs(self, total: int):
        self.set_state(total_jobs=total)

    def set_loading(self, loading: bool):
        self.set_state(loading=loading)

    def set_error(self, error: Optional[str]):
        self.set_state(error=error)

    # ----- derived ------------------------------------------------------

    def clear_filters(self):
        """Reset every filter to empty, sort to newest and go back to page 1."""
        changes = {field: "" for field in FILTER_FIELDS}
        changes.update(sort_by=DEFAULT_SORT, current_page=1)
        self.set_state(**changes)

    def get_filters(self) -> Dict[str, Any]:
        """Current filters keyed the way GET /api/jobs expects them."""
        return {
            "search": self.search_query,
            "location": self.location,
            "type": self.job_type,
            "salary": self.salary_range,
            "experience": self.experience_level,
            "category": self.category,
            "remote": self.remote_type,
            "sort": self.sort_by,
            "page": self.current_page,
        }

    def has_active_filters(self) -> bool:
        return any(getattr(self, field) for field in FILTER_FIELDS)

    def query_params(self) -> Dict[str, Any]:
        """get_filters() without empty values, ready to send as a query string."""
        return {key: value for key, value in self.get_filters().items() if value not in ("", None)}
