"""
Client-side state stores with persisted subsets.

- JobSearchStore: search filters and result paging ("job-search-store")
- AuthStore: signed-in user and token ("auth-store")
"""
from jobportal.stores.auth_store import AuthStore
from jobportal.stores.job_store import JobSearchStore
from jobportal.stores.storage import JsonFileStorage, MemoryStorage

__all__ = ["AuthStore", "JobSearchStore", "JsonFileStorage", "MemoryStorage"]
