"""
API tests with FastAPI's TestClient.

Route modules run raw Postgres SQL through execute_raw_sql; the tests swap
that helper for a FakeSQL that answers by matching a fragment of the query.
"""
import json
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import IntegrityError

from jobportal import main
from jobportal.api.routes import (
    admin_routes, application_routes, auth_routes, company_routes, job_routes, payment_routes,
    referral_routes, resume_routes,
)
from jobportal.api.routes.job_routes import build_job_search_query, parse_salary_range
from jobportal.core.auth import hash_password, protect
from jobportal.main import app
from jobportal.stores import AuthStore
from jobportal.stores.auth_client import ApiAuthClient

NOW = datetime(2024, 12, 1, 10, 0, 0)

CANDIDATE = {"id": 7, "first_name": "Asha", "last_name": "Rao", "email": "asha@example.com",
             "role": "candidate", "phone": None, "is_active": True, "created_at": NOW}
RECRUITER = {**CANDIDATE, "id": 3, "first_name": "Meera", "last_name": "Kapoor",
             "email": "recruiter1@jobportal.com", "role": "recruiter"}
ADMIN = {**CANDIDATE, "id": 1, "first_name": "Super", "last_name": "Admin",
         "email": "admin@jobportal.com", "role": "admin"}


class FakeSQL:
    """Stands in for execute_raw_sql; first matching fragment wins."""

    def __init__(self, *handlers):
        self.handlers = list(handlers)
        self.calls = []

    def __call__(self, sql, params=None):
        self.calls.append((sql, params or {}))
        for fragment, result in self.handlers:
            if fragment in sql:
                return result(params or {}) if callable(result) else result
        return []


class FakeSession:
    """Stands in for the get_db_session() session; every statement returns id 1."""

    def __init__(self):
        self.calls = []

    def execute(self, statement, params=None):
        self.calls.append((str(statement), params or {}))
        return self

    def fetchone(self):
        return (1,)


def fake_db_session(session):
    @contextmanager
    def factory():
        yield session
    return factory


def unique_violation(params):
    raise IntegrityError("INSERT", params, Exception("duplicate key value violates unique constraint"))


def job_row(**overrides):
    row = {
        "id": 1, "company_id": 2, "company_name": "TechCorp Solutions", "posted_by_recruiter_id": 3,
        "title": "Backend Engineer", "description": "Build APIs", "location": "Pune",
        "salary_min": 800000, "salary_max": 1500000, "currency": "INR", "experience_level": "Mid Level",
        "employment_type": "full-time", "category": "Technology", "remote_type": "hybrid",
        "is_remote": False, "status": "active", "application_deadline": None, "created_at": NOW,
    }
    row.update(overrides)
    return row


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def sign_in_as(user):
    app.dependency_overrides[protect] = lambda: user


# ============================================================
# HEALTH / CONTENT
# ============================================================

def test_health_reports_database(client, monkeypatch):
    monkeypatch.setattr(main, "test_postgres_connection", lambda: False)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["postgres"] == "disconnected"
    assert response.json()["status"] == "degraded"


def test_content_endpoints(client):
    assert len(client.get("/api/content/blogs").json()["posts"]) == 3
    assert [p["id"] for p in client.get("/api/content/pricing").json()["plans"]] == \
        ["starter", "professional", "enterprise"]
    assert client.get("/api/content/salaries").json()["fields"][0]["field"] == "Software Engineering"

    page = client.get("/api/content/pages/privacy").json()
    assert page["slug"] == "privacy"
    assert page["title"] == "Privacy Policy"

    assert client.get("/api/content/pages/nope").status_code == 404


# ============================================================
# AUTH
# ============================================================

def test_register_returns_field_errors(client, monkeypatch):
    fake = FakeSQL()
    monkeypatch.setattr(auth_routes, "execute_raw_sql", fake)

    response = client.post("/api/auth/register", json={
        "first_name": "A", "last_name": "", "email": "nope", "password": "weak",
    })

    assert response.status_code == 400
    detail = response.json()["detail"]
    assert detail["message"] == "Validation failed"
    assert set(detail["errors"]) == {"first_name", "last_name", "email", "password"}
    assert fake.calls == []


def test_register_creates_user_and_returns_token(client, monkeypatch):
    fake = FakeSQL(
        ("SELECT id FROM users WHERE email", []),
        ("INSERT INTO users", lambda params: [{**CANDIDATE, "email": params["email"]}]),
    )
    monkeypatch.setattr(auth_routes, "execute_raw_sql", fake)

    response = client.post("/api/auth/register", json={
        "first_name": "Asha", "last_name": "Rao", "email": "Asha@Example.com", "password": "Str0ng!Pass",
    })

    assert response.status_code == 201
    body = response.json()
    assert body["access_token"]
    assert body["user"]["email"] == "asha@example.com"
    insert_params = fake.calls[-1][1]
    assert insert_params["role"] == "candidate"
    assert insert_params["password_hash"] != "Str0ng!Pass"


def test_register_rejects_duplicate_email(client, monkeypatch):
    monkeypatch.setattr(auth_routes, "execute_raw_sql", FakeSQL(("SELECT id FROM users", [{"id": 7}])))
    response = client.post("/api/auth/register", json={
        "first_name": "Asha", "last_name": "Rao", "email": "asha@example.com", "password": "Str0ng!Pass",
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "User with this email already exists"


def test_register_cannot_create_admin(client, monkeypatch):
    monkeypatch.setattr(auth_routes, "execute_raw_sql", FakeSQL())
    response = client.post("/api/auth/register", json={
        "first_name": "Asha", "last_name": "Rao", "email": "asha@example.com",
        "password": "Str0ng!Pass", "role": "admin",
    })
    assert response.status_code == 403


def test_login(client, monkeypatch):
    password_hash = hash_password("Str0ng!Pass")
    monkeypatch.setattr(auth_routes, "execute_raw_sql", FakeSQL(
        ("password_hash FROM users", lambda params: [{**CANDIDATE, "password_hash": password_hash}]),
        ("UPDATE users SET last_login", [{"id": 7}]),
    ))

    ok = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "Str0ng!Pass"})
    assert ok.status_code == 200
    assert ok.json()["user"]["id"] == 7
    assert ok.json()["token_type"] == "bearer"

    bad = client.post("/api/auth/login", json={"email": "asha@example.com", "password": "Wr0ng!Pass"})
    assert bad.status_code == 401


def test_me_requires_token(client):
    assert client.get("/api/auth/me").status_code == 401


def test_me_and_profile_update(client, monkeypatch):
    sign_in_as(CANDIDATE)
    fake = FakeSQL(("UPDATE users SET", lambda params: [{**CANDIDATE, "first_name": params["first_name"]}]))
    monkeypatch.setattr(auth_routes, "execute_raw_sql", fake)

    assert client.get("/api/auth/me").json()["email"] == "asha@example.com"

    response = client.put("/api/auth/profile", json={"first_name": "Anu"})
    assert response.status_code == 200
    assert response.json()["first_name"] == "Anu"
    assert "first_name = :first_name" in fake.calls[0][0]

    assert client.put("/api/auth/profile", json={"phone": "not a phone"}).status_code == 400


def test_auth_store_against_api(client, monkeypatch):
    password_hash = hash_password("Str0ng!Pass")
    monkeypatch.setattr(auth_routes, "execute_raw_sql", FakeSQL(
        ("password_hash FROM users", lambda params: [{**CANDIDATE, "password_hash": password_hash}]),
    ))
    store = AuthStore(client=ApiAuthClient(http=client))

    assert store.login("asha@example.com", "Wr0ng!Pass") == {"success": False, "error": "Invalid credentials"}
    assert store.login("asha@example.com", "Str0ng!Pass") == {"success": True}
    assert store.get_user_id() == 7


# ============================================================
# JOBS
# ============================================================

def test_parse_salary_range():
    assert parse_salary_range("30k-50k") == (30000, 50000)
    assert parse_salary_range("120k+") == (120000, None)
    assert parse_salary_range("0-30k") == (0, 30000)
    assert parse_salary_range("") is None
    assert parse_salary_range("lots") is None


def test_build_job_search_query_uses_store_filter_keys():
    query = build_job_search_query(
        {"search": "python", "type": "Full-time", "remote": "Remote", "salary": "120k+", "sort": "salary-high"},
        page=3, limit=20,
    )

    assert query["params"] == {
        "search": "%python%",
        "employment_type": "full-time",
        "remote_type": "fully-remote",
        "salary_low": 120000,
        "limit": 20,
        "offset": 40,
    }
    assert "ORDER BY j.salary_max DESC NULLS LAST" in query["sql"]
    assert query["count_sql"].startswith("SELECT COUNT(*) AS total")
    assert "LIMIT" not in query["count_sql"]


def test_build_job_search_query_without_filters():
    query = build_job_search_query({})
    assert query["params"] == {"limit": 10, "offset": 0}
    assert "ORDER BY j.created_at DESC" in query["sql"]


def test_list_jobs(client, monkeypatch):
    fake = FakeSQL(
        ("COUNT(*) AS total", [{"total": 12}]),
        ("FROM job_skills", [{"job_id": 1, "name": "Python"}, {"job_id": 1, "name": "SQL"}]),
        ("FROM jobs j", [job_row()]),
    )
    monkeypatch.setattr(job_routes, "execute_raw_sql", fake)

    response = client.get("/api/jobs", params={"search": "backend", "type": "Full-time", "limit": 5, "page": 2})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 12
    assert body["pages"] == 3
    assert body["page"] == 2
    assert body["jobs"][0]["skills"] == ["Python", "SQL"]
    assert body["jobs"][0]["salary_min"] == 800000.0
    assert fake.calls[0][1]["offset"] == 5


def test_list_jobs_rejects_unknown_sort(client):
    assert client.get("/api/jobs", params={"sort": "random"}).status_code == 400


def test_get_job_not_found(client, monkeypatch):
    monkeypatch.setattr(job_routes, "execute_raw_sql", FakeSQL())
    assert client.get("/api/jobs/99").status_code == 404


def test_create_job_requires_recruiter(client):
    sign_in_as(CANDIDATE)
    response = client.post("/api/jobs", json={"company_id": 1, "title": "Backend Engineer"})
    assert response.status_code == 403


def test_create_job_validates_posting(client):
    sign_in_as(RECRUITER)
    response = client.post("/api/jobs", json={
        "company_id": 1, "title": "BE", "description": "too short",
        "employment_type": "gig", "salary_min": 100, "salary_max": 50, "skills": [],
    })
    assert response.status_code == 400
    assert set(response.json()["detail"]["errors"]) == {
        "title", "description", "employment_type", "salary_max", "skills"
    }


def test_delete_job_only_by_owner(client, monkeypatch):
    monkeypatch.setattr(job_routes, "execute_raw_sql", FakeSQL(("FROM jobs j", [job_row(posted_by_recruiter_id=99)])))
    sign_in_as(RECRUITER)
    assert client.delete("/api/jobs/1").status_code == 403


def test_apply_to_job(client, monkeypatch):
    fake = FakeSQL(
        ("FROM jobs j", [job_row()]),
        ("SELECT id FROM applications", []),
        ("INSERT INTO applications", [{
            "id": 40, "job_id": 1, "candidate_id": 7, "resume_id": None,
            "cover_letter": "Hello", "status": "pending", "applied_at": NOW,
        }]),
    )
    monkeypatch.setattr(job_routes, "execute_raw_sql", fake)
    sign_in_as(CANDIDATE)

    response = client.post("/api/jobs/1/apply", json={"cover_letter": "Hello"})

    assert response.status_code == 201
    assert response.json()["status"] == "pending"
    assert response.json()["company_name"] == "TechCorp Solutions"


def test_apply_twice_is_rejected(client, monkeypatch):
    monkeypatch.setattr(job_routes, "execute_raw_sql", FakeSQL(
        ("FROM jobs j", [job_row()]),
        ("SELECT id FROM applications", [{"id": 40}]),
    ))
    sign_in_as(CANDIDATE)
    response = client.post("/api/jobs/1/apply", json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "You have already applied for this job"


def test_update_application_status(client, monkeypatch):
    fake = FakeSQL(
        ("FROM jobs j", [job_row()]),
        ("UPDATE applications", lambda params: [{
            "id": params["aid"], "job_id": 1, "candidate_id": 7, "resume_id": None,
            "cover_letter": None, "status": params["status"], "applied_at": NOW,
        }]),
    )
    monkeypatch.setattr(job_routes, "execute_raw_sql", fake)
    sign_in_as(RECRUITER)

    response = client.put("/api/jobs/1/applications/40", json={"status": "shortlisted"})
    assert response.status_code == 200
    assert response.json()["status"] == "shortlisted"

    assert client.put("/api/jobs/1/applications/40", json={"status": "ghosted"}).status_code == 422


def test_my_applications(client, monkeypatch):
    fake = FakeSQL(("FROM applications a", [{
        "id": 40, "job_id": 1, "job_title": "Backend Engineer", "company_name": "TechCorp Solutions",
        "candidate_id": 7, "candidate_name": "Asha Rao", "candidate_email": "asha@example.com",
        "resume_id": None, "cover_letter": None, "status": "reviewed", "applied_at": NOW,
    }]))
    monkeypatch.setattr(application_routes, "execute_raw_sql", fake)
    sign_in_as(CANDIDATE)

    response = client.get("/api/applications/me")

    assert response.status_code == 200
    assert response.json()[0]["job_title"] == "Backend Engineer"
    assert fake.calls[0][1] == {"uid": 7}


# ============================================================
# COMPANIES / RESUMES
# ============================================================

def test_list_companies_with_search(client, monkeypatch):
    fake = FakeSQL(("FROM companies c", [{
        "id": 2, "name": "TechCorp Solutions", "description": None, "website": None,
        "industry": "Technology", "size": "1000-5000", "location_city": "Pune",
        "location_country": "India", "open_jobs": 4,
    }]))
    monkeypatch.setattr(company_routes, "execute_raw_sql", fake)

    response = client.get("/api/companies", params={"search": "tech"})

    assert response.json()[0]["open_jobs"] == 4
    assert fake.calls[0][1] == {"search": "%tech%"}
    assert client.get("/api/companies/2").status_code == 200


def test_resume_templates_are_public(client, monkeypatch):
    monkeypatch.setattr(resume_routes, "execute_raw_sql", FakeSQL(("FROM resume_templates", [
        {"id": 1, "name": "Modern", "description": "Clean layout", "is_premium": False},
    ])))
    assert client.get("/api/resumes/templates").json()[0]["name"] == "Modern"


def test_private_resume_hidden_from_other_users(client, monkeypatch):
    monkeypatch.setattr(resume_routes, "execute_raw_sql", FakeSQL(("FROM resumes", [{
        "id": 5, "user_id": 99, "title": "CV", "template": "modern", "status": "draft",
        "resume_data": "{}", "is_public": False, "created_at": NOW, "updated_at": NOW,
    }])))
    sign_in_as(CANDIDATE)
    assert client.get("/api/resumes/5").status_code == 403


def test_create_resume_with_skills(client, monkeypatch):
    session = FakeSession()
    monkeypatch.setattr(resume_routes, "get_db_session", fake_db_session(session))
    monkeypatch.setattr(resume_routes, "execute_raw_sql", FakeSQL(
        ("FROM resume_skills", [{"resume_id": 1, "name": "Python", "proficiency": "expert"}]),
        ("FROM resumes", [{
            "id": 1, "user_id": 7, "title": "Backend CV", "template": "modern", "status": "draft",
            "resume_data": '{"summary": "APIs"}', "is_public": False, "created_at": NOW, "updated_at": NOW,
        }]),
    ))
    sign_in_as(CANDIDATE)

    response = client.post("/api/resumes", json={
        "title": "Backend CV", "resume_data": {"summary": "APIs"},
        "skills": [{"name": " Python ", "proficiency": "expert"}],
    })

    assert response.status_code == 201
    assert response.json()["resume_data"] == {"summary": "APIs"}
    assert response.json()["skills"] == [{"name": "Python", "proficiency": "expert"}]
    statements = [sql for sql, _ in session.calls]
    assert "INSERT INTO resumes" in statements[0]
    assert json.loads(session.calls[0][1]["data"]) == {"summary": "APIs"}
    assert any("INSERT INTO skills" in sql for sql in statements)
    skill_link = next(params for sql, params in session.calls if "INSERT INTO resume_skills" in sql)
    assert skill_link == {"rid": 1, "sid": 1, "proficiency": "expert"}


def test_update_resume_status(client, monkeypatch):
    session = FakeSession()
    monkeypatch.setattr(resume_routes, "get_db_session", fake_db_session(session))
    monkeypatch.setattr(resume_routes, "execute_raw_sql", FakeSQL(("FROM resumes", [{
        "id": 1, "user_id": 7, "title": "Backend CV", "template": "modern", "status": "draft",
        "resume_data": "{}", "is_public": False, "created_at": NOW, "updated_at": NOW,
    }])))
    sign_in_as(CANDIDATE)

    response = client.put("/api/resumes/1", json={"status": "published"})

    assert response.status_code == 200
    sql, params = session.calls[0]
    assert "UPDATE resumes SET status = :status" in sql
    assert params == {"status": "published", "rid": 1}
    assert type(params["status"]) is str


def test_update_resume_rejects_unknown_status(client, monkeypatch):
    session = FakeSession()
    monkeypatch.setattr(resume_routes, "get_db_session", fake_db_session(session))
    sign_in_as(CANDIDATE)

    assert client.put("/api/resumes/1", json={"status": "lost"}).status_code == 422
    assert session.calls == []


# ============================================================
# JOB UPDATES / DUPLICATE INSERTS
# ============================================================

def test_update_job_applies_posting_rules(client, monkeypatch):
    fake = FakeSQL(("UPDATE jobs", [{"id": 1}]), ("FROM jobs j", [job_row()]))
    monkeypatch.setattr(job_routes, "execute_raw_sql", fake)
    sign_in_as(RECRUITER)

    response = client.put("/api/jobs/1", json={"title": "", "description": "short"})

    assert response.status_code == 400
    assert set(response.json()["detail"]["errors"]) == {"title", "description"}
    assert not any("UPDATE jobs" in sql for sql, _ in fake.calls)


def test_update_job_checks_salary_against_stored_minimum(client, monkeypatch):
    monkeypatch.setattr(job_routes, "execute_raw_sql", FakeSQL(
        ("UPDATE jobs", [{"id": 1}]), ("FROM jobs j", [job_row()])
    ))
    sign_in_as(RECRUITER)

    response = client.put("/api/jobs/1", json={"salary_max": 100})

    assert response.status_code == 400
    assert set(response.json()["detail"]["errors"]) == {"salary_max"}


def test_update_job_saves_valid_changes(client, monkeypatch):
    fake = FakeSQL(("UPDATE jobs", [{"id": 1}]), ("FROM jobs j", [job_row()]))
    monkeypatch.setattr(job_routes, "execute_raw_sql", fake)
    sign_in_as(RECRUITER)

    response = client.put("/api/jobs/1", json={"title": "Senior Backend Engineer", "remote_type": "fully-remote"})

    assert response.status_code == 200
    params = next(params for sql, params in fake.calls if "UPDATE jobs" in sql)
    assert params == {
        "title": "Senior Backend Engineer", "remote_type": "fully-remote", "is_remote": True, "jid": 1
    }


def test_update_job_only_by_owner(client, monkeypatch):
    monkeypatch.setattr(job_routes, "execute_raw_sql", FakeSQL(("FROM jobs j", [job_row(posted_by_recruiter_id=99)])))
    sign_in_as(RECRUITER)
    assert client.put("/api/jobs/1", json={"title": "Senior Backend Engineer"}).status_code == 403


def test_register_race_on_duplicate_email(client, monkeypatch):
    monkeypatch.setattr(auth_routes, "execute_raw_sql", FakeSQL(
        ("SELECT id FROM users", []),
        ("INSERT INTO users", unique_violation),
    ))
    response = client.post("/api/auth/register", json={
        "first_name": "Asha", "last_name": "Rao", "email": "asha@example.com",
        "password": "Str0ng!Pass",
    })
    assert response.status_code == 400
    assert response.json()["detail"] == "User with this email already exists"


def test_apply_race_on_duplicate_application(client, monkeypatch):
    monkeypatch.setattr(job_routes, "execute_raw_sql", FakeSQL(
        ("FROM jobs j", [job_row()]),
        ("SELECT id FROM applications", []),
        ("INSERT INTO applications", unique_violation),
    ))
    sign_in_as(CANDIDATE)
    response = client.post("/api/jobs/1/apply", json={})
    assert response.status_code == 400
    assert response.json()["detail"] == "You have already applied for this job"


# ============================================================
# APPLICATION STATS / WITHDRAW
# ============================================================

def test_application_stats_scoped_to_recruiter(client, monkeypatch):
    fake = FakeSQL(("FROM applications a", [
        {"status": "pending", "count": 4, "recent": 3},
        {"status": "hired", "count": 1, "recent": 0},
    ]))
    monkeypatch.setattr(application_routes, "execute_raw_sql", fake)
    sign_in_as(RECRUITER)

    response = client.get("/api/applications/stats", params={"job_id": 1})

    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 5
    assert body["new_last_7_days"] == 3
    assert body["by_status"]["shortlisted"] == 0
    assert body["by_status"]["pending"] == 4
    assert fake.calls[0][1] == {"uid": 3, "jid": 1}


def test_application_stats_not_for_candidates(client):
    sign_in_as(CANDIDATE)
    assert client.get("/api/applications/stats").status_code == 403


def test_withdraw_application(client, monkeypatch):
    fake = FakeSQL(("SELECT id, candidate_id, status", [{"id": 40, "candidate_id": 7, "status": "reviewed"}]))
    monkeypatch.setattr(application_routes, "execute_raw_sql", fake)
    sign_in_as(CANDIDATE)

    response = client.delete("/api/applications/40/withdraw")

    assert response.status_code == 200
    assert response.json()["message"] == "Application withdrawn successfully"
    assert "DELETE FROM applications" in fake.calls[-1][0]


def test_withdraw_rules(client, monkeypatch):
    sign_in_as(CANDIDATE)

    monkeypatch.setattr(application_routes, "execute_raw_sql", FakeSQL(
        ("SELECT id, candidate_id, status", [{"id": 40, "candidate_id": 7, "status": "hired"}])
    ))
    response = client.delete("/api/applications/40/withdraw")
    assert response.status_code == 400
    assert response.json()["detail"] == "Cannot withdraw application at this stage"

    monkeypatch.setattr(application_routes, "execute_raw_sql", FakeSQL(
        ("SELECT id, candidate_id, status", [{"id": 40, "candidate_id": 99, "status": "pending"}])
    ))
    assert client.delete("/api/applications/40/withdraw").status_code == 403

    monkeypatch.setattr(application_routes, "execute_raw_sql", FakeSQL())
    assert client.delete("/api/applications/40/withdraw").status_code == 404


# ============================================================
# REFERRALS
# ============================================================

def referral_row(**overrides):
    row = {
        "id": 11, "referrer_id": 7, "referrer_name": "Asha Rao", "job_id": 1,
        "job_title": "Backend Engineer", "company_name": "TechCorp Solutions",
        "referred_email": "ravi@example.com", "referred_name": "Ravi", "status": "pending", "created_at": NOW,
    }
    row.update(overrides)
    return row


def test_create_referral(client, monkeypatch):
    fake = FakeSQL(
        ("SELECT id FROM jobs", [{"id": 1}]),
        ("SELECT id FROM referrals", []),
        ("INSERT INTO referrals", [{"id": 11}]),
        ("FROM referrals r", [referral_row()]),
    )
    monkeypatch.setattr(referral_routes, "execute_raw_sql", fake)
    sign_in_as(CANDIDATE)

    response = client.post("/api/referrals", json={
        "job_id": 1, "referred_email": "Ravi@Example.com", "referred_name": "Ravi",
    })

    assert response.status_code == 201
    assert response.json()["job_title"] == "Backend Engineer"
    insert_params = next(params for sql, params in fake.calls if "INSERT INTO referrals" in sql)
    assert insert_params == {"uid": 7, "jid": 1, "email": "ravi@example.com", "name": "Ravi"}


def test_create_referral_rules(client, monkeypatch):
    sign_in_as(CANDIDATE)
    monkeypatch.setattr(referral_routes, "execute_raw_sql", FakeSQL(("SELECT id FROM referrals", [{"id": 11}])))

    response = client.post("/api/referrals", json={"job_id": 1, "referred_email": "not-an-email"})
    assert response.status_code == 400
    assert set(response.json()["detail"]["errors"]) == {"referred_email"}

    response = client.post("/api/referrals", json={"job_id": 1, "referred_email": "ASHA@example.com"})
    assert response.json()["detail"] == "You cannot refer yourself"

    response = client.post("/api/referrals", json={"job_id": 1, "referred_email": "ravi@example.com"})
    assert response.status_code == 404

    monkeypatch.setattr(referral_routes, "execute_raw_sql", FakeSQL(
        ("SELECT id FROM jobs", [{"id": 1}]),
        ("SELECT id FROM referrals", []),
        ("INSERT INTO referrals", unique_violation),
    ))
    response = client.post("/api/referrals", json={"job_id": 1, "referred_email": "ravi@example.com"})
    assert response.status_code == 400
    assert response.json()["detail"] == "This person has already been referred for this job"


def test_my_referrals_and_stats(client, monkeypatch):
    fake = FakeSQL(
        ("FROM referrals r", [referral_row()]),
        ("GROUP BY status", [{"status": "pending", "count": 2}, {"status": "hired", "count": 1}]),
    )
    monkeypatch.setattr(referral_routes, "execute_raw_sql", fake)
    sign_in_as(CANDIDATE)

    assert client.get("/api/referrals/my-referrals").json()[0]["referred_email"] == "ravi@example.com"

    stats = client.get("/api/referrals/stats").json()
    assert stats["total"] == 3
    assert stats["by_status"] == {"pending": 2, "applied": 0, "hired": 1, "rejected": 0}
    assert fake.calls[-1][1] == {"uid": 7}


def test_all_referrals_for_admin_only(client, monkeypatch):
    monkeypatch.setattr(referral_routes, "execute_raw_sql", FakeSQL(("FROM referrals r", [referral_row()])))

    sign_in_as(CANDIDATE)
    assert client.get("/api/referrals").status_code == 403

    sign_in_as(ADMIN)
    assert len(client.get("/api/referrals", params={"status": "pending"}).json()) == 1


def test_update_referral_status(client, monkeypatch):
    monkeypatch.setattr(referral_routes, "execute_raw_sql", FakeSQL(
        ("UPDATE referrals", [{"id": 11}]),
        ("FROM referrals r", [referral_row(referrer_id=99)]),
    ))

    sign_in_as(CANDIDATE)
    assert client.patch("/api/referrals/11/status", json={"status": "hired"}).status_code == 403

    sign_in_as(ADMIN)
    response = client.patch("/api/referrals/11/status", json={"status": "hired"})
    assert response.status_code == 200
    assert response.json()["status"] == "hired"


# ============================================================
# PAYMENTS / ADMIN
# ============================================================

def payment_row(**overrides):
    row = {
        "id": 21, "user_id": 7, "user_email": "asha@example.com", "amount": Decimal("499.00"),
        "currency": "INR", "purpose": "premium_profile", "status": "completed",
        "reference": "PAY-0A1B2C3D4E5F", "created_at": NOW,
    }
    row.update(overrides)
    return row


def test_payment_list_for_admin_only(client, monkeypatch):
    monkeypatch.setattr(payment_routes, "execute_raw_sql", FakeSQL(("FROM payments p", [payment_row()])))

    sign_in_as(CANDIDATE)
    assert client.get("/api/payments").status_code == 403
    assert client.get("/api/payments/my-payments").json()[0]["amount"] == 499.0

    sign_in_as(ADMIN)
    assert client.get("/api/payments", params={"purpose": "premium_profile"}).status_code == 200


def test_refund_rules(client, monkeypatch):
    sign_in_as(ADMIN)

    monkeypatch.setattr(payment_routes, "execute_raw_sql", FakeSQL(("FROM payments p", [payment_row(status="pending")])))
    response = client.post("/api/payments/21/refund")
    assert response.status_code == 400
    assert response.json()["detail"] == "Only completed payments can be refunded"

    response = client.patch("/api/payments/21/status", json={"status": "refunded"})
    assert response.json()["detail"] == "Use the refund endpoint to refund a payment"

    fake = FakeSQL(("UPDATE payments", [{"id": 21}]), ("FROM payments p", [payment_row()]))
    monkeypatch.setattr(payment_routes, "execute_raw_sql", fake)
    response = client.post("/api/payments/21/refund")
    assert response.status_code == 200
    assert response.json()["status"] == "refunded"
    assert fake.calls[-1][1] == {"status": "refunded", "pid": 21}

    monkeypatch.setattr(payment_routes, "execute_raw_sql", FakeSQL(("FROM payments p", [payment_row(status="refunded")])))
    response = client.patch("/api/payments/21/status", json={"status": "completed"})
    assert response.json()["detail"] == "Refunded payments cannot change status"


def test_create_payment_generates_reference(client, monkeypatch):
    fake = FakeSQL(
        ("SELECT id FROM users", [{"id": 7}]),
        ("INSERT INTO payments", [{"id": 21}]),
        ("FROM payments p", [payment_row(status="pending")]),
    )
    monkeypatch.setattr(payment_routes, "execute_raw_sql", fake)
    sign_in_as(ADMIN)

    response = client.post("/api/payments", json={
        "user_id": 7, "amount": 499, "currency": "INR", "purpose": "premium_profile",
    })

    assert response.status_code == 201
    insert_params = next(params for sql, params in fake.calls if "INSERT INTO payments" in sql)
    assert insert_params["reference"].startswith("PAY-")
    assert len(insert_params["reference"]) == 16


def test_payment_stats(client, monkeypatch):
    monkeypatch.setattr(payment_routes, "execute_raw_sql", FakeSQL(("GROUP BY status, currency", [
        {"status": "completed", "currency": "INR", "count": 2, "amount": Decimal("998.00")},
        {"status": "refunded", "currency": "USD", "count": 1, "amount": Decimal("15.50")},
    ])))
    sign_in_as(ADMIN)

    stats = client.get("/api/payments/stats").json()

    assert stats["total"] == 3
    assert stats["by_status"]["pending"] == 0
    assert stats["revenue"] == {"INR": 998.0}
    assert stats["refunded"] == {"USD": 15.5}


def test_admin_dashboard_requires_admin(client, monkeypatch):
    monkeypatch.setattr(admin_routes, "execute_raw_sql", FakeSQL(("AS total_users", [{
        "total_users": 12, "candidates": 8, "recruiters": 3, "companies": 4, "total_jobs": 9,
        "active_jobs": 7, "total_applications": 20, "new_applications": 5, "total_referrals": 2,
        "revenue": Decimal("1497.00"),
    }])))

    sign_in_as(CANDIDATE)
    assert client.get("/api/admin/dashboard/stats").status_code == 403

    sign_in_as(ADMIN)
    response = client.get("/api/admin/dashboard/stats")
    assert response.status_code == 200
    assert response.json()["revenue"] == 1497.0
    assert response.json()["active_jobs"] == 7


def test_admin_analytics(client, monkeypatch):
    fake = FakeSQL(
        ("FROM application_pipeline", [{
            "job_id": 1, "title": "Backend Engineer", "pending": 3, "reviewed": 1,
            "shortlisted": 1, "interviewed": 0, "rejected": 0, "hired": 0,
        }]),
        ("FROM job_listings", []),
    )
    monkeypatch.setattr(admin_routes, "execute_raw_sql", fake)
    sign_in_as(ADMIN)

    assert client.get("/api/admin/analytics/applications").json()[0]["pending"] == 3
    assert client.get("/api/admin/analytics/jobs", params={"limit": 5}).json() == []
    assert fake.calls[-1][1] == {"limit": 5}
    assert client.get("/api/admin/analytics/jobs", params={"limit": 500}).status_code == 422
