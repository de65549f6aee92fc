"""
Tests for the verification battery and the watchdog.
"""
import threading

from jobportal.services.verification import (
    Watchdog,
    application_query_checks,
    check_data_minimums,
    check_relationships,
    functional_checks,
    run_comprehensive_verification,
    run_quick_verification,
)


def test_data_minimums_pass_fail_and_missing(portal_tables):
    results = check_data_minimums(portal_tables, [("users", 1), ("jobs", 5), ("payments", 1)])

    by_table = {r["table"]: r for r in results}
    assert by_table["users"]["passed"] is True
    assert by_table["users"]["actual"] == 1
    assert by_table["jobs"]["passed"] is False
    assert by_table["jobs"]["actual"] == 2
    assert by_table["payments"]["actual"] is None
    assert by_table["payments"]["error"]


def test_relationship_checks_record_counts_and_errors(portal_tables):
    results = check_relationships(portal_tables, [
        ("Jobs → Companies", "SELECT COUNT(*) FROM jobs j JOIN companies c ON j.company_id = c.id"),
        ("Payments → Users", "SELECT COUNT(*) FROM payments p JOIN users u ON p.user_id = u.id"),
    ])

    assert results[0] == {"name": "Jobs → Companies", "count": 2, "error": None}
    assert results[1]["count"] is None
    assert "payments" in results[1]["error"]


def test_functional_checks_continue_past_failures(portal_tables):
    results = functional_checks(portal_tables)

    assert results["user_roles"] == [{"role": "candidate", "count": 1}]
    assert results["active_jobs"] == 1
    # no payments table in this database
    assert "error" in results["top_payment_purposes"]


def test_application_queries(portal_tables):
    results = application_query_checks(portal_tables, [
        ("Authentication query", "SELECT id, email, role FROM users WHERE email = :email", {"email": "x@y.z"}),
        ("Broken query", "SELECT nope FROM users", {}),
    ])
    assert [r["ok"] for r in results] == [True, False]


def test_comprehensive_status_reports_minor_issues(portal_tables):
    report = run_comprehensive_verification(portal_tables)

    assert report["tables"] == ["companies", "jobs", "users"]
    assert report["status"] == "minor_issues"
    assert report["total_records"] == 4  # users 1, companies 1, jobs 2
    assert len(report["relationships"]) == 6


def test_comprehensive_status_operational_when_minimums_met(portal_tables, monkeypatch):
    from jobportal.services import verification
    monkeypatch.setattr(
        verification, "check_data_minimums",
        lambda conn: [
            {"table": "users", "expected": 1, "actual": 5, "passed": True, "error": None},
            {"table": "jobs", "expected": 1, "actual": 5, "passed": True, "error": None},
        ],
    )

    report = verification.run_comprehensive_verification(portal_tables)
    assert report["status"] == "operational"
    assert report["total_records"] == 10


def test_quick_verification(portal_tables):
    result = run_quick_verification(portal_tables)
    assert result["table_count"] == 3
    assert result["server_time"] is not None


def test_watchdog_fires_on_timeout():
    fired = threading.Event()
    seen = []

    def on_timeout(seconds):
        seen.append(seconds)
        fired.set()

    watchdog = Watchdog(0.05, on_timeout=on_timeout).start()
    assert fired.wait(2)
    assert watchdog.fired is True
    assert seen == [0.05]


def test_watchdog_cancelled_by_context_exit():
    seen = []
    with Watchdog(0.2, on_timeout=seen.append) as watchdog:
        pass
    threading.Event().wait(0.4)
    assert watchdog.fired is False
    assert seen == []


def test_watchdog_cancel_without_start_is_harmless():
    watchdog = Watchdog(1)
    watchdog.cancel()
    assert watchdog.fired is False
