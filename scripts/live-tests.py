#!/usr/bin/env python3
# This project was developed with assistance from AI tools.
"""Live smoke suite for the Education Loan Workflow API.

Drives one case through its lifecycle against a running server and checks
response shapes, the error contract and the admin endpoints.

Prerequisites:
  - API server running on localhost:8000 with AUTH_DISABLED=true
    (every request then runs as the dev admin)
  - Migrated database

Usage:
  ./scripts/live-tests.py                  # full suite
  ./scripts/live-tests.py --base-url URL   # another server
"""

import argparse
import asyncio
import sys
import uuid

import httpx

BASE = "http://localhost:8000"
HEADERS = {"Origin": "http://localhost:5173"}

# ---------------------------------------------------------------------------
# Test runner
# ---------------------------------------------------------------------------

PASS = 0
FAIL = 0
ERRORS: list[str] = []
SECTION = ""


def section(name: str):
    global SECTION
    SECTION = name
    print(f"\n{'=' * 60}")
    print(f"  {name}")
    print(f"{'=' * 60}\n")


def ok(name: str, passed: bool, detail: str = ""):
    global PASS, FAIL
    if passed:
        PASS += 1
        print(f"  PASS  {name}")
    else:
        FAIL += 1
        msg = f"[{SECTION}] {name}: {detail}" if detail else f"[{SECTION}] {name}"
        ERRORS.append(msg)
        print(f"  FAIL  {name} -- {detail}")


def has_keys(d: dict, *keys: str) -> bool:
    return all(k in d for k in keys)


# ---------------------------------------------------------------------------
# 1. Health
# ---------------------------------------------------------------------------

async def test_health(c: httpx.AsyncClient):
    section("Health")

    r = await c.get("/health/")
    ok("GET /health/ returns 200", r.status_code == 200)
    data = r.json()
    ok("contains API service", any(s.get("name") == "API" for s in data))
    ok("database is healthy",
       any(s.get("name") == "Database" and s.get("status") == "healthy" for s in data))

    r = await c.get("/")
    ok("GET / root returns 200", r.status_code == 200)


# ---------------------------------------------------------------------------
# 2. Admin and reference data
# ---------------------------------------------------------------------------

async def test_admin(c: httpx.AsyncClient):
    section("Admin and Reference Data")

    r = await c.post("/api/admin/seed")
    ok("POST /api/admin/seed returns 200", r.status_code == 200, f"status={r.status_code}")
    ok("seed reports a status",
       r.json().get("status") in ("seeded", "already_seeded"))

    r = await c.post("/api/admin/seed")
    ok("second seed inserts nothing", r.json().get("status") == "already_seeded")

    r = await c.get("/api/admin/seed")
    ok("GET /api/admin/seed returns 405", r.status_code == 405)

    r = await c.get("/api/admin/stage-expectations")
    ok("stage expectations listed", r.status_code == 200 and len(r.json()) == 8,
       f"count={len(r.json()) if r.status_code == 200 else '-'}")

    r = await c.get("/api/catalog/", params={"owner_type": "collateral"})
    ok("catalog filtered by owner", r.status_code == 200 and len(r.json()) > 0)

    r = await c.get("/api/reminder-rules")
    names = {rule["template_name"] for rule in r.json()} if r.status_code == 200 else set()
    ok("default reminder rules present", "student_docs_reminder_24h" in names)


# ---------------------------------------------------------------------------
# 3. Case lifecycle
# ---------------------------------------------------------------------------

async def test_case_lifecycle(c: httpx.AsyncClient) -> int | None:
    section("Case Lifecycle")

    suffix = uuid.uuid4().hex[:8]
    r = await c.post("/api/cases/", json={
        "student_name": f"Live Test {suffix}",
        "student_email": f"live-{suffix}@example.com",
        "country": "Germany",
        "collateral": "Flat in Pune",
        "priority": "high",
    })
    ok("POST /api/cases/ returns 201", r.status_code == 201, f"status={r.status_code}")
    if r.status_code != 201:
        return None
    body = r.json()
    case_id = body["case"]["id"]
    ok("new case is not_connected", body["case"]["status"] == "not_connected")
    ok("checklist generated", len(body["checklist"]) > 0)
    ok("every checklist outcome ok", all(o["ok"] for o in body["checklist"]))

    r = await c.get(f"/api/cases/{case_id}")
    detail = r.json()
    ok("detail has sla", has_keys(detail.get("sla", {}), "level", "elapsed_days"))
    ok("detail has stage expectation", detail.get("stage_expectation") is not None)

    r = await c.get(f"/api/cases/{case_id}/checklist")
    groups = {g["owner_key"] for g in r.json().get("groups", [])}
    ok("collateral group present", "collateral" in groups, f"groups={groups}")

    r = await c.post(f"/api/cases/{case_id}/co-applicants", json={
        "name": "Rajesh Test",
        "co_applicant_type": "INDIA_SALARIED",
        "relation": "Father",
    })
    ok("co-applicant added", r.status_code == 201, f"status={r.status_code}")

    r = await c.post(f"/api/cases/{case_id}/transition", json={
        "status": "docs_pending",
        "awaiting_party": "student",
    })
    ok("transition to docs_pending", r.status_code == 200, f"status={r.status_code}")

    r = await c.get(f"/api/cases/{case_id}/actions", params={"open_only": True})
    automatic = [a for a in r.json()["data"] if a["origin"] == "automatic"]
    ok("exactly one open automatic action", len(automatic) == 1, f"count={len(automatic)}")
    ok("action owned by student", automatic and automatic[0]["owner"] == "student")
    ok("action mirrors case priority", automatic and automatic[0]["priority"] == "high")

    r = await c.post(f"/api/cases/{case_id}/transition", json={"note": "[WHATSAPP] Sent doc list"})
    ok("note-only update accepted", r.status_code == 200)

    r = await c.get(f"/api/cases/{case_id}/history")
    history = r.json()
    ok("history newest first", history and history[0]["entry_type"] == "whatsapp")
    ok("history has three entries", len(history) == 3, f"count={len(history)}")

    return case_id


# ---------------------------------------------------------------------------
# 4. Bank side
# ---------------------------------------------------------------------------

async def test_bank_side(c: httpx.AsyncClient, case_id: int):
    section("Bank Applications, Overrides and Queries")

    r = await c.post(f"/api/cases/{case_id}/bank-applications", json={"bank_id": "HDFC"})
    ok("bank application created", r.status_code == 201, f"status={r.status_code}")
    app_id = r.json()["id"]

    r = await c.post(f"/api/cases/{case_id}/bank-applications", json={"bank_id": "HDFC"})
    ok("duplicate bank application is conflict", r.json().get("kind") == "conflict")

    r = await c.post(f"/api/bank-applications/{app_id}/sync", json={"bank_status": "login_done"})
    ok("bank sync returns 200", r.status_code == 200)
    r = await c.get(f"/api/cases/{case_id}")
    ok("case translated to login_submitted", r.json()["status"] == "login_submitted")

    r = await c.post(f"/api/bank-applications/{app_id}/overrides", json={
        "override_type": "add_required",
        "doc_code": "STU_RESUME",
        "reason": "Bank wants a CV",
    })
    ok("add_required override", r.status_code == 201, f"status={r.status_code}")
    ok("bank item inserted", len(r.json().get("affected_items", [])) == 1)

    r = await c.post(f"/api/cases/{case_id}/queries", json={
        "title": "Need ITR",
        "raised_by": "bank",
        "message": "Please share ITR for two years",
        "bank_application_id": app_id,
    })
    ok("bank query created", r.status_code == 201, f"status={r.status_code}")
    thread_id = r.json()["id"]

    r = await c.get(f"/api/cases/{case_id}/actions", params={"open_only": True})
    query_tasks = [a for a in r.json()["data"] if a["origin"] == "query"]
    ok("query spawned a student task", len(query_tasks) == 1)

    r = await c.patch(f"/api/cases/{case_id}/queries/{thread_id}/status", json={"status": "closed"})
    ok("thread closed", r.status_code == 200 and r.json()["resolved_at"] is not None)

    r = await c.post(f"/api/cases/{case_id}/queries/{thread_id}/messages", json={"message": "late"})
    ok("message to closed thread is state error", r.json().get("kind") == "state")

    r = await c.post(f"/api/cases/{case_id}/escalations", json={"level": 2})
    ok("escalation created", r.status_code == 201)
    esc_id = r.json()["id"]
    r = await c.post(f"/api/cases/{case_id}/escalations/{esc_id}/resolve")
    ok("escalation resolved", r.status_code == 200 and r.json()["resolved_at"] is not None)


# ---------------------------------------------------------------------------
# 5. Reminders
# ---------------------------------------------------------------------------

async def test_reminders(c: httpx.AsyncClient, case_id: int):
    section("Reminder Jobs")

    r = await c.post(f"/api/cases/{case_id}/reminders", json={
        "to_address": "live@example.com",
        "channel": "email",
    })
    ok("reminder scheduled", r.status_code == 201, f"status={r.status_code}")
    job_id = r.json()["id"]

    r = await c.get("/api/reminder-jobs/due")
    ok("job is due", any(j["id"] == job_id for j in r.json()))

    r = await c.patch(f"/api/reminder-jobs/{job_id}", json={"status": "failed", "last_error": "timeout"})
    ok("failed attempt recorded", r.json().get("attempts") == 1)
    r = await c.patch(f"/api/reminder-jobs/{job_id}", json={"status": "sent"})
    ok("retry sent", r.json().get("attempts") == 2)
    r = await c.patch(f"/api/reminder-jobs/{job_id}", json={"status": "cancelled"})
    ok("sent job is final", r.json().get("kind") == "state")


# ---------------------------------------------------------------------------
# 6. Leads
# ---------------------------------------------------------------------------

async def test_leads(c: httpx.AsyncClient):
    section("Lead Conversion")

    r = await c.post("/api/leads/", json={"full_name": "Lead Live", "stage": "qualified"})
    ok("lead created", r.status_code == 201)
    lead_id = r.json()["id"]

    r = await c.post(f"/api/leads/{lead_id}/convert", json={"student_email": "lead-live@example.com"})
    ok("lead converted", r.status_code == 201, f"status={r.status_code}")

    r = await c.post(f"/api/leads/{lead_id}/convert", json={"student_email": "lead-live@example.com"})
    ok("second conversion is conflict", r.json().get("kind") == "conflict")

    r = await c.get(f"/api/leads/{lead_id}")
    ok("lead marked case_created", r.json().get("stage") == "case_created")


# ---------------------------------------------------------------------------
# 7. Error handling -- RFC 7807
# ---------------------------------------------------------------------------

async def test_error_handling(c: httpx.AsyncClient, case_id: int):
    section("Error Handling (RFC 7807)")

    r = await c.get("/api/cases/99999999")
    ok("404 status code", r.status_code == 404)
    body = r.json()
    ok("404 has problem fields", has_keys(body, "type", "title", "status", "detail", "kind"))
    ok("404 kind is not_found", body.get("kind") == "not_found")

    r = await c.post("/api/cases/", json={"student_email": "x@example.com"})
    ok("missing name is validation", r.status_code == 422 and r.json().get("kind") == "validation")

    r = await c.post(f"/api/cases/{case_id}/transition", json={"status": "dropped"})
    ok("dropped without reason is state", r.status_code == 409 and r.json().get("kind") == "state")

    r = await c.post(f"/api/cases/{case_id}/transition", json={"status": "not_a_status"})
    ok("unknown status is validation", r.status_code == 422)

    r = await c.get("/api/nonexistent")
    ok("non-existent route returns 404", r.status_code == 404)


# ---------------------------------------------------------------------------
# 8. OpenAPI
# ---------------------------------------------------------------------------

async def test_openapi(c: httpx.AsyncClient):
    section("OpenAPI Schema")

    r = await c.get("/openapi.json")
    ok("GET /openapi.json returns 200", r.status_code == 200)
    spec = r.json()
    ok("spec title is Education Loan",
       "education loan" in spec.get("info", {}).get("title", "").lower())
    ok("spec has paths", len(spec.get("paths", {})) > 10,
       f"path_count={len(spec.get('paths', {}))}")


async def main():
    parser = argparse.ArgumentParser(description="Live smoke suite for the Education Loan Workflow API")
    parser.add_argument("--base-url", default=BASE, help="Server base URL")
    args = parser.parse_args()

    print("=" * 60)
    print("  LIVE TEST SUITE -- Education Loan Workflow API")
    print("=" * 60)

    async with httpx.AsyncClient(base_url=args.base_url, headers=HEADERS, timeout=15) as c:

        # Pre-flight: make sure server is up
        try:
            r = await c.get("/health/")
            if r.status_code != 200:
                print(f"\n  Server returned {r.status_code} on /health/ -- is it running?")
                sys.exit(2)
        except httpx.ConnectError:
            print(f"\n  Cannot connect to server at {args.base_url} -- is it running?")
            sys.exit(2)

        await test_health(c)
        await test_admin(c)
        case_id = await test_case_lifecycle(c)
        if case_id:
            await test_bank_side(c, case_id)
            await test_reminders(c, case_id)
            await test_error_handling(c, case_id)
        await test_leads(c)
        await test_openapi(c)

    # Summary
    print(f"\n{'=' * 60}")
    print(f"  RESULTS: {PASS} passed, {FAIL} failed")
    print(f"{'=' * 60}")

    if ERRORS:
        print("\nFailures:")
        for e in ERRORS:
            print(f"  - {e}")

    sys.exit(0 if FAIL == 0 else 1)


if __name__ == "__main__":
    asyncio.run(main())
