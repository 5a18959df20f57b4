# This project was developed with assistance from AI tools.
"""Functional tests: one case from creation to bank sanction, driven through
the HTTP API by every persona that touches it.

Each test sets up its data through the API only, so every request runs in
its own session exactly as in production.
"""

import pytest
import pytest_asyncio

pytestmark = pytest.mark.functional


@pytest_asyncio.fixture
async def clients(
    client_factory,
    admin_user,
    staff_user,
    bank_user,
    other_bank_user,
    student_user,
    other_student_user,
):
    return {
        "admin": client_factory(admin_user),
        "staff": client_factory(staff_user),
        "hdfc": client_factory(bank_user),
        "axis": client_factory(other_bank_user),
        "aarav": client_factory(student_user),
        "meera": client_factory(other_student_user),
    }


@pytest_asyncio.fixture
async def case_with_app(clients):
    """Seeded reference data, Aarav's case and an HDFC application; returns (case_id, app_id)."""
    seed = await clients["admin"].post("/api/admin/seed")
    assert seed.status_code == 200
    assert seed.json()["status"] == "seeded"

    created = await clients["staff"].post(
        "/api/cases/",
        json={
            "student_name": "Aarav Mehta",
            "student_email": "aarav@example.com",
            "student_user_id": "student-aarav",
            "country": "Germany",
            "priority": "high",
        },
    )
    assert created.status_code == 201
    case_id = created.json()["case"]["id"]

    app = await clients["staff"].post(
        f"/api/cases/{case_id}/bank-applications", json={"bank_id": "HDFC"},
    )
    assert app.status_code == 201
    return case_id, app.json()["id"]


# ---------------------------------------------------------------------------
# Creation
# ---------------------------------------------------------------------------


class TestCreation:
    @pytest.mark.asyncio
    async def test_new_case_starts_not_connected_with_checklist(self, clients, case_with_app):
        case_id, _ = case_with_app
        resp = await clients["staff"].get(f"/api/cases/{case_id}")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "not_connected"
        assert data["awaiting_party"] == "internal_ops"
        assert data["sla"]["level"] == "on_track"
        assert data["stage_expectation"]["status"] == "not_connected"

        checklist = await clients["staff"].get(f"/api/cases/{case_id}/checklist")
        assert checklist.status_code == 200
        groups = checklist.json()["groups"]
        assert [g["owner_key"] for g in groups] == ["student"]
        assert checklist.json()["summary"]["required_total"] > 0

    @pytest.mark.asyncio
    async def test_new_case_has_one_open_automatic_task(self, clients, case_with_app):
        case_id, _ = case_with_app
        resp = await clients["staff"].get(f"/api/cases/{case_id}/actions", params={"open_only": True})
        [task] = resp.json()["data"]
        assert task["origin"] == "automatic"
        assert task["owner"] == "internal_ops"


# ---------------------------------------------------------------------------
# Visibility
# ---------------------------------------------------------------------------


class TestVisibility:
    @pytest.mark.asyncio
    async def test_list_counts_by_persona(self, clients, case_with_app):
        expected = {"staff": 1, "admin": 1, "hdfc": 1, "aarav": 1, "axis": 0, "meera": 0}
        for persona, count in expected.items():
            resp = await clients[persona].get("/api/cases/")
            assert resp.status_code == 200, persona
            assert resp.json()["pagination"]["total"] == count, persona

    @pytest.mark.asyncio
    async def test_other_bank_cannot_sync(self, clients, case_with_app):
        _, app_id = case_with_app
        resp = await clients["axis"].post(
            f"/api/bank-applications/{app_id}/sync", json={"bank_status": "sanctioned"},
        )
        assert resp.status_code == 403
        assert resp.json()["kind"] == "forbidden"

    @pytest.mark.asyncio
    async def test_student_cannot_transition(self, clients, case_with_app):
        case_id, _ = case_with_app
        resp = await clients["aarav"].post(
            f"/api/cases/{case_id}/transition", json={"status": "docs_submitted"},
        )
        assert resp.status_code == 403


# ---------------------------------------------------------------------------
# Lifecycle
# ---------------------------------------------------------------------------


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_bank_sync_moves_case(self, clients, case_with_app):
        case_id, app_id = case_with_app
        resp = await clients["hdfc"].post(
            f"/api/bank-applications/{app_id}/sync", json={"bank_status": "login_done"},
        )
        assert resp.status_code == 200
        assert resp.json()["status"] == "login_done"
        assert resp.json()["last_bank_update_at"] is not None

        case = (await clients["staff"].get(f"/api/cases/{case_id}")).json()
        assert case["status"] == "login_submitted"

        history = (await clients["aarav"].get(f"/api/cases/{case_id}/history")).json()
        assert history[0]["changed_by"] == "HDFC Credit Desk"
        assert history[0]["note"].startswith("[BANK]")
        assert history[0]["entry_type"] == "status"

    @pytest.mark.asyncio
    async def test_bank_query_reaches_student_queue(self, clients, case_with_app):
        case_id, _ = case_with_app
        resp = await clients["hdfc"].post(
            f"/api/cases/{case_id}/queries",
            json={"title": "Need ITR for 2 years", "message": "Please upload the last two ITRs"},
        )
        assert resp.status_code == 201
        assert resp.json()["raised_by"] == "bank"

        queue = await clients["aarav"].get("/api/actions", params={"owner": "student"})
        titles = [t["title"] for t in queue.json()["data"]]
        assert "Respond to bank query: Need ITR for 2 years" in titles

        other = await clients["meera"].get("/api/actions")
        assert other.json()["data"] == []

    @pytest.mark.asyncio
    async def test_student_upload_marks_item(self, clients, case_with_app):
        case_id, _ = case_with_app
        checklist = (await clients["aarav"].get(f"/api/cases/{case_id}/checklist")).json()
        item = checklist["groups"][0]["items"][0]

        resp = await clients["aarav"].post(
            f"/api/cases/{case_id}/checklist/{item['id']}/upload",
            json={"file_name": "passport.pdf", "mime_type": "application/pdf", "size_bytes": 20480},
        )
        assert resp.status_code == 201
        assert resp.json()["checklist_item_id"] == item["id"]

        checklist = (await clients["aarav"].get(f"/api/cases/{case_id}/checklist")).json()
        updated = next(i for i in checklist["groups"][0]["items"] if i["id"] == item["id"])
        assert updated["status"] == "uploaded"
        assert checklist["summary"]["required_completed"] == 1

    @pytest.mark.asyncio
    async def test_bank_waiver_through_api(self, clients, case_with_app):
        _, app_id = case_with_app
        resp = await clients["hdfc"].post(
            f"/api/bank-applications/{app_id}/overrides",
            json={"override_type": "waive", "doc_code": "STU_PASSPORT", "reason": "Domestic disbursal"},
        )
        assert resp.status_code == 201
        [affected] = resp.json()["affected_items"]
        assert affected["status"] == "waived"
        assert affected["requirement_level"] == "not_needed"

        overrides = await clients["staff"].get(f"/api/bank-applications/{app_id}/overrides")
        assert len(overrides.json()) == 1

    @pytest.mark.asyncio
    async def test_sanction_to_disbursal(self, clients, case_with_app):
        case_id, app_id = case_with_app
        for bank_status in ("login_done", "under_review", "sanctioned"):
            resp = await clients["hdfc"].post(
                f"/api/bank-applications/{app_id}/sync", json={"bank_status": bank_status},
            )
            assert resp.status_code == 200

        case = (await clients["staff"].get(f"/api/cases/{case_id}")).json()
        assert case["status"] == "sanctioned"

        resp = await clients["staff"].post(
            f"/api/cases/{case_id}/transition",
            json={"status": "disbursed", "awaiting_party": "closed", "note": "Funds released"},
        )
        assert resp.status_code == 200
        assert resp.json()["sla"]["level"] == "exempt"

        actions = (
            await clients["staff"].get(f"/api/cases/{case_id}/actions", params={"open_only": True})
        ).json()
        assert [a for a in actions["data"] if a["origin"] == "automatic"] == []
