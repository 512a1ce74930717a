"""Integration tests for the admin and health endpoints."""

import uuid

import pytest

from tests.helpers import DOCX, auth_headers

pytestmark = pytest.mark.integration

ADMIN_API = "/api/v1/admin"


async def _upload(client, user, content, filename="cv.docx"):
    return await client.post(
        "/api/v1/resumes/upload",
        files={"file": (filename, content, DOCX)},
        headers=auth_headers(user),
    )


# ── access control ───────────────────────────────────────────────────────


@pytest.mark.parametrize("path", ["/resumes", "/stats"])
async def test_admin_routes_reject_regular_users(client, user, path):
    resp = await client.get(f"{ADMIN_API}{path}", headers=auth_headers(user))
    assert resp.status_code == 403


async def test_admin_routes_require_identity(client):
    resp = await client.get(f"{ADMIN_API}/stats")
    assert resp.status_code == 401


async def test_inactive_admin_is_rejected(client, admin_user, db_session):
    admin_user.is_active = False
    await db_session.commit()

    resp = await client.get(f"{ADMIN_API}/stats", headers=auth_headers(admin_user))
    assert resp.status_code == 403


# ── resumes ──────────────────────────────────────────────────────────────


async def test_list_all_resumes_and_filter_by_user(
    client, user, other_user, admin_user, sample_docx
):
    await _upload(client, user, sample_docx, "mine.docx")
    await _upload(client, other_user, sample_docx, "theirs.docx")

    everything = await client.get(f"{ADMIN_API}/resumes", headers=auth_headers(admin_user))
    assert everything.json()["total"] == 2

    filtered = await client.get(
        f"{ADMIN_API}/resumes",
        params={"user_id": str(other_user.id)},
        headers=auth_headers(admin_user),
    )
    body = filtered.json()
    assert body["total"] == 1
    assert body["items"][0]["original_filename"] == "theirs.docx"


async def test_get_any_resume_includes_owner(client, user, admin_user, sample_docx):
    resume_id = (await _upload(client, user, sample_docx)).json()["id"]

    resp = await client.get(f"{ADMIN_API}/resumes/{resume_id}", headers=auth_headers(admin_user))

    assert resp.status_code == 200
    owner = resp.json()["user"]
    assert owner["id"] == str(user.id)
    assert owner["name"] == "Jane Doe"
    assert owner["email"] == "jane@example.com"


async def test_get_any_resume_404(client, admin_user):
    resp = await client.get(
        f"{ADMIN_API}/resumes/{uuid.uuid4()}", headers=auth_headers(admin_user)
    )
    assert resp.status_code == 404


async def test_delete_any_resume(client, user, admin_user, storage, sample_docx):
    body = (await _upload(client, user, sample_docx)).json()

    resp = await client.delete(
        f"{ADMIN_API}/resumes/{body['id']}", headers=auth_headers(admin_user)
    )

    assert resp.status_code == 204
    assert not any(storage.base_dir.rglob(body["stored_filename"]))
    gone = await client.get(f"{ADMIN_API}/resumes/{body['id']}", headers=auth_headers(admin_user))
    assert gone.status_code == 404


# ── stats ────────────────────────────────────────────────────────────────


async def test_stats(client, user, admin_user, sample_docx, fake_parser):
    await _upload(client, user, sample_docx)
    fake_parser.response = "not json"
    await _upload(client, user, sample_docx, "broken.docx")

    resp = await client.get(f"{ADMIN_API}/stats", headers=auth_headers(admin_user))

    assert resp.status_code == 200
    body = resp.json()
    assert body["users"] == {"total": 2, "active": 2, "recent": 2}
    resumes = body["resumes"]
    assert resumes["total"] == 2
    assert resumes["completed"] == 1
    assert resumes["failed"] == 1
    assert resumes["uploaded"] == 0
    assert resumes["processing"] == 0
    assert resumes["recent"] == 2
    assert resumes["average_confidence"] == 100.0


# ── health ───────────────────────────────────────────────────────────────


async def test_health(client):
    resp = await client.get("/api/v1/health")

    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "healthy"
    assert body["database"] == "connected"
    assert body["ai_provider"] in {"gemini", "deepseek"}


async def test_status(client):
    resp = await client.get("/api/v1/status")
    assert resp.json() == {"status": "ok"}
