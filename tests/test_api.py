import re
from datetime import datetime, timedelta, timezone

import pytest

from app.api.routes import auth_routes
from app.core.auth import decode_token, generate_reset_token
from app.utils.email import EmailDeliveryError

pytestmark = pytest.mark.api


def _register(client, **overrides):
    body = {
        "first_name": "Jane",
        "last_name": "Doe",
        "email": "Jane.Doe@example.com",
        "password": "secret1",
        "role": "veteran",
        "terms_accepted": True,
        "military_branch": "Army",
    }
    body.update(overrides)
    return client.post("/api/auth/register", json=body)


# ============================================================
# AUTH
# ============================================================

def test_register_veteran_returns_token(client, db):
    response = _register(client)
    assert response.status_code == 201
    data = response.json()
    assert data["role"] == "veteran"
    assert data["email"] == "jane.doe@example.com"
    assert decode_token(data["token"])["sub"] == data["id"]
    assert "password_hash" not in db.users.get_by_id(data["id"])


@pytest.mark.parametrize("overrides", [
    {"terms_accepted": False},
    {"military_branch": None},
    {"role": "employer", "military_branch": None},
])
def test_register_validation_errors(client, db, overrides):
    assert _register(client, **overrides).status_code == 400
    assert db.users.docs == {}


def test_register_admin_is_rejected(client, db):
    assert _register(client, role="admin").status_code == 422


def test_register_duplicate_email(client, db):
    _register(client)
    assert _register(client, email="jane.doe@example.com").status_code == 400


def test_register_employer_creates_company(client, db):
    response = _register(client, role="employer", military_branch=None, company_name="Acme Corp")
    assert response.status_code == 201
    company_id = response.json()["company_id"]
    company = db.companies.get_by_id(company_id)
    assert company["name"] == "Acme Corp"
    assert company["industry"] == "Unspecified"
    assert company["verified"] is False


def test_login_and_me(client, db):
    _register(client)
    response = client.post("/api/auth/login", json={"email": "jane.doe@example.com", "password": "secret1"})
    assert response.status_code == 200
    token = response.json()["token"]

    me = client.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["military_branch"] == "Army"
    assert "password_hash" not in me.json()


def test_login_bad_credentials(client, db):
    _register(client)
    wrong = client.post("/api/auth/login", json={"email": "jane.doe@example.com", "password": "nope123"})
    unknown = client.post("/api/auth/login", json={"email": "who@example.com", "password": "secret1"})
    assert wrong.status_code == 401
    assert unknown.status_code == 401


def test_protected_route_requires_token(client, db):
    assert client.get("/api/auth/me").status_code == 401
    bad = client.get("/api/auth/me", headers={"Authorization": "Bearer garbage"})
    assert bad.status_code == 401


def test_forgot_and_reset_password(client, db, monkeypatch):
    user_id = _register(client).json()["id"]
    sent = {}
    monkeypatch.setattr(auth_routes, "send_email", lambda to, subject, body: sent.update(to=to, body=body))

    response = client.post("/api/auth/forgot-password", json={"email": "jane.doe@example.com"})
    assert response.status_code == 200
    token = re.search(r"/reset-password/(\w+)", sent["body"]).group(1)
    # only the hash is stored
    assert db.users.docs[user_id]["reset_password_token"] != token

    reset = client.put(f"/api/auth/reset-password/{token}", json={"password": "newpass1"})
    assert reset.status_code == 200
    assert decode_token(reset.json()["token"])["sub"] == user_id

    login = client.post("/api/auth/login", json={"email": "jane.doe@example.com", "password": "newpass1"})
    assert login.status_code == 200

    # tokens are single use
    again = client.put(f"/api/auth/reset-password/{token}", json={"password": "other12"})
    assert again.status_code == 400


def test_forgot_password_unknown_email(client, db):
    response = client.post("/api/auth/forgot-password", json={"email": "ghost@example.com"})
    assert response.status_code == 404


def test_forgot_password_email_failure_clears_token(client, db, monkeypatch):
    user_id = _register(client).json()["id"]

    def fail(to, subject, body):
        raise EmailDeliveryError("smtp down")

    monkeypatch.setattr(auth_routes, "send_email", fail)
    response = client.post("/api/auth/forgot-password", json={"email": "jane.doe@example.com"})
    assert response.status_code == 500
    assert "reset_password_token" not in db.users.docs[user_id]


def test_expired_reset_token(client, db, expired):
    user_id = _register(client).json()["id"]
    token, token_hash, _ = generate_reset_token()
    db.users.set_reset_token(user_id, token_hash, expired)

    response = client.put(f"/api/auth/reset-password/{token}", json={"password": "newpass1"})
    assert response.status_code == 400


# ============================================================
# JOBS & MATCHING
# ============================================================

def test_job_matches_ranked_for_veteran(client, db, login_as):
    employer = db.add_user("employer")
    now = datetime.now(timezone.utc)
    db.add_job(employer["id"], title="Reference", created_at=now - timedelta(days=2),
               key_skills=["Leadership", "Logistics"], city="Austin", state="Texas",
               veteran_preferences={"mos_codes": ["11B"], "security_clearance": "Secret"})
    db.add_job(employer["id"], title="Exact", created_at=now - timedelta(days=1),
               key_skills=["Leadership"], veteran_preferences={"mos_codes": ["11B10"], "security_clearance": "Top Secret/SCI"})
    db.add_job(employer["id"], title="No fit", created_at=now,
               veteran_preferences={"mos_codes": ["68W"], "security_clearance": "Top Secret/SCI"})

    login_as(db.add_user("veteran", persona={
        "mos_code": "11B10",
        "security_clearance": "Top Secret",
        "skills": ["Leadership", "Communication"],
        "current_location": {"city": "Austin", "state": "Texas"},
    }))

    response = client.get("/api/jobs/matches")
    assert response.status_code == 200
    matches = response.json()
    assert [(m["title"], m["score"]) for m in matches] == [("Exact", 70), ("Reference", 65)]
    assert matches[0]["match_details"] == {"mos_match": True, "skill_match_count": 1}


def test_job_matches_veterans_only(client, db, login_as):
    login_as(db.add_user("employer"))
    assert client.get("/api/jobs/matches").status_code == 403


def test_create_and_list_jobs(client, db, login_as):
    employer = login_as(db.add_user("employer"))
    response = client.post("/api/jobs", json={
        "title": "  Logistics Coordinator ",
        "company": "Acme",
        "location": "Austin, TX",
        "description": "Coordinate shipments",
        "key_skills": ["Logistics"],
        "veteran_preferences": {"mos_codes": ["92Y"]},
    })
    assert response.status_code == 201
    job = response.json()
    assert job["title"] == "Logistics Coordinator"
    assert job["posted_by"] == employer["id"]
    assert job["type"] == "Full-time"

    assert [j["id"] for j in client.get("/api/jobs").json()] == [job["id"]]
    assert [j["id"] for j in client.get("/api/jobs/my-jobs").json()] == [job["id"]]


def test_veterans_cannot_post_jobs(client, db, login_as):
    login_as(db.add_user("veteran"))
    response = client.post("/api/jobs", json={
        "title": "x", "company": "y", "location": "z", "description": "d",
    })
    assert response.status_code == 403


def test_only_owner_modifies_job(client, db, login_as):
    owner = db.add_user("employer")
    job = db.add_job(owner["id"])

    login_as(db.add_user("employer"))
    assert client.put(f"/api/jobs/{job['id']}", json={"title": "Hijacked"}).status_code == 403
    assert client.delete(f"/api/jobs/{job['id']}").status_code == 403

    login_as(owner)
    updated = client.put(f"/api/jobs/{job['id']}", json={"openings": 3})
    assert updated.status_code == 200
    assert updated.json()["openings"] == 3
    assert client.delete(f"/api/jobs/{job['id']}").status_code == 200
    assert client.get(f"/api/jobs/{job['id']}").status_code == 404


# ============================================================
# APPLICATIONS
# ============================================================

def test_apply_once_and_list(client, db, login_as):
    employer = db.add_user("employer")
    job = db.add_job(employer["id"], title="Site Lead")
    veteran = login_as(db.add_user("veteran"))

    first = client.post(f"/api/applications/{job['id']}")
    assert first.status_code == 201
    assert first.json()["status"] == "applied"
    assert client.post(f"/api/applications/{job['id']}").status_code == 400

    mine = client.get("/api/applications/my").json()
    assert mine[0]["job_summary"]["title"] == "Site Lead"

    db.resumes.insert(veteran["id"], title="Resume", generated_summary="Summary",
                      military_history={"branch": "Army", "mos_code": "11B"})
    login_as(employer)
    applicants = client.get(f"/api/applications/job/{job['id']}").json()
    assert applicants[0]["applicant_profile"]["id"] == veteran["id"]
    assert applicants[0]["applicant_profile"]["resume"]["military_history"]["mos_code"] == "11B"

    status = client.put(f"/api/applications/{first.json()['id']}/status", json={"status": "interviewing"})
    assert status.status_code == 200
    assert status.json()["status"] == "interviewing"


def test_apply_to_missing_job(client, db, login_as):
    login_as(db.add_user("veteran"))
    assert client.post("/api/applications/not-an-id").status_code == 404


def test_applicants_hidden_from_other_employers(client, db, login_as):
    job = db.add_job(db.add_user("employer")["id"])
    login_as(db.add_user("employer"))
    assert client.get(f"/api/applications/job/{job['id']}").status_code == 403


# ============================================================
# RESUMES
# ============================================================

ARMY_RECORD = b"""United States Army
Rank: Staff Sergeant
MOS: 11B Infantryman
2005 - 2013
Squad Leader. SECRET clearance."""


def test_parse_uploaded_record(client, db, login_as):
    login_as(db.add_user("veteran"))
    response = client.post("/api/resume/parse", files={"file": ("dd214.txt", ARMY_RECORD, "text/plain")})
    assert response.status_code == 200
    data = response.json()["data"]
    assert data["branch"] == "Army"
    assert data["rank"] == "Staff Sergeant"
    assert data["mos_code"] == "11B"
    assert data["years_of_service"] == 8
    assert data["security_clearance"] == "Secret"


def test_parse_rejects_unsupported_file(client, db, login_as):
    login_as(db.add_user("veteran"))
    response = client.post("/api/resume/parse", files={"file": ("dd214.exe", b"MZ", "application/octet-stream")})
    assert response.status_code == 400


def test_create_get_and_update_resume(client, db, login_as):
    veteran = login_as(db.add_user("veteran", first_name="Jane"))
    created = client.post("/api/resume", json={
        "military_history": {"branch": "Army", "rank": "Sergeant", "mos_code": "11B",
                             "security_clearance": "Secret"},
    })
    assert created.status_code == 201
    resume = created.json()
    assert resume["title"] == "Jane's Resume"
    assert resume["generated_summary"].startswith("Dedicated and disciplined Army veteran")
    assert "Security Clearance: Secret" in resume["generated_skills"]

    me = client.get("/api/resume/me").json()
    assert me["id"] == resume["id"]

    updated = client.put(f"/api/resume/{resume['id']}", json={"title": "Ops Resume"})
    assert updated.json()["title"] == "Ops Resume"
    assert updated.json()["user"] == veteran["id"]

    login_as(db.add_user("veteran"))
    assert client.put(f"/api/resume/{resume['id']}", json={"title": "Mine now"}).status_code == 403
    assert client.get("/api/resume/me").status_code == 404


# ============================================================
# MESSAGES
# ============================================================

def test_messaging_flow(client, db, login_as):
    veteran = db.add_user("veteran")
    employer = login_as(db.add_user("employer"))

    assert client.post("/api/messages", json={"recipient_id": "missing", "content": "hi"}).status_code == 404
    assert client.post("/api/messages", json={"recipient_id": veteran["id"], "content": "  "}).status_code == 422
    sent = client.post("/api/messages", json={"recipient_id": veteran["id"], "content": "Interested?"})
    assert sent.status_code == 201

    login_as(veteran)
    assert client.get("/api/messages/unread").json() == {"count": 1}
    conversations = client.get("/api/messages/conversations").json()
    assert conversations[0]["user"]["id"] == employer["id"]
    assert conversations[0]["last_message"]["content"] == "Interested?"

    thread = client.get(f"/api/messages/{employer['id']}").json()
    assert [m["content"] for m in thread] == ["Interested?"]
    assert client.get("/api/messages/unread").json() == {"count": 0}


# ============================================================
# COMPANIES, USERS, COMMUNITY
# ============================================================

def test_company_create_and_member_update(client, db, login_as):
    founder = login_as(db.add_user("employer"))
    created = client.post("/api/companies", json={"name": "Acme", "industry": "Logistics", "size": "11-50"})
    assert created.status_code == 201
    company_id = created.json()["id"]
    assert db.users.get_by_id(founder["id"])["company_id"] == company_id
    assert client.post("/api/companies", json={"name": "Acme", "industry": "Other"}).status_code == 400

    assert [c["name"] for c in client.get("/api/companies?keyword=acm").json()] == ["Acme"]

    login_as(db.add_user("employer"))
    assert client.put(f"/api/companies/{company_id}", json={"industry": "Defense"}).status_code == 403

    login_as(db.users.get_by_id(founder["id"]))
    updated = client.put(f"/api/companies/{company_id}", json={"industry": "Defense"})
    assert updated.json()["industry"] == "Defense"
    assert updated.json()["name"] == "Acme"


def test_company_rejects_bad_website(client, db, login_as):
    login_as(db.add_user("employer"))
    response = client.post("/api/companies", json={"name": "Acme", "industry": "x", "website": "acme"})
    assert response.status_code == 422


def test_profile_update_and_candidates(client, db, login_as):
    veteran = login_as(db.add_user("veteran"))
    response = client.put("/api/users/profile", json={"persona": {
        "mos_code": "25B", "skills": ["Networking"], "current_location": {"city": "Tampa", "state": "Florida"},
    }})
    assert response.status_code == 200
    assert response.json()["persona"]["mos_code"] == "25B"

    assert client.get("/api/users/candidates").status_code == 403

    login_as(db.add_user("employer"))
    candidates = client.get("/api/users/candidates").json()
    assert [c["id"] for c in candidates] == [veteran["id"]]
    assert candidates[0]["location"] == "Tampa, Florida"
    assert candidates[0]["resume"] is None

    public = client.get(f"/api/users/{veteran['id']}").json()
    assert set(public) == {"id", "first_name", "last_name", "role"}


def test_stories(client, db, login_as):
    login_as(db.add_user("veteran", first_name="Jane", last_name="Doe"))
    story = {"title": "From 11B to PM", "content": "...", "military_branch": "Army", "current_role": "PM"}
    created = client.post("/api/stories", json=story)
    assert created.status_code == 201
    assert created.json()["status"] == "approved"

    listed = client.get("/api/stories").json()
    assert listed[0]["author_name"] == "Jane Doe"

    login_as(db.add_user("employer"))
    assert client.post("/api/stories", json=story).status_code == 403


def test_partner_inquiries_admin_only(client, db, login_as):
    created = client.post("/api/partners", json={
        "organization_name": "State VA", "contact_name": "Sam", "email": "sam@va.example.com",
        "type": "government", "message": "Let's partner",
    })
    assert created.status_code == 201
    assert created.json()["status"] == "new"

    login_as(db.add_user("veteran"))
    assert client.get("/api/partners").status_code == 403

    login_as(db.add_user("admin"))
    assert len(client.get("/api/partners").json()) == 1
    updated = client.put(f"/api/partners/{created.json()['id']}/status", json={"status": "contacted"})
    assert updated.json()["status"] == "contacted"


def test_saved_candidates(client, db, login_as):
    veteran = db.add_user("veteran")
    login_as(db.add_user("employer"))

    saved = client.post("/api/saved-candidates", json={"candidate_id": veteran["id"], "notes": "call back"})
    assert saved.status_code == 201
    assert client.post("/api/saved-candidates", json={"candidate_id": veteran["id"]}).status_code == 400

    listed = client.get("/api/saved-candidates").json()
    assert listed[0]["candidate_profile"]["id"] == veteran["id"]

    assert client.delete(f"/api/saved-candidates/{saved.json()['id']}").status_code == 200
    assert client.get("/api/saved-candidates").json() == []
