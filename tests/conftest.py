"""Shared test configuration: in-memory service fakes and an authenticated client."""

from datetime import datetime, timedelta, timezone

import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from app.core import auth as core_auth
from app.core.auth import get_current_user
from app.core.rate_limit import limiter
from app.main import app
from app.api.routes import (
    application_routes, auth_routes, company_routes, job_routes, message_routes,
    partner_routes, resume_routes, saved_candidate_routes, story_routes, user_routes
)
from app.services import candidate_service, matching_service, resume_parsing_service


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line(
        "markers", "api: exercises HTTP routes against in-memory services"
    )


def _now():
    return datetime.now(timezone.utc)


class _FakeCollection:
    """Dict-backed stand-in for one collection service."""

    def __init__(self):
        self.docs = {}

    def _add(self, doc):
        doc = dict(doc)
        doc["id"] = str(ObjectId())
        self.docs[doc["id"]] = doc
        return dict(doc)

    def get_by_id(self, doc_id):
        doc = self.docs.get(doc_id)
        return dict(doc) if doc else None

    def update(self, doc_id, fields):
        if doc_id not in self.docs:
            return None
        self.docs[doc_id].update(fields, updated_at=_now())
        return dict(self.docs[doc_id])

    def delete(self, doc_id):
        return self.docs.pop(doc_id, None) is not None


class FakeUserService(_FakeCollection):
    SECRETS = ("password_hash", "reset_password_token", "reset_password_expire")

    def _public(self, doc):
        return {k: v for k, v in doc.items() if k not in self.SECRETS} if doc else None

    def insert(self, data, password_hash):
        doc = {**data, "email": data["email"].lower(), "password_hash": password_hash,
               "company_id": data.get("company_id"), "created_at": _now()}
        return self._public(self._add(doc))

    def get_by_id(self, user_id):
        return self._public(self.docs.get(user_id))

    def get_by_email(self, email, include_secrets=False):
        for doc in self.docs.values():
            if doc["email"] == email.lower():
                return dict(doc) if include_secrets else self._public(doc)
        return None

    def update(self, user_id, fields):
        return self._public(super().update(user_id, fields))

    def list_by_role(self, role):
        return [self._public(d) for d in self.docs.values() if d.get("role") == role]

    def get_many(self, user_ids):
        return {uid: self._public(self.docs[uid]) for uid in user_ids if uid in self.docs}

    def set_reset_token(self, user_id, token_hash, expires_at):
        self.docs[user_id].update(reset_password_token=token_hash, reset_password_expire=expires_at)

    def clear_reset_token(self, user_id):
        self.docs[user_id].pop("reset_password_token", None)
        self.docs[user_id].pop("reset_password_expire", None)

    def get_by_reset_token(self, token_hash):
        for doc in self.docs.values():
            if doc.get("reset_password_token") == token_hash and doc["reset_password_expire"] > _now():
                return self._public(doc)
        return None

    def set_password(self, user_id, password_hash):
        self.docs[user_id]["password_hash"] = password_hash
        self.clear_reset_token(user_id)


class FakeCompanyService(_FakeCollection):
    def insert(self, data):
        return self._add({"verified": False, **data, "created_at": _now()})

    def get_by_name(self, name):
        return next((dict(d) for d in self.docs.values() if d["name"] == name), None)

    def list(self, keyword=None):
        found = [dict(d) for d in self.docs.values()
                 if not keyword or keyword.lower() in d["name"].lower()]
        return sorted(found, key=lambda d: d["name"])


class FakeJobService(_FakeCollection):
    def insert(self, posted_by, data):
        return self._add({**data, "posted_by": posted_by, "is_active": True, "created_at": _now()})

    def list_active(self):
        jobs = [dict(d) for d in self.docs.values() if d.get("is_active", True)]
        return sorted(jobs, key=lambda d: d["created_at"], reverse=True)

    def list_by_poster(self, user_id):
        return [dict(d) for d in self.docs.values() if d["posted_by"] == user_id]


class FakeApplicationService(_FakeCollection):
    def exists(self, job_id, applicant_id):
        return any(d["job"] == job_id and d["applicant"] == applicant_id for d in self.docs.values())

    def insert(self, job_id, applicant_id):
        return self._add({"job": job_id, "applicant": applicant_id, "status": "applied", "applied_at": _now()})

    def list_by_job(self, job_id):
        return [dict(d) for d in self.docs.values() if d["job"] == job_id]

    def list_by_applicant(self, applicant_id):
        return [dict(d) for d in self.docs.values() if d["applicant"] == applicant_id]

    def update_status(self, application_id, status):
        return self.update(application_id, {"status": status})


class FakeResumeService(_FakeCollection):
    def insert(self, user_id, **fields):
        return self._add({"user": user_id, **fields, "created_at": _now()})

    def get_latest_for_user(self, user_id):
        mine = [d for d in self.docs.values() if d["user"] == user_id]
        return dict(max(mine, key=lambda d: d["created_at"])) if mine else None

    def get_latest_for_users(self, user_ids):
        latest = {uid: self.get_latest_for_user(uid) for uid in user_ids}
        return {uid: r for uid, r in latest.items() if r}


class FakeMessageService(_FakeCollection):
    def insert(self, sender_id, recipient_id, content):
        return self._add({"sender": sender_id, "recipient": recipient_id, "content": content,
                          "read": False, "created_at": _now()})

    def get_thread(self, user_id, other_user_id):
        pair = {user_id, other_user_id}
        return [dict(d) for d in self.docs.values() if {d["sender"], d["recipient"]} == pair]

    def mark_read(self, sender_id, recipient_id):
        count = 0
        for d in self.docs.values():
            if d["sender"] == sender_id and d["recipient"] == recipient_id and not d["read"]:
                d["read"] = True
                count += 1
        return count

    def count_unread(self, recipient_id):
        return sum(1 for d in self.docs.values() if d["recipient"] == recipient_id and not d["read"])

    def get_conversations(self, user_id):
        latest = {}
        for d in sorted(self.docs.values(), key=lambda d: d["created_at"], reverse=True):
            if user_id not in (d["sender"], d["recipient"]):
                continue
            partner = d["recipient"] if d["sender"] == user_id else d["sender"]
            latest.setdefault(partner, dict(d))
        return [{"partner_id": p, "last_message": m} for p, m in latest.items()]


class FakeStoryService(_FakeCollection):
    def insert(self, user_id, data, status="approved"):
        return self._add({**data, "user": user_id, "status": status, "created_at": _now()})

    def list_approved(self):
        return [dict(d) for d in self.docs.values() if d["status"] == "approved"]


class FakePartnerInquiryService(_FakeCollection):
    def insert(self, data):
        return self._add({**data, "status": "new", "created_at": _now()})

    def list_all(self):
        return [dict(d) for d in self.docs.values()]

    def update_status(self, inquiry_id, status):
        return self.update(inquiry_id, {"status": status})


class FakeSavedCandidateService(_FakeCollection):
    def exists(self, employer_id, candidate_id, job_id):
        return any((d["employer"], d["candidate"], d["job"]) == (employer_id, candidate_id, job_id)
                   for d in self.docs.values())

    def insert(self, employer_id, candidate_id, job_id, notes):
        return self._add({"employer": employer_id, "candidate": candidate_id, "job": job_id,
                          "notes": notes, "created_at": _now()})

    def list_by_employer(self, employer_id):
        return [dict(d) for d in self.docs.values() if d["employer"] == employer_id]


class FakeDB:
    def __init__(self):
        self.users = FakeUserService()
        self.companies = FakeCompanyService()
        self.jobs = FakeJobService()
        self.applications = FakeApplicationService()
        self.resumes = FakeResumeService()
        self.messages = FakeMessageService()
        self.stories = FakeStoryService()
        self.partners = FakePartnerInquiryService()
        self.saved = FakeSavedCandidateService()

    def add_user(self, role="veteran", **fields):
        data = {"first_name": "Test", "last_name": role.title(), "email": f"{ObjectId()}@example.com",
                "role": role, **fields}
        return self.users.insert(data, password_hash="x")

    def add_job(self, posted_by, created_at=None, **fields):
        data = {"title": "Operations Manager", "company": "Acme", "location": "Austin, TX",
                "type": "Full-time", "description": "Lead operations", **fields}
        job = self.jobs.insert(posted_by, data)
        if created_at is not None:
            self.jobs.docs[job["id"]]["created_at"] = created_at
            job["created_at"] = created_at
        return job


@pytest.fixture
def db(monkeypatch):
    """Replace every service class used by the routes with in-memory fakes."""
    fake = FakeDB()
    patches = {
        "UserService": fake.users,
        "CompanyService": fake.companies,
        "JobService": fake.jobs,
        "ApplicationService": fake.applications,
        "ResumeService": fake.resumes,
        "MessageService": fake.messages,
        "StoryService": fake.stories,
        "PartnerInquiryService": fake.partners,
        "SavedCandidateService": fake.saved,
    }
    modules = [
        application_routes, auth_routes, company_routes, job_routes, message_routes,
        partner_routes, resume_routes, saved_candidate_routes, story_routes, user_routes,
        candidate_service, matching_service, resume_parsing_service, core_auth,
    ]
    for module in modules:
        for name, instance in patches.items():
            if hasattr(module, name):
                monkeypatch.setattr(module, name, lambda instance=instance: instance)
    return fake


@pytest.fixture
def client():
    limiter.enabled = False
    yield TestClient(app)
    app.dependency_overrides.clear()
    limiter.enabled = True


@pytest.fixture
def login_as():
    """Authenticate the test client as the given account dict."""
    def _login(user):
        app.dependency_overrides[get_current_user] = lambda: user
        return user
    return _login


@pytest.fixture
def expired():
    return _now() - timedelta(minutes=1)
