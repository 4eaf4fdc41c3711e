"""
MongoDB Service - CRUD operations for the marketplace collections.

Collections in this database:
1. users             - Veteran / employer / admin accounts (persona embedded)
2. companies         - Employer organizations
3. jobs              - Job postings with veteran preferences
4. applications      - One per (job, applicant)
5. resumes           - Military history + generated resume content
6. messages          - Direct messages between accounts
7. stories           - Veteran success stories
8. partner_inquiries - Partnership requests from organizations
9. saved_candidates  - Employer bookmarks of veterans

References between documents (job.posted_by, application.applicant, ...)
are stored as string ids, the same form the API hands out.
"""

import re
from datetime import datetime, timezone
from typing import Optional, List, Dict, Any
from bson import ObjectId
from pymongo import ReturnDocument
from pymongo.collection import Collection

from app.db.mongodb import get_collection, COLLECTIONS


# ============================================================
# HELPERS: ObjectId <-> string, timestamps
# ============================================================

def serialize_doc(doc: dict) -> Optional[dict]:
    """Convert MongoDB document to JSON-serializable dict (_id -> id)."""
    if doc is None:
        return None
    if "_id" in doc:
        doc["id"] = str(doc.pop("_id"))
    for key, value in doc.items():
        if isinstance(value, ObjectId):
            doc[key] = str(value)
    return doc


def serialize_docs(docs) -> list:
    """Convert list of MongoDB documents to JSON-serializable list."""
    return [serialize_doc(doc) for doc in docs]


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse an id string. Malformed ids return None (treated as not found)."""
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    return None


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _get_by_id(collection: Collection, doc_id: str, projection: dict = None) -> Optional[dict]:
    oid = to_object_id(doc_id)
    if oid is None:
        return None
    return serialize_doc(collection.find_one({"_id": oid}, projection))


def _update_by_id(collection: Collection, doc_id: str, fields: dict, projection: dict = None) -> Optional[dict]:
    """$set the given fields (plus updated_at) and return the new document."""
    oid = to_object_id(doc_id)
    if oid is None:
        return None
    doc = collection.find_one_and_update(
        {"_id": oid},
        {"$set": {**fields, "updated_at": utcnow()}},
        projection=projection,
        return_document=ReturnDocument.AFTER
    )
    return serialize_doc(doc)


def _insert(collection: Collection, doc: dict) -> dict:
    result = collection.insert_one(doc)
    doc["_id"] = result.inserted_id
    return serialize_doc(doc)


# ============================================================
# USERS COLLECTION
# ============================================================

# Never returned to API callers
PRIVATE_USER_FIELDS = {"password_hash": 0, "reset_password_token": 0, "reset_password_expire": 0}


class UserService:
    """
    Handles accounts. Emails are stored lowercase.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["users"])

    def insert(self, data: dict, password_hash: str) -> dict:
        """Create an account and return it without secret fields."""
        now = utcnow()
        doc = {
            **data,
            "email": data["email"].lower(),
            "password_hash": password_hash,
            "auth_provider": data.get("auth_provider", "local"),
            "company_id": data.get("company_id"),
            "created_at": now,
            "updated_at": now,
        }
        user = _insert(self.collection, doc)
        for field in PRIVATE_USER_FIELDS:
            user.pop(field, None)
        return user

    def get_by_id(self, user_id: str) -> Optional[dict]:
        return _get_by_id(self.collection, user_id, PRIVATE_USER_FIELDS)

    def get_by_email(self, email: str, include_secrets: bool = False) -> Optional[dict]:
        """Fetch by email. include_secrets=True keeps the password hash (login only)."""
        projection = None if include_secrets else PRIVATE_USER_FIELDS
        doc = self.collection.find_one({"email": email.lower()}, projection)
        return serialize_doc(doc)

    def update(self, user_id: str, fields: dict) -> Optional[dict]:
        return _update_by_id(self.collection, user_id, fields, PRIVATE_USER_FIELDS)

    def list_by_role(self, role: str) -> List[dict]:
        cursor = self.collection.find({"role": role}, PRIVATE_USER_FIELDS).sort("created_at", -1)
        return serialize_docs(cursor)

    def get_many(self, user_ids: List[str]) -> Dict[str, dict]:
        """Fetch several accounts at once, keyed by id."""
        oids = [oid for oid in (to_object_id(u) for u in user_ids) if oid is not None]
        if not oids:
            return {}
        cursor = self.collection.find({"_id": {"$in": oids}}, PRIVATE_USER_FIELDS)
        return {doc["id"]: doc for doc in serialize_docs(cursor)}

    # ---------- password reset ----------

    def set_reset_token(self, user_id: str, token_hash: str, expires_at: datetime) -> None:
        self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {"$set": {"reset_password_token": token_hash, "reset_password_expire": expires_at}}
        )

    def clear_reset_token(self, user_id: str) -> None:
        self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {"$unset": {"reset_password_token": "", "reset_password_expire": ""}}
        )

    def get_by_reset_token(self, token_hash: str) -> Optional[dict]:
        """Account holding this (hashed) token, if it has not expired."""
        doc = self.collection.find_one(
            {"reset_password_token": token_hash, "reset_password_expire": {"$gt": utcnow()}},
            PRIVATE_USER_FIELDS
        )
        return serialize_doc(doc)

    def set_password(self, user_id: str, password_hash: str) -> None:
        """Store a new password hash and consume any pending reset token."""
        self.collection.update_one(
            {"_id": to_object_id(user_id)},
            {
                "$set": {"password_hash": password_hash, "updated_at": utcnow()},
                "$unset": {"reset_password_token": "", "reset_password_expire": ""}
            }
        )


# ============================================================
# COMPANIES COLLECTION
# ============================================================

class CompanyService:
    """
    Handles employer organizations. Names are unique.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["companies"])

    def insert(self, data: dict) -> dict:
        now = utcnow()
        doc = {"verified": False, **data, "created_at": now, "updated_at": now}
        return _insert(self.collection, doc)

    def get_by_id(self, company_id: str) -> Optional[dict]:
        return _get_by_id(self.collection, company_id)

    def get_by_name(self, name: str) -> Optional[dict]:
        return serialize_doc(self.collection.find_one({"name": name}))

    def list(self, keyword: Optional[str] = None) -> List[dict]:
        """All companies sorted by name, optionally filtered by a name substring."""
        query = {}
        if keyword:
            query["name"] = {"$regex": re.escape(keyword), "$options": "i"}
        return serialize_docs(self.collection.find(query).sort("name", 1))

    def update(self, company_id: str, fields: dict) -> Optional[dict]:
        return _update_by_id(self.collection, company_id, fields)


# ============================================================
# JOBS COLLECTION
# ============================================================

class JobService:
    """
    Handles job postings.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["jobs"])

    def insert(self, posted_by: str, data: dict) -> dict:
        now = utcnow()
        doc = {**data, "posted_by": posted_by, "is_active": True, "created_at": now, "updated_at": now}
        return _insert(self.collection, doc)

    def get_by_id(self, job_id: str) -> Optional[dict]:
        return _get_by_id(self.collection, job_id)

    def list_active(self) -> List[dict]:
        """Active postings, newest first."""
        return serialize_docs(self.collection.find({"is_active": True}).sort("created_at", -1))

    def list_by_poster(self, user_id: str) -> List[dict]:
        return serialize_docs(self.collection.find({"posted_by": user_id}).sort("created_at", -1))

    def update(self, job_id: str, fields: dict) -> Optional[dict]:
        return _update_by_id(self.collection, job_id, fields)

    def delete(self, job_id: str) -> bool:
        result = self.collection.delete_one({"_id": to_object_id(job_id)})
        return result.deleted_count > 0


# ============================================================
# APPLICATIONS COLLECTION
# ============================================================

class ApplicationService:
    """
    Handles job applications. A veteran applies to a job at most once.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["applications"])

    def exists(self, job_id: str, applicant_id: str) -> bool:
        return self.collection.count_documents({"job": job_id, "applicant": applicant_id}, limit=1) > 0

    def insert(self, job_id: str, applicant_id: str) -> dict:
        now = utcnow()
        doc = {
            "job": job_id,
            "applicant": applicant_id,
            "status": "applied",
            "applied_at": now,
            "updated_at": now,
        }
        return _insert(self.collection, doc)

    def get_by_id(self, application_id: str) -> Optional[dict]:
        return _get_by_id(self.collection, application_id)

    def list_by_job(self, job_id: str) -> List[dict]:
        return serialize_docs(self.collection.find({"job": job_id}).sort("applied_at", -1))

    def list_by_applicant(self, applicant_id: str) -> List[dict]:
        return serialize_docs(self.collection.find({"applicant": applicant_id}).sort("applied_at", -1))

    def update_status(self, application_id: str, status: str) -> Optional[dict]:
        return _update_by_id(self.collection, application_id, {"status": status})


# ============================================================
# RESUMES COLLECTION
# ============================================================

class ResumeService:
    """
    Handles resumes (military history + generated content).
    A user may have several; "latest" means most recently created.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["resumes"])

    def insert(self, user_id: str, **fields) -> dict:
        now = utcnow()
        doc = {"user": user_id, **fields, "created_at": now, "updated_at": now}
        return _insert(self.collection, doc)

    def get_by_id(self, resume_id: str) -> Optional[dict]:
        return _get_by_id(self.collection, resume_id)

    def get_latest_for_user(self, user_id: str) -> Optional[dict]:
        doc = self.collection.find_one({"user": user_id}, sort=[("created_at", -1)])
        return serialize_doc(doc)

    def get_latest_for_users(self, user_ids: List[str]) -> Dict[str, dict]:
        """Latest resume per user, keyed by user id (users without one are absent)."""
        if not user_ids:
            return {}
        pipeline = [
            {"$match": {"user": {"$in": list(user_ids)}}},
            {"$sort": {"created_at": -1}},
            {"$group": {"_id": "$user", "resume": {"$first": "$$ROOT"}}},
        ]
        return {
            row["_id"]: serialize_doc(row["resume"])
            for row in self.collection.aggregate(pipeline)
        }

    def update(self, resume_id: str, fields: dict) -> Optional[dict]:
        return _update_by_id(self.collection, resume_id, fields)


# ============================================================
# MESSAGES COLLECTION
# ============================================================

class MessageService:
    """
    Handles direct messages between two accounts.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["messages"])

    def insert(self, sender_id: str, recipient_id: str, content: str) -> dict:
        doc = {
            "sender": sender_id,
            "recipient": recipient_id,
            "content": content,
            "read": False,
            "created_at": utcnow(),
        }
        return _insert(self.collection, doc)

    def get_thread(self, user_id: str, other_user_id: str) -> List[dict]:
        """All messages between two accounts, oldest first."""
        cursor = self.collection.find({
            "$or": [
                {"sender": user_id, "recipient": other_user_id},
                {"sender": other_user_id, "recipient": user_id},
            ]
        }).sort("created_at", 1)
        return serialize_docs(cursor)

    def mark_read(self, sender_id: str, recipient_id: str) -> int:
        """Mark everything sender_id sent to recipient_id as read."""
        result = self.collection.update_many(
            {"sender": sender_id, "recipient": recipient_id, "read": False},
            {"$set": {"read": True}}
        )
        return result.modified_count

    def count_unread(self, recipient_id: str) -> int:
        return self.collection.count_documents({"recipient": recipient_id, "read": False})

    def get_conversations(self, user_id: str) -> List[dict]:
        """
        One row per conversation partner with the latest message,
        most recent conversation first.

        Returns: [{"partner_id": str, "last_message": dict}, ...]
        """
        pipeline = [
            {"$match": {"$or": [{"sender": user_id}, {"recipient": user_id}]}},
            {"$sort": {"created_at": -1}},
            {"$group": {
                "_id": {"$cond": [{"$eq": ["$sender", user_id]}, "$recipient", "$sender"]},
                "last_message": {"$first": "$$ROOT"},
            }},
            {"$sort": {"last_message.created_at": -1}},
        ]
        return [
            {"partner_id": row["_id"], "last_message": serialize_doc(row["last_message"])}
            for row in self.collection.aggregate(pipeline)
        ]


# ============================================================
# SUCCESS STORIES COLLECTION
# ============================================================

class StoryService:
    """
    Handles veteran success stories.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["stories"])

    def insert(self, user_id: str, data: dict, status: str = "approved") -> dict:
        doc = {**data, "user": user_id, "status": status, "created_at": utcnow()}
        return _insert(self.collection, doc)

    def list_approved(self) -> List[dict]:
        return serialize_docs(self.collection.find({"status": "approved"}).sort("created_at", -1))


# ============================================================
# PARTNER INQUIRIES COLLECTION
# ============================================================

class PartnerInquiryService:
    """
    Handles partnership requests submitted from the public site.
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["partner_inquiries"])

    def insert(self, data: dict) -> dict:
        doc = {**data, "status": "new", "created_at": utcnow()}
        return _insert(self.collection, doc)

    def list_all(self) -> List[dict]:
        return serialize_docs(self.collection.find().sort("created_at", -1))

    def update_status(self, inquiry_id: str, status: str) -> Optional[dict]:
        return _update_by_id(self.collection, inquiry_id, {"status": status})


# ============================================================
# SAVED CANDIDATES COLLECTION
# ============================================================

class SavedCandidateService:
    """
    Handles employer bookmarks. Unique per (employer, candidate, job).
    """

    def __init__(self):
        self.collection: Collection = get_collection(COLLECTIONS["saved_candidates"])

    def exists(self, employer_id: str, candidate_id: str, job_id: Optional[str]) -> bool:
        query = {"employer": employer_id, "candidate": candidate_id, "job": job_id}
        return self.collection.count_documents(query, limit=1) > 0

    def insert(self, employer_id: str, candidate_id: str, job_id: Optional[str], notes: Optional[str]) -> dict:
        doc = {
            "employer": employer_id,
            "candidate": candidate_id,
            "job": job_id,
            "notes": notes,
            "created_at": utcnow(),
        }
        return _insert(self.collection, doc)

    def get_by_id(self, saved_id: str) -> Optional[dict]:
        return _get_by_id(self.collection, saved_id)

    def list_by_employer(self, employer_id: str) -> List[dict]:
        return serialize_docs(self.collection.find({"employer": employer_id}).sort("created_at", -1))

    def delete(self, saved_id: str) -> bool:
        result = self.collection.delete_one({"_id": to_object_id(saved_id)})
        return result.deleted_count > 0
