"""
Job Service - listing, in-memory filtering, publishing, view counting.

Lists are fetched whole and filtered in memory (no pagination, no server-side filters).
"""

import logging
from typing import Any, Dict, Iterable, List, Optional

from foresty.db.supabase import SupabaseClient, SupabaseError
from foresty.schemas.schemas import JobCreate, JobStatus

log = logging.getLogger(__name__)

PREVIEW_JOB_ID = "preview"
ALL = "all"


def _contains(haystack: Optional[str], needle: str) -> bool:
    return needle in (haystack or "").lower()


async def list_active_jobs(db: SupabaseClient) -> List[Dict[str, Any]]:
    return await db.select("jobs", filters={"status": JobStatus.active.value}, order="created_at", desc=True)


async def list_all_jobs(db: SupabaseClient) -> List[Dict[str, Any]]:
    return await db.select("jobs", order="created_at", desc=True)


def filter_jobs(
    jobs: Iterable[Dict[str, Any]],
    search: str = "",
    location: str = "",
    types: Optional[List[str]] = None,
) -> List[Dict[str, Any]]:
    """
    Public job search.

    - search: case-insensitive match on title, company or description
    - location: case-insensitive substring
    - types: any of the given job types (empty = all)
    """
    search = search.strip().lower()
    location = location.strip().lower()
    types = [t for t in (types or []) if t]

    results = []
    for job in jobs:
        if search and not any(_contains(job.get(f), search) for f in ("title", "company", "description")):
            continue
        if location and not _contains(job.get("location"), location):
            continue
        if types and job.get("type") not in types:
            continue
        results.append(job)
    return results


def filter_admin_jobs(
    jobs: Iterable[Dict[str, Any]],
    search: str = "",
    status: str = ALL,
    job_type: str = ALL,
) -> List[Dict[str, Any]]:
    """Admin jobs table: search on title/company, exact status and type."""
    search = search.strip().lower()
    results = []
    for job in jobs:
        if search and not (_contains(job.get("title"), search) or _contains(job.get("company"), search)):
            continue
        if status and status != ALL and job.get("status") != status:
            continue
        if job_type and job_type != ALL and job.get("type") != job_type:
            continue
        results.append(job)
    return results


async def increment_view(db: SupabaseClient, job_id: Any) -> None:
    """Bump a job's view counter. Failures are logged, never raised."""
    if not job_id or str(job_id) == PREVIEW_JOB_ID:
        return
    try:
        await db.rpc("increment_job_view", {"job_id": job_id})
    except SupabaseError:
        log.exception("Error incrementing view count for job %s", job_id)


async def publish_job(db: SupabaseClient, job: JobCreate, user_id: str) -> Dict[str, Any]:
    """Store a job from the posting wizard. It stays inactive until an admin reviews it."""
    row = {
        "title": job.title,
        "company": job.company,
        "location": job.location,
        "type": job.type.value,
        "salary": job.salary or None,
        "description": job.description,
        "requirements": job.requirements,
        "status": JobStatus.inactive.value,
        "posted_by": user_id,
        "views": 0,
        "applications": 0,
    }
    inserted = await db.insert("jobs", row)
    log.info("Job '%s' submitted by %s", job.title, user_id)
    return inserted[0] if inserted else row


async def get_job(db: SupabaseClient, job_id: str) -> Optional[Dict[str, Any]]:
    return await db.select("jobs", filters={"id": job_id}, single=True)


async def set_job_status(db: SupabaseClient, job_id: str, status: JobStatus) -> None:
    await db.update("jobs", {"status": status.value}, filters={"id": job_id})


async def delete_job(db: SupabaseClient, job_id: str) -> None:
    await db.delete("jobs", filters={"id": job_id})
