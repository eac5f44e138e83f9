"""
Admin Routes (admins only)

GET /admin/dashboard - Stats, users and jobs tabs (?tab=dashboard|users|jobs)
POST /admin/jobs/{job_id}/status - Activate / deactivate a job
POST /admin/jobs/{job_id}/delete - Delete a job
POST /admin/users/{user_id}/delete - Delete a user profile
"""

import logging

from fastapi import APIRouter, Depends, Form, HTTPException, Query, Request
from fastapi.responses import RedirectResponse

from foresty.core.auth import AuthContext, get_user_db
from foresty.core.guard import get_current_admin
from foresty.core.templating import render
from foresty.db.supabase import SupabaseClient, SupabaseError
from foresty.schemas.schemas import JOB_TYPE_LABELS, JobStatus, UserRole
from foresty.services import admin_service, job_service
from foresty.utils.toasts import add_error, add_toast

log = logging.getLogger(__name__)

router = APIRouter(prefix="/admin", tags=["Admin"])

TABS = ("dashboard", "users", "jobs")


@router.get("/dashboard")
async def dashboard(
    request: Request,
    tab: str = Query("dashboard"),
    search: str = Query(""),
    status: str = Query(job_service.ALL),
    type: str = Query(job_service.ALL),
    auth: AuthContext = Depends(get_current_admin),
    db: SupabaseClient = Depends(get_user_db),
):
    tab = tab if tab in TABS else "dashboard"
    try:
        users = await admin_service.list_users(db)
        jobs = await job_service.list_all_jobs(db)
    except SupabaseError as e:
        log.exception("Error loading admin data")
        add_error(request, "Erreur", f"Impossible de charger les données : {e.message}")
        users, jobs = [], []

    context = {
        "tab": tab,
        "filters": {"search": search, "status": status, "type": type},
        "stats": admin_service.compute_stats(users, jobs),
        "job_types": JOB_TYPE_LABELS,
        "user_types": [UserRole.job_seeker.value, UserRole.job_poster.value],
        "admin_name": auth.metadata.get("first_name") or "Admin",
        "recent_jobs": jobs[:5],
    }
    if tab == "users":
        context["users"] = admin_service.filter_users(users, search, status, type)
    elif tab == "jobs":
        context["jobs"] = job_service.filter_admin_jobs(jobs, search, status, type)
    return render(request, "admin/dashboard.html", context)


@router.post("/jobs/{job_id}/status")
async def set_job_status(
    request: Request,
    job_id: str,
    status: str = Form(...),
    auth: AuthContext = Depends(get_current_admin),
    db: SupabaseClient = Depends(get_user_db),
):
    try:
        new_status = JobStatus(status)
    except ValueError:
        raise HTTPException(status_code=400, detail=f"Statut inconnu : {status}")

    try:
        await job_service.set_job_status(db, job_id, new_status)
        label = "activée" if new_status == JobStatus.active else "désactivée"
        add_toast(request, "Statut mis à jour", f"L'offre a été {label}.")
    except SupabaseError as e:
        add_error(request, "Erreur", e.message)
    return RedirectResponse("/admin/dashboard?tab=jobs", status_code=303)


@router.post("/jobs/{job_id}/delete")
async def delete_job(
    request: Request,
    job_id: str,
    auth: AuthContext = Depends(get_current_admin),
    db: SupabaseClient = Depends(get_user_db),
):
    try:
        await job_service.delete_job(db, job_id)
        add_toast(request, "Offre supprimée", "L'offre a été supprimée avec succès.")
    except SupabaseError as e:
        add_error(request, "Erreur", e.message)
    return RedirectResponse("/admin/dashboard?tab=jobs", status_code=303)


@router.post("/users/{user_id}/delete")
async def delete_user(
    request: Request,
    user_id: str,
    auth: AuthContext = Depends(get_current_admin),
    db: SupabaseClient = Depends(get_user_db),
):
    if user_id == auth.user_id:
        add_error(request, "Action impossible", "Vous ne pouvez pas supprimer votre propre compte.")
        return RedirectResponse("/admin/dashboard?tab=users", status_code=303)

    try:
        await admin_service.delete_user(db, user_id)
        add_toast(request, "Utilisateur supprimé", "L'utilisateur a été supprimé avec succès.")
    except SupabaseError as e:
        add_error(request, "Erreur", e.message)
    return RedirectResponse("/admin/dashboard?tab=users", status_code=303)
