"""
Job Routes

GET /find-job - Search active jobs (search, location, types)
GET /find-job/{job_id}/apply - Application form
POST /find-job/{job_id}/apply - Apply with a resume
GET /post-job - Job posting wizard (job posters only)
POST /post-job - Wizard step: next / back / preview, publish on the last step
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, Query, Request, UploadFile
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from foresty.core.auth import AuthContext, get_auth, get_user_db
from foresty.core.guard import get_current_job_poster
from foresty.core.templating import render
from foresty.db.supabase import SupabaseClient, SupabaseError
from foresty.schemas.schemas import JOB_TYPE_LABELS, JobApplicationForm, JobCreate, form_errors
from foresty.services.job_service import filter_jobs, get_job, increment_view, list_active_jobs, publish_job
from foresty.services.wizard import JobPostingWizard
from foresty.utils.file_upload import read_resume
from foresty.utils.toasts import add_error, add_toast

log = logging.getLogger(__name__)

router = APIRouter(tags=["Jobs"])


@router.get("/find-job")
async def find_job(
    request: Request,
    background_tasks: BackgroundTasks,
    search: str = Query(""),
    location: str = Query(""),
    types: List[str] = Query([]),
    auth: AuthContext = Depends(get_auth),
    db: SupabaseClient = Depends(get_user_db),
):
    """List active jobs filtered in memory. Every rendered card counts one view."""
    try:
        jobs = await list_active_jobs(db)
    except SupabaseError as e:
        add_error(request, "Erreur", f"Impossible de charger les offres : {e.message}")
        jobs = []

    results = filter_jobs(jobs, search, location, types)
    for job in results:
        background_tasks.add_task(increment_view, db, job.get("id"))

    return render(request, "find_job.html", {
        "jobs": results,
        "filters": {"search": search, "location": location, "types": types},
        "job_types": JOB_TYPE_LABELS,
    })


async def _load_job_or_404(db: SupabaseClient, job_id: str) -> dict:
    try:
        job = await get_job(db, job_id)
    except SupabaseError as e:
        raise HTTPException(status_code=e.status_code, detail=e.message)
    if not job:
        raise HTTPException(status_code=404, detail="Offre introuvable")
    return job


@router.get("/find-job/{job_id}/apply")
async def application_form(
    request: Request,
    job_id: str,
    auth: AuthContext = Depends(get_auth),
    db: SupabaseClient = Depends(get_user_db),
):
    job = await _load_job_or_404(db, job_id)
    values = {"email": (auth.user or {}).get("email") or ""}
    return render(request, "apply.html", {"job": job, "values": values, "errors": {}})


@router.post("/find-job/{job_id}/apply")
async def apply(
    request: Request,
    job_id: str,
    full_name: str = Form(""),
    email: str = Form(""),
    phone: str = Form(""),
    cover_letter: str = Form(""),
    resume: Optional[UploadFile] = File(None),
    auth: AuthContext = Depends(get_auth),
    db: SupabaseClient = Depends(get_user_db),
):
    job = await _load_job_or_404(db, job_id)
    values = {"full_name": full_name, "email": email, "phone": phone, "cover_letter": cover_letter}
    context = {"job": job, "values": values, "errors": {}}

    try:
        form = JobApplicationForm(**values)
    except ValidationError as e:
        context["errors"] = form_errors(e, JobApplicationForm)
        return render(request, "apply.html", context, status_code=400)

    if resume is None or not resume.filename:
        add_error(request, "CV manquant", "Veuillez télécharger votre CV pour postuler")
        return render(request, "apply.html", context, status_code=400)

    try:
        _, filename = await read_resume(resume)
    except HTTPException as e:
        context["errors"] = {"resume": e.detail}
        return render(request, "apply.html", context, status_code=e.status_code)

    log.info("Application for job %s from %s <%s> (resume %s)", job_id, form.full_name, form.email, filename)
    add_toast(request, "Candidature envoyée", "Votre candidature a été envoyée avec succès.")
    return RedirectResponse("/find-job", status_code=303)


# ============================================================
# POST JOB WIZARD
# ============================================================

def _wizard_context(wizard: JobPostingWizard, errors: dict) -> dict:
    return {
        "step": wizard.step,
        "data": wizard.data,
        "preview": wizard.preview,
        "preview_job": wizard.preview_job(),
        "errors": errors,
        "job_types": JOB_TYPE_LABELS,
    }


@router.get("/post-job")
async def post_job_page(request: Request, auth: AuthContext = Depends(get_current_job_poster)):
    wizard = JobPostingWizard.from_session(request.session)
    return render(request, "post_job.html", _wizard_context(wizard, {}))


@router.post("/post-job")
async def post_job_step(
    request: Request,
    auth: AuthContext = Depends(get_current_job_poster),
    db: SupabaseClient = Depends(get_user_db),
):
    form = await request.form()
    action = form.get("action", "next")
    wizard = JobPostingWizard.from_session(request.session)

    if action == "back":
        wizard.back(form)
        wizard.save(request.session)
        return RedirectResponse("/post-job", status_code=303)

    if action == "preview":
        wizard.merge(form)
        wizard.toggle_preview()
        wizard.save(request.session)
        return RedirectResponse("/post-job", status_code=303)

    if not wizard.is_last_step:
        errors = wizard.advance(form)
        wizard.save(request.session)
        if errors:
            return render(request, "post_job.html", _wizard_context(wizard, errors), status_code=400)
        return RedirectResponse("/post-job", status_code=303)

    try:
        job = wizard.to_job()
    except ValidationError as e:
        # Incomplete draft: restart at the first step
        wizard.step = 1
        wizard.save(request.session)
        return render(request, "post_job.html", _wizard_context(wizard, form_errors(e, JobCreate)), status_code=400)

    try:
        await publish_job(db, job, auth.user_id)
    except SupabaseError as e:
        add_error(request, "Erreur lors de la publication", e.message)
        return RedirectResponse("/post-job", status_code=303)

    JobPostingWizard.clear(request.session)
    add_toast(
        request, "Offre publiée avec succès",
        "Votre offre sera examinée par notre équipe avant d'être mise en ligne.",
    )
    return RedirectResponse("/post-job", status_code=303)
