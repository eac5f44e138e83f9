"""
Auth Routes

GET /signin - Sign-in form
POST /signin - Password sign-in
GET /signup - Sign-up form (?type=job-seeker|job-poster)
POST /signup - Create an account
POST /signout - Sign out
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse
from pydantic import ValidationError

from foresty.core.auth import AuthContext, AuthResolver, get_auth, get_resolver
from foresty.core.templating import render
from foresty.db.supabase import SupabaseError
from foresty.schemas.schemas import (
    GOVERNORATES, INDUSTRIES, JobPosterSignUp, JobSeekerSignUp, SignInForm, UserRole, form_errors
)
from foresty.utils.toasts import add_error, add_toast

log = logging.getLogger(__name__)

router = APIRouter(tags=["Auth"])

SIGNUP_FORMS = {
    UserRole.job_seeker.value: JobSeekerSignUp,
    UserRole.job_poster.value: JobPosterSignUp,
}


def safe_next(next_path: Optional[str]) -> Optional[str]:
    """Only local absolute paths are followed after sign-in."""
    if next_path and next_path.startswith("/") and not next_path.startswith("//"):
        return next_path
    return None


@router.get("/signin")
async def signin_page(request: Request, next: Optional[str] = None, auth: AuthContext = Depends(get_auth)):
    return render(request, "signin.html", {"values": {}, "errors": {}, "next": safe_next(next) or ""})


@router.post("/signin")
async def signin(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    remember_me: bool = Form(False),
    next: str = Form(""),
    resolver: AuthResolver = Depends(get_resolver),
):
    values = {"email": email, "remember_me": remember_me}
    context = {"values": values, "errors": {}, "next": safe_next(next) or ""}

    try:
        form = SignInForm(email=email, password=password, remember_me=remember_me)
    except ValidationError as e:
        context["errors"] = form_errors(e, SignInForm)
        return render(request, "signin.html", context, status_code=400)

    try:
        data = await resolver.backend.sign_in_with_password(form.email, form.password)
    except SupabaseError as e:
        log.info("Sign-in failed for %s: %s", form.email, e.message)
        if "Email not confirmed" in e.message:
            add_error(
                request, "Email non confirmé",
                "Veuillez vérifier votre boîte de réception et confirmer votre email avant de vous connecter.",
            )
        else:
            add_error(request, "Erreur de connexion", "Identifiants incorrects. Veuillez réessayer.")
        return render(request, "signin.html", context, status_code=400)

    auth = await resolver.sign_in(request, data)
    add_toast(request, "Connexion réussie", "Vous êtes maintenant connecté à votre compte.")

    if auth.is_admin:
        return RedirectResponse("/admin/dashboard", status_code=303)
    return RedirectResponse(safe_next(next) or "/profile", status_code=303)


def _signup_context(user_type: str, values: dict, errors: dict) -> dict:
    return {
        "user_type": user_type,
        "values": values,
        "errors": errors,
        "governorates": GOVERNORATES,
        "industries": INDUSTRIES,
    }


@router.get("/signup")
async def signup_page(request: Request, type: str = UserRole.job_seeker.value, auth: AuthContext = Depends(get_auth)):
    user_type = type if type in SIGNUP_FORMS else UserRole.job_seeker.value
    return render(request, "signup.html", _signup_context(user_type, {}, {}))


@router.post("/signup")
async def signup(request: Request, resolver: AuthResolver = Depends(get_resolver)):
    values = dict(await request.form())
    user_type = values.pop("user_type", UserRole.job_seeker.value)
    schema = SIGNUP_FORMS.get(user_type, JobSeekerSignUp)
    shown = {k: v for k, v in values.items() if "password" not in k}

    try:
        form = schema(**values)
    except ValidationError as e:
        return render(request, "signup.html", _signup_context(user_type, shown, form_errors(e, schema)), status_code=400)

    try:
        await resolver.backend.sign_up(form.email, form.password, form.metadata())
    except SupabaseError as e:
        log.warning("Registration error for %s: %s", form.email, e.message)
        add_error(
            request, "Erreur lors de l'inscription",
            e.message or "Une erreur est survenue lors de la création de votre compte.",
        )
        return render(request, "signup.html", _signup_context(user_type, shown, {}), status_code=400)

    if user_type == UserRole.job_seeker.value:
        add_toast(
            request, "Compte créé avec succès",
            "Vous devez d'abord confirmer votre adresse e-mail, puis vous pourrez vous connecter à votre compte.",
        )
    else:
        add_toast(request, "Compte créé avec succès", "Vous pouvez maintenant vous connecter à votre compte.")
    return RedirectResponse("/signin", status_code=303)


@router.post("/signout")
async def signout(
    request: Request,
    auth: AuthContext = Depends(get_auth),
    resolver: AuthResolver = Depends(get_resolver),
):
    await resolver.sign_out(request, auth)
    add_toast(request, "Déconnexion réussie", "Vous avez été déconnecté avec succès.")
    return RedirectResponse("/", status_code=303)
