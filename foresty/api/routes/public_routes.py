"""
Public Routes

GET / - Landing page with the latest active jobs
GET /about - About page
GET /pricing - Job posting plans

fallback_router:
ANY /{path} - Not-found page (included last, after every other route)
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from foresty.core.auth import AuthContext, get_auth, get_user_db
from foresty.core.templating import render
from foresty.db.supabase import SupabaseClient, SupabaseError
from foresty.schemas.schemas import PricingPlan
from foresty.services.job_service import list_active_jobs

log = logging.getLogger(__name__)

router = APIRouter(tags=["Pages"])

LATEST_JOBS = 3

PRICING_PLANS = [
    PricingPlan(
        title="Plan Basique",
        price="50 TND",
        features=[
            "1 offre d'emploi incluse",
            "Visibilité de 30 jours",
            "Analyses basiques",
            "Support standard",
        ],
    ),
    PricingPlan(
        title="Plan Pro",
        price="120 TND",
        features=[
            "3 offres d'emploi incluses",
            "Visibilité de 60 jours chacune",
            "Analyses avancées",
            "Annonce mise en avant",
            "Support prioritaire",
        ],
        is_most_popular=True,
    ),
    PricingPlan(
        title="Plan Premium",
        price="200 TND",
        features=[
            "5 offres d'emploi incluses",
            "Visibilité de 90 jours chacune",
            "Analyses avancées",
            "Annonces mises en avant",
            "Image de marque personnalisée",
            "Gestionnaire de compte dédié",
        ],
    ),
]


@router.get("/")
async def home(
    request: Request,
    auth: AuthContext = Depends(get_auth),
    db: SupabaseClient = Depends(get_user_db),
):
    try:
        jobs = (await list_active_jobs(db))[:LATEST_JOBS]
    except SupabaseError:
        # The landing page still renders without the job teaser
        log.exception("Could not load latest jobs")
        jobs = []
    return render(request, "index.html", {"jobs": jobs})


@router.get("/about")
async def about(request: Request, auth: AuthContext = Depends(get_auth)):
    return render(request, "about.html")


@router.get("/pricing")
async def pricing(request: Request, auth: AuthContext = Depends(get_auth)):
    return render(request, "pricing.html", {"plans": PRICING_PLANS})


fallback_router = APIRouter(tags=["Pages"])


@fallback_router.api_route("/{path:path}", methods=["GET", "POST", "PUT", "PATCH", "DELETE"], include_in_schema=False)
async def not_found(path: str, auth: AuthContext = Depends(get_auth)):
    # Resolving auth first lets the 404 page show the signed-in navigation
    raise HTTPException(status_code=404, detail="Page introuvable")
