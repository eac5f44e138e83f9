"""Tests for sign-in, sign-up, sign-out and role resolution."""
import logging

import pytest

from foresty.core.auth import resolve_role, role_from_email
from foresty.core.config import get_settings


# ============================================================
# ROLE RESOLUTION
# ============================================================

def test_role_inferred_from_email_without_stored_role():
    assert resolve_role(None, "user@employer.com") == "job-poster"
    assert resolve_role(None, "user@gmail.com") == "job-seeker"
    assert role_from_email("recrutement.job-poster@forets.tn") == "job-poster"


def test_stored_role_wins_over_email():
    assert resolve_role("job-seeker", "user@employer.com") == "job-seeker"
    assert resolve_role("admin", "user@gmail.com") == "admin"


def test_email_fallback_can_be_disabled():
    assert resolve_role(None, "user@employer.com", email_fallback=False) == "job-seeker"


def test_unknown_stored_role_is_treated_as_missing():
    assert resolve_role("superuser", "user@employer.com") == "job-poster"


def test_email_heuristic_ignores_case():
    assert role_from_email("Rh@EMPLOYER.tn") == "job-poster"
    assert role_from_email("Recrutement.Job-Poster@forets.tn") == "job-poster"


@pytest.mark.api
def test_role_fallback_warning_logs_user_id_not_email(client, login, caplog):
    with caplog.at_level(logging.WARNING, logger="foresty.core.auth"):
        user_id = login("contact@employer.com")
    assert f"No stored role for user {user_id}" in caplog.text
    assert "contact@employer.com" not in caplog.text


@pytest.mark.api
def test_employer_email_without_role_can_post_jobs(client, login):
    login("user@employer.com")
    response = client.get("/post-job", follow_redirects=False)
    assert response.status_code == 200
    assert "Publier une offre" in response.text


@pytest.mark.api
def test_gmail_without_role_is_job_seeker(client, login):
    login("user@gmail.com")
    response = client.get("/post-job", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/profile"


@pytest.mark.api
def test_profile_lookup_error_falls_back_to_email(client, backend, login, caplog):
    backend.fail.add("select:profiles")
    with caplog.at_level(logging.ERROR):
        login("contact@employer.com")
        response = client.get("/post-job", follow_redirects=False)
    assert response.status_code == 200
    assert "Error fetching user profile" in caplog.text


# ============================================================
# SIGN IN
# ============================================================

@pytest.mark.api
def test_signin_calls_backend_once_with_credentials(client, backend):
    backend.add_user("amel@gmail.com", "motdepasse1", user_type="job-seeker")
    response = client.post(
        "/signin", data={"email": "amel@gmail.com", "password": "motdepasse1"}, follow_redirects=False
    )
    assert response.status_code == 303
    assert response.headers["location"] == "/profile"
    assert backend.calls_to("sign_in") == [("sign_in", "amel@gmail.com", "motdepasse1")]


@pytest.mark.api
def test_signin_sends_password_exactly_as_typed(client, backend):
    backend.add_user("amel@gmail.com", "  motdepasse1  ", user_type="job-seeker")
    response = client.post(
        "/signin", data={"email": " amel@gmail.com ", "password": "  motdepasse1  "}, follow_redirects=False
    )
    assert response.status_code == 303
    assert backend.calls_to("sign_in") == [("sign_in", "amel@gmail.com", "  motdepasse1  ")]


@pytest.mark.api
def test_signin_validation_errors_do_not_call_backend(client, backend):
    response = client.post("/signin", data={"email": "not-an-email", "password": "short"})
    assert response.status_code == 400
    assert "Adresse e-mail invalide" in response.text
    assert "Le mot de passe doit contenir au moins 8 caractères" in response.text
    assert backend.calls_to("sign_in") == []


@pytest.mark.api
def test_signin_wrong_password(client, backend):
    backend.add_user("amel@gmail.com", "motdepasse1")
    response = client.post("/signin", data={"email": "amel@gmail.com", "password": "mauvais-mdp"})
    assert response.status_code == 400
    assert "Identifiants incorrects" in response.text


@pytest.mark.api
def test_signin_unconfirmed_email(client, backend):
    backend.add_user("amel@gmail.com", "motdepasse1", confirmed=False)
    response = client.post("/signin", data={"email": "amel@gmail.com", "password": "motdepasse1"})
    assert response.status_code == 400
    assert "Email non confirmé" in response.text


@pytest.mark.api
def test_admin_signin_goes_to_dashboard(client, backend):
    backend.add_user("admin@foresty.tn", "password123", user_type="admin")
    response = client.post(
        "/signin", data={"email": "admin@foresty.tn", "password": "password123"}, follow_redirects=False
    )
    assert response.headers["location"] == "/admin/dashboard"


@pytest.mark.api
def test_signin_follows_safe_next_only(client, backend):
    backend.add_user("amel@gmail.com", "password123")
    response = client.post(
        "/signin",
        data={"email": "amel@gmail.com", "password": "password123", "next": "//evil.example.com"},
        follow_redirects=False,
    )
    assert response.headers["location"] == "/profile"

    client.post("/signout")
    response = client.post(
        "/signin",
        data={"email": "amel@gmail.com", "password": "password123", "next": "/feedback"},
        follow_redirects=False,
    )
    assert response.headers["location"] == "/feedback"


# ============================================================
# SESSION LIFECYCLE
# ============================================================

@pytest.mark.api
def test_signout_clears_session(client, backend, login):
    login("amel@gmail.com", user_type="job-seeker")
    assert client.get("/profile", follow_redirects=False).status_code == 200

    response = client.post("/signout", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/"
    assert len(backend.calls_to("sign_out")) == 1

    response = client.get("/profile", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"].startswith("/signin")


@pytest.mark.api
def test_expired_token_is_refreshed(client, backend, login):
    backend.token_ttl = -10
    login("amel@gmail.com", user_type="job-seeker")

    response = client.get("/profile", follow_redirects=False)
    assert response.status_code == 200
    assert backend.calls_to("refresh") == [("refresh", "refresh:amel@gmail.com")]

    # The refreshed token is stored; no second refresh
    client.get("/profile", follow_redirects=False)
    assert len(backend.calls_to("refresh")) == 1


@pytest.mark.api
def test_failed_refresh_signs_out(client, backend, login):
    backend.token_ttl = -10
    login("amel@gmail.com", user_type="job-seeker")
    backend.fail.add("refresh")

    response = client.get("/profile", follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"].startswith("/signin")


@pytest.mark.api
def test_navigation_hides_posting_links_for_job_seekers(client, login):
    login("amel@gmail.com", user_type="job-seeker")
    html = client.get("/about").text
    assert 'href="/post-job"' not in html
    assert 'href="/pricing"' not in html
    assert 'href="/admin/dashboard"' not in html


@pytest.mark.api
def test_navigation_for_admin(client, login):
    login("admin@foresty.tn", user_type="admin")
    html = client.get("/about").text
    assert 'href="/admin/dashboard"' in html
    assert 'href="/pricing"' in html


# ============================================================
# SIGN UP
# ============================================================

SEEKER = {
    "user_type": "job-seeker",
    "first_name": "Amel",
    "last_name": "Ben Salah",
    "email": "amel@gmail.com",
    "password": "password123",
    "confirm_password": "password123",
    "location": "Jendouba",
    "agree_terms": "on",
}

POSTER = {
    "user_type": "job-poster",
    "company_name": "Forêts du Nord",
    "contact_name": "Karim Trabelsi",
    "email": "rh@forets-nord.tn",
    "password": "password123",
    "confirm_password": "password123",
    "location": "Béja",
    "industry": "Agriculture & Foresterie",
    "phone": "71234567",
    "agree_terms": "on",
}


@pytest.mark.api
def test_signup_job_seeker(client, backend):
    response = client.post("/signup", data=SEEKER, follow_redirects=False)
    assert response.status_code == 303
    assert response.headers["location"] == "/signin"

    (_, email, password, metadata), = backend.calls_to("sign_up")
    assert email == "amel@gmail.com"
    assert metadata == {
        "first_name": "Amel",
        "last_name": "Ben Salah",
        "user_type": "job-seeker",
        "location": "Jendouba",
    }


@pytest.mark.api
def test_signup_job_poster_metadata(client, backend):
    client.post("/signup", data=POSTER, follow_redirects=False)
    (_, _, _, metadata), = backend.calls_to("sign_up")
    assert metadata["user_type"] == "job-poster"
    assert metadata["first_name"] == "Karim Trabelsi"
    assert metadata["last_name"] == "Forêts du Nord"
    assert metadata["industry"] == "Agriculture & Foresterie"
    assert metadata["phone"] == "71234567"


@pytest.mark.api
def test_signup_password_mismatch(client, backend):
    response = client.post("/signup", data={**SEEKER, "confirm_password": "different1"})
    assert response.status_code == 400
    assert "Les mots de passe ne correspondent pas" in response.text
    assert backend.calls_to("sign_up") == []


@pytest.mark.api
def test_signup_requires_terms_and_phone(client, backend):
    data = {k: v for k, v in POSTER.items() if k != "agree_terms"}
    data["phone"] = "123"
    response = client.post("/signup", data=data)
    assert response.status_code == 400
    assert "Vous devez accepter les conditions d&#39;utilisation" in response.text
    assert "Le numéro de téléphone doit contenir au moins 8 chiffres" in response.text


@pytest.mark.api
def test_signup_backend_error_is_shown(client, backend):
    backend.add_user("amel@gmail.com")
    response = client.post("/signup", data=SEEKER)
    assert response.status_code == 400
    assert "User already registered" in response.text


def test_default_settings_enable_email_fallback():
    assert get_settings().role_email_fallback is True
