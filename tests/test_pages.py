"""Tests for public pages and display helpers."""
from datetime import datetime, timezone

import pytest

from foresty.utils.formatting import avatar_url, date_fr, parse_datetime, posted_ago

NOW = datetime(2024, 3, 20, 12, 0, tzinfo=timezone.utc)


def test_posted_ago():
    assert posted_ago("2024-03-20T08:00:00Z", now=NOW) == "Aujourd'hui"
    assert posted_ago("2024-03-19T08:00:00Z", now=NOW) == "Il y a 1 jour"
    assert posted_ago("2024-03-15T08:00:00Z", now=NOW) == "Il y a 5 jours"
    assert posted_ago("2024-03-06T08:00:00Z", now=NOW) == "Il y a 2 semaines"
    assert posted_ago("2024-01-10T08:00:00Z", now=NOW) == "Il y a 2 mois"
    assert posted_ago(None, now=NOW) == ""


def test_date_fr():
    assert date_fr("2023-09-15T10:00:00+00:00") == "15 septembre 2023"
    assert date_fr("not a date") == ""


def test_naive_timestamps_are_utc():
    assert parse_datetime("2024-01-01T00:00:00").tzinfo == timezone.utc


def test_trimmed_fractional_seconds():
    assert date_fr("2024-01-05T10:00:00.12345+00:00") == "5 janvier 2024"
    assert date_fr("2024-01-05T10:00:00.1+00:00") == "5 janvier 2024"
    assert posted_ago("2024-03-18T10:00:00.1234+00:00", now=NOW) == "Il y a 2 jours"


def test_avatar_fallback():
    assert avatar_url("Amel", "https://cdn.example.com/a.png") == "https://cdn.example.com/a.png"
    assert "name=Amel+Ben+Salah" in avatar_url("Amel Ben Salah")


@pytest.mark.api
def test_home_shows_latest_active_jobs(client, sample_jobs):
    response = client.get("/")
    assert response.status_code == 200
    assert "Ingénieur forestier" in response.text
    assert "Technicien pépinière" not in response.text


@pytest.mark.api
def test_home_survives_backend_errors(client, backend):
    backend.fail.add("select:jobs")
    assert client.get("/").status_code == 200


@pytest.mark.api
def test_pricing_plans(client):
    html = client.get("/pricing").text
    assert "Plan Pro" in html
    assert "120 TND" in html
    assert "Plan Premium" in html


@pytest.mark.api
def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
