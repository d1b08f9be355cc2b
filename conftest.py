"""
Root conftest for the pytest test suite.

This file contains the main fixtures that are used across the entire test suite.

Each test builds its own application through ``create_app`` with an
in-memory SQLite user database (initialised by the app's own lifespan inside
the TestClient) and an in-memory report repository standing in for MongoDB.

Key Fixtures:
- `sample_reports`: Two report documents with date and ASIN entries.
- `report_repository`: In-memory repository over `sample_reports` that counts round trips.
- `test_settings`: Settings pointing at the in-memory stores.
- `app_for_testing`: The FastAPI application under test.
- `client`: A non-authenticated TestClient.
- `auth_headers`: Bearer headers for a user created through signup and login.
- `authenticated_client`: A TestClient that sends those headers.
"""

import copy
from typing import Any, Dict, Generator, List

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from salestraffic.core.config import Settings
from salestraffic.main import create_app

TEST_USERNAME = "reportsuser"
TEST_PASSWORD = "password123"


class InMemoryReportRepository:
    """Report repository over a list of dicts; ``calls`` counts round trips."""

    def __init__(self, reports: List[Dict[str, Any]]):
        self.reports = reports
        self.calls = 0
        self.fail_with = None

    async def fetch(self, field: str) -> List[Dict[str, Any]]:
        self.calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        return [
            {field: copy.deepcopy(report[field])}
            for report in self.reports
            if field in report
        ]


def date_entry(date, units, amount, sessions, page_views):
    return {
        "date": date,
        "salesByDate": {
            "unitsOrdered": units,
            "orderedProductSales": {"amount": amount, "currencyCode": "USD"},
        },
        "trafficByDate": {"sessions": sessions, "pageViews": page_views},
    }


def asin_entry(asin, units, amount, sessions, page_views):
    return {
        "parentAsin": asin,
        "salesByAsin": {
            "unitsOrdered": units,
            "orderedProductSales": {"amount": amount, "currencyCode": "USD"},
        },
        "trafficByAsin": {"sessions": sessions, "pageViews": page_views},
    }


@pytest.fixture
def sample_reports() -> List[Dict[str, Any]]:
    return [
        {
            "sellerId": "SELLER-1",
            "salesAndTrafficByDate": [
                date_entry("2024-01-01", 3, 30.0, 10, 20),
                date_entry("2024-01-02", 5, 50.5, 12, 25),
                date_entry("2024-01-03", 1, 9.99, 4, 6),
            ],
            "salesAndTrafficByAsin": [
                asin_entry("A1", 2, 20.0, 5, 9),
                asin_entry("A2", 4, 40.0, 7, 11),
                asin_entry("A1", 100, 1000.0, 50, 90),
            ],
        },
        {
            "sellerId": "SELLER-2",
            "salesAndTrafficByDate": [
                date_entry("2024-01-05", 2, 19.5, 8, 15),
            ],
            "salesAndTrafficByAsin": [
                asin_entry("A3", 1, 15.0, 3, 4),
            ],
        },
    ]


@pytest.fixture
def report_repository(sample_reports) -> InMemoryReportRepository:
    return InMemoryReportRepository(sample_reports)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        secret_key="test-secret-key",
        database_url="sqlite://:memory:",
        generate_schemas=True,
        cache_ttl_seconds=None,
        report_demo_delay_seconds=0,
    )


@pytest.fixture
def app_for_testing(test_settings: Settings, report_repository) -> FastAPI:
    return create_app(test_settings, report_repository=report_repository)


@pytest.fixture
def client(app_for_testing: FastAPI) -> Generator[TestClient, Any, None]:
    """
    Provides a non-authenticated starlette TestClient. Entering it runs the
    application lifespan, which creates the in-memory user schema.
    """
    with TestClient(app_for_testing) as tc:
        yield tc


def signup_and_login(client: TestClient, username: str, password: str) -> str:
    response = client.post(
        "/api/auth/signup",
        json={"username": username, "email": f"{username}@example.com", "password": password},
    )
    if response.status_code != 201:
        raise Exception(f"Signup failed for {username}: {response.text}")

    response = client.post("/api/auth/login", json={"username": username, "password": password})
    if response.status_code != 200:
        raise Exception(f"Authentication failed for {username}: {response.text}")
    return response.json()["access_token"]


@pytest.fixture
def auth_headers(client: TestClient) -> Dict[str, str]:
    token = signup_and_login(client, TEST_USERNAME, TEST_PASSWORD)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def authenticated_client(client: TestClient, auth_headers) -> TestClient:
    client.headers.update(auth_headers)
    return client
