from fastapi import status
from fastapi.testclient import TestClient

from conftest import TEST_PASSWORD, TEST_USERNAME, signup_and_login
from salestraffic.features.reports.repository import MongoReportRepository
from salestraffic.main import create_app


def test_lifespan_serves_user_database_to_request_handlers(test_settings, report_repository):
    app = create_app(test_settings, report_repository=report_repository)
    with TestClient(app) as tc:
        token = signup_and_login(tc, TEST_USERNAME, TEST_PASSWORD)
        response = tc.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["username"] == TEST_USERNAME

        response = tc.get("/api/stats/total/dates", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_200_OK


def test_lifespan_builds_mongo_repository_when_none_is_injected(test_settings):
    app = create_app(test_settings)
    with TestClient(app) as tc:
        service = app.state.report_service
        assert isinstance(service.repository, MongoReportRepository)
        assert service.repository.collection.name == test_settings.report_collection

        token = signup_and_login(tc, TEST_USERNAME, TEST_PASSWORD)
        response = tc.get("/api/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert response.status_code == status.HTTP_200_OK
