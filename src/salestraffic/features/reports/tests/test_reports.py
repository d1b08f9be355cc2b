import pytest
from fastapi import status
from fastapi.testclient import TestClient

STATS_ENDPOINTS = [
    "/api/stats/dates?startDate=2024-01-01&endDate=2024-01-31",
    "/api/stats/asins?asins=A1",
    "/api/stats/total/units-and-sales",
    "/api/stats/total/dates",
    "/api/stats/total/asins",
]


@pytest.mark.parametrize("url", STATS_ENDPOINTS)
def test_stats_endpoints_require_authentication(client: TestClient, url):
    response = client.get(url)
    assert response.status_code == status.HTTP_401_UNAUTHORIZED
    assert response.json() == {"detail": "Not authenticated"}


@pytest.mark.parametrize("url", STATS_ENDPOINTS)
def test_stats_endpoints_with_token(authenticated_client: TestClient, url):
    assert authenticated_client.get(url).status_code == status.HTTP_200_OK


def test_get_statistics_by_date_range(authenticated_client: TestClient):
    response = authenticated_client.get("/api/stats/dates", params={"startDate": "2024-01-02", "endDate": "2024-01-05"})
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert [entry["date"] for entry in data] == ["2024-01-05", "2024-01-03", "2024-01-02"]
    assert data[0]["salesByDate"]["orderedProductSales"]["amount"] == 19.5


def test_get_statistics_by_date_range_requires_both_dates(authenticated_client: TestClient):
    response = authenticated_client.get("/api/stats/dates", params={"startDate": "2024-01-02"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_get_statistics_by_date_range_rejects_bad_date(authenticated_client: TestClient):
    response = authenticated_client.get("/api/stats/dates", params={"startDate": "yesterday", "endDate": "2024-01-05"})
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_date_range_is_served_from_cache(authenticated_client: TestClient, report_repository):
    params = {"startDate": "2024-01-01", "endDate": "2024-01-31"}
    first = authenticated_client.get("/api/stats/dates", params=params).json()
    second = authenticated_client.get("/api/stats/dates", params=params).json()
    assert first == second
    assert report_repository.calls == 1


def test_get_statistics_by_asins_repeated_parameter(authenticated_client: TestClient):
    response = authenticated_client.get("/api/stats/asins", params=[("asins", "A1"), ("asins", "A2")])
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert sorted(entry["parentAsin"] for entry in data) == ["A1", "A2"]
    assert len(data) == 2


def test_get_statistics_by_asins_comma_separated(authenticated_client: TestClient):
    response = authenticated_client.get("/api/stats/asins", params={"asins": "A2,A3"})
    assert sorted(entry["parentAsin"] for entry in response.json()) == ["A2", "A3"]


def test_get_statistics_by_asins_requires_identifier(authenticated_client: TestClient):
    response = authenticated_client.get("/api/stats/asins")
    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY


def test_get_units_and_sales_total(authenticated_client: TestClient):
    response = authenticated_client.get("/api/stats/total/units-and-sales")
    assert response.status_code == status.HTTP_200_OK
    data = response.json()
    assert data["totalUnitsOrdered"] == 107
    assert data["totalSalesAmount"] == pytest.approx(1075.0)


def test_get_total_statistics_by_dates(authenticated_client: TestClient):
    data = authenticated_client.get("/api/stats/total/dates").json()
    assert set(data) == {"totalUnitsOrdered", "totalSalesAmount", "totalSessions", "totalPageViews"}
    assert data["totalUnitsOrdered"] == 11
    assert data["totalPageViews"] == 66


def test_get_total_statistics_by_asins(authenticated_client: TestClient):
    data = authenticated_client.get("/api/stats/total/asins").json()
    assert data["totalSessions"] == 65
    assert data["totalPageViews"] == 114


def test_totals_are_zero_filled_for_empty_collection(authenticated_client: TestClient, sample_reports):
    sample_reports.clear()
    assert authenticated_client.get("/api/stats/total/units-and-sales").json() == {
        "totalUnitsOrdered": 0,
        "totalSalesAmount": 0,
    }
    assert authenticated_client.get("/api/stats/total/dates").json() == {
        "totalUnitsOrdered": 0,
        "totalSalesAmount": 0,
        "totalSessions": 0,
        "totalPageViews": 0,
    }


def test_cached_total_is_stale_after_storage_change(authenticated_client: TestClient, sample_reports):
    first = authenticated_client.get("/api/stats/total/asins").json()
    sample_reports.clear()
    second = authenticated_client.get("/api/stats/total/asins").json()
    assert second == first
