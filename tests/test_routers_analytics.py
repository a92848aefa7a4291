import pytest

from formlytics.exceptions import FormNotFoundError, StoreError
from formlytics.models.analytics import AnalyticsReport, ExportFile, QuestionAnalytics, TrendPoint

SAMPLE_REPORT = AnalyticsReport(
    form_id="form123", total_responses=2, completed_responses=1, completion_rate=50.0,
    average_completion_time_seconds=42,
    question_analytics=[
        QuestionAnalytics(
            question_id="q1", question_title="Name", question_type="SHORT_ANSWER", response_count=1,
        ),
    ],
    trends=[TrendPoint(date="2025-01-01", count=1)],
)

SAMPLE_CSV = ExportFile(
    content='"Response ID","Submitted At","Email"\n"r1","",""',
    filename="form-form123-responses.csv", media_type="text/csv",
)

SAMPLE_JSON = ExportFile(
    content='{"form": {"id": "form123"}, "responses": []}',
    filename="form-form123-responses.json", media_type="application/json",
)


@pytest.fixture
def client(mocker):
    mocker.patch("formlytics.routers.analytics.analytics_service")
    mocker.patch("formlytics.routers.analytics.export_service")
    from formlytics.main import api
    from fastapi.testclient import TestClient
    return TestClient(api)


@pytest.fixture
def mock_svc(mocker):
    return mocker.patch("formlytics.routers.analytics.analytics_service")


@pytest.fixture
def mock_export(mocker):
    return mocker.patch("formlytics.routers.analytics.export_service")


class TestGetAnalytics:
    def test_returns_camel_case_report(self, client, mock_svc):
        mock_svc.get_analytics.return_value = SAMPLE_REPORT
        resp = client.get("/api/analytics/forms/form123")
        assert resp.status_code == 200
        data = resp.json()
        assert data["formId"] == "form123"
        assert data["completionRate"] == 50.0
        assert data["averageCompletionTimeSeconds"] == 42
        assert data["trends"] == [{"date": "2025-01-01", "count": 1}]

    def test_omits_absent_fields(self, client, mock_svc):
        mock_svc.get_analytics.return_value = SAMPLE_REPORT
        question = client.get("/api/analytics/forms/form123").json()["questionAnalytics"][0]
        assert question == {
            "questionId": "q1", "questionTitle": "Name", "questionType": "SHORT_ANSWER", "responseCount": 1,
        }

    def test_forwards_params(self, client, mock_svc):
        mock_svc.get_analytics.return_value = SAMPLE_REPORT
        client.get("/api/analytics/forms/form123?user_id=user1")
        mock_svc.get_analytics.assert_called_once_with("form123", user_id="user1")

    def test_user_id_is_optional(self, client, mock_svc):
        mock_svc.get_analytics.return_value = SAMPLE_REPORT
        assert client.get("/api/analytics/forms/form123").status_code == 200
        mock_svc.get_analytics.assert_called_once_with("form123", user_id=None)


class TestExport:
    def test_csv_download(self, client, mock_export):
        mock_export.export_csv.return_value = SAMPLE_CSV
        resp = client.get("/api/analytics/forms/form123/export/csv")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/csv")
        assert resp.headers["content-disposition"].startswith("attachment;")
        assert 'filename="form-form123-responses.csv"' in resp.headers["content-disposition"]
        assert "filename*=UTF-8''form-form123-responses.csv" in resp.headers["content-disposition"]
        assert resp.text == SAMPLE_CSV.content

    def test_non_ascii_filename_falls_back(self, client, mock_export):
        mock_export.export_csv.return_value = ExportFile(
            content="", filename="form-caf\u00e9-responses.csv", media_type="text/csv",
        )
        disposition = client.get("/api/analytics/forms/form123/export/csv").headers["content-disposition"]
        assert 'filename="form-caf?-responses.csv"' in disposition
        assert "filename*=UTF-8''form-caf%C3%A9-responses.csv" in disposition

    def test_json_download(self, client, mock_export):
        mock_export.export_json.return_value = SAMPLE_JSON
        resp = client.get("/api/analytics/forms/form123/export/json?user_id=user1")
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("application/json")
        assert 'filename="form-form123-responses.json"' in resp.headers["content-disposition"]
        assert resp.json()["form"]["id"] == "form123"
        mock_export.export_json.assert_called_once_with("form123", user_id="user1")


class TestExceptionMapping:
    def test_not_found_returns_404(self, client, mock_svc):
        mock_svc.get_analytics.side_effect = FormNotFoundError("Form form123 not found")
        resp = client.get("/api/analytics/forms/form123")
        assert resp.status_code == 404
        assert resp.json() == {"error_code": "not_found", "message": "Form form123 not found"}

    def test_store_error_returns_500(self, client, mock_export):
        mock_export.export_csv.side_effect = StoreError("corrupt")
        resp = client.get("/api/analytics/forms/form123/export/csv")
        assert resp.status_code == 500
        assert resp.json()["error_code"] == "store_error"


class TestEndToEnd:
    def test_report_from_store(self, form_store, api_client):
        resp = api_client.get("/api/analytics/forms/form123?user_id=user1")
        assert resp.status_code == 200
        data = resp.json()
        assert data["totalResponses"] == 4
        rating = data["questionAnalytics"][1]
        assert rating["average"] == 4.5
        assert [s["count"] for s in rating["scaleDistribution"]] == [0, 0, 0, 1, 1]

    def test_status(self, form_store, api_client):
        resp = api_client.get("/api/status")
        assert resp.status_code == 200
        assert resp.json()["form_count"] == 1
        assert resp.json()["ready"] is True
