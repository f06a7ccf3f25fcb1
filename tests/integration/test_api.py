"""Integration tests for FastAPI endpoints."""
import pytest
from fastapi.testclient import TestClient
from bill_scanner.api.app import create_app
from bill_scanner.models.schema import BillScanResult, ProviderKind
from bill_scanner.scanner import NO_PROVIDER_MESSAGE, BillScanner
from tests.factories import make_provider, make_success_result


def make_client(settings, local, cloud):
    scanner = BillScanner(settings, providers=[local, cloud])
    app = create_app(settings, scanner=scanner)
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def client(mock_settings):
    local = make_provider(ProviderKind.LOCAL, result=make_success_result(ProviderKind.LOCAL))
    cloud = make_provider(ProviderKind.CLOUD)
    return make_client(mock_settings, local, cloud)


@pytest.fixture
def offline_client(mock_settings):
    return make_client(
        mock_settings,
        make_provider(ProviderKind.LOCAL, available=False),
        make_provider(ProviderKind.CLOUD, available=False),
    )


@pytest.mark.integration
class TestHealthEndpoint:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "ok"
        assert data["service"] == "bill-scanner-api"


@pytest.mark.integration
class TestScanUpload:
    def test_text_upload(self, client):
        response = client.post(
            "/api/bills/scan",
            files={"file": ("bill.txt", b"Total Amount: 4500", "text/plain")},
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert "timestamp" in body["meta"]
        data = body["data"]
        assert data["provider"] == "local"
        assert data["fileType"] == "text/plain"
        assert data["confidence"] == 0.9
        assert data["extractedData"]["totalAmount"] == 4500.0
        assert data["insights"]["riskLevel"] == "medium"

    def test_content_passed_to_provider(self, mock_settings):
        local = make_provider(ProviderKind.LOCAL, result=make_success_result(ProviderKind.LOCAL))
        client = make_client(mock_settings, local, make_provider(ProviderKind.CLOUD))

        client.post("/api/bills/scan", files={"file": ("bill.png", b"\x89PNG", "image/png")})
        client.post("/api/bills/scan", files={"file": ("bill.txt", b"Units: 320", "text/plain; charset=utf-8")})

        assert local.scan_bill.await_args_list[0].args == ("iVBORw==", "image/png")
        assert local.scan_bill.await_args_list[1].args == ("Units: 320", "text/plain")

    def test_no_provider(self, offline_client):
        response = offline_client.post(
            "/api/bills/scan",
            files={"file": ("bill.txt", b"Total", "text/plain")},
        )
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "BAD_REQUEST"
        assert error["message"] == NO_PROVIDER_MESSAGE

    def test_missing_file(self, client):
        response = client.post("/api/bills/scan")
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "No file provided"

    def test_file_too_large(self, mock_settings):
        settings = mock_settings.model_copy(update={"max_upload_bytes": 1024 * 1024})
        client = make_client(
            settings,
            make_provider(ProviderKind.LOCAL),
            make_provider(ProviderKind.CLOUD),
        )
        response = client.post(
            "/api/bills/scan",
            files={"file": ("bill.png", b"0" * (1024 * 1024 + 1), "image/png")},
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"] == "File too large. Maximum size is 1MB"

    def test_unsupported_type(self, client):
        response = client.post(
            "/api/bills/scan",
            files={"file": ("bill.docx", b"PK", "application/msword")},
        )
        assert response.status_code == 400
        assert response.json()["error"]["message"].startswith("Unsupported file type: application/msword")

    def test_failed_scan_returns_warnings(self, mock_settings):
        local = make_provider(
            ProviderKind.LOCAL,
            result=BillScanResult.failure(["Failed to connect"], ProviderKind.LOCAL),
        )
        client = make_client(mock_settings, local, make_provider(ProviderKind.CLOUD, available=False))

        response = client.post(
            "/api/bills/scan",
            files={"file": ("bill.jpg", b"\xff\xd8", "image/jpeg")},
        )
        assert response.status_code == 400
        error = response.json()["error"]
        assert error["message"].startswith("Failed to scan bill. Warnings: Cannot connect to Ollama")
        assert len(error["details"]["warnings"]) == 1

    def test_unexpected_error(self, mock_settings):
        local = make_provider(ProviderKind.LOCAL)
        local.is_available.side_effect = RuntimeError("probe crashed")
        client = make_client(mock_settings, local, make_provider(ProviderKind.CLOUD))

        response = client.post("/api/bills/scan", files={"file": ("bill.txt", b"x", "text/plain")})
        assert response.status_code == 500
        assert response.json()["error"]["code"] == "INTERNAL_ERROR"


@pytest.mark.integration
class TestScanCapabilities:
    def test_available(self, client):
        response = client.get("/api/bills/scan")
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["available"] is True
        assert data["activeProvider"] == "local"
        assert data["configured"] == "auto"
        assert data["providers"]["cloud"]["available"] is True
        assert data["supportedFormats"]["documents"] == ["PDF"]
        assert data["maxFileSize"] == 15 * 1024 * 1024
        assert data["maxFileSizeMB"] == 15

    def test_unavailable(self, offline_client):
        data = offline_client.get("/api/bills/scan").json()["data"]
        assert data["available"] is False
        assert data["activeProvider"] is None


@pytest.mark.integration
class TestVLMStatus:
    def test_status(self, mock_settings):
        client = make_client(
            mock_settings,
            make_provider(ProviderKind.LOCAL, available=False),
            make_provider(ProviderKind.CLOUD, available=True),
        )
        response = client.get("/api/vlm/status")
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["configured"] == "auto"
        assert body["activeProvider"] == "cloud"
        assert body["providers"]["local"]["error"] == "local unavailable"
        assert body["providers"]["cloud"]["model"] == "cloud-model"
        assert "images" in body["supportedFormats"]

    def test_status_error(self, mock_settings):
        local = make_provider(ProviderKind.LOCAL)
        local.check_status.side_effect = RuntimeError("probe crashed")
        client = make_client(mock_settings, local, make_provider(ProviderKind.CLOUD))

        response = client.get("/api/vlm/status")
        assert response.status_code == 500
        assert response.json() == {"success": False, "error": "probe crashed"}
