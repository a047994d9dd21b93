"""Tests unitaires pour le client du registre Satu Sehat.

Couvre la synchronisation d'un patient de bout en bout (token puis création),
la classification des corps d'erreur et le mapping des erreurs transport.
"""

import json
from datetime import date
from unittest.mock import AsyncMock, MagicMock, patch

import httpx
import pytest

from app.infrastructure.satusehat.auth import TokenManager
from app.infrastructure.satusehat.client import (
    OperationOutcomeError,
    RawError,
    SatuSehatClient,
    parse_registry_error,
)
from app.infrastructure.satusehat.exceptions import (
    SatuSehatConfigurationError,
    SatuSehatRegistryError,
    SatuSehatRegistryTimeoutError,
    SatuSehatValidationError,
)
from app.infrastructure.satusehat.token_store import InMemoryTokenStorage, TokenStore
from app.schemas.patient import PatientRecord

FHIR_BASE_URL = "https://satusehat.test/fhir-r4/v1"

# =============================================================================
# Fixtures
# =============================================================================


def make_response(status_code: int, json_data=None, text: str = ""):
    response = MagicMock(spec=httpx.Response)
    response.status_code = status_code
    if json_data is not None:
        response.json.return_value = json_data
        response.text = json.dumps(json_data)
    else:
        response.json.side_effect = json.JSONDecodeError("No JSON", "", 0)
        response.text = text
    return response


@pytest.fixture
def record():
    return PatientRecord(
        id=7,
        name="Budi Santoso",
        nik="3171234567890001",
        birth_date=date(1990, 5, 15),
        gender="male",
        phone="081234567890",
    )


@pytest.fixture
def token_manager():
    manager = MagicMock(spec=TokenManager)
    manager.get_access_token = AsyncMock(return_value="T1")
    manager.close = AsyncMock()
    return manager


@pytest.fixture
def http_client():
    client = AsyncMock()
    client.post = AsyncMock(
        return_value=make_response(201, {"resourceType": "Patient", "id": "P-001"})
    )
    return client


@pytest.fixture
def satusehat_client(token_manager):
    return SatuSehatClient(token_manager, base_url=FHIR_BASE_URL, timeout=5)


# =============================================================================
# Tests
# =============================================================================


class TestSyncPatient:
    """Tests pour SatuSehatClient.sync_patient()."""

    @pytest.mark.asyncio
    async def test_returns_registry_id(self, satusehat_client, http_client, record):
        with patch.object(satusehat_client, "_get_client", return_value=http_client):
            satusehat_id = await satusehat_client.sync_patient(record)

        assert satusehat_id == "P-001"

    @pytest.mark.asyncio
    async def test_posts_patient_with_bearer_token(self, satusehat_client, http_client, record):
        with patch.object(satusehat_client, "_get_client", return_value=http_client):
            await satusehat_client.sync_patient(record)

        call_args = http_client.post.call_args
        assert call_args.args[0] == "/Patient"
        assert call_args.kwargs["headers"] == {"Authorization": "Bearer T1"}

        body = json.loads(call_args.kwargs["content"])
        assert body["identifier"][0]["value"] == "3171234567890001"
        assert body["name"][0]["text"] == "Budi Santoso"
        assert body["telecom"] == [{"system": "phone", "use": "mobile", "value": "081234567890"}]

    @pytest.mark.asyncio
    async def test_invalid_gender_fails_before_any_network_call(
        self, satusehat_client, token_manager, http_client, record
    ):
        invalid = record.model_copy(update={"gender": "other"})

        with patch.object(satusehat_client, "_get_client", return_value=http_client):
            with pytest.raises(SatuSehatValidationError):
                await satusehat_client.sync_patient(invalid)

        token_manager.get_access_token.assert_not_called()
        http_client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_configuration_error_propagates(
        self, satusehat_client, token_manager, http_client, record
    ):
        token_manager.get_access_token.side_effect = SatuSehatConfigurationError()

        with patch.object(satusehat_client, "_get_client", return_value=http_client):
            with pytest.raises(SatuSehatConfigurationError):
                await satusehat_client.sync_patient(record)

        http_client.post.assert_not_called()

    @pytest.mark.asyncio
    async def test_success_without_id_is_registry_error(
        self, satusehat_client, http_client, record
    ):
        http_client.post.return_value = make_response(201, {"resourceType": "Patient"})

        with patch.object(satusehat_client, "_get_client", return_value=http_client):
            with pytest.raises(SatuSehatRegistryError) as exc_info:
                await satusehat_client.sync_patient(record)

        assert exc_info.value.status_code == 201

    @pytest.mark.asyncio
    async def test_operation_outcome_diagnostics_surfaced(
        self, satusehat_client, http_client, record
    ):
        http_client.post.return_value = make_response(
            400,
            {
                "resourceType": "OperationOutcome",
                "issue": [
                    {"severity": "error", "code": "invalid"},
                    {
                        "severity": "error",
                        "code": "duplicate",
                        "diagnostics": "NIK sudah terdaftar",
                    },
                ],
            },
        )

        with patch.object(satusehat_client, "_get_client", return_value=http_client):
            with pytest.raises(SatuSehatRegistryError) as exc_info:
                await satusehat_client.sync_patient(record)

        error = exc_info.value
        assert error.status_code == 400
        assert error.diagnostics == "NIK sudah terdaftar"
        assert isinstance(error.error_body, OperationOutcomeError)

    @pytest.mark.asyncio
    async def test_non_json_error_body_kept_as_text(self, satusehat_client, http_client, record):
        http_client.post.return_value = make_response(502, text="<html>Bad Gateway</html>")

        with patch.object(satusehat_client, "_get_client", return_value=http_client):
            with pytest.raises(SatuSehatRegistryError) as exc_info:
                await satusehat_client.sync_patient(record)

        assert exc_info.value.status_code == 502
        assert exc_info.value.diagnostics == "<html>Bad Gateway</html>"
        assert exc_info.value.error_body.kind == "raw"

    @pytest.mark.asyncio
    async def test_timeout_raises_registry_timeout(self, satusehat_client, http_client, record):
        http_client.post.side_effect = httpx.ReadTimeout("timed out")

        with patch.object(satusehat_client, "_get_client", return_value=http_client):
            with pytest.raises(SatuSehatRegistryTimeoutError):
                await satusehat_client.sync_patient(record)

    @pytest.mark.asyncio
    async def test_transport_error_raises_registry_error(
        self, satusehat_client, http_client, record
    ):
        http_client.post.side_effect = httpx.ConnectError("connection refused")

        with patch.object(satusehat_client, "_get_client", return_value=http_client):
            with pytest.raises(SatuSehatRegistryError) as exc_info:
                await satusehat_client.sync_patient(record)

        assert not isinstance(exc_info.value, SatuSehatRegistryTimeoutError)
        assert exc_info.value.status_code is None


class TestParseRegistryError:
    """Classification des corps d'erreur du registre."""

    def test_operation_outcome_first_diagnostics(self):
        response = make_response(
            422,
            {"issue": [{"diagnostics": "first"}, {"diagnostics": "second"}]},
        )

        parsed = parse_registry_error(response)

        assert parsed == OperationOutcomeError(
            diagnostics="first",
            body={"issue": [{"diagnostics": "first"}, {"diagnostics": "second"}]},
        )
        assert parsed.kind == "operation_outcome"

    def test_json_without_diagnostics_is_serialized(self):
        response = make_response(400, {"fault": {"faultstring": "Invalid access token"}})

        parsed = parse_registry_error(response)

        assert isinstance(parsed, RawError)
        assert json.loads(parsed.text) == {"fault": {"faultstring": "Invalid access token"}}

    def test_non_json_body(self):
        parsed = parse_registry_error(make_response(500, text="Internal error"))

        assert parsed == RawError(text="Internal error")


class TestEndToEnd:
    """Token réel (TokenManager) + création, avec un seul transport mocké."""

    @pytest.mark.asyncio
    async def test_sync_then_second_sync_reuses_token(self, record):
        store = TokenStore(InMemoryTokenStorage())
        await store.set_credentials("abc", "xyz")
        token_manager = TokenManager(store, auth_url="https://satusehat.test/oauth2/v1/accesstoken")
        client = SatuSehatClient(token_manager, base_url=FHIR_BASE_URL)

        auth_http = AsyncMock()
        auth_http.post = AsyncMock(
            return_value=make_response(200, {"access_token": "T1", "expires_in": 3600})
        )
        fhir_http = AsyncMock()
        fhir_http.post = AsyncMock(
            return_value=make_response(201, {"resourceType": "Patient", "id": "PATIENT-999"})
        )

        with (
            patch.object(token_manager, "_get_client", return_value=auth_http),
            patch.object(client, "_get_client", return_value=fhir_http),
        ):
            first = await client.sync_patient(record)
            second = await client.sync_patient(record)

        assert first == second == "PATIENT-999"
        assert auth_http.post.await_count == 1
        assert fhir_http.post.await_count == 2
        for call in fhir_http.post.call_args_list:
            assert call.kwargs["headers"]["Authorization"] == "Bearer T1"


class TestClientLifecycle:
    @pytest.mark.asyncio
    async def test_close_closes_token_manager(self, satusehat_client, token_manager):
        await satusehat_client._get_client()

        await satusehat_client.close()

        assert satusehat_client._client is None
        token_manager.close.assert_awaited_once()

    def test_base_url_trailing_slash_stripped(self, token_manager):
        client = SatuSehatClient(token_manager, base_url=FHIR_BASE_URL + "/")

        assert client.base_url == FHIR_BASE_URL
