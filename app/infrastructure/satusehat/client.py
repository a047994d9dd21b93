"""Async client for the Satu Sehat FHIR registry.

Creates Patient resources on the national registry. One call per sync: the
client never retries, queues, or updates an existing resource.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Any, Literal

import httpx
from fhir.resources.patient import Patient as FHIRPatient
from opentelemetry import trace

from app.infrastructure.satusehat.auth import TokenManager
from app.infrastructure.satusehat.config import satusehat_settings
from app.infrastructure.satusehat.exceptions import (
    SatuSehatRegistryError,
    SatuSehatRegistryTimeoutError,
)
from app.infrastructure.satusehat.mappers import build_fhir_patient_payload
from app.schemas.patient import PatientRecord

logger = logging.getLogger(__name__)
tracer = trace.get_tracer(__name__)


@dataclass(frozen=True)
class OperationOutcomeError:
    """Error body carrying a FHIR OperationOutcome diagnostics message."""

    diagnostics: str
    body: dict[str, Any] = field(default_factory=dict)
    kind: Literal["operation_outcome"] = "operation_outcome"

    @property
    def message(self) -> str:
        return self.diagnostics


@dataclass(frozen=True)
class RawError:
    """Error body without diagnostics: serialized JSON or raw text."""

    text: str
    kind: Literal["raw"] = "raw"

    @property
    def message(self) -> str:
        return self.text


RegistryErrorBody = OperationOutcomeError | RawError


def _find_diagnostics(body: Any) -> str | None:
    if not isinstance(body, dict):
        return None
    for issue in body.get("issue") or []:
        if isinstance(issue, dict) and issue.get("diagnostics"):
            return str(issue["diagnostics"])
    return None


def parse_registry_error(response: httpx.Response) -> RegistryErrorBody:
    """Classify a registry error response body.

    Returns ``OperationOutcomeError`` with the first ``issue[].diagnostics``
    found, otherwise ``RawError`` with the serialized JSON body, or the raw
    text when the body is not JSON.
    """
    try:
        body = response.json()
    except ValueError:
        return RawError(text=response.text)

    diagnostics = _find_diagnostics(body)
    if diagnostics is not None:
        return OperationOutcomeError(diagnostics=diagnostics, body=body)
    return RawError(text=json.dumps(body))


class SatuSehatClient:
    """Satu Sehat registry client with OpenTelemetry tracing.

    Example:
        ```python
        client = SatuSehatClient(TokenManager(store))
        satusehat_id = await client.sync_patient(record)
        await client.close()
        ```
    """

    def __init__(
        self,
        token_manager: TokenManager,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        """Initialize the registry client.

        Args:
            token_manager: Provides bearer tokens
            base_url: FHIR base URL. Defaults to settings.
            timeout: Request timeout in seconds. Defaults to settings.
        """
        self.token_manager = token_manager
        self.base_url = (base_url or str(satusehat_settings.SATUSEHAT_FHIR_BASE_URL)).rstrip("/")
        self.timeout = timeout or satusehat_settings.SATUSEHAT_TIMEOUT
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                },
            )
        return self._client

    async def sync_patient(self, record: PatientRecord) -> str:
        """Push a patient record to the registry.

        The payload is built and validated before any token request or
        network call.

        Returns:
            The registry-assigned Patient id

        Raises:
            SatuSehatValidationError: If the record is incomplete or invalid
            SatuSehatConfigurationError: If credentials are not set
            SatuSehatAuthError: If authentication fails
            SatuSehatRegistryError: If the registry rejects the resource
        """
        payload = build_fhir_patient_payload(record)
        return await self.create_patient(payload)

    async def create_patient(self, payload: FHIRPatient) -> str:
        """POST a Patient resource and return its registry id."""
        token = await self.token_manager.get_access_token()

        with tracer.start_as_current_span("satusehat_create_patient") as span:
            span.set_attribute("fhir.resource_type", "Patient")

            try:
                client = await self._get_client()
                response = await client.post(
                    "/Patient",
                    content=payload.model_dump_json(exclude_none=True),
                    headers={"Authorization": f"Bearer {token}"},
                )
            except httpx.TimeoutException as e:
                span.record_exception(e)
                raise SatuSehatRegistryTimeoutError(
                    f"Satu Sehat registry request timed out: {e}"
                ) from e
            except httpx.HTTPError as e:
                span.record_exception(e)
                raise SatuSehatRegistryError(f"Failed to reach Satu Sehat registry: {e}") from e

            span.set_attribute("http.status_code", response.status_code)
            if not 200 <= response.status_code < 300:
                error_body = parse_registry_error(response)
                logger.warning(
                    f"Création Patient refusée par Satu Sehat: HTTP {response.status_code} "
                    f"({error_body.kind})"
                )
                raise SatuSehatRegistryError(
                    f"Satu Sehat rejected the Patient resource: {error_body.message}",
                    status_code=response.status_code,
                    diagnostics=error_body.message,
                    error_body=error_body,
                )

            try:
                created = response.json()
            except ValueError as e:
                raise SatuSehatRegistryError(
                    "Satu Sehat returned a non-JSON response",
                    status_code=response.status_code,
                ) from e

            resource_id = created.get("id") if isinstance(created, dict) else None
            if not resource_id:
                raise SatuSehatRegistryError(
                    "Satu Sehat response has no resource id",
                    status_code=response.status_code,
                    error_body=created,
                )

            span.set_attribute("fhir.resource_id", str(resource_id))
            span.add_event("Resource created successfully")
            return str(resource_id)

    async def close(self) -> None:
        """Close the HTTP clients."""
        if self._client is not None and not self._client.is_closed:
            await self._client.aclose()
            self._client = None
        await self.token_manager.close()
