import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from compute_capabilities.clients.http import RequestFailure, send_request
from compute_capabilities.errors import CapabilityResolutionError
from compute_capabilities.models import (
    BackendCapabilityFlags,
    IdentityCapabilities,
    NetworkCapabilities,
)


logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)


class CapabilityClient:
    """Reads capability documents from the provider's capability endpoint."""

    def __init__(
        self,
        base_url: str,
        auth_token: str | None = None,
        timeout: float = 10.0,
        transport: httpx.BaseTransport | None = None,
    ):
        headers = {"Authorization": f"Bearer {auth_token}"} if auth_token else {}
        self.client = httpx.Client(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            headers=headers,
            transport=transport,
        )

    def close(self) -> None:
        self.client.close()

    def _fetch(self, path: str, model: type[ModelT]) -> ModelT:
        try:
            response = send_request(self.client, "GET", path)
            document = model.model_validate(response.json())
        except RequestFailure as exc:
            logger.warning(
                "capability request failed path=%s error_type=%s detail=%s",
                path,
                exc.error_type,
                exc.detail,
            )
            raise CapabilityResolutionError(source=path, detail=exc.detail) from exc
        except (ValueError, ValidationError) as exc:
            logger.warning("capability payload rejected path=%s error=%s", path, exc)
            raise CapabilityResolutionError(
                source=path, detail=f"invalid payload: {exc}"
            ) from exc
        return document

    def capability_flags(self) -> BackendCapabilityFlags:
        return self._fetch("/v1/capabilities/compute", BackendCapabilityFlags)

    def network_capabilities(self) -> NetworkCapabilities:
        return self._fetch("/v1/capabilities/network", NetworkCapabilities)

    def identity_capabilities(self) -> IdentityCapabilities:
        return self._fetch("/v1/capabilities/identity", IdentityCapabilities)
