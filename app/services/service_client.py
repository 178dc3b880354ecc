# app/services/service_client.py
import requests
from requests import RequestException

from app.exceptions import (
    DownstreamUnavailableException,
    InvalidInputException,
    ResourceAlreadyExistsException,
    ResourceNotFoundException,
)
from app.utils.settings import HTTP_TIMEOUT_SECONDS
from app.utils.logging import get_logger

logger = get_logger(__name__)


class ServiceClient:
    """
    Wspolna baza dla klientow HTTP do innych serwisow.

    Mapuje odpowiedzi peera na wyjatki:
    - brak polaczenia / timeout / 5xx -> DownstreamUnavailableException
    - 404 -> ResourceNotFoundException
    - 409 -> ResourceAlreadyExistsException (status zostaje 409)
    - inne 4xx -> InvalidInputException
    Nie ma retry - wywolania nie sa idempotentne.
    """

    service_name = "service"

    def __init__(self, base_url: str, timeout: float | None = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout or HTTP_TIMEOUT_SECONDS

    def _request(self, method: str, path: str, **kwargs) -> requests.Response:
        url = f"{self.base_url}{path}"
        logger.info(f"{self.__class__.__name__} {method} {url}")

        try:
            resp = requests.request(method, url, timeout=self.timeout, **kwargs)
        except RequestException as e:
            logger.error(f"{self.service_name} unreachable: {method} {url}: {e}")
            raise DownstreamUnavailableException(
                self.service_name, f"Downstream service [{self.service_name}] is unavailable."
            ) from e

        if resp.status_code >= 500:
            logger.error(f"{self.service_name} answered {resp.status_code} for {method} {url}")
            upstream_message, upstream_details = self._error_payload(resp)
            exc = DownstreamUnavailableException(
                self.service_name,
                f"Downstream service [{self.service_name}] reported an error: {upstream_message}",
                status=resp.status_code,
            )
            # np. lista produktow do uzgodnienia po czesciowej redukcji stocku
            exc.details = {**upstream_details, **exc.details}
            raise exc

        if resp.status_code >= 400:
            message, details = self._error_payload(resp)
            details = {**details, 'service': self.service_name, 'upstream_status': resp.status_code}
            if resp.status_code == 404:
                raise ResourceNotFoundException(message, details)
            if resp.status_code == 409:
                raise ResourceAlreadyExistsException(message, details)
            raise InvalidInputException(message, details)

        return resp

    @staticmethod
    def _error_payload(resp: requests.Response) -> tuple[str, dict]:
        try:
            body = resp.json()
        except ValueError:
            return resp.text or f"HTTP {resp.status_code}", {}
        if not isinstance(body, dict):
            return str(body), {}
        message = body.get("message") or body.get("detail") or f"HTTP {resp.status_code}"
        return str(message), dict(body.get("details") or {})
