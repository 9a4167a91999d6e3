import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx
import pybreaker

from whatsapp_dispatch.core.circuit_breaker import async_circuit_breaker, gateway_breaker
from whatsapp_dispatch.core.config import settings
from whatsapp_dispatch.core.retry import retry_operation
from whatsapp_dispatch.schemas.dispatch import DispatchResult

logger = logging.getLogger(__name__)

# Shared client instance (defined once for efficiency)
HTTP_CLIENT = httpx.AsyncClient(timeout=settings.WHATSAPP_SEND_TIMEOUT_SECONDS)

# Transport failures and 5xx are worth retrying; 4xx never are
RETRYABLE_ERRORS = (httpx.TransportError, httpx.HTTPStatusError)


def _response_json(response: httpx.Response) -> Optional[Dict[str, Any]]:
    try:
        data = response.json()
    except ValueError:
        return {"raw": response.text} if response.text else None
    return data if isinstance(data, dict) else {"data": data}


def extract_message_id(data: Optional[Dict[str, Any]]) -> Optional[str]:
    """Pull the gateway message id out of its response, wherever it put it."""
    if not data:
        return None
    for container in (data, data.get("data")):
        if not isinstance(container, dict):
            continue
        for key in ("messageId", "message_id", "id"):
            if container.get(key):
                return str(container[key])
    return None


class GatewayClient:
    """HTTP client for the WhatsApp template gateway."""

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None):
        self.endpoint = settings.WHATSAPP_ENDPOINT
        self.api_key = settings.WHATSAPP_API_KEY
        self.language = settings.WHATSAPP_TEMPLATE_LANGUAGE
        self.http_client = http_client or HTTP_CLIENT

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    def build_body(
        self,
        template_id: str,
        phone: str,
        template_args: Sequence[Any],
        image_url: Optional[str] = None,
    ) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "type": "buttonTemplate",
            "templateId": template_id,
            "templateLanguage": self.language,
            "sender_phone": phone,
            "templateArgs": [str(arg) for arg in template_args],
        }
        if image_url:
            body["imageUrl"] = image_url
        return body

    async def post_template(self, body: Dict[str, Any], timeout: float) -> httpx.Response:
        """
        Issue one POST to the gateway.

        Raises:
            httpx.RequestError: If connection fails or times out.
        """
        return await self.http_client.post(
            self.endpoint,
            json=body,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.api_key}",
            },
            timeout=timeout,
        )

    @async_circuit_breaker(gateway_breaker)
    async def _post_protected(self, body: Dict[str, Any], timeout: float) -> httpx.Response:
        response = await self.post_template(body, timeout)
        # Only gateway-side failures count against the breaker
        if response.status_code >= 500:
            response.raise_for_status()
        return response

    async def send_template(
        self,
        template_id: str,
        phone: str,
        template_args: Sequence[Any],
        image_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_attempts: int = 1,
        retry_base_delay: float = 1.0,
    ) -> DispatchResult:
        """
        Send one template message. Never raises: every failure is returned
        as a failed DispatchResult.
        """
        if not self.configured:
            logger.error("❌ WhatsApp gateway API key is not configured")
            return DispatchResult.failed("WhatsApp gateway API key is not configured")

        timeout = timeout or settings.WHATSAPP_SEND_TIMEOUT_SECONDS
        body = self.build_body(template_id, phone, template_args, image_url)

        try:
            response = await retry_operation(
                lambda: self._post_protected(body, timeout),
                max_attempts=max_attempts,
                base_delay=retry_base_delay,
                retry_on=RETRYABLE_ERRORS,
            )
        except pybreaker.CircuitBreakerError as e:
            logger.warning(f"⚡ Gateway send rejected, circuit breaker open: {e}")
            return DispatchResult.failed(f"WhatsApp gateway unavailable: {e}")
        except httpx.TimeoutException:
            return DispatchResult.failed(f"WhatsApp gateway timed out after {timeout}s")
        except httpx.HTTPStatusError as e:
            data = _response_json(e.response)
            return DispatchResult.failed(
                f"WhatsApp gateway responded with HTTP {e.response.status_code}: "
                f"{e.response.text[:200]}",
                status_code=e.response.status_code,
                response=data,
            )
        except httpx.HTTPError as e:
            return DispatchResult.failed(f"WhatsApp gateway request failed: {e}")
        except Exception as e:
            logger.exception(f"❌ Unexpected error sending template '{template_id}'")
            return DispatchResult.failed(f"Unexpected error: {e}")

        data = _response_json(response)
        if not response.is_success:
            return DispatchResult.failed(
                f"WhatsApp gateway responded with HTTP {response.status_code}: "
                f"{response.text[:200]}",
                status_code=response.status_code,
                response=data,
            )

        return DispatchResult.ok(
            message_id=extract_message_id(data),
            status_code=response.status_code,
            response=data,
        )

    async def probe(
        self, template_id: str, phone: str, template_args: List[str], timeout: float
    ) -> Tuple[bool, Optional[Dict[str, Any]]]:
        """
        One reachability check with a dummy payload. Bypasses the circuit breaker.

        Returns:
            (reachable, parsed gateway response)

        Raises:
            httpx.RequestError: If connection fails or times out.
        """
        body = self.build_body(template_id, phone, template_args)
        response = await self.post_template(body, timeout)
        return response.is_success, _response_json(response)


# Instantiate client for use in services
gateway_client = GatewayClient()
