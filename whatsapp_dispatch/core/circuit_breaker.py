import pybreaker
from whatsapp_dispatch.core.config import settings
import logging
from typing import Callable
from functools import wraps

logger = logging.getLogger(__name__)


# --- Circuit Breaker Listener ---
class BreakerListener(pybreaker.CircuitBreakerListener):
    """Logs circuit breaker state changes."""

    def state_changed(self, breaker: pybreaker.CircuitBreaker, old_state, new_state):
        logger.warning(
            f"⚡ CIRCUIT BREAKER: '{breaker.name}' changed from "
            f"'{getattr(old_state, 'name', old_state)}' → "
            f"'{getattr(new_state, 'name', new_state)}' "
            f"(Reset in {breaker.reset_timeout}s)"
        )

    def failure(self, breaker: pybreaker.CircuitBreaker, exception: Exception):
        """Called when a protected call fails."""
        logger.error(
            f"❌ Circuit breaker '{breaker.name}' failure: {exception} "
            f"(Failures: {breaker.fail_counter}/{breaker.fail_max})"
        )


# --- Global Circuit Breaker Instances ---

# WhatsApp gateway breaker (outbound template sends)
gateway_breaker = pybreaker.CircuitBreaker(
    fail_max=settings.CIRCUIT_BREAKER_MAX_FAILURES,
    reset_timeout=settings.CIRCUIT_BREAKER_RESET_TIMEOUT,
    name="WhatsApp Gateway",
    listeners=[BreakerListener()],
)

# Redis Breaker (approval records & delivery log)
redis_breaker = pybreaker.CircuitBreaker(
    fail_max=5,
    reset_timeout=20,  # Shorter timeout for cache
    name="Redis",
    listeners=[BreakerListener()],
)


# --- Async Circuit Breaker Wrapper ---
def async_circuit_breaker(breaker: pybreaker.CircuitBreaker):
    """
    Decorator to apply circuit breaker pattern to async functions.

    Raises pybreaker.CircuitBreakerError without calling the function
    while the breaker is open.

    Usage:
        @async_circuit_breaker(gateway_breaker)
        async def post_template(body: dict):
            ...
    """

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            with breaker.calling():
                return await func(*args, **kwargs)

        return wrapper

    return decorator


# --- Status Helpers ---

# Keys as reported under `circuitBreakers` in the health report
BREAKERS = {"gateway": gateway_breaker, "redis": redis_breaker}


def get_breaker_status(breaker: pybreaker.CircuitBreaker) -> dict:
    return {
        "name": breaker.name,
        "state": breaker.current_state,
        "fail_counter": breaker.fail_counter,
        "fail_max": breaker.fail_max,
        "reset_timeout": breaker.reset_timeout,
    }


def get_all_breakers_status() -> dict:
    """Snapshot of every breaker, keyed by dependency."""
    return {key: get_breaker_status(breaker) for key, breaker in BREAKERS.items()}


def reset_all_breakers():
    """Force every breaker closed (operator action; also used between tests)."""
    for breaker in BREAKERS.values():
        try:
            breaker.close()
            logger.info(f"🔄 Circuit breaker '{breaker.name}' manually reset")
        except Exception as e:
            logger.error(f"❌ Failed to reset circuit breaker '{breaker.name}': {e}")
