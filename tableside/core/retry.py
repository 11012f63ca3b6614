import logging
import time
from typing import Callable, TypeVar

from tableside.core.errors import TransientError

logger = logging.getLogger(__name__)

T = TypeVar("T")


def retry_read(
    fn: Callable[[], T],
    *,
    retry_on: tuple[type[BaseException], ...],
    attempts: int = 3,
    base_delay: float = 0.2,
    description: str = "read",
) -> T:
    """
    Run a read with exponential backoff (base_delay, 2x, 4x, ...).

    Only meant for reads: mutations go through once so a retry can never
    duplicate an order or a cart line. When every attempt fails the last
    error is wrapped in TransientError.
    """
    for attempt in range(1, attempts + 1):
        try:
            return fn()
        except retry_on as e:
            if attempt == attempts:
                logger.error(f"❌ {description} failed after {attempts} attempts: {e}")
                raise TransientError(f"{description} is temporarily unavailable") from e
            delay = base_delay * (2 ** (attempt - 1))
            logger.warning(f"⚠️ {description} failed ({attempt}/{attempts}): {e}. Retrying in {delay:.2f}s")
            time.sleep(delay)
    raise TransientError(f"{description} is temporarily unavailable")  # attempts < 1
