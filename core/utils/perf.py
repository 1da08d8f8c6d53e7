import time
import functools
import logging

logger = logging.getLogger(__name__)


def profile_stage(stage_name: str):
    """Decorator logging duration and outcome of an async onboarding stage."""
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            t0 = time.perf_counter()
            outcome = "error"
            try:
                result = await func(*args, **kwargs)
                outcome = "ok"
                return result
            finally:
                elapsed = (time.perf_counter() - t0) * 1000
                logger.info(f"[PERF] {stage_name}: {elapsed:.1f} ms ({outcome})")
        return wrapper
    return decorator
