# Copyright 2025 Canonical Ltd.
# See LICENSE file for licensing details.

"""Utility functions for Kubernetes API calls."""

import json
import logging
from typing import Any, Callable, Dict, Optional, Tuple, Type, Union

from lightkube.core.exceptions import ApiError
from tenacity import (
    Retrying,
    retry_if_exception_type,
    retry_if_result,
    stop_after_attempt,
    wait_fixed,
)

from .constants import K8S_CHECK_ATTEMPTS, K8S_CHECK_DELAY, K8S_CHECK_OBSERVATIONS

logger = logging.getLogger(__name__)


def api_error_code(ae: ApiError) -> Optional[int]:
    """Return the HTTP status code carried by a lightkube ApiError."""
    status = getattr(ae, "status", None)
    return getattr(status, "code", None)


def k8s_retry_check(
    check_func: Callable[[], None],
    *,
    retry_exceptions: Tuple[Type[BaseException], ...] = (),
    attempts: int = K8S_CHECK_ATTEMPTS,
    delay: float = K8S_CHECK_DELAY,
    min_successful: int = K8S_CHECK_OBSERVATIONS,
) -> None:
    """Retry a check function until it succeeds or the maximum number of attempts is reached.

    Args:
        check_func (Callable[[], None]): The function to check.
            Should raise an exception if the check fails.
        retry_exceptions (Tuple[Type[BaseException], ...]): Exceptions to retry on.
        attempts (int): Maximum number of attempts.
        delay (float): Delay between attempts in seconds.
        min_successful (int): Minimum number of successful observations before stopping retries.
    """
    observations = 0

    for attempt in Retrying(
        stop=stop_after_attempt(attempts),
        wait=wait_fixed(delay),
        retry=(
            retry_if_result(lambda obs: obs < min_successful)
            | retry_if_exception_type((ApiError,) + retry_exceptions)
        ),
        reraise=True,
    ):
        with attempt:
            check_func()
            observations += 1
        if not attempt.retry_state.outcome.failed:  # type: ignore
            attempt.retry_state.set_result(observations)


def load_patch(patch: Union[Dict[str, Any], bytes, str]) -> Dict[str, Any]:
    """Return a merge patch given as a dict or as JSON bytes or text.

    Raises:
        ValueError: If the patch is not a JSON object.
    """
    if isinstance(patch, (bytes, str)):
        try:
            patch = json.loads(patch)
        except json.JSONDecodeError as je:
            raise ValueError(f"Patch is not valid JSON: {je}") from je
    if not isinstance(patch, dict):
        raise ValueError("Patch must be a JSON object")
    return patch
