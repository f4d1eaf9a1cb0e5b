# Copyright Amazon.com, Inc. or its affiliates. All Rights Reserved.
# SPDX-License-Identifier: MIT-0

import random
import time
from typing import Callable, TypeVar

from aws_lambda_powertools import Logger
from botocore.exceptions import ClientError

logger = Logger(child=True)

T = TypeVar("T")

MAX_ATTEMPTS = 10
STARTING_DELAY_SECONDS = 0.15
MAX_DELAY_SECONDS = 10.0
DELAY_MULTIPLIER = 2

THROTTLING_ERROR_CODES = frozenset(
    [
        "ConcurrentModificationException",
        "InternalErrorException",
        "LimitExceededException",
        "RequestLimitExceeded",
        "ServiceException",
        "Throttling",
        "ThrottlingException",
        "TooManyRequestsException",
    ]
)


def is_throttling_error(error: Exception) -> bool:
    if not isinstance(error, ClientError):
        return False
    return error.response.get("Error", {}).get("Code", "") in THROTTLING_ERROR_CODES


def compute_delay(attempt: int) -> float:
    """
    Full jitter: a random delay between zero and the exponential ceiling for `attempt`.
    `attempt` is zero based, the first retry waits up to STARTING_DELAY_SECONDS.
    """
    ceiling = min(MAX_DELAY_SECONDS, STARTING_DELAY_SECONDS * DELAY_MULTIPLIER**attempt)
    return random.uniform(0, ceiling)


def throttling_back_off(request: Callable[[], T], max_attempts: int = MAX_ATTEMPTS) -> T:
    """
    Calls `request` until it succeeds, retrying only on rate-limit errors.
    Any other error, or the last throttling error once `max_attempts` is reached, is raised unchanged.
    """
    attempt = 0
    while True:
        try:
            return request()
        except ClientError as error:
            attempt += 1
            if not is_throttling_error(error) or attempt >= max_attempts:
                raise
            delay = compute_delay(attempt - 1)
            logger.warning(
                "Throttled, retrying",
                extra={
                    "error_code": error.response["Error"]["Code"],
                    "attempt": attempt,
                    "delay_seconds": delay,
                },
            )
            time.sleep(delay)
