"""
Mock API constants and helpers.
"""
import asyncio
from typing import List, Type

from ...api.exceptions import DMSError

STATIC_OTP = "123456"
MOCK_TOKEN = "mock_token_12345"
DEFAULT_DELAY_MS = 1000
MOCK_USER_ID = "mock_user_123"

# Seed tags offered before any document has been tagged
DEFAULT_TAGS: List[str] = [
    "Important",
    "Work",
    "Personal",
    "Finance",
    "Health",
    "Legal",
    "Insurance",
    "Tax",
    "Contract",
    "Invoice",
    "Receipt",
    "Report",
    "Certificate",
    "License",
    "Passport",
]


async def mock_delay(ms: int = DEFAULT_DELAY_MS) -> None:
    """Simulate network latency."""
    if ms > 0:
        await asyncio.sleep(ms / 1000)


def create_mock_error(message: str, error_cls: Type[DMSError] = DMSError) -> DMSError:
    """Build the error a mock call raises, using the same classes as the real backend."""
    return error_cls(message)
