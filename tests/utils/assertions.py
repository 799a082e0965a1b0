"""Test utilities for asserting API error responses and message codes."""

from typing import Any

from httpx import Response

from src.api.core.messages import MessageCode, get_default_message


def assert_error_response(
    response: Response,
    expected_message_code: MessageCode,
    expected_status: int,
    expected_message: str | None = None,
) -> dict[str, Any]:
    """Assert that response is an error with expected message code.

    Returns:
        Response body for further assertions
    """
    assert response.status_code == expected_status, (
        f"Expected status {expected_status}, got {response.status_code}. "
        f"Response: {response.text}"
    )

    json_data = response.json()

    assert json_data.get("message_code") == expected_message_code.value, (
        f"Expected message_code {expected_message_code.value}, "
        f"got {json_data.get('message_code')}"
    )
    assert json_data.get("error") == (
        expected_message or get_default_message(expected_message_code)
    )

    return json_data
