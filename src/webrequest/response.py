r"""Response produced by an HTTP exchange.

Every exchange produces exactly one ``HttpResponse``. Negative status
codes mark failures synthesized on the client side (see
``webrequest.config``).
"""

from __future__ import annotations

__all__ = ["HttpResponse"]

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from webrequest.options import HttpRequestOptions


@dataclass
class HttpResponse:
    """Outcome of one HTTP exchange.

    Attributes:
        status: The HTTP status code, or a negative client-side failure code.
        message: Optional message, set on synthesized failures.
        headers: The parsed response headers. A header received more than
            once maps to the list of its values in arrival order.
        raw_data: The raw response body.
        text_data: The response body decoded as text, for textual and JSON
            content types.
        json_data: The parsed JSON response body, when the content type is
            JSON and automatic parsing is enabled.
        request_options: The options the request was made with.
    """

    status: int
    message: str | None = None
    headers: dict[str, str | list[str]] | None = None
    raw_data: bytes | None = None
    text_data: str | None = None
    json_data: Any = None
    request_options: HttpRequestOptions | None = None

    @property
    def is_synthesized(self) -> bool:
        """Whether the status is a client-side failure code."""
        return self.status < 0

    @classmethod
    def failure(
        cls, status: int, message: str, request_options: HttpRequestOptions | None = None
    ) -> HttpResponse:
        """Create a client-side failure response.

        Args:
            status: The negative failure code.
            message: A human-readable description of the failure.
            request_options: The options the request was made with.

        Returns:
            The failure response.

        Example:
            ```pycon
            >>> from webrequest.response import HttpResponse
            >>> response = HttpResponse.failure(-3, "Your request has timed out.")
            >>> response.is_synthesized
            True

            ```
        """
        return cls(status=status, message=message, request_options=request_options)
