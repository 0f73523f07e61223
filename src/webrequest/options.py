r"""Options describing a single HTTP request.

This module provides the immutable ``HttpRequestOptions`` dataclass that
is bound to a ``HttpWebRequest`` for the duration of one exchange.
"""

from __future__ import annotations

__all__ = ["HttpRequestOptions"]

from dataclasses import dataclass, fields, replace
from typing import TYPE_CHECKING, Any

from webrequest.config import DEFAULT_METHOD, DEFAULT_TIMEOUT
from webrequest.utils.validation import validate_method, validate_timeout, validate_url

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True)
class HttpRequestOptions:
    """Options for one HTTP request.

    Args:
        url: The request URL.
        method: The HTTP method. Default is "GET".
        timeout: Maximum seconds the whole exchange may take before it is
            terminated. Must be >= 0. Default is 0, meaning no timeout.
        headers: Optional request headers. Names are case-insensitive.
        body: Optional request body. A mapping, list or tuple is serialized
            as JSON when ``automatic_json_request_body_parsing`` is enabled.
            ``bytes``, ``str``, ``FormData``, ``httpx.QueryParams``, file
            objects and byte iterators are sent as they are. Numbers and
            booleans are sent as text.
        allow_credentials_on_cross_site_requests: Whether credentials may be
            sent on cross-site requests. Default is False.
        automatic_json_request_body_parsing: Whether a structured body is
            serialized as JSON. Default is True.
        automatic_json_response_body_parsing: Whether a JSON response body is
            parsed. Default is True.
        additional_data: Optional data passed down to event listeners.
        request_tags: Optional tags passed down to event listeners and logs.

    Raises:
        ValueError: If url, method or timeout are invalid.

    Example:
        ```pycon
        >>> from webrequest.options import HttpRequestOptions
        >>> options = HttpRequestOptions.from_value("https://api.example.com/data")
        >>> options.method
        'GET'
        >>> post = options.merge(method="POST", body={"key": "value"})
        >>> post.method
        'POST'
        >>> options.method  # Original unchanged
        'GET'

        ```
    """

    url: str
    method: str = DEFAULT_METHOD
    timeout: float = DEFAULT_TIMEOUT
    headers: Mapping[str, str] | None = None
    body: Any = None
    allow_credentials_on_cross_site_requests: bool = False
    automatic_json_request_body_parsing: bool = True
    automatic_json_response_body_parsing: bool = True
    additional_data: Mapping[str, Any] | None = None
    request_tags: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        validate_url(self.url)
        validate_method(self.method)
        validate_timeout(self.timeout)
        if not isinstance(self.request_tags, tuple):
            object.__setattr__(self, "request_tags", tuple(self.request_tags))

    @classmethod
    def from_value(cls, options: str | HttpRequestOptions) -> HttpRequestOptions:
        """Normalize a bare URL or existing options into options.

        Args:
            options: A URL string or an ``HttpRequestOptions`` instance.

        Returns:
            ``options`` unchanged if it is already an ``HttpRequestOptions``,
            otherwise new options targeting the given URL.
        """
        if isinstance(options, HttpRequestOptions):
            return options
        return cls(url=options)

    def merge(self, **overrides: Any) -> HttpRequestOptions:
        """Create new options with the given fields overridden.

        Only non-None override values are applied.
        """
        filtered_overrides = {k: v for k, v in overrides.items() if v is not None}
        return replace(self, **filtered_overrides)

    def to_dict(self) -> dict[str, Any]:
        """Convert the options to a dictionary."""
        return {f.name: getattr(self, f.name) for f in fields(self)}
