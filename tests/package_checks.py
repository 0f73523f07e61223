from __future__ import annotations

import asyncio
import logging
import sys

import webrequest
from webrequest import HttpEvent, HttpRequestOptions

logger: logging.Logger = logging.getLogger(__name__)

# Use httpbin.org for real HTTP testing
HTTPBIN_URL = "https://httpbin.org"


def check_get() -> None:
    logger.info("Checking get...")
    response = asyncio.run(webrequest.request_async(f"{HTTPBIN_URL}/get"))
    assert response.status == 200
    assert response.json_data["url"] == f"{HTTPBIN_URL}/get"


def check_post() -> None:
    logger.info("Checking post...")
    client = webrequest.HttpClient()
    progress = []
    client.event_manager.add_event_listener(
        HttpEvent.UPLOAD_PROGRESS_CHANGE, lambda arguments: progress.append(arguments.progress)
    )
    response = asyncio.run(
        client.send_request_async(
            HttpRequestOptions(url=f"{HTTPBIN_URL}/post", method="POST", body={"key": "value"})
        )
    )
    assert response.status == 200
    assert response.json_data["json"] == {"key": "value"}
    assert progress[-1] == 100.0


def check_timeout() -> None:
    logger.info("Checking timeout...")
    response = asyncio.run(
        webrequest.request_async(HttpRequestOptions(url=f"{HTTPBIN_URL}/delay/5", timeout=0.5))
    )
    assert response.status == -3


def main() -> None:
    r"""Run all package checks to validate installation and
    functionality."""
    try:
        assert webrequest.is_supported()
        check_get()
        check_post()
        check_timeout()

        logger.info("✅ All package checks passed successfully!")
    except Exception:
        logger.exception("❌ Package check failed")
        sys.exit(1)


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    main()
