from urllib.parse import urlparse

import httpx

from config import settings
from exceptions import FileTooLargeError, URLFetchError

ALLOWED_SCHEMES = ("http", "https")


def _validate_scheme(url: str) -> None:
    scheme = urlparse(url).scheme.lower()
    if scheme not in ALLOWED_SCHEMES:
        raise URLFetchError(f"Unsupported URL scheme: '{scheme}'", url=url)


def _parse_content_length(response: httpx.Response, url: str) -> int | None:
    raw = response.headers.get("content-length")
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError:
        raise URLFetchError(f"Malformed Content-Length header: '{raw}'", url=url)


async def fetch_image(url: str) -> bytes:
    """Fetch image bytes from an http(s) URL with a size limit.

    Follows redirects manually (max url_fetch_max_redirects hops) and
    checks the scheme at each hop. Content-Length is checked for early
    rejection, then the actual body size.

    Args:
        url: http or https URL.

    Returns:
        Raw image bytes.

    Raises:
        URLFetchError: Fetch failed (timeout, non-2xx, redirect limit, bad scheme).
        FileTooLargeError: Response body exceeds max file size.
    """
    _validate_scheme(url)

    timeout = settings.url_fetch_timeout
    max_redirects = settings.url_fetch_max_redirects

    try:
        async with httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=False,
            verify=True,
        ) as client:
            current_url = url

            for _hop in range(max_redirects + 1):
                response = await client.get(current_url)

                if response.is_redirect:
                    if response.next_request is None:
                        raise URLFetchError(
                            "Redirect without Location header",
                            url=current_url,
                        )
                    redirect_url = str(response.next_request.url)
                    _validate_scheme(redirect_url)
                    current_url = redirect_url
                    continue

                if not response.is_success:
                    raise URLFetchError(
                        f"URL returned HTTP {response.status_code}",
                        url=url,
                        http_status=response.status_code,
                    )

                content_length = _parse_content_length(response, url)
                if content_length is not None and content_length > settings.max_file_size_bytes:
                    raise FileTooLargeError(
                        f"URL content too large: {content_length} bytes",
                        file_size=content_length,
                        limit=settings.max_file_size_bytes,
                    )

                data = response.content
                if len(data) > settings.max_file_size_bytes:
                    raise FileTooLargeError(
                        f"URL content exceeds {settings.max_file_size_mb} MB limit",
                        file_size=len(data),
                        limit=settings.max_file_size_bytes,
                    )

                return data

            raise URLFetchError(
                f"Too many redirects (>{max_redirects})",
                url=url,
            )

    except httpx.TimeoutException:
        raise URLFetchError(
            f"URL fetch timed out after {timeout}s",
            url=url,
        )
    except httpx.RequestError as e:
        raise URLFetchError(
            f"URL fetch failed: {e}",
            url=url,
        )
