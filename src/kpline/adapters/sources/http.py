"""HTTP feed source backed by httpx."""

import logging

import httpx

from kpline.core.errors import FeedFetchError

logger = logging.getLogger(__name__)

DEFAULT_NOWCAST_URL = "http://www-app3.gfz-potsdam.de/kp_index/Kp_ap_nowcast.txt"


class HttpFeedSource:
    """Implementation of FeedSourcePort that downloads the feed over HTTP.

    A single GET per ``fetch``; failures are reported, never retried.

    Args:
        url: Location of the feed text file.
        timeout: Request timeout in seconds.
        client: Optional preconfigured ``httpx.Client``. When omitted a
            client is created for each fetch and closed afterwards.
    """

    def __init__(
        self,
        url: str = DEFAULT_NOWCAST_URL,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.url = url
        self.timeout = timeout
        self._client = client

    def fetch(self) -> str:
        """Download the feed text.

        Raises:
            FeedFetchError: On transport errors or a non-success status.
        """
        logger.debug("Downloading feed from %s", self.url)
        try:
            if self._client is not None:
                response = self._client.get(self.url, timeout=self.timeout)
            else:
                with httpx.Client(timeout=self.timeout, follow_redirects=True) as client:
                    response = client.get(self.url)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise FeedFetchError(
                f"error while downloading '{self.url}': "
                f"status {exc.response.status_code}"
            ) from exc
        except httpx.HTTPError as exc:
            raise FeedFetchError(f"error while downloading '{self.url}': {exc}") from exc

        logger.debug("Downloaded %d bytes from %s", len(response.content), self.url)
        return response.text
