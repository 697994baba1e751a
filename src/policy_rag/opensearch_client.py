"""OpenSearch client construction shared by the vector store and interaction log.

Supports basic auth against a self-hosted cluster and AWS SigV4 against
OpenSearch Service / Serverless (``aws`` extra).
"""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


def create_client(
    url: str = "http://127.0.0.1:9200",
    username: str | None = None,
    password: str | None = None,
    region: str = "us-east-1",
    aws_sigv4: bool = False,
    service: str = "es",
    timeout: int = 60,
) -> Any:
    """Build an ``opensearchpy.OpenSearch`` client for ``url``."""
    from opensearchpy import OpenSearch, RequestsHttpConnection

    parsed = urlparse(url)
    use_ssl = parsed.scheme == "https"
    host = {"host": parsed.hostname or "localhost", "port": parsed.port or (443 if use_ssl else 9200)}

    kwargs: dict[str, Any] = {
        "hosts": [host],
        "use_ssl": use_ssl,
        "verify_certs": use_ssl,
        "timeout": timeout,
    }

    if aws_sigv4:
        try:
            import boto3
            from requests_aws4auth import AWS4Auth
        except ImportError as exc:
            raise ImportError(
                "boto3 and requests-aws4auth required: pip install policy-rag[aws]"
            ) from exc

        credentials = boto3.Session().get_credentials()
        kwargs["http_auth"] = AWS4Auth(
            credentials.access_key,
            credentials.secret_key,
            region,
            service,
            session_token=credentials.token,
        )
        kwargs["connection_class"] = RequestsHttpConnection
    elif username:
        kwargs["http_auth"] = (username, password or "")

    logger.debug("Connecting to OpenSearch at %s:%s", host["host"], host["port"])
    return OpenSearch(**kwargs)
