"""HTTP embedding-server provider.

Speaks the common JSON shapes: OpenAI-style `{"data": [{"embedding": [...]}]}`,
`{"embeddings": [[...]]}` or `{"embedding": [...]}`.
"""

from __future__ import annotations

import asyncio
import json
import socket
from urllib import error as urllib_error
from urllib import parse as urllib_parse
from urllib import request as urllib_request

from patternscout.core.console import get_logger
from patternscout.core.result import EmbeddingError

logger = get_logger(__name__)


def normalize_server_url(raw: str | None) -> str | None:
    """Normalize a server URL, adding http:// if needed."""
    if not raw:
        return None
    cleaned = raw.strip()
    if not cleaned:
        return None
    if "://" not in cleaned:
        cleaned = f"http://{cleaned}"
    parsed = urllib_parse.urlparse(cleaned)
    if not parsed.netloc and parsed.path:
        parsed = urllib_parse.urlparse(f"http://{parsed.path}")
    return parsed.geturl() if parsed.netloc else None


def _host_port(url: str) -> tuple[str, int] | None:
    parsed = urllib_parse.urlparse(url)
    host = parsed.hostname
    if host is None:
        return None
    port = parsed.port
    if port is None:
        if parsed.scheme == "https":
            port = 443
        elif parsed.scheme == "http":
            port = 80
        else:
            return None
    return host, port


def _check_port(host: str, port: int, timeout: float = 1.0) -> bool:
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


def _post_json(
    url: str, payload: dict[str, object], timeout: float = 2.0
) -> dict[str, object] | None:
    """POST JSON to a URL and return the decoded response."""
    data = json.dumps(payload, ensure_ascii=True).encode("utf-8")
    req = urllib_request.Request(url, data=data, headers={"Content-Type": "application/json"})
    try:
        with urllib_request.urlopen(req, timeout=timeout) as resp:
            raw = resp.read()
    except (
        urllib_error.HTTPError,
        urllib_error.URLError,
        TimeoutError,
        OSError,
        ValueError,
    ) as exc:
        logger.debug("Embedding HTTP request failed: %s", exc)
        return None

    try:
        parsed = json.loads(raw.decode("utf-8"))
    except json.JSONDecodeError as exc:
        logger.debug("Embedding HTTP response parse failed: %s", exc)
        return None
    return parsed if isinstance(parsed, dict) else None


def extract_embeddings(payload: dict[str, object]) -> list[list[float]] | None:
    """Extract embedding vectors from an API response."""
    candidates: list[list[float]] = []
    data = payload.get("data")
    if isinstance(data, list):
        for item in data:
            if isinstance(item, dict) and isinstance(item.get("embedding"), list):
                candidates.append([float(val) for val in item["embedding"]])
    embeddings = payload.get("embeddings")
    if not candidates and isinstance(embeddings, list):
        for vector in embeddings:
            if isinstance(vector, list):
                candidates.append([float(val) for val in vector])
    single = payload.get("embedding")
    if not candidates and isinstance(single, list):
        candidates.append([float(val) for val in single])
    return candidates or None


class RemoteEmbeddingProvider:
    """Embeds text by POSTing to an embedding server."""

    def __init__(self, server_url: str, model_name: str, timeout: float = 2.0) -> None:
        normalized = normalize_server_url(server_url)
        if normalized is None:
            raise ValueError(f"Invalid embedding server URL: {server_url!r}")
        self.server_url = normalized
        self.model_name = model_name
        self.timeout = timeout
        self._available: bool | None = None

    @property
    def name(self) -> str:
        return f"remote:{self.server_url}"

    def is_ready(self) -> bool:
        if self._available is None:
            host_port = _host_port(self.server_url)
            self._available = host_port is not None and _check_port(*host_port)
        return self._available

    async def embed(self, text: str) -> list[float]:
        payload: dict[str, object] = {"input": [text], "model": self.model_name}
        response = await asyncio.to_thread(_post_json, self.server_url, payload, self.timeout)
        if response is None:
            self._available = False
            raise EmbeddingError("Embedding server request failed", context={"url": self.server_url})

        vectors = extract_embeddings(response)
        if not vectors or not vectors[0]:
            raise EmbeddingError(
                "Embedding server returned no embeddings", context={"url": self.server_url}
            )
        self._available = True
        return vectors[0]


__all__ = ["RemoteEmbeddingProvider", "extract_embeddings", "normalize_server_url"]
