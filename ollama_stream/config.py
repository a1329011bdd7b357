"""
Configuration constants and Pydantic models for ollama-stream.
"""

import os
from typing import Optional

from pydantic import BaseModel, ConfigDict


# ─────────────────────────────────────────────────────────────────────
# DEFAULTS
# ─────────────────────────────────────────────────────────────────────

DEFAULT_HOSTNAME: str = "127.0.0.1"
DEFAULT_PORT: int = 11434
DEFAULT_TIMEOUT_SECONDS: float = 300.0  # generation on CPU can be slow


# ─────────────────────────────────────────────────────────────────────
# ENDPOINTS
# ─────────────────────────────────────────────────────────────────────

# target -> (method, path)
API_ENDPOINTS: dict[str, tuple[str, str]] = {
    "list": ("GET", "/api/tags"),
    "show": ("POST", "/api/show"),
    "generate": ("POST", "/api/generate"),
    "embed": ("POST", "/api/embeddings"),
    "create": ("POST", "/api/create"),
    "delete": ("DELETE", "/api/delete"),
    "pull": ("POST", "/api/pull"),
    "push": ("POST", "/api/push"),
    "copy": ("POST", "/api/copy"),
}


# ─────────────────────────────────────────────────────────────────────
# ENVIRONMENT LOADING
# ─────────────────────────────────────────────────────────────────────

def get_hostname() -> str:
    """
    Get the model server hostname from environment or default.

    Set OLLAMA_HOSTNAME in .env (default: 127.0.0.1).
    """
    value = os.environ.get("OLLAMA_HOSTNAME", "").strip()
    return value or DEFAULT_HOSTNAME


def get_port() -> int:
    """
    Get the model server port from environment or default.

    Set OLLAMA_PORT in .env (default: 11434).
    """
    try:
        return int(os.environ.get("OLLAMA_PORT", str(DEFAULT_PORT)))
    except ValueError:
        return DEFAULT_PORT


def get_timeout_seconds() -> float:
    """
    Get the per-request timeout in seconds.

    Set OLLAMA_TIMEOUT_SECONDS in .env (default: 300).
    """
    try:
        return float(os.environ.get("OLLAMA_TIMEOUT_SECONDS", str(DEFAULT_TIMEOUT_SECONDS)))
    except ValueError:
        return DEFAULT_TIMEOUT_SECONDS


# ─────────────────────────────────────────────────────────────────────
# REQUEST MODELS
# ─────────────────────────────────────────────────────────────────────

class RequestOptions(BaseModel):
    """Where and how to send one request."""
    hostname: str = DEFAULT_HOSTNAME
    port: int = DEFAULT_PORT
    method: str = "GET"
    path: str = "/"
    headers: dict[str, str] = {}

    @property
    def url(self) -> str:
        return f"http://{self.hostname}:{self.port}{self.path}"

    @classmethod
    def for_target(
        cls,
        target: str,
        hostname: Optional[str] = None,
        port: Optional[int] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> "RequestOptions":
        """Build options for a known endpoint, filling host/port from environment."""
        if target not in API_ENDPOINTS:
            raise ValueError(f"Unknown target: {target!r}")
        method, path = API_ENDPOINTS[target]
        return cls(
            hostname=hostname or get_hostname(),
            port=port if port is not None else get_port(),
            method=method,
            path=path,
            headers=dict(headers or {}),
        )


class GenerationOptions(BaseModel):
    """Model and sampling parameters passed through in the ``options`` field."""
    model_config = ConfigDict(extra="allow")

    seed: Optional[int] = None
    numa: Optional[bool] = None

    # Model options
    num_ctx: Optional[int] = None
    num_keep: Optional[int] = None
    num_batch: Optional[int] = None
    num_gqa: Optional[int] = None
    num_gpu: Optional[int] = None
    main_gpu: Optional[int] = None
    low_vram: Optional[bool] = None
    f16_kv: Optional[bool] = None
    logits_all: Optional[bool] = None
    vocab_only: Optional[bool] = None
    use_mmap: Optional[bool] = None
    use_mlock: Optional[bool] = None
    embedding_only: Optional[bool] = None
    rope_frequency_base: Optional[float] = None
    rope_frequency_scale: Optional[float] = None

    # Predict options
    num_predict: Optional[int] = None
    top_k: Optional[int] = None
    top_p: Optional[float] = None
    tfs_z: Optional[float] = None
    typical_p: Optional[float] = None
    repeat_last_n: Optional[int] = None
    temperature: Optional[float] = None
    repeat_penalty: Optional[float] = None
    presence_penalty: Optional[float] = None
    frequency_penalty: Optional[float] = None
    mirostat: Optional[int] = None
    mirostat_tau: Optional[float] = None
    mirostat_eta: Optional[float] = None
    penalize_newline: Optional[bool] = None
    stop: Optional[list[str]] = None

    num_thread: Optional[int] = None


class GenerateRequest(BaseModel):
    """Body for the generate target."""
    model: str
    prompt: str
    system: Optional[str] = None
    template: Optional[str] = None
    options: Optional[GenerationOptions] = None
    context: Optional[list[int]] = None


class EmbedRequest(BaseModel):
    """Body for the embed target."""
    model: str
    prompt: str


class CreateRequest(BaseModel):
    """Body for the create target."""
    name: str
    path: str


class NameRequest(BaseModel):
    """Body naming a single model (delete, pull, push, show)."""
    name: str


class CopyRequest(BaseModel):
    """Body for the copy target."""
    source: str
    destination: str


REQUEST_MODELS: dict[str, type[BaseModel]] = {
    "generate": GenerateRequest,
    "embed": EmbedRequest,
    "create": CreateRequest,
    "delete": NameRequest,
    "pull": NameRequest,
    "push": NameRequest,
    "copy": CopyRequest,
}

POST_TARGETS: frozenset[str] = frozenset(REQUEST_MODELS)
