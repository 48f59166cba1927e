"""Google Cloud Storage configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_var
from .http_resilience import RateLimit, ResilienceConfig, RetryPolicy

GCS_BASE_URL = "https://storage.googleapis.com/storage/v1/"
GCS_TIMEOUT_SECONDS = 20.0
GCS_PAGE_SIZE = 1000


@dataclass(frozen=True, slots=True)
class GcsConfig:
    bucket: str
    resilience: ResilienceConfig
    access_token: str | None = None
    page_size: int = GCS_PAGE_SIZE


def get_gcs_config(*, resilience: ResilienceConfig | None = None) -> GcsConfig:
    return GcsConfig(
        bucket=require_env_var("GCS_BUCKET"),
        access_token=optional_env_var("GCS_ACCESS_TOKEN"),
        resilience=resilience
        or ResilienceConfig(
            name="gcs",
            base_url=GCS_BASE_URL,
            timeout_seconds=GCS_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=3),
            ratelimit=RateLimit(max_calls=20, per_seconds=1.0),
        ),
    )
