from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import boto3
from botocore.client import BaseClient

from src.adapters.config import env_bool, env_str

if TYPE_CHECKING:
    from mypy_boto3_s3 import S3Client
else:
    S3Client = BaseClient  # type: ignore[misc,assignment]

LOCALSTACK_DEFAULT_ENDPOINT = "http://localhost:4566"


@dataclass(frozen=True, slots=True)
class AwsRuntimeConfig:
    """Where boto3 should send requests: real AWS or LocalStack.

    Env vars:
      - AWS_REGION (default: ap-southeast-2)
      - ENDPOINT_URL: explicit endpoint, wins over everything else
      - USE_LOCALSTACK + LOCALSTACK_ENDPOINT_URL: fallback LocalStack endpoint
    """

    use_localstack: bool
    region: str
    endpoint_url: str | None

    @staticmethod
    def from_env() -> "AwsRuntimeConfig":
        return AwsRuntimeConfig(
            use_localstack=env_bool("USE_LOCALSTACK", False),
            region=env_str("AWS_REGION") or "ap-southeast-2",
            endpoint_url=env_str("ENDPOINT_URL"),
        )

    def resolved_endpoint_url(self) -> str | None:
        if self.endpoint_url:
            return self.endpoint_url
        if self.use_localstack:
            return os.getenv("LOCALSTACK_ENDPOINT_URL", LOCALSTACK_DEFAULT_ENDPOINT)
        return None

    def client_kwargs(self) -> dict[str, Any]:
        return {
            "region_name": self.region,
            "endpoint_url": self.resolved_endpoint_url(),
        }


def s3_client() -> S3Client:
    """S3 client for the GTFS archive backup bucket."""

    cfg = AwsRuntimeConfig.from_env()
    return boto3.session.Session().client("s3", **cfg.client_kwargs())
