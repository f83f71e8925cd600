"""Configuration management for storefs."""

import os
from typing import Optional, Tuple

from dotenv import load_dotenv

# Load environment variables
load_dotenv()


def _env_choice(name: str, default: str, allowed: Tuple[str, ...]) -> str:
    value = os.getenv(name, default)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized not in allowed:
        return default
    return normalized


def _env_optional(*names: str) -> Optional[str]:
    for name in names:
        value = os.getenv(name)
        if value and value.strip():
            return value.strip()
    return None


# Backend selection
STORAGE_PROVIDER = _env_choice("STORAGE_PROVIDER", "local", ("local", "s3"))

# S3 configuration (used when STORAGE_PROVIDER=s3)
S3_REGION = _env_optional("S3_REGION", "AWS_REGION")
S3_BUCKET = _env_optional("S3_BUCKET")
# Only set for S3-compatible services; public URLs keep the AWS host layout
S3_ENDPOINT_URL = _env_optional("S3_ENDPOINT_URL")
S3_HOST_PREFIX = os.getenv("S3_HOST_PREFIX", "s3")
S3_DOMAIN = os.getenv("S3_DOMAIN", "amazonaws.com")
# Static keys are optional; without them boto3 falls back to its default chain
AWS_ACCESS_KEY_ID = _env_optional("AWS_ACCESS_KEY_ID")

# Logging
LOG_LEVEL = os.getenv("STOREFS_LOG_LEVEL", "INFO").strip().upper()
