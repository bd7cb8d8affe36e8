"""
S3 client construction for artifact_prune.

Works against AWS S3 and any S3-compatible store (OSS, R2, MinIO) through
endpoint_url.
"""

import boto3
from botocore.config import Config

from .config import PruneConfig, RemoteCredentials

# Leave headroom over the delete workers for the listing call.
POOL_HEADROOM = 2


def build_client_config(config: PruneConfig) -> Config:
    """Return the botocore Config used for the prune client."""
    return Config(
        signature_version="s3v4",
        max_pool_connections=config.max_workers + POOL_HEADROOM,
    )


def create_s3_client(config: PruneConfig, credentials: RemoteCredentials):
    """
    Create a boto3 S3 client with explicit credentials.

    Args:
        config: Run configuration (region, endpoint, worker count)
        credentials: Access key pair and optional session token

    Returns:
        boto3.client: Configured S3 client
    """
    client_kwargs = {
        "aws_access_key_id": credentials.access_key_id,
        "aws_secret_access_key": credentials.secret_access_key,
        "config": build_client_config(config),
    }

    if credentials.session_token:
        client_kwargs["aws_session_token"] = credentials.session_token

    if config.region is not None:
        client_kwargs["region_name"] = config.region

    if config.endpoint_url is not None:
        client_kwargs["endpoint_url"] = config.endpoint_url

    return boto3.client("s3", **client_kwargs)
