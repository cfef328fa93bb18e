"""Base AWS client utilities for infrastructure clients.

Provides `get_boto3_client`. This module intentionally avoids reading
settings at import time and accepts configuration via parameters.
"""

from typing import Any, Dict, Optional

import boto3  # type: ignore
from botocore.client import BaseClient  # type: ignore
from botocore.config import Config  # type: ignore
import structlog

logger = structlog.get_logger()

# Retries are owned by RetryExecutor; the SDK makes exactly one attempt per call
SINGLE_ATTEMPT_CONFIG = Config(retries={"total_max_attempts": 1, "mode": "standard"})


def get_boto3_client(
    service_name: str,
    session_config: Optional[Dict[str, Any]] = None,
    client_config: Optional[Dict[str, Any]] = None,
    role_arn: Optional[str] = None,
    session_name: str = "InfraClientSession",
) -> BaseClient:
    """Create a boto3 client for the given service.

    Args:
        service_name: AWS service name (e.g., 'dynamodb')
        session_config: Optional boto3 session kwargs (e.g., region_name)
        client_config: Optional client kwargs (e.g., endpoint_url)
        role_arn: Optional role to assume for cross-account access
        session_name: Name for assumed role session

    Returns:
        botocore client instance
    """
    session_config = session_config or {}
    client_config = dict(client_config or {})
    client_config.setdefault("config", SINGLE_ATTEMPT_CONFIG)

    if role_arn:
        sts = boto3.client("sts", **session_config)
        assumed = sts.assume_role(RoleArn=role_arn, RoleSessionName=session_name)
        creds = assumed["Credentials"]
        session = boto3.Session(
            aws_access_key_id=creds["AccessKeyId"],
            aws_secret_access_key=creds["SecretAccessKey"],
            aws_session_token=creds["SessionToken"],
            **session_config,
        )
    else:
        session = boto3.Session(**session_config)

    logger.debug(
        "boto3_client_created",
        service=service_name,
        assumed_role=bool(role_arn),
    )
    return session.client(service_name, **client_config)
