"""Resolves where and as whom the DynamoDB client connects.

Settings carry a region, an optional local endpoint (DynamoDB Local) and
an optional role per service. ``SessionProvider`` turns them into a
``ClientTarget`` and hands it to ``executor.get_boto3_client``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import structlog

from infrastructure.clients.aws import executor

logger = structlog.get_logger()


@dataclass(frozen=True)
class ClientTarget:
    """Session and client kwargs for one boto3 client."""

    service_name: str
    session_config: Dict[str, str] = field(default_factory=dict)
    client_config: Dict[str, str] = field(default_factory=dict)
    role_arn: Optional[str] = None

    @property
    def is_local(self) -> bool:
        return "endpoint_url" in self.client_config


class SessionProvider:
    """Builds boto3 clients for the configured region, endpoint and roles.

    Args:
        region: AWS region (e.g. 'ca-central-1')
        service_role_map: Role ARN to assume per service; blank entries are ignored
        endpoint_url: Local endpoint, e.g. http://localhost:8000
    """

    def __init__(
        self,
        region: Optional[str] = None,
        service_role_map: Optional[Mapping[str, str]] = None,
        endpoint_url: Optional[str] = None,
    ) -> None:
        self.region = region
        self.endpoint_url = endpoint_url
        self._roles = {
            service: arn for service, arn in (service_role_map or {}).items() if arn
        }

    def target(self, service_name: str, role_arn: Optional[str] = None) -> ClientTarget:
        """Resolve the client target; an explicit ``role_arn`` wins over the map."""
        session_config: Dict[str, str] = {}
        client_config: Dict[str, str] = {}
        if self.region:
            session_config["region_name"] = self.region
            client_config["region_name"] = self.region
        if self.endpoint_url:
            client_config["endpoint_url"] = self.endpoint_url
        return ClientTarget(
            service_name=service_name,
            session_config=session_config,
            client_config=client_config,
            role_arn=role_arn or self._roles.get(service_name),
        )

    def get_boto3_client(self, service_name: str, role_arn: Optional[str] = None) -> Any:
        target = self.target(service_name, role_arn)
        logger.info(
            "aws_client_target_resolved",
            service=service_name,
            region=self.region,
            local=target.is_local,
            assumes_role=target.role_arn is not None,
        )
        return executor.get_boto3_client(
            service_name,
            session_config=target.session_config,
            client_config=target.client_config,
            role_arn=target.role_arn,
        )
