"""Settings for the pet site service, read from CDK context."""

import re
from dataclasses import dataclass
from typing import Optional, Tuple

from constructs import Node

SQS_FULL_ACCESS_ARN = "arn:aws:iam::aws:policy/AmazonSQSFullAccess"
SNS_FULL_ACCESS_ARN = "arn:aws:iam::aws:policy/AmazonSNSFullAccess"
START_EXECUTION_ACTION = "states:StartExecution"
PET_SITE_BUILD_CONTEXT = "../../petsite/petsite"
PET_SITE_REPOSITORY_NAME = "pet-site"

_IAM_ACTION = re.compile(r"^[a-z0-9-]+:[A-Za-z0-9*]+$")


def _as_bool(value) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes")
    return bool(value)


def _context_int(node: Node, key: str, default: int) -> int:
    value = node.try_get_context(key)
    return default if value is None else int(value)


@dataclass(frozen=True)
class PetSiteSettings:
    """Fixed identifiers granted to and built for the pet site."""

    sqs_policy_arn: str = SQS_FULL_ACCESS_ARN
    sns_policy_arn: str = SNS_FULL_ACCESS_ARN
    start_execution_action: str = START_EXECUTION_ACTION
    start_execution_resources: Tuple[str, ...] = ("*",)
    build_context: str = PET_SITE_BUILD_CONTEXT
    repository_name: str = PET_SITE_REPOSITORY_NAME
    require_task_role: bool = False

    def __post_init__(self):
        for name in ("sqs_policy_arn", "sns_policy_arn"):
            arn = getattr(self, name)
            if not arn or not arn.startswith("arn:"):
                raise ValueError(f"{name} must be an IAM policy ARN, got: {arn!r}")

        if not _IAM_ACTION.match(self.start_execution_action):
            raise ValueError(
                f"start_execution_action must look like 'service:Action', "
                f"got: {self.start_execution_action!r}"
            )

        if not self.start_execution_resources or not all(self.start_execution_resources):
            raise ValueError("start_execution_resources must name at least one resource")

        if not self.build_context:
            raise ValueError("build_context is required")
        if not self.repository_name:
            raise ValueError("repository_name is required")

    @classmethod
    def from_context(cls, node: Node) -> "PetSiteSettings":
        return cls(
            build_context=node.try_get_context("petsite_build_context") or PET_SITE_BUILD_CONTEXT,
            repository_name=node.try_get_context("petsite_repository_name") or PET_SITE_REPOSITORY_NAME,
            require_task_role=_as_bool(node.try_get_context("petsite_require_task_role")),
        )


@dataclass(frozen=True)
class ServiceSettings:
    """Sizing and toggles for the load-balanced Fargate service."""

    cpu: int = 1024
    memory_limit_mib: int = 2048
    desired_task_count: int = 2
    log_group_name: str = "/ecs/PetSite"
    health_check: Optional[str] = "/health/status"
    disable_service: bool = False
    disable_xray: bool = False

    def __post_init__(self):
        if self.cpu <= 0:
            raise ValueError(f"cpu must be positive, got: {self.cpu}")
        if self.memory_limit_mib <= 0:
            raise ValueError(f"memory_limit_mib must be positive, got: {self.memory_limit_mib}")
        if self.desired_task_count < 0:
            raise ValueError(
                f"desired_task_count must not be negative, got: {self.desired_task_count}"
            )
        if not self.log_group_name:
            raise ValueError("log_group_name is required")

    @classmethod
    def from_context(cls, node: Node) -> "ServiceSettings":
        defaults = cls()
        # an empty health check path disables the target group override
        health_check = node.try_get_context("petsite_health_check")
        if health_check is None:
            health_check = defaults.health_check
        return cls(
            cpu=_context_int(node, "petsite_cpu", defaults.cpu),
            memory_limit_mib=_context_int(node, "petsite_memory_mib", defaults.memory_limit_mib),
            desired_task_count=_context_int(
                node, "petsite_desired_count", defaults.desired_task_count
            ),
            log_group_name=node.try_get_context("petsite_log_group") or defaults.log_group_name,
            health_check=health_check or None,
            disable_service=_as_bool(node.try_get_context("petsite_disable_service")),
            disable_xray=_as_bool(node.try_get_context("petsite_disable_xray")),
        )
