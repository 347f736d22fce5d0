"""The pet site front end: ECS service with queue, topic and workflow access."""

import logging
from dataclasses import dataclass
from typing import Optional

from aws_cdk import aws_ecs as ecs, aws_iam as iam
from constructs import Construct

from infrastructure.services.ecs_service import EcsService, EcsServiceProps
from infrastructure.settings import PetSiteSettings

logger = logging.getLogger(__name__)


class MissingTaskRoleError(RuntimeError):
    """Raised when the task role is absent and settings require one."""


@dataclass(frozen=True)
class ContainerImageSpec:
    """Build context and repository name for an image built from local source."""

    directory: str
    repository_name: str

    def to_container_image(self) -> ecs.ContainerImage:
        return ecs.ContainerImage.from_asset(
            self.directory,
            asset_name=self.repository_name,
        )


def pet_site_image(settings: Optional[PetSiteSettings] = None) -> ContainerImageSpec:
    settings = settings or PetSiteSettings()
    return ContainerImageSpec(
        directory=settings.build_context,
        repository_name=settings.repository_name,
    )


def attach_pet_site_policies(
    scope: Construct,
    role: Optional[iam.IRole],
    settings: Optional[PetSiteSettings] = None,
) -> None:
    """Grant SQS and SNS full access and Step Functions start to ``role``.

    An absent role is skipped with a warning and nothing is attached, unless
    ``settings.require_task_role`` is set, in which case it is an error.
    """
    settings = settings or PetSiteSettings()

    if role is None:
        if settings.require_task_role:
            raise MissingTaskRoleError(
                f"{scope.node.path} has no task role to attach pet site policies to"
            )
        logger.warning("No task role on %s; pet site policies not attached", scope.node.path)
        return

    role.add_managed_policy(
        iam.ManagedPolicy.from_managed_policy_arn(scope, "AmazonSQSFullAccess", settings.sqs_policy_arn)
    )
    logger.debug("Attached %s", settings.sqs_policy_arn)

    role.add_managed_policy(
        iam.ManagedPolicy.from_managed_policy_arn(scope, "AmazonSNSFullAccess", settings.sns_policy_arn)
    )
    logger.debug("Attached %s", settings.sns_policy_arn)

    role.add_to_principal_policy(
        iam.PolicyStatement(
            effect=iam.Effect.ALLOW,
            actions=[settings.start_execution_action],
            resources=list(settings.start_execution_resources),
        )
    )
    logger.debug("Allowed %s", settings.start_execution_action)


class PetSiteService(EcsService):
    """Pet site ECS service, built from the local petsite source tree."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        props: EcsServiceProps,
        settings: Optional[PetSiteSettings] = None,
    ) -> None:
        # create_container_image runs inside the base constructor
        self._settings = settings or PetSiteSettings()
        super().__init__(scope, construct_id, props)

        attach_pet_site_policies(self, self.task_definition.task_role, self._settings)

    @property
    def settings(self) -> PetSiteSettings:
        return self._settings

    def create_container_image(self) -> ecs.ContainerImage:
        return pet_site_image(self._settings).to_container_image()
