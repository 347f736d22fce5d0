"""Base construct for the load-balanced Fargate services of the pet store."""

import logging
from dataclasses import dataclass
from typing import Optional

from aws_cdk import (
    RemovalPolicy,
    aws_ec2 as ec2,
    aws_ecs as ecs,
    aws_ecs_patterns as ecs_patterns,
    aws_iam as iam,
    aws_logs as logs,
)
from constructs import Construct

logger = logging.getLogger(__name__)

EXECUTION_ROLE_ACTIONS = [
    "ecr:GetAuthorizationToken",
    "ecr:BatchCheckLayerAvailability",
    "ecr:GetDownloadUrlForLayer",
    "ecr:BatchGetImage",
    "logs:CreateLogGroup",
    "logs:DescribeLogStreams",
    "logs:CreateLogStream",
    "logs:DescribeLogGroups",
    "logs:PutLogEvents",
    "xray:PutTraceSegments",
    "xray:PutTelemetryRecords",
    "xray:GetSamplingRules",
    "xray:GetSamplingTargets",
    "xray:GetSamplingStatisticSummaries",
    "ssm:GetParameters",
]

TASK_EXECUTION_POLICY_ARN = "arn:aws:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy"


@dataclass
class EcsServiceProps:
    cpu: int
    memory_limit_mib: int
    log_group_name: str
    desired_task_count: int
    region: str
    cluster: Optional[ecs.ICluster] = None
    security_group: Optional[ec2.ISecurityGroup] = None
    health_check: Optional[str] = None
    disable_service: bool = False
    disable_xray: bool = False


class EcsService(Construct):
    """Fargate task definition plus an optional public ALB service.

    Subclasses provide the application image through ``create_container_image``.
    """

    def __init__(self, scope: Construct, construct_id: str, props: EcsServiceProps) -> None:
        super().__init__(scope, construct_id)

        log_group = logs.LogGroup(
            self,
            "ecs-log-group",
            log_group_name=props.log_group_name,
            removal_policy=RemovalPolicy.DESTROY,
        )
        log_driver = ecs.AwsLogDriver(stream_prefix="logs", log_group=log_group)

        task_role = iam.Role(
            self,
            "taskRole",
            assumed_by=iam.ServicePrincipal("ecs-tasks.amazonaws.com"),
        )

        self.task_definition = ecs.FargateTaskDefinition(
            self,
            "taskDefinition",
            cpu=props.cpu,
            memory_limit_mib=props.memory_limit_mib,
            task_role=task_role,
        )
        self.task_definition.add_to_execution_role_policy(
            iam.PolicyStatement(
                effect=iam.Effect.ALLOW,
                actions=EXECUTION_ROLE_ACTIONS,
                resources=["*"],
            )
        )

        task_role.add_managed_policy(
            iam.ManagedPolicy.from_managed_policy_arn(
                self, "AmazonECSTaskExecutionRolePolicy", TASK_EXECUTION_POLICY_ARN
            )
        )
        task_role.add_managed_policy(
            iam.ManagedPolicy.from_aws_managed_policy_name("AWSXrayWriteOnlyAccess")
        )

        self.container = self.task_definition.add_container(
            "container",
            image=self.create_container_image(),
            memory_limit_mib=512,
            cpu=256,
            logging=log_driver,
            environment={"AWS_REGION": props.region},
        )
        self.container.add_port_mappings(
            ecs.PortMapping(container_port=80, protocol=ecs.Protocol.TCP)
        )

        if not props.disable_xray:
            self._add_xray_daemon(log_driver)

        self.service = None
        if not props.disable_service:
            security_groups = [props.security_group] if props.security_group else None
            self.service = ecs_patterns.ApplicationLoadBalancedFargateService(
                self,
                "ecs-service",
                cluster=props.cluster,
                task_definition=self.task_definition,
                public_load_balancer=True,
                desired_count=props.desired_task_count,
                listener_port=80,
                security_groups=security_groups,
            )
            if props.health_check:
                self.service.target_group.configure_health_check(path=props.health_check)

        logger.info(
            "Defined ECS service %s (service=%s, xray=%s)",
            self.node.path,
            not props.disable_service,
            not props.disable_xray,
        )

    def _add_xray_daemon(self, log_driver: ecs.LogDriver) -> None:
        xray = self.task_definition.add_container(
            "xray-daemon",
            image=ecs.ContainerImage.from_registry("amazon/aws-xray-daemon:latest"),
            memory_limit_mib=256,
            cpu=32,
            essential=True,
            logging=log_driver,
        )
        xray.add_port_mappings(
            ecs.PortMapping(container_port=2000, protocol=ecs.Protocol.UDP)
        )

    def create_container_image(self) -> ecs.ContainerImage:
        raise NotImplementedError(
            f"{type(self).__name__} must implement create_container_image()"
        )
