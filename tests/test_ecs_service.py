"""
Tests for the EcsService base construct.
"""
import pytest
from aws_cdk import aws_ec2 as ec2, aws_ecs as ecs
from aws_cdk.assertions import Match, Template

from infrastructure.services.ecs_service import EcsService, EcsServiceProps


class RegistryImageService(EcsService):
    """Concrete service pulling a public image, so no Docker build is needed."""

    def create_container_image(self):
        return ecs.ContainerImage.from_registry("public.ecr.aws/nginx/nginx:latest")


def _props(stack, **overrides):
    vpc = ec2.Vpc(stack, "Vpc", max_azs=2)
    values = dict(
        cluster=ecs.Cluster(stack, "Cluster", vpc=vpc),
        cpu=1024,
        memory_limit_mib=2048,
        log_group_name="/ecs/Test",
        desired_task_count=2,
        region="us-east-1",
        security_group=ec2.SecurityGroup(stack, "Sg", vpc=vpc),
        health_check="/health/status",
    )
    values.update(overrides)
    return EcsServiceProps(**values)


def test_base_requires_image_factory(stack):
    with pytest.raises(NotImplementedError, match="create_container_image"):
        EcsService(stack, "Base", _props(stack))


def test_task_definition_and_containers(stack):
    service = RegistryImageService(stack, "Svc", _props(stack))
    template = Template.from_stack(stack)

    template.has_resource_properties("AWS::ECS::TaskDefinition", {
        "Cpu": "1024",
        "Memory": "2048",
        "RequiresCompatibilities": ["FARGATE"],
        "ContainerDefinitions": [
            Match.object_like({
                "Name": "container",
                "Essential": True,
                "Memory": 512,
                "Cpu": 256,
                "Environment": [{"Name": "AWS_REGION", "Value": "us-east-1"}],
                "PortMappings": [{"ContainerPort": 80, "Protocol": "tcp"}],
            }),
            Match.object_like({
                "Name": "xray-daemon",
                "Image": "amazon/aws-xray-daemon:latest",
                "PortMappings": [{"ContainerPort": 2000, "Protocol": "udp"}],
            }),
        ],
    })
    assert service.service is not None


def test_log_group(stack):
    RegistryImageService(stack, "Svc", _props(stack))
    template = Template.from_stack(stack)

    template.has_resource("AWS::Logs::LogGroup", {
        "Properties": {"LogGroupName": "/ecs/Test"},
        "DeletionPolicy": "Delete",
    })


def test_task_role_base_policies(stack):
    RegistryImageService(stack, "Svc", _props(stack))
    template = Template.from_stack(stack)

    template.has_resource_properties("AWS::IAM::Role", {
        "AssumeRolePolicyDocument": {
            "Statement": [Match.object_like({
                "Principal": {"Service": "ecs-tasks.amazonaws.com"},
            })],
        },
        "ManagedPolicyArns": Match.array_with([
            "arn:aws:iam::aws:policy/service-role/AmazonECSTaskExecutionRolePolicy",
        ]),
    })


def test_execution_role_statement(stack):
    RegistryImageService(stack, "Svc", _props(stack))
    template = Template.from_stack(stack)

    template.has_resource_properties("AWS::IAM::Policy", {
        "PolicyDocument": {
            "Statement": Match.array_with([Match.object_like({
                "Action": Match.array_with(["ecr:GetAuthorizationToken", "ssm:GetParameters"]),
                "Effect": "Allow",
                "Resource": "*",
            })]),
        },
    })


def test_load_balanced_service(stack):
    RegistryImageService(stack, "Svc", _props(stack))
    template = Template.from_stack(stack)

    template.has_resource_properties("AWS::ECS::Service", {
        "DesiredCount": 2,
        "LaunchType": "FARGATE",
    })
    template.has_resource_properties("AWS::ElasticLoadBalancingV2::LoadBalancer", {
        "Scheme": "internet-facing",
    })
    template.has_resource_properties("AWS::ElasticLoadBalancingV2::Listener", {
        "Port": 80,
    })
    template.has_resource_properties("AWS::ElasticLoadBalancingV2::TargetGroup", {
        "HealthCheckPath": "/health/status",
    })


def test_disable_service(stack):
    service = RegistryImageService(stack, "Svc", _props(stack, disable_service=True))
    template = Template.from_stack(stack)

    assert service.service is None
    template.resource_count_is("AWS::ECS::Service", 0)
    template.resource_count_is("AWS::ElasticLoadBalancingV2::LoadBalancer", 0)
    template.resource_count_is("AWS::ECS::TaskDefinition", 1)


def test_disable_xray(stack):
    RegistryImageService(stack, "Svc", _props(stack, disable_xray=True))
    template = Template.from_stack(stack)

    definitions = template.find_resources("AWS::ECS::TaskDefinition")
    (task_definition,) = definitions.values()
    containers = task_definition["Properties"]["ContainerDefinitions"]
    assert [c["Name"] for c in containers] == ["container"]
