"""Pet store services stack: network, messaging, adoption workflow and the pet site."""

from typing import Optional

from aws_cdk import (
    CfnOutput,
    Stack,
    aws_ec2 as ec2,
    aws_ecs as ecs,
    aws_sns as sns,
    aws_sqs as sqs,
    aws_ssm as ssm,
    aws_stepfunctions as sfn,
)
from constructs import Construct

from infrastructure.services.ecs_service import EcsServiceProps
from infrastructure.services.pet_site_service import PetSiteService
from infrastructure.settings import PetSiteSettings, ServiceSettings


class PetSiteStack(Stack):
    """Queue, topic and state machine the pet site talks to, plus the site itself."""

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        pet_site_settings: Optional[PetSiteSettings] = None,
        service_settings: Optional[ServiceSettings] = None,
        **kwargs,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        pet_site_settings = pet_site_settings or PetSiteSettings.from_context(self.node)
        service_settings = service_settings or ServiceSettings.from_context(self.node)

        # ----- Messaging -----
        queue = sqs.Queue(self, "sqs_queue")
        topic = sns.Topic(self, "topic_petadoption")

        # ----- Adoption workflow -----
        state_machine = sfn.StateMachine(
            self,
            "StepFn_PetAdoptionsWorkflow",
            definition_body=sfn.DefinitionBody.from_chainable(
                sfn.Pass(self, "RecordAdoption")
            ),
        )

        # ----- Network -----
        vpc = ec2.Vpc(self, "Microservices", max_azs=2)
        cluster = ecs.Cluster(self, "PetSite", vpc=vpc)

        security_group = ec2.SecurityGroup(
            self,
            "PetSiteSecurityGroup",
            vpc=vpc,
            description="Pet site load balancer and tasks",
        )
        security_group.add_ingress_rule(ec2.Peer.any_ipv4(), ec2.Port.tcp(80))

        # ----- Pet site -----
        pet_site = PetSiteService(
            self,
            "pet-site",
            EcsServiceProps(
                cluster=cluster,
                cpu=service_settings.cpu,
                memory_limit_mib=service_settings.memory_limit_mib,
                log_group_name=service_settings.log_group_name,
                desired_task_count=service_settings.desired_task_count,
                region=self.region,
                security_group=security_group,
                health_check=service_settings.health_check,
                disable_service=service_settings.disable_service,
                disable_xray=service_settings.disable_xray,
            ),
            settings=pet_site_settings,
        )
        self.pet_site = pet_site

        # ----- Runtime parameters read by the pet site -----
        ssm.StringParameter(
            self,
            "QueueUrlParameter",
            parameter_name="/petstore/queueurl",
            string_value=queue.queue_url,
        )
        ssm.StringParameter(
            self,
            "SnsArnParameter",
            parameter_name="/petstore/snsarn",
            string_value=topic.topic_arn,
        )
        ssm.StringParameter(
            self,
            "StepFnArnParameter",
            parameter_name="/petstore/stepfunctionarn",
            string_value=state_machine.state_machine_arn,
        )

        # ----- Outputs -----
        CfnOutput(self, "QueueURL", value=queue.queue_url)
        CfnOutput(self, "StepFnArn", value=state_machine.state_machine_arn)
        if pet_site.service is not None:
            CfnOutput(
                self,
                "PetSiteUrl",
                value=f"http://{pet_site.service.load_balancer.load_balancer_dns_name}",
            )
