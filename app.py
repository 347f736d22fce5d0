#!/usr/bin/env python3
"""Pet Adoptions - CDK Application.

Deploys the pet site front end and the AWS services it depends on:
- ECS Fargate service behind an Application Load Balancer
- SQS queue, SNS topic (adoption notifications)
- Step Functions state machine (adoption workflow)
- SSM parameters the site reads at runtime
"""

import os

import aws_cdk as cdk
from infrastructure.logger_config import configure_logging
from infrastructure.pet_site_stack import PetSiteStack

configure_logging(os.environ.get("LOG_LEVEL"))

app = cdk.App()

env = cdk.Environment(
    account=app.node.try_get_context("account"),
    region=app.node.try_get_context("region") or "us-east-1",
)

PetSiteStack(
    app,
    "Services",
    env=env,
    description="Pet site ECS service and supporting messaging resources",
)

app.synth()
