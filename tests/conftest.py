"""Shared fixtures for the CDK construct tests."""
import aws_cdk as cdk
import pytest

from infrastructure.settings import PetSiteSettings


@pytest.fixture
def build_context(tmp_path):
    """A minimal Docker build context standing in for the pet site source tree."""
    context_dir = tmp_path / "petsite"
    context_dir.mkdir()
    (context_dir / "Dockerfile").write_text(
        "FROM public.ecr.aws/docker/library/nginx:alpine\n"
    )
    return str(context_dir)


@pytest.fixture
def pet_site_settings(build_context):
    return PetSiteSettings(build_context=build_context)


@pytest.fixture
def stack():
    app = cdk.App()
    return cdk.Stack(app, "TestStack")
