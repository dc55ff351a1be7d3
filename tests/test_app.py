"""
Tests for deployment mode selection
"""
import aws_cdk as cdk
import pytest

from hermod.app import PIPELINE_STACK_ID, build_app, is_pipeline_mode
from hermod.configs.error_handler import ConfigurationError
from hermod.configs.stages import Stage
from hermod.stacks.hermod_stack import HermodStack
from hermod.stacks.pipeline_stack import PipelineStack

from conftest import ACCOUNT, CONNECTION_ARN


def stacks_of(app):
    return [c for c in app.node.children if isinstance(c, cdk.Stack)]


@pytest.mark.parametrize(
    "environ, expected",
    [
        ({"GITHUB_CONNECTION_ARN": CONNECTION_ARN}, True),
        ({"GITHUB_CONNECTION_ARN": ""}, False),
        ({}, False),
    ],
)
def test_is_pipeline_mode(environ, expected):
    assert is_pipeline_mode(environ) is expected


def test_is_pipeline_mode_reads_os_environ_by_default(monkeypatch):
    monkeypatch.delenv("GITHUB_CONNECTION_ARN", raising=False)
    assert is_pipeline_mode() is False

    monkeypatch.setenv("GITHUB_CONNECTION_ARN", CONNECTION_ARN)
    assert is_pipeline_mode() is True


def test_direct_mode_builds_dev_stack():
    app = cdk.App()
    stack = build_app(app, {"AWS_ACCOUNT_ID": ACCOUNT})

    assert isinstance(stack, HermodStack)
    assert [s.node.id for s in stacks_of(app)] == [stack.node.id]
    assert stack.stack_name == "dev-hermod"
    assert stack.stage is Stage.DEV
    assert stack.account == ACCOUNT
    assert stack.region == "eu-central-1"
    assert stack.template_options.description == "Hermod (dev) - Predictive Multi-Modal Congestion Avoider"


def test_direct_mode_builds_prod_stack():
    app = cdk.App()
    stack = build_app(app, {"AWS_ACCOUNT_ID": ACCOUNT, "STAGE": "prod", "AWS_REGION": "eu-west-1"})

    assert stack.stack_name == "prod-hermod"
    assert stack.stage is Stage.PROD
    assert stack.region == "eu-west-1"
    assert stack.template_options.description == "Hermod (prod) - Predictive Multi-Modal Congestion Avoider"


def test_empty_connection_arn_selects_direct_mode():
    app = cdk.App()
    stack = build_app(app, {"GITHUB_CONNECTION_ARN": "", "AWS_ACCOUNT_ID": ACCOUNT})
    assert isinstance(stack, HermodStack)


def test_pipeline_mode_builds_pipeline_stack():
    app = cdk.App()
    stack = build_app(
        app,
        {
            "GITHUB_CONNECTION_ARN": CONNECTION_ARN,
            "AWS_ACCOUNT_ID": ACCOUNT,
            "GITHUB_REPO": "owner/hermod",
            "STAGE": "dev",
        },
    )

    assert isinstance(stack, PipelineStack)
    assert [s.node.id for s in stacks_of(app)] == [stack.node.id]
    assert stack.stack_name == PIPELINE_STACK_ID == "HermodPipeline"
    assert stack.account == ACCOUNT
    assert stack.region == "eu-central-1"
    assert stack.template_options.description == "Hermod CI/CD Pipeline - deploys prod on GitHub push"


@pytest.mark.parametrize(
    "environ, message",
    [
        ({}, "AWS_ACCOUNT_ID environment variable is required"),
        ({"STAGE": "prod"}, "AWS_ACCOUNT_ID environment variable is required"),
        ({"GITHUB_CONNECTION_ARN": CONNECTION_ARN}, "AWS_ACCOUNT_ID environment variable is required"),
        (
            {"GITHUB_CONNECTION_ARN": CONNECTION_ARN, "AWS_ACCOUNT_ID": ACCOUNT},
            "GITHUB_REPO environment variable is required (format: owner/repo)",
        ),
    ],
)
def test_configuration_errors_build_no_stack(environ, message):
    app = cdk.App()
    with pytest.raises(ConfigurationError) as exc:
        build_app(app, environ)

    assert str(exc.value) == message
    assert stacks_of(app) == []
