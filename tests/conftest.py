import aws_cdk as cdk
import pytest
from aws_cdk import assertions

from hermod.configs.stages import Stage
from hermod.stacks.hermod_stack import HermodStack

ACCOUNT = "123456789012"
REGION = "eu-central-1"
CONNECTION_ARN = "arn:aws:codeconnections:eu-central-1:123456789012:connection/abc-123"


def synth_hermod(stage: Stage):
    app = cdk.App()
    stack = HermodStack(
        app,
        f"{stage.value}-hermod",
        stage=stage,
        env=cdk.Environment(account=ACCOUNT, region=REGION),
    )
    return stack, assertions.Template.from_stack(stack)


@pytest.fixture(scope="module")
def dev_stack():
    return synth_hermod(Stage.DEV)


@pytest.fixture(scope="module")
def dev_template(dev_stack):
    return dev_stack[1]


@pytest.fixture(scope="module")
def prod_template():
    return synth_hermod(Stage.PROD)[1]


@pytest.fixture
def scratch_stack():
    """Empty stack with a concrete environment, for builder-level tests."""
    return cdk.Stack(cdk.App(), "Scratch", env=cdk.Environment(account=ACCOUNT, region=REGION))
