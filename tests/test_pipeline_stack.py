"""
Tests for the CI/CD pipeline stack
"""
import json

import aws_cdk as cdk
import pytest
from aws_cdk import assertions

from hermod.configs.stages import Stage
from hermod.stacks.hermod_stack import HermodStack
from hermod.stacks.pipeline_stack import HermodStage, PipelineStack

from conftest import ACCOUNT, CONNECTION_ARN, REGION


@pytest.fixture(scope="module")
def pipeline_stack():
    app = cdk.App()
    return PipelineStack(
        app,
        "HermodPipeline",
        github_repo="owner/hermod",
        branch="main",
        connection_arn=CONNECTION_ARN,
        env=cdk.Environment(account=ACCOUNT, region=REGION),
    )


@pytest.fixture(scope="module")
def pipeline_template(pipeline_stack):
    return assertions.Template.from_stack(pipeline_stack)


def test_pipeline_name(pipeline_template):
    pipeline_template.resource_count_is("AWS::CodePipeline::Pipeline", 1)
    pipeline_template.has_resource_properties("AWS::CodePipeline::Pipeline", {"Name": "hermod-pipeline"})


def test_source_action_uses_connection(pipeline_template):
    pipeline_template.has_resource_properties(
        "AWS::CodePipeline::Pipeline",
        {
            "Stages": assertions.Match.array_with(
                [
                    assertions.Match.object_like(
                        {
                            "Name": "Source",
                            "Actions": [
                                assertions.Match.object_like(
                                    {
                                        "Configuration": assertions.Match.object_like(
                                            {
                                                "ConnectionArn": CONNECTION_ARN,
                                                "FullRepositoryId": "owner/hermod",
                                                "BranchName": "main",
                                            }
                                        )
                                    }
                                )
                            ],
                        }
                    )
                ]
            )
        },
    )


def test_prod_stage_is_deployed(pipeline_template):
    pipeline_template.has_resource_properties(
        "AWS::CodePipeline::Pipeline",
        {"Stages": assertions.Match.array_with([assertions.Match.object_like({"Name": "Prod"})])},
    )


def test_synth_step_keeps_pipeline_mode(pipeline_template):
    rendered = json.dumps(pipeline_template.to_json())

    for name in ("GITHUB_CONNECTION_ARN", "GITHUB_REPO", "GITHUB_BRANCH", "AWS_ACCOUNT_ID", "AWS_REGION"):
        assert name in rendered
    assert "cdk synth" in rendered


def test_prod_stage_wraps_prod_stack(pipeline_stack):
    stage = pipeline_stack.prod_stage

    assert isinstance(stage, HermodStage)
    assert isinstance(stage.stack, HermodStack)
    assert stage.stack.stage is Stage.PROD
    assert stage.stack.template_options.description == "Hermod (prod) - Predictive Multi-Modal Congestion Avoider"


def test_prod_stage_ignores_build_stage_variable(monkeypatch):
    monkeypatch.setenv("STAGE", "dev")
    app = cdk.App()
    stage = HermodStage(app, "Prod", stage=Stage.PROD, env=cdk.Environment(account=ACCOUNT, region=REGION))
    template = assertions.Template.from_stack(stage.stack)

    template.has_resource_properties("AWS::DynamoDB::Table", {"TableName": "hermod-prod-routes"})
    tables = template.find_resources("AWS::DynamoDB::Table")
    assert all(t["DeletionPolicy"] == "Retain" for t in tables.values())
