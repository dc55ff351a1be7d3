"""
CI/CD pipeline stack for the Hermod CDK project.

This stack creates a self-mutating CDK Pipeline. A push to the configured
GitHub branch synthesizes the app and deploys the prod stage.
"""

from __future__ import annotations

from aws_cdk import (
    Stack,
    Stage as CdkStage,
)
from aws_cdk import (
    pipelines as pipelines,
)
from constructs import Construct

from hermod.configs.stages import Stage
from hermod.stacks.hermod_stack import HermodStack

PIPELINE_NAME = "hermod-pipeline"


class HermodStage(CdkStage):
    """
    Deployment stage wrapping the Hermod application stack.

    The application stage is passed explicitly, so naming and removal
    policies follow it rather than the build environment.
    """

    def __init__(self, scope: Construct, construct_id: str, *, stage: Stage, **kwargs) -> None:
        """
        Initialize the application stage.

        Args:
            scope: CDK construct scope
            construct_id: Construct ID
            stage: Application stage deployed by this CDK stage
            **kwargs: Additional stage properties (env, ...)
        """
        super().__init__(scope, construct_id, **kwargs)
        self.stack = HermodStack(
            self,
            "HermodStack",
            stage=stage,
            description=f"Hermod ({stage}) - Predictive Multi-Modal Congestion Avoider",
        )


class PipelineStack(Stack):
    """
    Hermod CI/CD pipeline: GitHub push -> Synth -> Deploy to Prod.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        *,
        github_repo: str,
        branch: str,
        connection_arn: str,
        **kwargs,
    ) -> None:
        """
        Initialize the pipeline stack.

        Args:
            scope: CDK construct scope
            construct_id: Construct ID
            github_repo: GitHub repository as owner/repo
            branch: Git branch to deploy from
            connection_arn: CodeStar connection ARN for GitHub
            **kwargs: Additional stack properties (env, description, ...)
        """
        super().__init__(scope, construct_id, **kwargs)

        source = pipelines.CodePipelineSource.connection(
            github_repo,
            branch,
            connection_arn=connection_arn,
        )

        # The synth re-runs the app in CodeBuild; these values keep it in pipeline mode
        synth = pipelines.ShellStep(
            "Synth",
            input=source,
            env={
                "GITHUB_CONNECTION_ARN": connection_arn,
                "GITHUB_REPO": github_repo,
                "GITHUB_BRANCH": branch,
                "AWS_ACCOUNT_ID": self.account,
                "AWS_REGION": self.region,
            },
            commands=[
                'pip install -e ".[test]"',
                "npm install -g aws-cdk",
                "pytest",
                "cdk synth",
            ],
        )

        self.pipeline = pipelines.CodePipeline(
            self,
            "Pipeline",
            pipeline_name=PIPELINE_NAME,
            synth=synth,
        )

        # Prod deploys automatically on every push
        self.prod_stage = HermodStage(
            self,
            "Prod",
            stage=Stage.PROD,
            env=kwargs.get("env"),
        )
        self.pipeline.add_stage(self.prod_stage)
