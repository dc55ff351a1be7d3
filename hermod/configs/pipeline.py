"""
CI/CD pipeline configuration for the Hermod CDK project.

All sensitive values come from environment variables. The pipeline is only
built when a GitHub connection ARN is available, so that variable is
checked first.
"""

from __future__ import annotations
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from hermod.configs.error_handler import ErrorHandler
from hermod.configs.stages import DEFAULT_REGION

DEFAULT_BRANCH = "main"


@dataclass(frozen=True)
class PipelineConfig:
    """
    Pipeline configuration settings.

    Attributes:
        github_repo: GitHub repository, expected as owner/repo
        branch: Git branch that triggers the pipeline
        connection_arn: CodeStar connection ARN for GitHub
        account: AWS account ID hosting the pipeline
        region: AWS region hosting the pipeline
    """
    github_repo: str
    branch: str
    connection_arn: str
    account: str
    region: str


def get_pipeline_config(environ: Optional[Mapping[str, str]] = None) -> PipelineConfig:
    """
    Resolve the pipeline configuration.

    Required variables are checked in order: GITHUB_CONNECTION_ARN,
    AWS_ACCOUNT_ID, GITHUB_REPO. The first missing one wins.

    Args:
        environ: Environment mapping, defaults to os.environ

    Returns:
        Fully populated pipeline configuration

    Raises:
        ConfigurationError: If a required variable is unset or empty
    """
    env = os.environ if environ is None else environ

    connection_arn = ErrorHandler.require_env(env, "GITHUB_CONNECTION_ARN")
    account = ErrorHandler.require_env(env, "AWS_ACCOUNT_ID")
    # Only presence is checked; the owner/repo shape is left to CodePipeline.
    github_repo = ErrorHandler.require_env(
        env,
        "GITHUB_REPO",
        "GITHUB_REPO environment variable is required (format: owner/repo)",
    )

    return PipelineConfig(
        github_repo=github_repo,
        branch=env.get("GITHUB_BRANCH", DEFAULT_BRANCH),
        connection_arn=connection_arn,
        account=account,
        region=env.get("AWS_REGION", DEFAULT_REGION),
    )
