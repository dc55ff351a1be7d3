"""
CDK entry point for Hermod.

Two modes:

1. Local development:
     AWS_ACCOUNT_ID=xxx cdk deploy
   Deploys <stage>-hermod directly to the account (STAGE defaults to dev).

2. Pipeline deployment:
     GITHUB_CONNECTION_ARN, AWS_ACCOUNT_ID and GITHUB_REPO set
   Deploys the pipeline, which deploys prod on every GitHub push.
"""

from __future__ import annotations
import logging
import os
import sys
from typing import Mapping, Optional

import aws_cdk as cdk
from aws_cdk import Environment, Stack
from dotenv import load_dotenv

from hermod.configs.pipeline import get_pipeline_config
from hermod.configs.stages import get_stage_config
from hermod.stacks.hermod_stack import HermodStack
from hermod.stacks.pipeline_stack import PipelineStack

logger = logging.getLogger(__name__)

PIPELINE_STACK_ID = "HermodPipeline"


def is_pipeline_mode(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Pipeline mode is on when GITHUB_CONNECTION_ARN is set and non-empty."""
    env = os.environ if environ is None else environ
    return bool(env.get("GITHUB_CONNECTION_ARN"))


def build_app(app: cdk.App, environ: Optional[Mapping[str, str]] = None) -> Stack:
    """
    Add exactly one top-level stack to the app, chosen from the environment.

    Args:
        app: CDK app to populate
        environ: Environment mapping, defaults to os.environ

    Returns:
        The PipelineStack in pipeline mode, the HermodStack otherwise

    Raises:
        ConfigurationError: If a variable required by the chosen mode is missing
    """
    env = os.environ if environ is None else environ

    if is_pipeline_mode(env):
        config = get_pipeline_config(env)
        logger.info("Pipeline mode: %s@%s -> %s", config.github_repo, config.branch, PIPELINE_STACK_ID)
        return PipelineStack(
            app,
            PIPELINE_STACK_ID,
            github_repo=config.github_repo,
            branch=config.branch,
            connection_arn=config.connection_arn,
            env=Environment(account=config.account, region=config.region),
            description="Hermod CI/CD Pipeline - deploys prod on GitHub push",
        )

    config = get_stage_config(env)
    logger.info("Direct mode: stage %s -> %s", config.stage, config.stack_name)
    return HermodStack(
        app,
        config.stack_name,
        stage=config.stage,
        env=Environment(account=config.account, region=config.region),
        description=f"Hermod ({config.stage}) - Predictive Multi-Modal Congestion Avoider",
    )


def main() -> None:
    # Real environment variables win over .env
    load_dotenv()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s [%(levelname)s] %(message)s",
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    app = cdk.App()
    build_app(app)
    app.synth()


if __name__ == "__main__":
    main()
