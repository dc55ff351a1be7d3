"""
Deployment stage resolution for the Hermod CDK project.

The stage decides resource names and whether durable resources survive a
stack deletion. It is read from the environment with a fail-safe default:
anything that is not exactly "prod" deploys as dev.
"""

from __future__ import annotations
import logging
import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Mapping, Optional

from hermod.configs.error_handler import ErrorHandler

logger = logging.getLogger(__name__)

APP_NAME = "hermod"
DEFAULT_REGION = "eu-central-1"


class Stage(Enum):
    """Deployment stages."""

    DEV = "dev"
    PROD = "prod"

    @classmethod
    def parse(cls, value: Optional[str]) -> "Stage":
        """
        Parse a raw stage string.

        Only an exact, case-sensitive "prod" selects production.

        Args:
            value: Raw value, possibly None

        Returns:
            Stage.PROD or Stage.DEV
        """
        if value == cls.PROD.value:
            return cls.PROD
        return cls.DEV

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class StageConfig:
    """
    Configuration for a direct, single-environment deployment.

    Attributes:
        stage: Deployment stage
        account: AWS account ID
        region: AWS region
        stack_name: CloudFormation stack name, always "<stage>-hermod"
    """
    stage: Stage
    account: str
    region: str
    stack_name: str = field(init=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "stack_name", f"{self.stage.value}-{APP_NAME}")


def _environ(environ: Optional[Mapping[str, str]]) -> Mapping[str, str]:
    return os.environ if environ is None else environ


def get_current_stage(environ: Optional[Mapping[str, str]] = None) -> Stage:
    """
    Get the current stage from the STAGE environment variable.

    Args:
        environ: Environment mapping, defaults to os.environ

    Returns:
        Stage.PROD when STAGE is exactly "prod", Stage.DEV otherwise
    """
    return Stage.parse(_environ(environ).get("STAGE"))


def is_prod(environ: Optional[Mapping[str, str]] = None) -> bool:
    """
    Check if the current stage is production.

    Builders take the stage explicitly (see removal_policy_for); this reads
    the environment for callers outside a stack.
    """
    return get_current_stage(environ) is Stage.PROD


def get_stage_config(environ: Optional[Mapping[str, str]] = None) -> StageConfig:
    """
    Resolve the direct deployment configuration.

    Args:
        environ: Environment mapping, defaults to os.environ

    Returns:
        Fully populated stage configuration

    Raises:
        ConfigurationError: If AWS_ACCOUNT_ID is unset or empty
    """
    env = _environ(environ)
    stage = get_current_stage(env)
    account = ErrorHandler.require_env(env, "AWS_ACCOUNT_ID")

    region = env.get("AWS_REGION")
    if region is None:
        logger.debug("AWS_REGION not set, defaulting to %s", DEFAULT_REGION)
        region = DEFAULT_REGION

    return StageConfig(stage=stage, account=account, region=region)
