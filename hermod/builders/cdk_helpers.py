"""
CDK utility helpers shared by the Hermod builders.

Resource naming, removal policy and tagging all derive from the stage
passed in by the stack, never from ambient state.
"""

from __future__ import annotations
from typing import Optional
from aws_cdk import RemovalPolicy, Tags
from constructs import IConstruct
from hermod.configs.stages import APP_NAME, Stage


def resource_name(base_name: str, stage: Stage, suffix: Optional[str] = None) -> str:
    """
    Generate a resource name with the stage prefix.

    Args:
        base_name: Resource base name, e.g. "api"
        stage: Deployment stage
        suffix: Optional trailing qualifier

    Returns:
        "hermod-<stage>-<base_name>[-<suffix>]"
    """
    name = f"{APP_NAME}-{stage.value}-{base_name}"
    return f"{name}-{suffix}" if suffix else name


def removal_policy_for(stage: Stage) -> RemovalPolicy:
    """
    Removal policy for durable resources.

    Prod retains data on stack deletion; every other stage cleans up.
    """
    return RemovalPolicy.RETAIN if stage is Stage.PROD else RemovalPolicy.DESTROY


def apply_common_tags(scope: IConstruct, stage: Stage) -> None:
    """Tag every resource under scope with the application and stage."""
    tags = Tags.of(scope)
    tags.add("Application", "Hermod")
    tags.add("ManagedBy", "CDK")
    tags.add("Stage", stage.value)
