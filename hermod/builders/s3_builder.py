"""
S3 bucket builders for the Hermod CDK project.

Buckets are private, encrypted with S3-managed keys and follow the stage
removal policy. Objects are deleted with the bucket when the stage does
not retain data.
"""

from __future__ import annotations
import logging
from typing import Dict, List
from aws_cdk import Duration, RemovalPolicy, Stack
from aws_cdk import aws_s3 as s3
from constructs import Construct
from hermod.builders.cdk_helpers import removal_policy_for
from hermod.configs.config_manager import ConfigManager
from hermod.configs.error_handler import ErrorHandler, ValidationDecorators
from hermod.configs.stages import Stage

logger = logging.getLogger(__name__)

_HTTP_METHODS = {
    "GET": s3.HttpMethods.GET,
    "HEAD": s3.HttpMethods.HEAD,
    "PUT": s3.HttpMethods.PUT,
    "POST": s3.HttpMethods.POST,
    "DELETE": s3.HttpMethods.DELETE,
}


def lifecycle_rules_from(rules: List[dict]) -> List[s3.LifecycleRule]:
    """
    Convert lifecycle rule configs to CDK rules.

    Args:
        rules: List of {"id", "prefix"?, "expiration_days"?, "noncurrent_version_expiration_days"?}

    Returns:
        List of lifecycle rules
    """
    out = []
    for i, r in enumerate(rules or []):
        ErrorHandler.validate_required_fields(r, ["id"], f"Lifecycle rule #{i}")
        expiration = r.get("expiration_days")
        noncurrent = r.get("noncurrent_version_expiration_days")
        out.append(
            s3.LifecycleRule(
                id=r["id"],
                prefix=r.get("prefix"),
                enabled=r.get("enabled", True),
                expiration=Duration.days(expiration) if expiration else None,
                noncurrent_version_expiration=Duration.days(noncurrent) if noncurrent else None,
            )
        )
    return out


def cors_rules_from(rules: List[dict]) -> List[s3.CorsRule]:
    out = []
    for i, r in enumerate(rules or []):
        ErrorHandler.validate_required_fields(r, ["allowed_methods", "allowed_origins"], f"CORS rule #{i}")
        for m in r["allowed_methods"]:
            ErrorHandler.validate_enum_value(m, list(_HTTP_METHODS), "allowed_methods", f"CORS rule #{i}")
        out.append(
            s3.CorsRule(
                allowed_methods=[_HTTP_METHODS[m] for m in r["allowed_methods"]],
                allowed_origins=r["allowed_origins"],
                allowed_headers=r.get("allowed_headers"),
                max_age=r.get("max_age"),
            )
        )
    return out


@ValidationDecorators.validate_required_config_fields(["bucket_name"], context="Bucket")
def build_bucket(
        scope: Construct,
        name: str,
        conf: dict,
        *,
        stage: Stage
    ) -> s3.Bucket:
    """
    Build an S3 bucket from configuration.

    Args:
        scope: CDK construct scope
        name: Logical name for the bucket
        conf: Bucket configuration dictionary
        stage: Deployment stage, drives the removal policy

    Returns:
        S3 bucket instance
    """
    removal = removal_policy_for(stage)
    bucket = s3.Bucket(
        scope,
        f"Bucket-{name}",
        bucket_name=conf["bucket_name"],
        removal_policy=removal,
        auto_delete_objects=removal == RemovalPolicy.DESTROY,
        block_public_access=s3.BlockPublicAccess.BLOCK_ALL,
        encryption=s3.BucketEncryption.S3_MANAGED,
        enforce_ssl=True,
        versioned=bool(conf.get("versioned", False)),
        lifecycle_rules=lifecycle_rules_from(conf.get("lifecycle_rules", [])) or None,
        cors=cors_rules_from(conf.get("cors", [])) or None,
    )
    logger.debug("Built bucket %s", name)
    return bucket


class Buckets(Construct):
    """
    Build every S3 bucket found under configs/buckets/.

    Bucket JSON:
      {
        "bucket_name": "hermod-${Stage}-data-${AccountId}-${Region}",
        "env_var": "DATA_BUCKET",
        "versioned": true,
        "lifecycle_rules": [{"id": "ExpireRawData", "prefix": "raw/", "expiration_days": 7}],
        "cors": [{"allowed_methods": ["GET"], "allowed_origins": ["*"]}]
      }
    """
    def __init__(self, scope: Construct, construct_id: str, *, stage: Stage) -> None:
        super().__init__(scope, construct_id)

        config_mgr = ConfigManager(Stack.of(self), stage)
        self.buckets: Dict[str, s3.Bucket] = {}
        self.env_vars: Dict[str, str] = {}

        for _, conf in config_mgr.load_configs_with_defaults("buckets"):
            logical_name = conf["name"]
            bucket = build_bucket(self, logical_name, conf, stage=stage)
            self.buckets[logical_name] = bucket

            if conf.get("env_var"):
                self.env_vars[conf["env_var"]] = bucket.bucket_name
