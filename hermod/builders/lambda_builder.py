"""
Lambda function builders for the Hermod CDK project.

This module builds AWS Lambda functions from JSON configurations. It covers
runtime and architecture selection, environment variables, memory and
timeout settings, and DynamoDB/S3 access grants.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
from aws_cdk import Duration, Stack, Tags
from aws_cdk import aws_lambda as _lambda
from constructs import Construct
from hermod.configs.apis import ExternalApis
from hermod.configs.config_manager import ConfigManager
from hermod.configs.error_handler import ErrorHandler, ValidationDecorators
from hermod.configs.stages import Stage

logger = logging.getLogger(__name__)

CODE_ROOT = Path(__file__).resolve().parents[1] / "lambda_src"

# -----------------------------
# Lambda creators & grants
# -----------------------------

def runtime_from(s: str) -> _lambda.Runtime:
    """
    Convert string to Lambda runtime enum.

    Args:
        s: String representation of runtime

    Returns:
        Lambda runtime enum
    """
    s = (s or "python3.12").lower()
    m = {
        "python3.12": _lambda.Runtime.PYTHON_3_12,
        "python3.11": _lambda.Runtime.PYTHON_3_11,
        "python3.10": _lambda.Runtime.PYTHON_3_10,
        "nodejs18.x": _lambda.Runtime.NODEJS_18_X,
        "nodejs20.x": _lambda.Runtime.NODEJS_20_X,
    }
    ErrorHandler.validate_enum_value(s, list(m.keys()), "runtime", "Lambda")
    return m[s]

def architecture_from(s: str) -> _lambda.Architecture:
    s = (s or "arm64").lower()
    m = {
        "arm64": _lambda.Architecture.ARM_64,
        "x86_64": _lambda.Architecture.X86_64,
    }
    ErrorHandler.validate_enum_value(s, list(m.keys()), "architecture", "Lambda")
    return m[s]

@ValidationDecorators.validate_required_config_fields(
    ["code_path", "runtime", "handler", "memory", "timeout"],
    context="Lambda"
)
def build_lambda_function(
        scope: Construct,
        logical_name: str,
        conf: dict,
        common_env: Optional[Mapping[str, str]] = None
    ) -> _lambda.Function:
    """
    Build a Lambda function from configuration.

    Environment precedence, lowest first: common_env, external API URLs
    (when "fetcher_env" is true), the config's own "env".

    Args:
        scope: CDK construct scope
        logical_name: Logical name for the function
        conf: Lambda configuration dictionary
        common_env: Environment shared by every function (table and bucket names)

    Returns:
        Lambda function instance
    """
    env: Dict[str, str] = dict(common_env or {})
    if conf.get("fetcher_env"):
        env.update(ExternalApis.fetcher_env())
    env.update({k: str(v) for k, v in (conf.get("env") or {}).items()})

    fn = _lambda.Function(
        scope,
        f"Fn-{logical_name}",
        function_name=conf.get("function_name"),
        runtime=runtime_from(conf["runtime"]),
        architecture=architecture_from(conf.get("architecture")),
        handler=conf["handler"],
        code=_lambda.Code.from_asset(conf["code_path"]),
        memory_size=int(conf["memory"]),
        timeout=Duration.seconds(int(conf["timeout"])),
        tracing=_lambda.Tracing.ACTIVE if conf.get("tracing") else _lambda.Tracing.DISABLED,
        environment=env,
        description=conf.get("description"),
    )

    for k, v in (conf.get("tags") or {}).items():
        Tags.of(fn).add(k, v)

    return fn

def grant_table_access(
        fn: _lambda.Function,
        grants: List[dict],
        tables: Mapping[str, Any]
    ) -> None:
    """
    Grant DynamoDB table access to a Lambda function.

    Args:
        fn: Lambda function to grant access to
        grants: List of {"table": <logical name>, "access": read|write|readwrite}
        tables: Dictionary of DynamoDB tables

    Raises:
        ConfigurationError: If a grant entry is malformed
        KeyError: If a table is not found in tables
    """
    for g in grants or []:
        ErrorHandler.validate_required_fields(g, ["table", "access"], "DynamoDB grant")
        ErrorHandler.validate_reference(g["table"], tables, "table", "DynamoDB grant")

        table = tables[g["table"]]
        access = g["access"].lower()
        ErrorHandler.validate_enum_value(access, ["read", "write", "readwrite"], "access", "DynamoDB grant")

        if access == "read":
            table.grant_read_data(fn)
        elif access == "write":
            table.grant_write_data(fn)
        else:
            table.grant_read_write_data(fn)

def grant_bucket_access(
        fn: _lambda.Function,
        grants: List[dict],
        buckets: Mapping[str, Any]
    ) -> None:
    """
    Grant S3 bucket access to a Lambda function.

    Args:
        fn: Lambda function to grant access to
        grants: List of {"bucket": <logical name>, "access": read|write|readwrite}
        buckets: Dictionary of S3 buckets

    Raises:
        ConfigurationError: If a grant entry is malformed
        KeyError: If a bucket is not found in buckets
    """
    for g in grants or []:
        ErrorHandler.validate_required_fields(g, ["bucket", "access"], "S3 grant")
        ErrorHandler.validate_reference(g["bucket"], buckets, "bucket", "S3 grant")

        bucket = buckets[g["bucket"]]
        access = g["access"].lower()
        ErrorHandler.validate_enum_value(access, ["read", "write", "readwrite"], "access", "S3 grant")

        if access == "read":
            bucket.grant_read(fn)
        elif access == "write":
            bucket.grant_write(fn)
        else:
            bucket.grant_read_write(fn)

# -----------------------------
# Fleet construct
# -----------------------------

class LambdaFleet(Construct):
    """
    Builds one function per JSON file under configs/lambdas/, each merged
    over lambda.defaults.json. Example:

      configs/lambdas/lambda.defaults.json    runtime, memory, shared grants
      configs/lambdas/compute-route.json      function_name, env, extra grants

    "code" names a folder under lambda_src/. Grant lists in a function file
    extend the defaults rather than replacing them.
    """
    def __init__(
            self,
            scope: Construct,
            construct_id: str,
            *,
            stage: Stage,
            tables: Mapping[str, Any],
            buckets: Mapping[str, Any],
            common_env: Optional[Mapping[str, str]] = None,
            code_root: Path = CODE_ROOT
        ) -> None:
        """
        Initialize the Lambda fleet construct.

        Args:
            scope: CDK construct scope
            construct_id: Construct ID
            stage: Deployment stage
            tables: Dictionary of DynamoDB tables for access grants
            buckets: Dictionary of S3 buckets for access grants
            common_env: Environment shared by every function
            code_root: Root directory for Lambda source code
        """
        super().__init__(scope, construct_id)

        self.config_mgr = ConfigManager(Stack.of(self), stage)
        self.functions: Dict[str, _lambda.Function] = {}

        ErrorHandler.validate_path_exists(code_root, "Lambda root")

        configs = self.config_mgr.load_configs_with_defaults("lambdas", "lambda.defaults.json")
        for _, conf in configs:
            logical_name = conf["name"]
            ErrorHandler.validate_required_fields(conf, ["code"], f"Lambda configuration for {logical_name}")

            code_path = Path(code_root) / conf["code"]
            ErrorHandler.validate_file_exists(code_path / "app.py", "Lambda handler")
            conf["code_path"] = str(code_path)

            fn = build_lambda_function(self, logical_name, conf, common_env)
            grant_table_access(fn, conf.get("dynamodb_access", []), tables)
            grant_bucket_access(fn, conf.get("s3_access", []), buckets)

            self.functions[logical_name] = fn
            logger.debug("Built function %s", logical_name)
