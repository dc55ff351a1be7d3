"""
REST API builders for the Hermod CDK project.

This module builds API Gateway REST APIs, their deployment stage and
routes from JSON configs. Routes integrate with the Lambda fleet or with a
static mock response.
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping

from aws_cdk import Duration, Stack
from aws_cdk import aws_apigateway as apigateway
from aws_cdk import aws_logs as logs
from constructs import Construct
from hermod.builders.cdk_helpers import removal_policy_for
from hermod.configs.config_manager import ConfigManager
from hermod.configs.error_handler import ErrorHandler, ValidationDecorators
from hermod.configs.stages import Stage

logger = logging.getLogger(__name__)

HTTP_METHODS = ["GET", "POST", "PUT", "PATCH", "DELETE"]

# -----------------------------
# Core builders
# -----------------------------

def _template(value: Any) -> str:
    return value if isinstance(value, str) else json.dumps(value)

def _templates(templates: Mapping[str, Any] | None) -> Dict[str, str] | None:
    if not templates:
        return None
    return {content_type: _template(body) for content_type, body in templates.items()}

@ValidationDecorators.validate_required_config_fields(
    ["name", "stage"],
    context="REST API"
)
def build_rest_api(
        scope: Construct,
        logical_name: str,
        conf: dict,
        *,
        stage: Stage
    ) -> apigateway.RestApi:
    """
    Create a REST API with its deployment stage, access logs and CORS.

    api.json:
      {
        "name": "hermod-${Stage}-api",
        "stage": {"name": "v1", "tracing": true,
                  "throttling_burst_limit": 100, "throttling_rate_limit": 50},
        "access_logs": {"log_group_name": "...", "retention": "ONE_MONTH"},
        "cors": {"allow_headers": [...], "max_age_days": 1}
      }

    Args:
        scope: CDK construct scope
        logical_name: ID suffix used for CDK logical names
        conf: Parsed api.json dict
        stage: Deployment stage, drives the log group removal policy

    Returns:
        apigateway.RestApi instance
    """
    context = f"REST API configuration for {logical_name}"
    ErrorHandler.validate_field_structure(conf, "stage", ["name"], context)
    stage_conf = conf["stage"]

    access_log_kwargs = {}
    access_logs = conf.get("access_logs")
    if access_logs:
        retention = access_logs.get("retention", "ONE_MONTH").upper()
        ErrorHandler.validate_enum_value(
            retention, [r.name for r in logs.RetentionDays], "retention", context
        )
        log_group = logs.LogGroup(
            scope,
            f"ApiAccessLogs-{logical_name}",
            log_group_name=access_logs.get("log_group_name"),
            retention=getattr(logs.RetentionDays, retention),
            removal_policy=removal_policy_for(stage),
        )
        access_log_kwargs = dict(
            access_log_destination=apigateway.LogGroupLogDestination(log_group),
            access_log_format=apigateway.AccessLogFormat.json_with_standard_fields(
                caller=True,
                http_method=True,
                ip=True,
                protocol=True,
                request_time=True,
                resource_path=True,
                response_length=True,
                status=True,
                user=True,
            ),
        )

    cors = conf.get("cors")
    cors_options = None
    if cors is not None:
        cors_options = apigateway.CorsOptions(
            allow_origins=cors.get("allow_origins", apigateway.Cors.ALL_ORIGINS),
            allow_methods=cors.get("allow_methods", apigateway.Cors.ALL_METHODS),
            allow_headers=cors.get("allow_headers"),
            max_age=Duration.days(cors["max_age_days"]) if cors.get("max_age_days") else None,
        )

    return apigateway.RestApi(
        scope,
        f"RestApi-{logical_name}",
        rest_api_name=conf["name"],
        description=conf.get("description"),
        deploy_options=apigateway.StageOptions(
            stage_name=stage_conf["name"],
            tracing_enabled=bool(stage_conf.get("tracing", False)),
            throttling_burst_limit=stage_conf.get("throttling_burst_limit"),
            throttling_rate_limit=stage_conf.get("throttling_rate_limit"),
            **access_log_kwargs,
        ),
        default_cors_preflight_options=cors_options,
    )


def build_integration(
        integ: dict,
        lambdas: Mapping[str, Any],
        context: str
    ) -> apigateway.Integration:
    """
    Build a route integration.

    integration:
      {"type": "lambda", "lambda_name": "<LambdaFleet name>", "request_templates": {...}}
      {"type": "mock", "request_templates": {...},
       "responses": [{"status_code": "200", "templates": {"application/json": {...}}}]}

    Args:
        integ: Integration config
        lambdas: Dictionary of Lambda functions
        context: Context description for error messages

    Returns:
        API Gateway integration
    """
    ErrorHandler.validate_required_fields(integ, ["type"], context)
    ErrorHandler.validate_enum_value(integ["type"], ["lambda", "mock"], "type", context)

    if integ["type"] == "lambda":
        ErrorHandler.validate_required_fields(integ, ["lambda_name"], context)
        ErrorHandler.validate_reference(integ["lambda_name"], lambdas, "lambda", context)
        return apigateway.LambdaIntegration(
            lambdas[integ["lambda_name"]],
            request_templates=_templates(integ.get("request_templates")),
        )

    return apigateway.MockIntegration(
        request_templates=_templates(integ.get("request_templates")),
        integration_responses=[
            apigateway.IntegrationResponse(
                status_code=str(r["status_code"]),
                response_templates=_templates(r.get("templates")),
            )
            for r in integ.get("responses", [])
        ],
    )


def add_routes_from_dir(
        api: apigateway.RestApi,
        lambdas: Mapping[str, Any],
        config_mgr: ConfigManager,
        api_dir: Path
    ) -> List[str]:
    """
    Add routes by scanning a folder of JSON files.

    Each file is a dict with required fields:
      - path: resource path, e.g. "/users/{userId}/preferences"
      - method: HTTP method
      - integration: see build_integration
    and optional "operation_name" and "method_responses" (status codes).

    Args:
        api: REST API to add routes to
        lambdas: Dictionary of Lambda functions
        config_mgr: Configuration manager instance
        api_dir: API directory holding routes/

    Returns:
        List of "METHOD /path" keys created
    """
    created: List[str] = []

    for route_file in config_mgr.find_route_files(api_dir):
        rc = config_mgr.load_json(route_file)
        context = f"Route configuration in {route_file.name}"

        ErrorHandler.validate_required_fields(rc, ["path", "method", "integration"], context)
        ErrorHandler.validate_type(rc["integration"], dict, "integration", context)

        method = rc["method"].upper()
        ErrorHandler.validate_enum_value(method, HTTP_METHODS, "method", context)

        resource = api.root.resource_for_path(rc["path"])
        resource.add_method(
            method,
            build_integration(rc["integration"], lambdas, context),
            operation_name=rc.get("operation_name"),
            method_responses=[
                apigateway.MethodResponse(status_code=str(code))
                for code in rc.get("method_responses", [])
            ] or None,
        )
        created.append(f"{method} {rc['path']}")
    return created

# -----------------------------
# High-level construct
# -----------------------------

class RestApis(Construct):
    """
    Build REST APIs from JSON folders.

    Directory layout per API (under configs/apis/rest/):
      <api_dir>/api.json          # name, stage, access logs, CORS
      <api_dir>/routes/*.json     # one route per file

    Example usage in a stack:

        apis = RestApis(self, "Apis", stage=stage, lambdas=fleet.functions)
        apis.apis["hermod"]       # -> apigateway.RestApi
    """
    def __init__(
            self,
            scope: Construct,
            construct_id: str,
            *,
            stage: Stage,
            lambdas: Mapping[str, Any]
        ) -> None:
        super().__init__(scope, construct_id)

        self.config_mgr = ConfigManager(Stack.of(self), stage)
        self.apis: Dict[str, apigateway.RestApi] = {}
        self.routes: Dict[str, List[str]] = {}

        api_dirs = self.config_mgr.find_api_dirs("rest_apis")
        ErrorHandler.validate_configs_found(api_dirs, "REST API")

        for api_dir in api_dirs:
            name = api_dir.name
            api_conf = self.config_mgr.load_json(api_dir / "api.json")

            api = build_rest_api(self, name, api_conf, stage=stage)
            self.routes[name] = add_routes_from_dir(api, lambdas, self.config_mgr, api_dir)
            self.apis[name] = api
            logger.debug("Built REST API %s with %d routes", name, len(self.routes[name]))
