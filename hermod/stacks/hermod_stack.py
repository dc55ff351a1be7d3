from __future__ import annotations
from aws_cdk import (
    Stack, CfnOutput
)
from constructs import Construct

from hermod.builders.cdk_helpers import apply_common_tags
from hermod.builders.cloudfront_builder import WebDistribution
from hermod.builders.dynamodb_builder import DynamoTables
from hermod.builders.eventbridge_builder import Schedules
from hermod.builders.lambda_builder import LambdaFleet
from hermod.builders.rest_api_builder import RestApis
from hermod.builders.s3_builder import Buckets
from hermod.configs.stages import Stage


class HermodStack(Stack):
    """
    Application stack for Hermod, the predictive multi-modal congestion avoider.

    What this stack does:
      1) Builds the DynamoDB tables from per-table JSON files.
      2) Builds the S3 buckets (UI assets, raw data, ML models).
      3) Builds the Lambda fleet; every function gets the table and bucket
         names as environment variables.
      4) Builds the REST API from api.json + routes/*.json.
      5) Schedules the data fetchers with EventBridge rules.
      6) Puts CloudFront in front of the UI bucket and the API.
      7) Exposes the website and API URLs as CloudFormation outputs.

    The stage is explicit so a pipeline deployment never depends on the
    STAGE variable of the build container.
    """

    def __init__(self, scope: Construct, construct_id: str, *, stage: Stage, **kwargs) -> None:
        super().__init__(scope, construct_id, **kwargs)
        self.stage = stage

        # 1) + 2) Storage
        dyn = DynamoTables(self, "Dynamo", stage=stage)
        storage = Buckets(self, "Buckets", stage=stage)
        self.tables = dyn.tables
        self.buckets = storage.buckets

        # 3) Compute
        common_env = {**dyn.env_vars, **storage.env_vars}
        self.functions = LambdaFleet(
            self, "Lambdas",
            stage=stage,
            tables=self.tables,
            buckets=self.buckets,
            common_env=common_env,
        ).functions

        # 4) REST API
        apis = RestApis(self, "Apis", stage=stage, lambdas=self.functions)
        self.api = apis.apis["hermod"]

        # 5) Schedules
        Schedules(self, "Schedules", stage=stage, lambdas=self.functions)

        # 6) CDN
        web = WebDistribution(
            self, "Web",
            stage=stage,
            ui_bucket=self.buckets["ui-assets"],
            api=self.api,
        )
        self.distribution = web.distribution

        apply_common_tags(self, stage)

        # 7) Outputs
        CfnOutput(self, "WebsiteUrl", value=web.url, description="Hermod web application URL")
        CfnOutput(self, "ApiUrl", value=self.api.url, description="Hermod REST API URL")
