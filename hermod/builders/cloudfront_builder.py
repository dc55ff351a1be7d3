"""
CloudFront distribution builder for the Hermod CDK project.

The distribution serves the UI bucket through an Origin Access Identity and
proxies /api/* to the REST API deployment stage. The built UI is uploaded
from ui/dist when it exists.
"""

from __future__ import annotations
import logging
from pathlib import Path
from typing import Optional
from aws_cdk import (
    aws_apigateway as apigateway,
    aws_cloudfront as cloudfront,
    aws_cloudfront_origins as origins,
    aws_s3 as s3,
    aws_s3_deployment as s3_deployment,
    Duration,
    Stack,
)
from constructs import Construct
from hermod.builders.cdk_helpers import resource_name
from hermod.configs.stages import Stage

logger = logging.getLogger(__name__)

UI_DIST_DIR = Path(__file__).resolve().parents[2] / "ui" / "dist"

SPA_FALLBACK_STATUSES = (403, 404)


class WebDistribution(Construct):
    """
    CloudFront distribution in front of the UI bucket and the REST API.

    Behaviors:
      default     UI bucket, optimized caching
      /api/*      REST API stage, no caching, all viewer headers but Host
      /static/*   UI bucket, long-TTL cache policy
    """
    def __init__(
            self,
            scope: Construct,
            construct_id: str,
            *,
            stage: Stage,
            ui_bucket: s3.IBucket,
            api: apigateway.RestApi,
            ui_dist_dir: Optional[Path] = UI_DIST_DIR
        ) -> None:
        """
        Initialize the distribution.

        Args:
            scope: CDK construct scope
            construct_id: Construct ID
            stage: Deployment stage, used for resource naming
            ui_bucket: Bucket holding the UI assets
            api: REST API proxied under /api/*
            ui_dist_dir: Built UI directory; skipped when missing or None
        """
        super().__init__(scope, construct_id)

        oai = cloudfront.OriginAccessIdentity(
            self,
            "UIOriginAccessIdentity",
            comment="OAI for Hermod UI bucket",
        )
        ui_bucket.grant_read(oai)

        s3_origin = origins.S3BucketOrigin.with_origin_access_identity(
            ui_bucket,
            origin_access_identity=oai,
        )

        region = Stack.of(self).region
        api_origin = origins.HttpOrigin(
            f"{api.rest_api_id}.execute-api.{region}.amazonaws.com",
            origin_path=f"/{api.deployment_stage.stage_name}",
            protocol_policy=cloudfront.OriginProtocolPolicy.HTTPS_ONLY,
        )

        static_cache = cloudfront.CachePolicy(
            self,
            "StaticAssetsCachePolicy",
            cache_policy_name=resource_name("static-assets-cache", stage),
            default_ttl=Duration.days(30),
            max_ttl=Duration.days(365),
            min_ttl=Duration.days(1),
            enable_accept_encoding_brotli=True,
            enable_accept_encoding_gzip=True,
        )

        self.distribution = cloudfront.Distribution(
            self,
            "HermodDistribution",
            comment="Hermod - Predictive Multi-Modal Congestion Avoider",
            default_root_object="index.html",
            price_class=cloudfront.PriceClass.PRICE_CLASS_100,
            http_version=cloudfront.HttpVersion.HTTP2_AND_3,
            default_behavior=cloudfront.BehaviorOptions(
                origin=s3_origin,
                viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
                cache_policy=cloudfront.CachePolicy.CACHING_OPTIMIZED,
                compress=True,
                allowed_methods=cloudfront.AllowedMethods.ALLOW_GET_HEAD_OPTIONS,
            ),
            additional_behaviors={
                "/api/*": cloudfront.BehaviorOptions(
                    origin=api_origin,
                    viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.HTTPS_ONLY,
                    cache_policy=cloudfront.CachePolicy.CACHING_DISABLED,
                    origin_request_policy=cloudfront.OriginRequestPolicy.ALL_VIEWER_EXCEPT_HOST_HEADER,
                    allowed_methods=cloudfront.AllowedMethods.ALLOW_ALL,
                ),
                "/static/*": cloudfront.BehaviorOptions(
                    origin=s3_origin,
                    viewer_protocol_policy=cloudfront.ViewerProtocolPolicy.REDIRECT_TO_HTTPS,
                    cache_policy=static_cache,
                    compress=True,
                ),
            },
            # SPA routing
            error_responses=[
                cloudfront.ErrorResponse(
                    http_status=status,
                    response_http_status=200,
                    response_page_path="/index.html",
                    ttl=Duration.minutes(5),
                )
                for status in SPA_FALLBACK_STATUSES
            ],
        )

        self.url = f"https://{self.distribution.distribution_domain_name}"

        if ui_dist_dir is not None and Path(ui_dist_dir).is_dir():
            s3_deployment.BucketDeployment(
                self,
                "DeployUI",
                sources=[s3_deployment.Source.asset(str(ui_dist_dir))],
                destination_bucket=ui_bucket,
                distribution=self.distribution,
                distribution_paths=["/*"],
            )
        else:
            logger.info("No UI build at %s, skipping UI deployment", ui_dist_dir)
