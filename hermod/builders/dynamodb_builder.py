"""
DynamoDB table builders for the Hermod CDK project.

This module builds DynamoDB tables from per-table JSON configurations.
It covers key schemas, billing mode, TTL, point-in-time recovery, optional
KMS encryption and Global Secondary Indexes, with validation through the
centralized error handler.
"""

from __future__ import annotations
import logging
from typing import Dict, Optional
from aws_cdk import Stack, Tags
from aws_cdk import aws_kms as kms
from aws_cdk import aws_dynamodb as dynamodb
from constructs import Construct
from hermod.builders.cdk_helpers import removal_policy_for
from hermod.configs.config_manager import ConfigManager
from hermod.configs.error_handler import ErrorHandler, ValidationDecorators
from hermod.configs.stages import Stage

logger = logging.getLogger(__name__)

# -----------------------------
# Type mappers
# -----------------------------

def to_attr_type(s: str) -> dynamodb.AttributeType:
    """
    Convert string to DynamoDB attribute type.

    Args:
        s: String representation of attribute type

    Returns:
        DynamoDB attribute type enum
    """
    m = {
        "STRING": dynamodb.AttributeType.STRING,
        "NUMBER": dynamodb.AttributeType.NUMBER,
        "BINARY": dynamodb.AttributeType.BINARY,
    }
    s = (s or "").upper()
    ErrorHandler.validate_enum_value(s, list(m), "type", "DynamoDB attribute")
    return m[s]

def to_projection_type(s: Optional[str]) -> dynamodb.ProjectionType:
    m = {
        "ALL": dynamodb.ProjectionType.ALL,
        "KEYS_ONLY": dynamodb.ProjectionType.KEYS_ONLY,
        "INCLUDE": dynamodb.ProjectionType.INCLUDE,
    }
    s = (s or "ALL").upper()
    ErrorHandler.validate_enum_value(s, list(m), "projection", "GSI")
    return m[s]

def _attribute(key: dict) -> dynamodb.Attribute:
    return dynamodb.Attribute(name=key["name"], type=to_attr_type(key["type"]))

# -----------------------------
# GSIs
# -----------------------------

def add_gsis(
        table: dynamodb.Table,
        gsis: list[dict]
    ) -> None:
    """
    Add Global Secondary Indexes to a DynamoDB table.

    Args:
        table: DynamoDB table to add GSIs to
        gsis: List of GSI configuration dictionaries
    """
    for i, g in enumerate(gsis or []):
        ErrorHandler.validate_required_fields(g, ["index_name", "partition_key"], f"GSI #{i}")
        ErrorHandler.validate_field_structure(g, "partition_key", ["name", "type"], f"GSI #{i}")

        sk = g.get("sort_key")
        if sk:
            ErrorHandler.validate_field_structure(g, "sort_key", ["name", "type"], f"GSI #{i}")

        table.add_global_secondary_index(
            index_name=g["index_name"],
            partition_key=_attribute(g["partition_key"]),
            sort_key=_attribute(sk) if sk else None,
            projection_type=to_projection_type(g.get("projection")),
        )

# -----------------------------
# Single table builder
# -----------------------------

@ValidationDecorators.validate_required_config_fields(
    ["table_name", "partition_key", "billing_mode"],
    context="Table"
)
def build_table(
        scope: Construct,
        name: str,
        conf: dict,
        *,
        stage: Stage
    ) -> dynamodb.Table:
    """
    Build a DynamoDB table from configuration.

    Args:
        scope: CDK construct scope
        name: Logical name for the table
        conf: Table configuration dictionary
        stage: Deployment stage, drives the removal policy

    Returns:
        DynamoDB table instance
    """
    context = f"Table configuration for {name}"
    ErrorHandler.validate_field_structure(conf, "partition_key", ["name", "type"], context)

    sk = conf.get("sort_key")
    if sk:
        ErrorHandler.validate_field_structure(conf, "sort_key", ["name", "type"], context)

    billing = conf["billing_mode"].upper()
    ErrorHandler.validate_enum_value(billing, ["PAY_PER_REQUEST", "PROVISIONED"], "billing_mode", context)
    removal = removal_policy_for(stage)

    # Customer managed key only when an alias is configured
    encryption_kwargs = {}
    kms_alias = conf.get("kms_alias")
    if kms_alias:
        encryption_kwargs = dict(
            encryption=dynamodb.TableEncryption.CUSTOMER_MANAGED,
            encryption_key=kms.Key(
                scope,
                f"KmsKey-{name}",
                alias=kms_alias,
                enable_key_rotation=True,
                removal_policy=removal,
            ),
        )

    table = dynamodb.Table(
        scope,
        f"Table-{name}",
        table_name=conf["table_name"],
        partition_key=_attribute(conf["partition_key"]),
        sort_key=_attribute(sk) if sk else None,
        billing_mode=dynamodb.BillingMode.PROVISIONED if billing == "PROVISIONED" else dynamodb.BillingMode.PAY_PER_REQUEST,
        read_capacity=conf.get("rcu") if billing == "PROVISIONED" else None,
        write_capacity=conf.get("wcu") if billing == "PROVISIONED" else None,
        time_to_live_attribute=conf.get("ttl_attribute"),
        point_in_time_recovery=bool(conf.get("pitr", False)),
        removal_policy=removal,
        **encryption_kwargs,
    )

    add_gsis(table, conf.get("global_secondary_indexes", []))

    for k, v in (conf.get("tags") or {}).items():
        Tags.of(table).add(k, v)

    logger.debug("Built table %s (%s)", name, conf["table_name"])
    return table

# -----------------------------
# Multi-table builder (file-per-table)
# -----------------------------

class DynamoTables(Construct):
    """
    Build every DynamoDB table found under configs/tables/.

    Each table JSON looks like:
      {
        "name": "routes",                        # optional; falls back to filename stem
        "table_name": "hermod-${Stage}-routes",
        "env_var": "ROUTES_TABLE",               # Lambda env var carrying the name
        "partition_key": {"name": "routeId", "type": "STRING"},
        "billing_mode": "PAY_PER_REQUEST",

        # Optional fields:
        "sort_key": {"name": "timestamp", "type": "NUMBER"},
        "pitr": true,
        "ttl_attribute": "ttl",
        "kms_alias": "alias/hermod-${Stage}-routes",
        "global_secondary_indexes": [ ... ],
        "tags": {"domain": "routing"}
      }
    """
    def __init__(
            self,
            scope: Construct,
            construct_id: str,
            *,
            stage: Stage
        ) -> None:
        super().__init__(scope, construct_id)

        self.config_mgr = ConfigManager(Stack.of(self), stage)
        self.tables: Dict[str, dynamodb.Table] = {}
        self.env_vars: Dict[str, str] = {}

        for _, conf in self.config_mgr.load_configs_with_defaults("tables"):
            logical_name = conf["name"]
            table = build_table(self, logical_name, conf, stage=stage)
            self.tables[logical_name] = table

            if conf.get("env_var"):
                self.env_vars[conf["env_var"]] = table.table_name
