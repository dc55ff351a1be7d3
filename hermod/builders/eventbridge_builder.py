"""
EventBridge schedule builders for the Hermod CDK project.

Each JSON file under configs/schedules/ becomes one rate-based rule that
invokes a function of the Lambda fleet with a constant input.
"""

from __future__ import annotations
import logging
from typing import Any, Dict, Mapping
from aws_cdk import Duration, Stack
from aws_cdk import aws_events as events
from aws_cdk import aws_events_targets as targets
from constructs import Construct
from hermod.configs.config_manager import ConfigManager
from hermod.configs.error_handler import ErrorHandler, ValidationDecorators
from hermod.configs.stages import Stage

logger = logging.getLogger(__name__)


@ValidationDecorators.validate_required_config_fields(
    ["rule_name", "rate_minutes", "target"],
    context="Schedule"
)
def build_schedule(
        scope: Construct,
        name: str,
        conf: dict,
        lambdas: Mapping[str, Any]
    ) -> events.Rule:
    """
    Build a scheduled rule targeting a Lambda function.

    Args:
        scope: CDK construct scope
        name: Logical name for the rule
        conf: Schedule configuration dictionary
        lambdas: Dictionary of Lambda functions

    Returns:
        EventBridge rule

    Raises:
        TypeError: If rate_minutes is not an integer
        KeyError: If the target function is unknown
    """
    context = f"Schedule configuration for {name}"
    ErrorHandler.validate_type(conf["rate_minutes"], int, "rate_minutes", context)
    ErrorHandler.validate_reference(conf["target"], lambdas, "lambda", context)

    event_input = conf.get("input")
    rule = events.Rule(
        scope,
        f"Schedule-{name}",
        rule_name=conf["rule_name"],
        description=conf.get("description"),
        schedule=events.Schedule.rate(Duration.minutes(conf["rate_minutes"])),
        targets=[
            targets.LambdaFunction(
                lambdas[conf["target"]],
                event=events.RuleTargetInput.from_object(event_input) if event_input else None,
            )
        ],
    )
    logger.debug("Built schedule %s every %s min", conf["rule_name"], conf["rate_minutes"])
    return rule


class Schedules(Construct):
    """
    Build every schedule found under configs/schedules/.

    Schedule JSON:
      {
        "rule_name": "hermod-${Stage}-fetch-weather-schedule",
        "rate_minutes": 15,
        "target": "fetch-weather-data",
        "input": {"source": "scheduled", "type": "weather"}
      }
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

        config_mgr = ConfigManager(Stack.of(self), stage)
        self.rules: Dict[str, events.Rule] = {}

        for _, conf in config_mgr.load_configs_with_defaults("schedules"):
            self.rules[conf["name"]] = build_schedule(self, conf["name"], conf, lambdas)
