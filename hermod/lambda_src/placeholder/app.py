import json
import logging
import os
from datetime import datetime, timezone

logger = logging.getLogger()
logger.setLevel(logging.INFO)

NAME = os.environ.get("HANDLER_NAME", "handler")


def handler(event, context):
    logger.info("%s invoked: %s", NAME, json.dumps(event, default=str))
    return {
        "statusCode": 501,
        "body": json.dumps(
            {
                "message": f"{NAME} not yet implemented",
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        ),
    }
