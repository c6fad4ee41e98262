# alb_log_forwarder/lambdas/forward_logs/app.py
import json
from datetime import datetime, timezone
from typing import Any, Dict

import boto3
from pydantic import ValidationError

from .errors import LogForwarderError, LogPublishError
from .event_parser import parse_s3_notification
from .forwarder import LogForwarder
from .models import get_settings


# initialize clients and load config outside of handler so warm Lambda invocations reuse them
try:
    SETTINGS = get_settings()
    S3_CLIENT = boto3.client('s3', region_name=SETTINGS.aws_region)
    LOGS_CLIENT = boto3.client('logs', region_name=SETTINGS.aws_region)
except ValidationError as e:
    # This will cause a Lambda init failure, which is appropriate for bad config.
    print(f"FATAL: Invalid forwarder configuration: {e}")
    raise e


def handler(event: Dict[str, Any], context: object) -> Dict[str, Any]:
    """
    Main Lambda handler, triggered by an S3 object-created notification.
    Any failure is re-raised so Lambda records the invocation as failed.
    """
    # every line of this invocation is stamped with this time
    started_at = datetime.now(timezone.utc)
    print(f"Received event: {json.dumps(event, default=str)}")

    remaining_time_ms = getattr(context, "get_remaining_time_in_millis", None)

    try:
        # Decode the notification (first step)
        ref = parse_s3_notification(event)
        print(f"Processing file: {ref.uri}")

        forwarder = LogForwarder(S3_CLIENT, LOGS_CLIENT, SETTINGS)
        result = forwarder.forward(ref, started_at, remaining_time_ms=remaining_time_ms)

    except LogPublishError as e:
        print(f"❌ Publishing aborted after {e.lines_published} lines: {e}")
        raise
    except LogForwarderError as e:
        print(f"❌ {type(e).__name__}: {e}")
        raise
    except Exception as e:
        print(f"❌ An unexpected error occurred while forwarding logs: {e}")
        raise

    print(f"✅ Forwarded {result.lines_published} lines from {ref.uri} to {result.log_group}/{result.log_stream}")
    return {
        "statusCode": 200,
        "body": json.dumps(result.to_dict())
    }
