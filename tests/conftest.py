# tests/conftest.py
import gzip
from unittest.mock import MagicMock

import pytest
from botocore.exceptions import ClientError


def make_client_error(code: str, operation: str, message: str = "") -> ClientError:
    """A ClientError shaped the way botocore raises it."""
    return ClientError({"Error": {"Code": code, "Message": message or code}}, operation)


@pytest.fixture
def client_error():
    return make_client_error


@pytest.fixture
def gzip_body():
    """Returns a factory for a fake S3 GetObject response holding gzip text."""
    def _make(text: str) -> dict:
        body = MagicMock()
        body.read.return_value = gzip.compress(text.encode("utf-8"))
        return {"Body": body}
    return _make


def s3_event(bucket="alb-logs", key="AWSLogs/alb/2024/06/17/access.log.gz", extra_records=0) -> dict:
    record = {
        "eventSource": "aws:s3",
        "eventName": "ObjectCreated:Put",
        "s3": {"bucket": {"name": bucket}, "object": {"key": key, "size": 1024}},
    }
    other = {
        "eventSource": "aws:s3",
        "s3": {"bucket": {"name": "other-bucket"}, "object": {"key": "other.log.gz"}},
    }
    return {"Records": [record] + [other] * extra_records}


def make_logs_client() -> MagicMock:
    """A CloudWatch Logs client whose calls succeed."""
    logs = MagicMock()
    logs.create_log_stream.return_value = {}
    logs.put_log_events.return_value = {"nextSequenceToken": "49590000000000000000000000000000000000000000000000000000"}
    return logs
