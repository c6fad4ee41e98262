# alb_log_forwarder/lambdas/forward_logs/models.py
"""
Settings and plain-dataclass models for the log forwarder.
"""
from dataclasses import dataclass, asdict
from datetime import datetime, timedelta, timezone
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

# CloudWatch Logs PutLogEvents ceilings
MAX_EVENTS_PER_BATCH = 10000
MAX_BATCH_BYTES = 1048576
EVENT_OVERHEAD_BYTES = 26

EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


class AppSettings(BaseSettings):
    """
    Manages env vars using Pydantic BaseSettings.
    A local .env file is read too, which keeps local runs simple.
    """
    model_config = SettingsConfigDict(
        env_file='.env', env_file_encoding='utf-8', extra='ignore', populate_by_name=True
    )

    log_group_name: str = Field("ALB-access-log", alias='LOG_GROUP_NAME', min_length=1)
    aws_region: str = Field("us-east-1", alias='AWS_REGION')
    # 1 keeps the one-line-per-call behaviour; raise it to batch lines per request
    publish_batch_size: int = Field(1, alias='PUBLISH_BATCH_SIZE', ge=1, le=MAX_EVENTS_PER_BATCH)
    # stop publishing when less than this much invocation time is left
    deadline_margin_ms: int = Field(1000, alias='DEADLINE_MARGIN_MS', ge=0)


@lru_cache(maxsize=1)
def get_settings() -> AppSettings:
    return AppSettings()


# Data models
@dataclass(frozen=True)
class StorageObjectReference:
    """The S3 object named by a bucket notification."""
    bucket: str
    key: str

    @property
    def uri(self) -> str:
        return f"s3://{self.bucket}/{self.key}"


@dataclass(frozen=True)
class LogDestination:
    """A log stream inside a CloudWatch log group."""
    group: str
    stream: str


@dataclass(frozen=True)
class LogRecord:
    """
    One line of the log file as it is sent to CloudWatch Logs.
    timestamp_ms is the invocation start time, shared by every line.
    """
    message: str
    timestamp_ms: int

    @property
    def size(self) -> int:
        # how PutLogEvents counts the batch size
        return len(self.message.encode('utf-8')) + EVENT_OVERHEAD_BYTES

    def to_event(self) -> dict:
        return {"timestamp": self.timestamp_ms, "message": self.message}


@dataclass
class ForwardResult:
    """Summary of one forwarded object, returned from the handler."""
    bucket: str
    key: str
    log_group: str
    log_stream: str
    lines_published: int
    batches_sent: int
    stream_created: bool

    def to_dict(self) -> dict:
        return asdict(self)


def to_epoch_millis(moment: datetime) -> int:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    # integer maths, no float rounding
    return (moment - EPOCH) // timedelta(milliseconds=1)
