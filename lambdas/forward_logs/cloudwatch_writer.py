# lambdas/forward_logs/cloudwatch_writer.py
from datetime import datetime, timezone
from typing import Callable, Iterator, List, Optional

from botocore.exceptions import BotoCoreError, ClientError

from .errors import (
    LogPublishError,
    LogStreamAlreadyExistsError,
    LogStreamResolutionError,
    PublishDeadlineExceededError,
)
from .models import (
    MAX_BATCH_BYTES,
    MAX_EVENTS_PER_BATCH,
    LogDestination,
    LogRecord,
)

ALREADY_EXISTS_CODE = "ResourceAlreadyExistsException"


def _error_code(error: ClientError) -> str:
    return error.response.get('Error', {}).get('Code', 'Unknown')


def stream_name_for(moment: datetime) -> str:
    """Daily stream name, YYYY-MM-DD in UTC."""
    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc)
    return moment.strftime("%Y-%m-%d")


def create_log_stream(logs_client, destination: LogDestination) -> None:
    """
    Calls CreateLogStream and classifies failures by their error code.

    Raises:
        LogStreamAlreadyExistsError: The stream is already there.
        LogStreamResolutionError: Any other failure.
    """
    try:
        logs_client.create_log_stream(
            logGroupName=destination.group,
            logStreamName=destination.stream,
        )
    except ClientError as e:
        code = _error_code(e)
        if code == ALREADY_EXISTS_CODE:
            raise LogStreamAlreadyExistsError(destination.group, destination.stream) from e
        raise LogStreamResolutionError(destination.group, destination.stream, code, str(e)) from e
    except BotoCoreError as e:
        raise LogStreamResolutionError(destination.group, destination.stream, type(e).__name__, str(e)) from e


def ensure_log_stream(logs_client, destination: LogDestination) -> bool:
    """
    Makes sure the destination stream exists. Creation is always attempted,
    an existing stream counts as success.

    Returns:
        True if the stream was created by this call, False if it already existed.
    """
    try:
        create_log_stream(logs_client, destination)
    except LogStreamAlreadyExistsError:
        print(f"Log stream '{destination.stream}' already exists in '{destination.group}'.")
        return False

    print(f"Created log stream '{destination.stream}' in '{destination.group}'.")
    return True


def split_lines(text: str) -> List[str]:
    """Non-empty lines of text, in order, without line terminators."""
    lines = []
    for line in text.split("\n"):
        if line.endswith("\r"):
            line = line[:-1]
        if line:
            lines.append(line)
    return lines


def build_records(text: str, timestamp_ms: int) -> List[LogRecord]:
    return [LogRecord(message=line, timestamp_ms=timestamp_ms) for line in split_lines(text)]


def batch_records(records: List[LogRecord], batch_size: int) -> Iterator[List[LogRecord]]:
    """
    Groups records in order, capped by batch_size events and by the
    PutLogEvents byte ceiling. A record is never split or dropped.
    """
    batch_size = max(1, min(batch_size, MAX_EVENTS_PER_BATCH))
    batch: List[LogRecord] = []
    batch_bytes = 0
    for record in records:
        if batch and (len(batch) >= batch_size or batch_bytes + record.size > MAX_BATCH_BYTES):
            yield batch
            batch, batch_bytes = [], 0
        batch.append(record)
        batch_bytes += record.size
    if batch:
        yield batch


class LogEventPublisher:
    """
    Sends LogRecords to one CloudWatch log stream, one PutLogEvents call per
    batch, strictly in order. The first failure stops the run.
    """

    def __init__(
        self,
        logs_client,
        batch_size: int = 1,
        remaining_time_ms: Optional[Callable[[], int]] = None,
        deadline_margin_ms: int = 0,
    ):
        self.logs_client = logs_client
        self.batch_size = batch_size
        self.remaining_time_ms = remaining_time_ms
        self.deadline_margin_ms = deadline_margin_ms

    def publish(self, destination: LogDestination, records: List[LogRecord]) -> int:
        """
        Publishes every record to the destination.

        Returns:
            The number of PutLogEvents calls made.

        Raises:
            PublishDeadlineExceededError: Too little invocation time left to
                send the next batch.
            LogPublishError: A call failed or the service rejected events.
        """
        published = 0
        batches_sent = 0
        for batch in batch_records(records, self.batch_size):
            self._check_deadline(published, len(records))
            self._put_batch(destination, batch, published)
            published += len(batch)
            batches_sent += 1

        print(f"Published {published} lines in {batches_sent} call(s) to {destination.group}/{destination.stream}")
        return batches_sent

    def _check_deadline(self, published: int, total: int) -> None:
        if self.remaining_time_ms is None:
            return
        remaining = self.remaining_time_ms()
        if remaining < self.deadline_margin_ms:
            raise PublishDeadlineExceededError(published, total, remaining)

    def _put_batch(self, destination: LogDestination, batch: List[LogRecord], published: int) -> None:
        try:
            response = self.logs_client.put_log_events(
                logGroupName=destination.group,
                logStreamName=destination.stream,
                logEvents=[record.to_event() for record in batch],
            )
        except ClientError as e:
            code = _error_code(e)
            raise LogPublishError(
                f"PutLogEvents failed after {published} lines ({code}): {e}", published, code
            ) from e
        except BotoCoreError as e:
            raise LogPublishError(
                f"PutLogEvents failed after {published} lines: {e}", published, type(e).__name__
            ) from e

        rejected = (response or {}).get('rejectedLogEventsInfo')
        if rejected:
            raise LogPublishError(
                f"CloudWatch rejected events after {published} lines: {rejected}", published, "RejectedLogEvents"
            )
