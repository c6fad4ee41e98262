# lambdas/forward_logs/forwarder.py
from datetime import datetime
from typing import Callable, Optional

from .cloudwatch_writer import LogEventPublisher, build_records, ensure_log_stream, stream_name_for
from .models import AppSettings, ForwardResult, LogDestination, StorageObjectReference, to_epoch_millis
from .s3_reader import decompress_log, fetch_object


class LogForwarder:
    """
    Copies one gzip log object from S3 into the daily CloudWatch log stream.

    The S3 and CloudWatch Logs clients are handed in so they can be created
    once per Lambda container and reused by warm invocations.
    """

    def __init__(self, s3_client, logs_client, settings: AppSettings):
        self.s3_client = s3_client
        self.logs_client = logs_client
        self.settings = settings

    def destination_for(self, started_at: datetime) -> LogDestination:
        return LogDestination(group=self.settings.log_group_name, stream=stream_name_for(started_at))

    def forward(
        self,
        ref: StorageObjectReference,
        started_at: datetime,
        remaining_time_ms: Optional[Callable[[], int]] = None,
    ) -> ForwardResult:
        """
        Runs every step in order; the first failure propagates and nothing
        after it is attempted.
        """
        # Fetch the object (second step, the handler decodes the notification first)
        payload = fetch_object(self.s3_client, ref)

        # Inflate it (third step)
        text = decompress_log(payload)

        # Resolve the daily stream (fourth step)
        destination = self.destination_for(started_at)
        created = ensure_log_stream(self.logs_client, destination)

        # Publish the lines (fifth step)
        records = build_records(text, to_epoch_millis(started_at))
        publisher = LogEventPublisher(
            self.logs_client,
            batch_size=self.settings.publish_batch_size,
            remaining_time_ms=remaining_time_ms,
            deadline_margin_ms=self.settings.deadline_margin_ms,
        )
        batches_sent = publisher.publish(destination, records)

        return ForwardResult(
            bucket=ref.bucket,
            key=ref.key,
            log_group=destination.group,
            log_stream=destination.stream,
            lines_published=len(records),
            batches_sent=batches_sent,
            stream_created=created,
        )
