# alb_log_forwarder/lambdas/forward_logs/errors.py
"""
Exceptions raised by the forwarding pipeline. Every one of them ends the
invocation; the handler lets them reach the Lambda runtime.
"""


class LogForwarderError(Exception):
    """Base class for all forwarding failures."""
    pass


class InvalidNotificationError(LogForwarderError, ValueError):
    """The trigger event does not name a bucket and an object key."""
    pass


class ObjectRetrievalError(LogForwarderError):
    def __init__(self, bucket: str, key: str, code: str, detail: str):
        self.bucket = bucket
        self.key = key
        self.code = code
        super().__init__(f"Could not read s3://{bucket}/{key} ({code}): {detail}")


class LogDecodeError(LogForwarderError):
    """The object is not valid gzip or its content is not UTF-8."""
    pass


class LogStreamAlreadyExistsError(LogForwarderError):
    """CreateLogStream reported ResourceAlreadyExistsException."""
    def __init__(self, group: str, stream: str):
        self.group = group
        self.stream = stream
        super().__init__(f"Log stream '{stream}' already exists in group '{group}'")


class LogStreamResolutionError(LogForwarderError):
    def __init__(self, group: str, stream: str, code: str, detail: str):
        self.group = group
        self.stream = stream
        self.code = code
        super().__init__(f"Could not create log stream '{stream}' in group '{group}' ({code}): {detail}")


class LogPublishError(LogForwarderError):
    """
    Publishing stopped part way. lines_published tells how many lines were
    already delivered; those are not rolled back.
    """
    def __init__(self, message: str, lines_published: int, code: str = "Unknown"):
        self.lines_published = lines_published
        self.code = code
        super().__init__(message)


class PublishDeadlineExceededError(LogPublishError):
    def __init__(self, lines_published: int, lines_total: int, remaining_ms: int):
        self.lines_total = lines_total
        self.remaining_ms = remaining_ms
        super().__init__(
            f"Stopped after {lines_published}/{lines_total} lines with {remaining_ms} ms left",
            lines_published,
            code="DeadlineExceeded",
        )
