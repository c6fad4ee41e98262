# lambdas/forward_logs/event_parser.py
import urllib.parse

from .errors import InvalidNotificationError
from .models import StorageObjectReference


def parse_s3_notification(event: dict) -> StorageObjectReference:
    """
    Pulls the bucket name and object key out of an S3 event notification.

    Only the first record is used; any further records are ignored.

    Args:
        event: The S3 notification event dictionary.

    Returns:
        The referenced object, with the key URL-decoded.

    Raises:
        InvalidNotificationError: If there is no record, or the bucket name
            or object key is missing.
    """
    records = (event or {}).get('Records') or []
    if not records:
        raise InvalidNotificationError('Event contains no records.')

    try:
        s3_record = records[0]['s3']
        bucket = s3_record['bucket']['name']
        key = s3_record['object']['key']
    except (KeyError, TypeError):
        raise InvalidNotificationError('First record is not a valid S3 notification.')

    if not bucket:
        raise InvalidNotificationError('Missing bucket name in S3 notification.')
    if not key:
        raise InvalidNotificationError('Missing object key in S3 notification.')

    # S3 delivers keys URL-encoded, with spaces as '+'
    return StorageObjectReference(bucket=bucket, key=urllib.parse.unquote_plus(key))
