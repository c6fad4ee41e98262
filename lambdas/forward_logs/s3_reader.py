# lambdas/forward_logs/s3_reader.py
import gzip
import zlib

from botocore.exceptions import BotoCoreError, ClientError

from .errors import LogDecodeError, ObjectRetrievalError
from .models import StorageObjectReference


def fetch_object(s3_client, ref: StorageObjectReference) -> bytes:
    """
    Downloads the whole object body from S3.

    Raises:
        ObjectRetrievalError: For any S3 or transport failure. No retry here,
            a failed invocation is redelivered by Lambda.
    """
    try:
        response = s3_client.get_object(Bucket=ref.bucket, Key=ref.key)
        body = response["Body"].read()
    except ClientError as e:
        code = e.response.get('Error', {}).get('Code', 'Unknown')
        raise ObjectRetrievalError(ref.bucket, ref.key, code, str(e)) from e
    except BotoCoreError as e:
        raise ObjectRetrievalError(ref.bucket, ref.key, type(e).__name__, str(e)) from e

    print(f"Downloaded {len(body)} bytes from {ref.uri}")
    return body


def decompress_log(payload: bytes) -> str:
    """
    Inflates a gzip payload and decodes it as UTF-8.
    Concatenated gzip members come back as one text.
    """
    if not payload:
        raise LogDecodeError("Object is empty, expected a gzip stream")

    try:
        raw = gzip.decompress(payload)
    except (OSError, EOFError, zlib.error) as e:
        raise LogDecodeError(f"Object is not a valid gzip stream: {e}") from e

    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as e:
        raise LogDecodeError(f"Decompressed content is not valid UTF-8: {e}") from e
