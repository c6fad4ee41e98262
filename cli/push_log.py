import os
import argparse
import gzip
import uuid
from datetime import datetime, timezone

import boto3
from botocore.exceptions import ClientError
from dotenv import load_dotenv

# Load environment variables from a .env file for local testing
load_dotenv()

# Bucket watched by the forwarder Lambda
LOG_BUCKET = os.environ.get("LOG_BUCKET")
DEFAULT_PREFIX = "AWSLogs/alb"


def create_sample_alb_lines(count: int = 3) -> str:
    """
    Builds a few ALB access-log lines in the standard space-separated format.
    """
    now = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")
    lines = []
    for i in range(count):
        lines.append(
            f'http {now} app/my-alb/50dc6c495c0c9188 192.168.131.39:{2817 + i} 10.0.0.1:80 '
            f'0.000 0.001 0.000 200 200 34 366 "GET http://www.example.com:80/item/{i} HTTP/1.1" '
            f'"curl/7.46.0" - - arn:aws:elasticloadbalancing:us-east-2:123456789012:targetgroup/my-targets/73e2d6bc24d8a067 '
            f'"Root=1-58337262-36d228ad5d99923122bbe354" "-" "-" 0 {now} "forward" "-" "-" "10.0.0.1:80" "200" "-" "-"'
        )
    return "\n".join(lines) + "\n"


def compress_log_text(text: str) -> bytes:
    return gzip.compress(text.encode("utf-8"))


def build_object_key(prefix: str, now: datetime = None) -> str:
    """
    Date-partitioned key ending in .log.gz, the suffix the bucket notification filters on.
    """
    now = now or datetime.now(timezone.utc)
    prefix = prefix.strip("/")
    return f"{prefix}/{now:%Y/%m/%d}/{now:%Y%m%dT%H%M%SZ}_{uuid.uuid4().hex[:8]}.log.gz"


def upload_log(s3_client, bucket: str, key: str, payload: bytes) -> bool:
    """
    Uploads a gzip payload to S3, which triggers the forwarder.
    """
    try:
        s3_client.put_object(
            Bucket=bucket,
            Key=key,
            Body=payload,
            ContentType="text/plain",
            ContentEncoding="gzip",
        )
    except ClientError as e:
        print(f"\n❌ Failed to upload log file.")
        print(f"Error: {e.response['Error']['Message']}")
        return False

    print(f"\n✅ Success! Uploaded {len(payload)} bytes to s3://{bucket}/{key}")
    return True


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description="Gzip a log file and upload it to the forwarder bucket.")
    parser.add_argument("file", nargs="?", help="Plain-text log file to upload. Sample ALB lines are used when omitted.")
    parser.add_argument("--bucket", default=LOG_BUCKET, help="Target bucket (defaults to LOG_BUCKET).")
    parser.add_argument("--prefix", default=DEFAULT_PREFIX, help="Key prefix inside the bucket.")
    parser.add_argument("--lines", type=int, default=3, help="Number of sample lines when no file is given.")
    args = parser.parse_args(argv)

    if not args.bucket:
        print("❌ ERROR: LOG_BUCKET environment variable not set. Please create a .env file or pass --bucket.")
        return 1

    if args.file:
        with open(args.file, "r", encoding="utf-8") as f:
            text = f.read()
    else:
        text = create_sample_alb_lines(args.lines)

    print("--- Log Forwarder Push CLI ---")
    key = build_object_key(args.prefix)
    ok = upload_log(boto3.client("s3"), args.bucket, key, compress_log_text(text))
    return 0 if ok else 1


if __name__ == "__main__":
    raise SystemExit(main())
