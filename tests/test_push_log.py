# tests/test_push_log.py
import gzip
from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

from cli.push_log import build_object_key, compress_log_text, create_sample_alb_lines, main, upload_log
from lambdas.forward_logs.cloudwatch_writer import split_lines
from lambdas.forward_logs.s3_reader import decompress_log
from conftest import make_client_error


def test_sample_lines():
    text = create_sample_alb_lines(4)
    lines = split_lines(text)
    assert len(lines) == 4
    assert all(line.startswith("http ") for line in lines)


def test_compressed_text_is_readable_by_the_forwarder():
    text = create_sample_alb_lines(2)
    assert decompress_log(compress_log_text(text)) == text


def test_object_key_is_date_partitioned_gzip():
    key = build_object_key("/AWSLogs/alb/", datetime(2024, 6, 17, 13, 30, tzinfo=timezone.utc))
    assert key.startswith("AWSLogs/alb/2024/06/17/20240617T133000Z_")
    assert key.endswith(".log.gz")


def test_upload_log_puts_object():
    s3 = MagicMock()
    payload = gzip.compress(b"GET /a\n")

    assert upload_log(s3, "alb-logs", "AWSLogs/alb/a.log.gz", payload) is True
    kwargs = s3.put_object.call_args.kwargs
    assert kwargs["Bucket"] == "alb-logs"
    assert kwargs["Body"] == payload
    assert kwargs["ContentEncoding"] == "gzip"


def test_upload_log_reports_failure():
    s3 = MagicMock()
    s3.put_object.side_effect = make_client_error("AccessDenied", "PutObject")
    assert upload_log(s3, "alb-logs", "a.log.gz", b"") is False


def test_main_requires_bucket():
    with patch("cli.push_log.LOG_BUCKET", None):
        assert main([]) == 1


def test_main_uploads_file(tmp_path):
    log_file = tmp_path / "access.log"
    log_file.write_text("GET /a\nGET /b\n", encoding="utf-8")
    s3 = MagicMock()

    with patch("cli.push_log.boto3.client", return_value=s3):
        assert main([str(log_file), "--bucket", "alb-logs"]) == 0

    body = s3.put_object.call_args.kwargs["Body"]
    assert gzip.decompress(body) == b"GET /a\nGET /b\n"
