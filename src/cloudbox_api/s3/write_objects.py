"""Functions for writing objects to an S3 bucket--the "C" in CRUD."""

from typing import Optional

import boto3

try:
    from mypy_boto3_s3 import S3Client
except ImportError:
    ...

DEFAULT_CONTENT_TYPE = "application/octet-stream"


def upload_s3_object(
    bucket_name: str,
    object_key: str,
    file_content: bytes,
    content_type: Optional[str] = None,
    s3_client: Optional["S3Client"] = None,
) -> str:
    """
    Store bytes under a new key in one request.

    Empty payloads are valid objects; their ContentLength is 0.

    :param bucket_name: The name of the S3 bucket.
    :param object_key: Key the object is written under. Keys are never reused, so nothing is overwritten.
    :param file_content: Raw bytes of the upload.
    :param content_type: MIME type to record on the object; defaults to application/octet-stream.
    :param s3_client: An optional boto3 S3 client. If not provided, one will be created.

    :return: The ETag S3 assigned to the stored object.
    """
    s3_client = s3_client or boto3.client("s3")
    response = s3_client.put_object(
        Bucket=bucket_name,
        Key=object_key,
        Body=file_content,
        ContentLength=len(file_content),
        ContentType=content_type or DEFAULT_CONTENT_TYPE,
    )
    return response["ETag"]
