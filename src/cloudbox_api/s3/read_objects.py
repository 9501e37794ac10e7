"""Functions for reading objects from an S3 bucket--the "R" in CRUD."""

from typing import Iterator, Optional

import boto3
from botocore.exceptions import ClientError

try:
    from mypy_boto3_s3 import S3Client
    from mypy_boto3_s3.type_defs import ObjectTypeDef
except ImportError:
    ...

DEFAULT_MAX_KEYS = 1_000


def object_exists_in_s3(bucket_name: str, object_key: str, s3_client: Optional["S3Client"] = None) -> bool:
    """
    Check if an object exists in the S3 bucket using head_object.

    :param bucket_name: Name of the S3 bucket.
    :param object_key: Key of the object to check.
    :param s3_client: Optional S3 client to use. If not provided, a new client will be created.

    :return: True if the object exists, False otherwise.
    """
    s3_client = s3_client or boto3.client("s3")
    try:
        s3_client.head_object(Bucket=bucket_name, Key=object_key)
        return True
    except ClientError as err:
        error_code = err.response.get("Error", {}).get("Code")
        if error_code in ("404", "NoSuchKey", "NotFound"):
            return False
        raise


def generate_presigned_download_url(
    bucket_name: str,
    object_key: str,
    expires_in: int,
    s3_client: Optional["S3Client"] = None,
) -> str:
    """
    Create a time-limited GET URL for an object.

    :param expires_in: validity window in seconds; S3 rejects the URL afterwards.
    """
    s3_client = s3_client or boto3.client("s3")
    return s3_client.generate_presigned_url(
        ClientMethod="get_object",
        Params={"Bucket": bucket_name, "Key": object_key},
        ExpiresIn=expires_in,
    )


def iter_s3_objects_metadata(
    bucket_name: str,
    prefix: str = "",
    max_keys: int = DEFAULT_MAX_KEYS,
    s3_client: Optional["S3Client"] = None,
) -> Iterator["ObjectTypeDef"]:
    """
    Yield metadata of every object in the bucket, following continuation tokens.

    :param prefix: Only objects whose key starts with this prefix are listed.
    :param max_keys: Page size requested from S3.
    """
    s3_client = s3_client or boto3.client("s3")
    paginator = s3_client.get_paginator("list_objects_v2")
    for page in paginator.paginate(
        Bucket=bucket_name,
        Prefix=prefix,
        PaginationConfig={"PageSize": max_keys},
    ):
        yield from page.get("Contents", [])
