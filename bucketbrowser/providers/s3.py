import sys

from botocore.exceptions import BotoCoreError, ClientError

from ..errors import FetchFailed, ListingFailed
from .base import CloudProvider


def _error_code(e: ClientError) -> str:
    return e.response.get('Error', {}).get('Code', 'Unknown')


class S3Provider(CloudProvider):
    """boto3-backed provider. Takes an already configured S3 client."""

    name = 's3'

    def __init__(self, s3_client):
        self.s3_client = s3_client

    def run_listing(self, bucket: str, prefix: str) -> dict:
        try:
            response = self.s3_client.list_objects_v2(
                Bucket=bucket,
                Prefix=prefix,
                Delimiter='/',
            )
        except ClientError as e:
            error_code = _error_code(e)
            print(f"Error listing S3 objects at '{prefix}': {error_code}", file=sys.stderr)
            raise ListingFailed(f"S3 error: {error_code}") from e
        except BotoCoreError as e:
            print(f"Error listing S3 objects: {str(e)}", file=sys.stderr)
            raise ListingFailed(str(e)) from e

        return {
            'CommonPrefixes': response.get('CommonPrefixes', []),
            'Contents': response.get('Contents', []),
        }

    def run_fetch(self, bucket: str, key: str, dest_path: str) -> bool:
        try:
            self.s3_client.download_file(bucket, key, dest_path)
        except ClientError as e:
            error_code = _error_code(e)
            if error_code in ('404', 'NoSuchKey'):
                raise FetchFailed(f"Object not found: s3://{bucket}/{key}") from e
            if error_code in ('403', 'AccessDenied'):
                raise FetchFailed(f"Access denied to s3://{bucket}/{key}") from e
            raise FetchFailed(f"S3 error: {error_code}") from e
        except BotoCoreError as e:
            raise FetchFailed(str(e)) from e
        return True
