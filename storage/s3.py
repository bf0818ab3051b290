import logging
from typing import BinaryIO, Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

import config
from .base import BaseStorage, StorageError

logger = logging.getLogger(__name__)


class S3Storage(BaseStorage):
    def __init__(self):
        if not all([config.S3_BUCKET_NAME, config.AWS_ACCESS_KEY_ID, config.AWS_SECRET_ACCESS_KEY, config.AWS_REGION]):
            raise ValueError("S3 environment variables are not fully set.")
        self.s3_client = boto3.client(
            "s3",
            aws_access_key_id=config.AWS_ACCESS_KEY_ID,
            aws_secret_access_key=config.AWS_SECRET_ACCESS_KEY,
            region_name=config.AWS_REGION
        )
        self.bucket_name = config.S3_BUCKET_NAME
        self.base_url = f"https://{self.bucket_name}.s3.{config.AWS_REGION}.amazonaws.com/"

    def save(self, file: BinaryIO, filename: str, folder: Optional[str] = None, content_type: Optional[str] = None) -> str:
        s3_key = self.build_public_id(filename, folder)
        extra_args = {"ContentType": content_type} if content_type else None
        try:
            self.s3_client.upload_fileobj(file, self.bucket_name, s3_key, ExtraArgs=extra_args)
        except NoCredentialsError as e:
            raise StorageError("AWS credentials not available.") from e
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Error uploading S3 object {s3_key}: {e}") from e
        # Return the public URL of the file
        return f"{self.base_url}{s3_key}"

    def delete(self, public_id: str) -> bool:
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=public_id)
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") in ("404", "NoSuchKey", "NotFound"):
                logger.warning("S3 object not found for deletion: %s", public_id)
                return False
            raise StorageError(f"Error checking S3 object {public_id}: {e}") from e
        except NoCredentialsError as e:
            raise StorageError("AWS credentials not available.") from e
        except BotoCoreError as e:
            raise StorageError(f"Error checking S3 object {public_id}: {e}") from e

        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=public_id)
        except (BotoCoreError, ClientError) as e:
            raise StorageError(f"Error deleting S3 object {public_id}: {e}") from e
        return True

    def public_id_from_url(self, file_url: str) -> Optional[str]:
        if not file_url or not file_url.startswith(self.base_url):
            return None
        return file_url[len(self.base_url):]
