from typing import Optional, Tuple, Any
from aiobotocore.session import get_session
from botocore.config import Config
from botocore.exceptions import ClientError
from ..models.config import S3Config
from ..models.errors import NotFoundError
from ..models.files import ObjectPage, ObjectRef
import logging

def get_status_code(response: dict) -> int:
    return response["ResponseMetadata"]["HTTPStatusCode"]

def get_error_status_code(error: ClientError) -> Optional[int]:
    return error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")

class S3Service(object):

    def __init__(self, config: S3Config):
        """Initiate the S3 service.

        Args:
            config (S3Config): The endpoint, credentials and bucket of the S3 storage.
        """
        self.config = config
        self.s3_endpoint_url = config.endpoint_url
        self.region = config.region
        self.bucket = config.bucket

    def get_url(self, key: str) -> str:
        """Get the public URL of an object.

        Args:
            key (str): The object key

        Returns:
            str: The public URL, or the key itself when no public URL is configured.
        """
        if self.config.public_url:
            return f"{self.config.public_url.rstrip('/')}/{key}"
        return key

    async def list_objects(self, prefix: str = "", continuation_token: Optional[str] = None) -> ObjectPage:
        """List one page of the objects under a prefix.

        Args:
            prefix (str, optional): The key prefix. Defaults to "".
            continuation_token (str, optional): The cursor returned by the previous page. Defaults to None.

        Returns:
            ObjectPage: The objects of the page and the cursor of the next one.
        """
        params = {"Bucket": self.bucket, "Prefix": prefix}
        if continuation_token:
            params["ContinuationToken"] = continuation_token
        async with self._create_client() as client:
            response = await client.list_objects_v2(**params)
        return ObjectPage(
            objects=[ObjectRef(key=obj["Key"], size=obj.get("Size", 0))
                     for obj in response.get("Contents", [])],
            next_continuation_token=response.get("NextContinuationToken"),
            is_truncated=response.get("IsTruncated", False))

    async def get_object(self, key: str) -> Tuple[bytes, str]:
        """Extract object content and mimetype from S3 storage

        Args:
            key (str): The object key

        Raises:
            NotFoundError: When there is no such object.

        Returns:
            Tuple[bytes, str]: Object content and mimetype
        """
        async with self._create_client() as client:
            try:
                response = await client.get_object(Bucket=self.bucket, Key=key)
            except ClientError as e:
                if e.response.get("Error", {}).get("Code") in ("NoSuchKey", "404", "NotFound"):
                    raise NotFoundError(f"Object {key} does not exist", status_code=404)
                raise
            # Read the content of the S3 object
            async with response["Body"] as stream:
                content = await stream.read()
            return content, response.get("ContentType", "application/octet-stream")

    async def put_object(self, key: str, data: Any, content_type: str) -> int:
        """Perform the data upload to S3

        Args:
            key (str): Path of the object in the bucket
            data (Any): Bytes or file object to be uploaded
            content_type (str): Object mimetype

        Returns:
            int: The HTTP status of the request
        """
        async with self._create_client() as client:
            response = await client.put_object(
                Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        status = get_status_code(response)
        if status == 200:
            logging.info(f"File uploaded path : {self.s3_endpoint_url}/{self.bucket}/{key}")
        return status

    async def copy_object(self, source_key: str, destination_key: str) -> int:
        """Copy an object from one location to another in the same S3 storage

        Args:
            source_key (str): Key of the object to copy
            destination_key (str): Key of the copy

        Returns:
            int: The HTTP status of the request
        """
        async with self._create_client() as client:
            response = await client.copy_object(
                Bucket=self.bucket,
                CopySource={'Bucket': self.bucket, 'Key': source_key},
                Key=destination_key)
        status = get_status_code(response)
        if status == 200:
            logging.info(
                f"File copied path : {self.s3_endpoint_url}/{self.bucket}/{destination_key}")
        return status

    async def delete_object(self, key: str) -> int:
        """Delete an object from S3 storage

        Args:
            key (str): The object key

        Returns:
            int: The HTTP status of the request
        """
        async with self._create_client() as client:
            response = await client.delete_object(Bucket=self.bucket, Key=key)
        status = get_status_code(response)
        if status == 204:
            logging.info(f"File deleted path : {self.s3_endpoint_url}/{self.bucket}/{key}")
        return status

    async def set_public_read_acl(self, key: str) -> int:
        """Make an object readable by anyone

        Args:
            key (str): The object key

        Returns:
            int: The HTTP status of the request
        """
        async with self._create_client() as client:
            response = await client.put_object_acl(
                Bucket=self.bucket, Key=key, ACL="public-read")
        return get_status_code(response)

    #
    # Private methods
    #

    def _create_client(self):
        """Create an S3 client using the provided credentials and endpoint URL.

        Returns:
            Any: The S3 client.
        """
        settings = {
            'payload_signing_enabled': False,
            'use_accelerate_endpoint': False,
            'addressing_style': 'path'
        }
        if not self.config.with_checksums:
            # Completely disable checksums for S3-compatible services that don't support them
            settings['checksum_mode'] = 'DISABLED'
            settings['request_checksum_calculation'] = 'when_required'
            settings['response_checksum_validation'] = 'when_required'
        config = Config(
            s3=settings,
            signature_version='s3v4',
            disable_request_compression=True
        )

        session = get_session()
        return session.create_client(
            's3',
            region_name=self.region,
            endpoint_url=self.s3_endpoint_url,
            aws_secret_access_key=self.config.secret_access_key,
            aws_access_key_id=self.config.access_key_id,
            config=config)
