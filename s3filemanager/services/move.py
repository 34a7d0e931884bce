from botocore.exceptions import BotoCoreError, ClientError
from ..models.config import S3Config
from ..models.files import MoveResult, MoveStage, MoveStatus
from ..models.errors import S3Error
from .s3 import S3Service, get_error_status_code
from .thumbnails import ThumbnailService, ThumbnailGenerationError
import logging

class MoveService:
    """Moves (renames) objects. S3 has no rename, the object is copied then the source is deleted.

    The steps are not atomic, a failure is reported with the stage it happened in:

    1. copy the source to the destination,
    2. make the destination publicly readable,
    3. delete the source, on failure both keys hold the content,
    4. regenerate the preview of documents that have one, on failure the move still succeeded.
    """

    # expected HTTP status of each stage
    COPY_STATUS = 200
    ACL_STATUS = 200
    DELETE_STATUS = 204

    def __init__(self, s3_service: S3Service, thumbnail_service: ThumbnailService, config: S3Config):
        self.s3_service = s3_service
        self.thumbnail_service = thumbnail_service
        self.config = config

    async def move(self, current_key: str, new_key: str) -> MoveResult:
        """Move an object to a new key.

        Args:
            current_key (str): The key of the object to move
            new_key (str): The destination key

        Raises:
            ValueError: When the source and destination are the same key.

        Returns:
            MoveResult: The outcome, with the completed stages and the failed one if any.
        """
        if current_key == new_key:
            raise ValueError(f"Cannot move {current_key} onto itself")
        result = MoveResult(source_key=current_key, destination_key=new_key)

        failed = await self._run_stage(result, MoveStatus.COPY_FAILED, self.COPY_STATUS,
                                       self.s3_service.copy_object(current_key, new_key))
        if failed:
            return result
        result.completed.append(MoveStage.COPIED)

        failed = await self._run_stage(result, MoveStatus.PERMISSION_FAILED, self.ACL_STATUS,
                                       self.s3_service.set_public_read_acl(new_key))
        if failed:
            return result
        result.completed.append(MoveStage.PERMISSION_SET)

        failed = await self._run_stage(result, MoveStatus.DELETE_FAILED, self.DELETE_STATUS,
                                       self.s3_service.delete_object(current_key))
        if failed:
            logging.error(f"File duplicated, {current_key} and {new_key} both exist")
            return result
        result.completed.append(MoveStage.DELETED)

        if self.config.has_preview(current_key):
            if self.config.has_preview(new_key):
                try:
                    await self.thumbnail_service.generate(new_key)
                    result.completed.append(MoveStage.THUMBNAIL_GENERATED)
                except ThumbnailGenerationError as e:
                    logging.warning(f"Could not regenerate preview of {new_key}: {e}")
                    result.status = MoveStatus.THUMBNAIL_FAILED
                    result.message = str(e)
            # the source document is gone, so is its preview
            await self.thumbnail_service.delete(current_key)

        logging.info(f"File moved from {current_key} to {new_key}")
        return result

    async def _run_stage(self, result: MoveResult, failure: MoveStatus, expected_status: int, call) -> bool:
        """Await one store call, record its failure in the result.

        Returns:
            bool: True if the stage failed.
        """
        try:
            status = await call
        except ClientError as e:
            status = get_error_status_code(e)
            message = str(e)
        except S3Error as e:
            status = e.status_code
            message = str(e)
        except BotoCoreError as e:
            status = None
            message = str(e)
        else:
            if status == expected_status:
                return False
            message = f"Unexpected HTTP status {status}"
        result.status = failure
        result.status_code = status
        result.message = message
        logging.error(
            f"Error moving file from {result.source_key} to {result.destination_key} ({failure.value}): {message}")
        return True
