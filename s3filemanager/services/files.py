from typing import List, Tuple
from fastapi.datastructures import UploadFile
from ..models.config import S3Config
from ..models.files import MoveResult, TreeNode
from ..utils.files import FileChecker, normalize_prefix, get_file_extension
from ..models.errors import S3Error
from .s3 import S3Service
from .thumbnails import ThumbnailService, ThumbnailGenerationError
from .tree import TreeService
from .move import MoveService
import asyncio
import logging
import mimetypes

class FilesService:
  """
  This service provides the file manager operations: a virtual folder tree over a S3 bucket,
  search, move, upload with document previews, folder creation and deletion.
  """

  def __init__(self, config: S3Config, s3_service: S3Service = None):
    """Initialize the files service.

    Args:
        config (S3Config): The storage configuration.
        s3_service (S3Service, optional): The S3 client wrapper. Defaults to one made from the configuration.
    """
    self.config = config
    self.s3_service = s3_service if s3_service is not None else S3Service(config)
    self.thumbnail_service = ThumbnailService(self.s3_service, config)
    self.tree_service = TreeService(self.s3_service, config)
    self.move_service = MoveService(self.s3_service, self.thumbnail_service, config)
    self.file_checker = FileChecker(config.max_file_size)

  async def build_tree(self, prefix: str = "") -> TreeNode:
    """Build the folder tree under a prefix.

    Args:
        prefix (str, optional): The folder to list. Defaults to "".

    Returns:
        TreeNode: The root node.
    """
    return await self.tree_service.build_tree(prefix)

  async def search_tree(self, prefix: str, query: str) -> List[TreeNode]:
    """Search the files and folders by name.

    Args:
        prefix (str): The folder to search in.
        query (str): The text to look for.

    Returns:
        List[TreeNode]: The matching nodes.
    """
    return await self.tree_service.search_tree(prefix, query)

  async def get_tree(self, prefix: str = "", query: str = "") -> TreeNode:
    return await self.tree_service.get_tree(prefix, query)

  async def move(self, current_key: str, new_key: str) -> MoveResult:
    """Move or rename a file.

    Args:
        current_key (str): The file key.
        new_key (str): The destination key.

    Returns:
        MoveResult: The outcome of the move.
    """
    return await self.move_service.move(current_key, new_key)

  async def upload_file(self, upload_file: UploadFile, folder: str = "") -> TreeNode:
    """Upload a file to the specified folder, make it public and generate its preview.

    Args:
        upload_file (UploadFile): The file to upload.
        folder (str, optional): The folder to upload the file to. Defaults to "".

    Raises:
        ValueError: When the file has no name.
        S3Error: When the upload or the permission change fails.

    Returns:
        TreeNode: The uploaded file node.
    """
    if not upload_file.filename:
      raise ValueError("File name is required")
    await self.file_checker.check_size([upload_file])
    content = await upload_file.read()
    content_type = upload_file.content_type or self._get_mime_type(upload_file.filename)
    key = f"{normalize_prefix(folder)}{upload_file.filename}"

    status = await self.s3_service.put_object(key, content, content_type)
    if status != 200:
      raise S3Error(f"Failed to upload file {key} to S3", status_code=status)
    status = await self.s3_service.set_public_read_acl(key)
    if status != 200:
      raise S3Error(f"Failed to set permission of file {key}", status_code=status)

    if self.config.has_preview(key):
      try:
        await self.thumbnail_service.generate(key, content)
      except ThumbnailGenerationError as e:
        logging.warning(f"Could not generate preview of {key}: {e}")

    return TreeNode(
      name=upload_file.filename,
      is_directory=False,
      path=self.s3_service.get_url(key),
      file_extension=get_file_extension(upload_file.filename),
      size=len(content)
    )

  async def upload_files(self, upload_files: List[UploadFile], folder: str = "") -> List[TreeNode]:
    """Upload several files to the specified folder, concurrently.

    Args:
        upload_files (List[UploadFile]): The files to upload.
        folder (str, optional): The folder to upload the files to. Defaults to "".

    Returns:
        List[TreeNode]: The uploaded file nodes, in the order of the files.
    """
    return list(await asyncio.gather(
      *[self.upload_file(upload_file, folder) for upload_file in upload_files]))

  async def create_folder(self, path: str) -> TreeNode:
    """Create an empty folder, as a directory marker object.

    Args:
        path (str): The folder path.

    Raises:
        S3Error: When the marker cannot be written.

    Returns:
        TreeNode: The folder node.
    """
    key = normalize_prefix(path)
    if not key:
      raise ValueError("Folder path is required")
    status = await self.s3_service.put_object(key, b"", "application/x-directory")
    if status != 200:
      raise S3Error(f"Failed to create folder {key}", status_code=status)
    name = key.rstrip("/").split("/")[-1]
    return TreeNode(
      name=name,
      is_directory=True,
      path=self.s3_service.get_url(key),
      bread_crumbs=key.rstrip("/")
    )

  async def get_file(self, key: str) -> Tuple[bytes, str]:
    """Extract file content and mimetype from storage.

    Args:
        key (str): The file key.

    Raises:
        NotFoundError: When the file does not exist.

    Returns:
        Tuple: File content and mimetype.
    """
    return await self.s3_service.get_object(key)

  async def delete_file(self, key: str):
    """Delete the file with the specified key, and its preview if it has one.

    Args:
        key (str): The file key.

    Raises:
        S3Error: When the deletion fails.
    """
    status = await self.s3_service.delete_object(key)
    if status != 204:
      raise S3Error(f"Failed to delete file {key}", status_code=status)
    if self.config.has_preview(key):
      await self.thumbnail_service.delete(key)

  async def delete_folder(self, path: str) -> List[str]:
    """Delete a folder recursively.

    Args:
        path (str): The folder path.

    Raises:
        S3Error: When a deletion fails.

    Returns:
        List[str]: The deleted keys.
    """
    prefix = normalize_prefix(path)
    if not prefix:
      raise ValueError("Refusing to delete the bucket root")
    keys = []
    continuation_token = None
    while True:
      page = await self.s3_service.list_objects(prefix, continuation_token=continuation_token)
      keys.extend(obj.key for obj in page.objects)
      if not page.is_truncated or not page.next_continuation_token:
        break
      continuation_token = page.next_continuation_token
    if prefix not in keys:
      keys.append(prefix)

    deleted = []
    for key in keys:
      if key == prefix:
        # the marker may not exist, S3 deletes missing keys without error
        await self.s3_service.delete_object(key)
      else:
        await self.delete_file(key)
      deleted.append(key)
    return deleted

  def _get_mime_type(self, file_name: str) -> str:
    """Guess the mime type from file name.

    Args:
        file_name (str): The file name.

    Returns:
        str: A standard mime type string.
    """
    mime_type, encoding = mimetypes.guess_type(file_name)
    if mime_type is None:
      mime_type = 'application/octet-stream'
    return mime_type
