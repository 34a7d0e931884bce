from enum import Enum
from typing import Optional, List
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from .errors import CopyFailedError, PermissionFailedError, DeleteFailedError

class ObjectRef(BaseModel):
  key: str
  size: int = 0

class ObjectPage(BaseModel):
  objects: List[ObjectRef] = Field(default_factory=list)
  next_continuation_token: Optional[str] = None
  is_truncated: bool = False

class TreeNode(BaseModel):
  model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

  name: str = ""
  is_directory: bool = False
  path: str = ""
  file_extension: str = ""
  bread_crumbs: str = ""
  size: Optional[int] = None
  children: List["TreeNode"] = Field(default_factory=list)

# We need to update self references.
TreeNode.model_rebuild()

class MoveStage(str, Enum):
  COPIED = "copied"
  PERMISSION_SET = "permission_set"
  DELETED = "deleted"
  THUMBNAIL_GENERATED = "thumbnail_generated"

class MoveStatus(str, Enum):
  OK = "ok"
  COPY_FAILED = "copy_failed"
  PERMISSION_FAILED = "permission_failed"
  DELETE_FAILED = "delete_failed"
  THUMBNAIL_FAILED = "thumbnail_failed"

class MoveResult(BaseModel):
  source_key: str
  destination_key: str
  status: MoveStatus = MoveStatus.OK
  completed: List[MoveStage] = Field(default_factory=list)
  status_code: Optional[int] = None
  message: Optional[str] = None

  @property
  def succeeded(self) -> bool:
    """Whether the object now lives at the destination key only.

    A missing preview does not make a move fail.
    """
    return self.status in (MoveStatus.OK, MoveStatus.THUMBNAIL_FAILED)

  def raise_for_status(self):
    """Raise the error matching the failed stage, if the move did not succeed.

    Raises:
        CopyFailedError: The source could not be copied.
        PermissionFailedError: The destination ACL could not be set.
        DeleteFailedError: The source could not be deleted, both keys exist.
    """
    errors = {
      MoveStatus.COPY_FAILED: CopyFailedError,
      MoveStatus.PERMISSION_FAILED: PermissionFailedError,
      MoveStatus.DELETE_FAILED: DeleteFailedError,
    }
    if self.status in errors:
      raise errors[self.status](
        f"Move of {self.source_key} to {self.destination_key} failed: {self.message}",
        status_code=self.status_code)
    return self
