from typing import Optional

class S3Error(Exception):
  """Exception raised when managing S3 files."""

  def __init__(self, message: str, status_code: Optional[int] = None):
    super().__init__(message)
    self.status_code = status_code

class NotFoundError(S3Error):
  """Exception raised when the requested object does not exist."""
  pass

class MoveError(S3Error):
  """Exception raised when a move could not be completed."""
  pass

class CopyFailedError(MoveError):
  """The source object could not be copied, the destination should not be trusted."""
  pass

class PermissionFailedError(MoveError):
  """The destination object exists but its public read permission could not be set."""
  pass

class DeleteFailedError(MoveError):
  """The source object could not be deleted, it is duplicated at the destination."""
  pass
