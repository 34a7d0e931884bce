import os
from typing import Optional, List
from pydantic import BaseModel, Field

# 100 MB in binary
DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024

class S3Config(BaseModel):
  """Connection and behaviour settings of the file manager, passed explicitly to each service."""
  endpoint_url: Optional[str] = None
  access_key_id: Optional[str] = None
  secret_access_key: Optional[str] = None
  region: str = "us-east-1"
  bucket: str
  public_url: Optional[str] = None
  thumbnail_folder: str = "thumbnails"
  preview_extensions: List[str] = Field(default_factory=lambda: [".pdf"])
  max_file_size: int = DEFAULT_MAX_FILE_SIZE
  thumbnail_dpi: int = 96
  with_checksums: bool = False

  @classmethod
  def from_env(cls, prefix: str = "S3_"):
    """Read the settings from environment variables.

    Args:
        prefix (str, optional): The variables prefix. Defaults to "S3_".

    Returns:
        S3Config: The configuration.
    """
    def env(name: str, default=None):
      return os.environ.get(f"{prefix}{name}", default)

    settings = {
      "endpoint_url": env("ENDPOINT_URL"),
      "access_key_id": env("ACCESS_KEY_ID"),
      "secret_access_key": env("SECRET_ACCESS_KEY"),
      "region": env("REGION", "us-east-1"),
      "bucket": env("BUCKET"),
      "public_url": env("PUBLIC_URL"),
      "thumbnail_folder": env("THUMBNAIL_FOLDER", "thumbnails"),
    }
    return cls(**settings)

  def thumbnail_key(self, key: str) -> str:
    """Get the key of the preview image derived from a document key."""
    return f"{self.thumbnail_folder.strip('/')}/{key.lstrip('/')}"

  def has_preview(self, key: str) -> bool:
    """Whether a document with this key gets a generated preview."""
    ext = os.path.splitext(key)[1].lower()
    return ext in [e.lower() for e in self.preview_extensions]
