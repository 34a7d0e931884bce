from .files import FilesService
from ..models.files import TreeNode, MoveResult, MoveStage, MoveStatus
from ..models.errors import S3Error, NotFoundError, MoveError, CopyFailedError, PermissionFailedError, DeleteFailedError
from .s3 import S3Service
from .tree import TreeService
from .move import MoveService
from .thumbnails import ThumbnailService, ThumbnailGenerationError
