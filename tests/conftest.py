import pytest
from io import BytesIO
from PIL import Image
from s3filemanager.models.config import S3Config
from s3filemanager.models.files import ObjectPage, ObjectRef
from s3filemanager.models.errors import NotFoundError


class FakeS3Service:
    """In memory stand-in of S3Service, listing pages of page_size objects sorted by key."""

    def __init__(self, config: S3Config, page_size: int = 1000):
        self.config = config
        self.bucket = config.bucket
        self.page_size = page_size
        self.objects = {}
        self.public = set()
        # method name -> HTTP status to answer instead of succeeding
        self.failures = {}
        self.calls = []

    def put(self, key: str, content: bytes = b"", content_type: str = "application/octet-stream"):
        self.objects[key] = (content, content_type)

    def get_url(self, key: str) -> str:
        if self.config.public_url:
            return f"{self.config.public_url.rstrip('/')}/{key}"
        return key

    async def list_objects(self, prefix: str = "", continuation_token=None) -> ObjectPage:
        self.calls.append(("list_objects", prefix, continuation_token))
        keys = sorted(k for k in self.objects if k.startswith(prefix))
        start = int(continuation_token) if continuation_token else 0
        end = start + self.page_size
        return ObjectPage(
            objects=[ObjectRef(key=k, size=len(self.objects[k][0])) for k in keys[start:end]],
            next_continuation_token=str(end) if end < len(keys) else None,
            is_truncated=end < len(keys))

    async def get_object(self, key: str):
        self.calls.append(("get_object", key))
        if key not in self.objects:
            raise NotFoundError(f"Object {key} does not exist", status_code=404)
        return self.objects[key]

    async def put_object(self, key: str, data, content_type: str) -> int:
        self.calls.append(("put_object", key))
        if "put_object" in self.failures:
            return self.failures["put_object"]
        self.put(key, data if isinstance(data, bytes) else data.read(), content_type)
        return 200

    async def copy_object(self, source_key: str, destination_key: str) -> int:
        self.calls.append(("copy_object", source_key, destination_key))
        if "copy_object" in self.failures:
            return self.failures["copy_object"]
        if source_key not in self.objects:
            return 404
        self.objects[destination_key] = self.objects[source_key]
        return 200

    async def delete_object(self, key: str) -> int:
        self.calls.append(("delete_object", key))
        if "delete_object" in self.failures:
            return self.failures["delete_object"]
        self.objects.pop(key, None)
        self.public.discard(key)
        return 204

    async def set_public_read_acl(self, key: str) -> int:
        self.calls.append(("set_public_read_acl", key))
        if "set_public_read_acl" in self.failures:
            return self.failures["set_public_read_acl"]
        if key not in self.objects:
            return 404
        self.public.add(key)
        return 200


@pytest.fixture
def config():
    return S3Config(bucket="test-bucket")


@pytest.fixture
def fake_s3_service(config):
    return FakeS3Service(config)


@pytest.fixture
def pdf_content():
    """A one page PDF document."""
    data = BytesIO()
    Image.new("RGB", (200, 300), "white").save(data, format="PDF")
    return data.getvalue()
