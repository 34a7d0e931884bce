import os
from typing import List, Optional
from fastapi.exceptions import HTTPException
from fastapi.datastructures import UploadFile
from s3filemanager.models.config import DEFAULT_MAX_FILE_SIZE
from s3filemanager.models.files import ObjectRef, TreeNode

# suffix of the keys that are directory markers
SEPARATOR = "/"


class InvalidKeyError(ValueError):
    """Exception raised when an object key is not under the listing prefix."""
    pass


class FileChecker:
    """A class that checks the size of files
    """

    def __init__(self, max_size: int = DEFAULT_MAX_FILE_SIZE):
        self.max_size = max_size

    async def check_size(self, files: list[UploadFile]):
        for file in files:
            content = await file.read()
            await self._check_content_size(content)
            await file.seek(0)
        return files

    async def _check_content_size(self, content: bytes | str):
        file_size = len(content)
        if file_size > self.max_size:
            detail = f"File size {file_size} exceeds max size {self.max_size}"
            raise HTTPException(400, detail=detail)


def normalize_prefix(prefix: str) -> str:
    """Make a folder path usable as a listing prefix: no leading separator, one trailing separator.

    Args:
        prefix (str): The folder path, possibly empty.

    Returns:
        str: The listing prefix, empty for the bucket root.
    """
    prefix = (prefix or "").lstrip(SEPARATOR)
    if prefix and not prefix.endswith(SEPARATOR):
        prefix += SEPARATOR
    return prefix


def split_key(key: str, prefix: str = "") -> List[str]:
    """Split an object key into its path segments relative to the listing prefix.

    Args:
        key (str): The object key.
        prefix (str, optional): The prefix the listing was scoped to. Defaults to "".

    Raises:
        InvalidKeyError: When the key is not under the prefix.

    Returns:
        List[str]: The non empty segments.
    """
    if not key.startswith(prefix):
        raise InvalidKeyError(f"Key {key} does not start with prefix {prefix}")
    relative_path = key[len(prefix):].strip(SEPARATOR)
    return [part for part in relative_path.split(SEPARATOR) if part]


def make_bread_crumbs(key: str, prefix: str = "") -> str:
    """Breadcrumb of a directory: its key relative to the listing prefix, without trailing separator."""
    if prefix and key.startswith(prefix):
        key = key[len(prefix):]
    return key.rstrip(SEPARATOR)


def get_file_extension(name: str) -> str:
    return os.path.splitext(name)[1]


def to_location(key: str, base_url: Optional[str] = None) -> str:
    """The node path of a key: its public URL if a base URL is known, the key otherwise."""
    if not base_url:
        return key
    return f"{base_url.rstrip(SEPARATOR)}/{key}"


def from_location(path: str, base_url: Optional[str] = None) -> str:
    """The key of a node path, reverse of to_location."""
    if base_url:
        base = f"{base_url.rstrip(SEPARATOR)}/"
        if path.startswith(base):
            return path[len(base):]
    return path


def insert_object(root: TreeNode, key: str, prefix: str = "", size: Optional[int] = None,
                  base_url: Optional[str] = None) -> TreeNode:
    """Add an object key to the tree, from the root node makes the intermediate folder nodes.

    A segment is a folder unless it is the last one of a key that is not a directory marker.
    Existing nodes are looked up by name, so inserting a key twice or in any order gives the same tree.

    Args:
        root (TreeNode): The root node
        key (str): The S3 object key
        prefix (str, optional): The listing prefix, stripped from the key. Defaults to "".
        size (int, optional): The object size in bytes. Defaults to None.
        base_url (str, optional): The public base URL of the keys. Defaults to None.

    Returns:
        TreeNode: The root node
    """
    parts = split_key(key, prefix)
    is_marker = key.endswith(SEPARATOR)
    current_node = root
    current_parts = []

    for i, part in enumerate(parts):
        current_parts.append(part)
        is_directory = i < len(parts) - 1 or is_marker
        matching_child = next(
            (child for child in current_node.children if child.name == part), None)

        if matching_child is None:
            if is_directory:
                dir_key = prefix + SEPARATOR.join(current_parts) + SEPARATOR
                matching_child = TreeNode(name=part,
                                          is_directory=True,
                                          path=to_location(dir_key, base_url),
                                          bread_crumbs=make_bread_crumbs(dir_key, prefix))
            else:
                matching_child = TreeNode(name=part,
                                          is_directory=False,
                                          path=to_location(key, base_url),
                                          file_extension=get_file_extension(part),
                                          size=size)
            current_node.children.append(matching_child)
        elif is_directory and not matching_child.is_directory:
            # file "a" listed before "a/b": the node has descendants, it is a folder
            matching_child.is_directory = True
            matching_child.file_extension = ""
            matching_child.size = None
            matching_child.bread_crumbs = make_bread_crumbs(
                from_location(matching_child.path, base_url), prefix)

        current_node = matching_child

    return root


class TreeNodeBuilder:
    """Builds the tree of nodes representing the folders and files of a flat listing of S3 keys
    """

    def __init__(self, prefix: str = "", base_url: Optional[str] = None):
        self.prefix = prefix
        self.base_url = base_url
        self.root = TreeNode(name="", is_directory=True, path=to_location(prefix, base_url))

    @classmethod
    def from_prefix(cls, prefix: str = "", base_url: Optional[str] = None):
        """Make a synthetic root node from which nodes will be added.

        Args:
            prefix (str, optional): The listing prefix, stripped from the keys. Defaults to "".
            base_url (str, optional): The public base URL of the keys. Defaults to None.

        Returns:
            TreeNodeBuilder: The builder
        """
        return cls(prefix=prefix, base_url=base_url)

    def add_objects(self, objects: List[ObjectRef]):
        for obj in objects:
            self.add_object(obj.key, obj.size)
        return self

    def add_object(self, key: str, size: Optional[int] = None):
        insert_object(self.root, key, self.prefix, size=size, base_url=self.base_url)
        return self

    def build(self) -> TreeNode:
        """Get the root of the tree of nodes.

        Returns:
            TreeNode: The root node
        """
        return self.root


def search_nodes(node: TreeNode, query: str) -> List[TreeNode]:
    """Find the nodes whose name contains the query, ignoring case.

    The tree is walked depth first, parents before children. Matches are copies without children,
    the descendants of a match are searched as well.

    Args:
        node (TreeNode): The node to search from, included in the search
        query (str): The text to look for

    Returns:
        List[TreeNode]: The matching nodes
    """
    results = []
    needle = query.casefold()
    if needle in node.name.casefold():
        results.append(node.model_copy(update={"children": []}))
    for child in node.children:
        results.extend(search_nodes(child, query))
    return results


def wrap_results(results: List[TreeNode]) -> TreeNode:
    """Make a synthetic directory node holding the search results."""
    return TreeNode(name="", is_directory=True, children=results)
