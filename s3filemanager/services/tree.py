from typing import List
from ..models.config import S3Config
from ..models.files import TreeNode
from ..utils.files import TreeNodeBuilder, normalize_prefix, search_nodes, wrap_results
from .s3 import S3Service
import logging

class TreeService:
    """Synthesizes the folder tree of the flat S3 listing.
    """

    def __init__(self, s3_service: S3Service, config: S3Config):
        self.s3_service = s3_service
        self.config = config

    async def build_tree(self, prefix: str = "") -> TreeNode:
        """List all the objects under a prefix and fold them into a tree.

        The pages are requested one after the other until S3 reports there is no more,
        each call owns the tree it returns.

        Args:
            prefix (str, optional): The folder to list. Defaults to "" (the whole bucket).

        Returns:
            TreeNode: The synthetic root node, its children are the content of the folder.
        """
        prefix = normalize_prefix(prefix)
        builder = TreeNodeBuilder.from_prefix(prefix, base_url=self.config.public_url)
        continuation_token = None
        pages = 0
        while True:
            page = await self.s3_service.list_objects(prefix, continuation_token=continuation_token)
            builder.add_objects(page.objects)
            pages += 1
            if not page.is_truncated or not page.next_continuation_token:
                break
            continuation_token = page.next_continuation_token
        logging.debug(f"Listed {pages} page(s) of {self.config.bucket}/{prefix}")
        return builder.build()

    async def search_tree(self, prefix: str, query: str) -> List[TreeNode]:
        """Find the files and folders under a prefix whose name contains the query.

        Args:
            prefix (str): The folder to search in
            query (str): The text to look for, case insensitive

        Returns:
            List[TreeNode]: The matching nodes, without children
        """
        root = await self.build_tree(prefix)
        # the synthetic root is not an entry of the folder
        return [node for child in root.children for node in search_nodes(child, query)]

    async def get_tree(self, prefix: str = "", query: str = "") -> TreeNode:
        """Get the folder tree, or the search results wrapped in a root node when a query is given.

        Args:
            prefix (str, optional): The folder to list. Defaults to "".
            query (str, optional): The text to look for. Defaults to "".

        Returns:
            TreeNode: The root node
        """
        if not query:
            return await self.build_tree(prefix)
        return wrap_results(await self.search_tree(prefix, query))
