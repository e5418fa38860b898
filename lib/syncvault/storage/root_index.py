"""
Root Index
==========
Per-user view of the root index (root hash + generation) layered on a
blob store. The view holds no state of its own.
"""

import logging
from dataclasses import dataclass

from .base import BaseBlobStore
from ..errors import GenerationConflictError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RootIndex:
    """Snapshot of a user's root index. generation 0 / '' means never written."""
    root_hash: str = ""
    generation: int = 0

    @property
    def is_empty(self) -> bool:
        return self.generation == 0 and not self.root_hash


class RootIndexView:
    """Read and write one user's root index through a blob store."""

    def __init__(self, store: BaseBlobStore, uid: str):
        self.store = store
        self.uid = uid

    def get(self) -> RootIndex:
        root_hash, generation = self.store.get_root_index(self.uid)
        return RootIndex(root_hash=root_hash, generation=generation)

    def write(self, generation: int, root_hash: str) -> RootIndex:
        """Write unconditionally; last writer wins."""
        new_generation = self.store.write_root_index(self.uid, generation, root_hash)
        return RootIndex(root_hash=root_hash, generation=new_generation)

    def write_if_current(self, expected_generation: int, root_hash: str) -> RootIndex:
        """
        Write only if the stored generation still matches expected_generation.

        The check is a read immediately before the write, not an atomic
        compare-and-swap: a concurrent writer can still slip in between.
        Callers treat GenerationConflictError as retryable.

        Args:
            expected_generation: Generation the caller based its change on
            root_hash: New root index payload

        Returns:
            The written RootIndex

        Raises:
            GenerationConflictError: If the generation moved
        """
        current = self.get()
        if current.generation != expected_generation:
            logger.info(
                f"root index conflict for {self.uid}: "
                f"expected {expected_generation}, found {current.generation}"
            )
            raise GenerationConflictError(expected_generation, current.generation)

        return self.write(expected_generation, root_hash)
