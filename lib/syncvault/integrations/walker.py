"""
Remote Directory Walker
=======================
Depth-bounded walk of a remote drive, producing an IntegrationFolder tree.

Provider listings are converted once into RemoteFolder / RemoteFile
entries by the listing source; the walker only dispatches on those two
types.

Depth semantics:
    The entries of the folder being visited are always collected. A
    subfolder is only expanded while the remaining depth is at least 1,
    and is then walked with one less. With max_depth=0 the root's own
    files and subfolders are returned, every subfolder left empty.
"""

import logging
from dataclasses import dataclass
from typing import List, Protocol, Union

from .models import IntegrationFile, IntegrationFolder
from ..config.constants import ROOT_FOLDER_ID

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RemoteFolder:
    """A directory entry of a remote listing."""
    id: str
    name: str


@dataclass(frozen=True)
class RemoteFile:
    """A leaf entry of a remote listing, already translated."""
    file: IntegrationFile


RemoteEntry = Union[RemoteFolder, RemoteFile]


class RemoteListingSource(Protocol):
    """What the walker needs from a provider."""

    def list_folder(self, folder_id: str) -> List[RemoteEntry]:
        """All entries directly under folder_id, in provider order."""
        ...

    def list_shared(self) -> List[RemoteEntry]:
        """Entries shared with the user."""
        ...

    def folder_name(self, folder_id: str) -> str:
        ...

    def root_listing_id(self) -> str:
        """Folder id to list for the synthesized root."""
        ...

    def root_name(self) -> str:
        ...


class RemoteDirectoryWalker:
    """
    Builds IntegrationFolder trees from a RemoteListingSource.

    Listing calls are sequential. Any exception raised by the source
    aborts the walk; no partially built tree is returned.
    """

    def __init__(self, source: RemoteListingSource, root_id: str = ROOT_FOLDER_ID):
        self.source = source
        self.root_id = root_id

    def walk(self, folder_id: str, max_depth: int) -> IntegrationFolder:
        """
        Walk the remote tree starting at folder_id.

        Args:
            folder_id: Folder to list; the synthesized root id also pulls in
                entries shared with the user
            max_depth: Number of subfolder levels to expand below folder_id

        Returns:
            The folder tree rooted at folder_id

        Raises:
            UpstreamError: If any listing call fails
        """
        if folder_id == self.root_id:
            response = IntegrationFolder(id=folder_id, name=self.source.root_name())
            logger.debug("Listing shared items for root")
            self._collect(response, self.source.list_shared(), max_depth)
            listing_id = self.source.root_listing_id()
        else:
            response = IntegrationFolder(id=folder_id, name=self.source.folder_name(folder_id))
            listing_id = folder_id

        self._fill(response, listing_id, max_depth)
        return response

    def _fill(self, folder: IntegrationFolder, listing_id: str, depth: int) -> None:
        self._collect(folder, self.source.list_folder(listing_id), depth)

    def _collect(self, folder: IntegrationFolder, entries: List[RemoteEntry], depth: int) -> None:
        for entry in entries:
            if isinstance(entry, RemoteFolder):
                child = IntegrationFolder(id=entry.id, name=entry.name)
                if depth >= 1:
                    self._fill(child, entry.id, depth - 1)
                folder.subfolders.append(child)
            elif isinstance(entry, RemoteFile):
                folder.files.append(entry.file)
            else:
                raise TypeError(f"Unexpected remote entry: {entry!r}")
