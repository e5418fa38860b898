"""
SyncVault Core - Google Drive Integration
=========================================
Google Drive as an import source for the sync namespace.

Features:
- Depth-bounded folder walks, including items shared with the user
- Export of native Docs/Sheets/Slides to PDF on download
- Single-file metadata with thumbnail
- Upload into a Drive folder

All Drive API and transport failures surface as UpstreamError.
"""

import io
import logging
from datetime import datetime, timezone
from typing import Any, BinaryIO, Dict, List, Optional, Tuple

import httplib2
import requests
from google.auth.exceptions import RefreshError, TransportError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import HttpError
from googleapiclient.http import MediaIoBaseDownload, MediaIoBaseUpload

from .content_types import is_convertible, provided_content_type
from .models import IntegrationConfig, IntegrationFile, IntegrationFolder, IntegrationMetadata
from .oauth import GoogleOAuthClient, OAuthToken
from .walker import RemoteDirectoryWalker, RemoteEntry, RemoteFile, RemoteFolder
from ..config.constants import (
    EXPORT_MIME_TYPE,
    GOOGLE_DRIVE_ROOT_NAME,
    GOOGLE_FILE_FIELDS,
    GOOGLE_MIME_TYPE_FOLDER,
    HTTP_TIMEOUT_SECONDS,
    ROOT_FOLDER_ID,
)
from ..errors import IntegrationUnavailableError, UpstreamError
from ..utils.file_utils import basename, get_file_extension

logger = logging.getLogger(__name__)

# Failures of the Drive client stack that mean "the remote side is unreachable
# or refused us"
DRIVE_ERRORS = (HttpError, RefreshError, TransportError, httplib2.HttpLib2Error, OSError)

SHARED_WITH_ME_QUERY = "sharedWithMe"
PAGE_SIZE = 100


def _parse_drive_time(value: Optional[str]) -> Optional[datetime]:
    """Parse an RFC 3339 timestamp as returned by Drive."""
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace('Z', '+00:00'))
    except ValueError:
        logger.warning(f"Unparseable Drive timestamp: {value}")
        return None


def to_remote_entry(item: Dict[str, Any]) -> RemoteEntry:
    """Convert one Drive file resource into a folder or file entry."""
    mime_type = item.get('mimeType', '')
    if mime_type == GOOGLE_MIME_TYPE_FOLDER:
        return RemoteFolder(id=item['id'], name=item.get('name', ''))

    return RemoteFile(IntegrationFile(
        id=item['id'],
        name=item.get('name', ''),
        size=int(item.get('size', 0)),
        source_type=mime_type,
        provided_type=provided_content_type(mime_type),
        extension=item.get('fullFileExtension', ''),
        changed=_parse_drive_time(item.get('modifiedTime') or item.get('createdTime')),
    ))


class GoogleDriveIntegration:
    """
    Google Drive client bound to one user's OAuth credential.

    Usage:
        drive = GoogleDriveIntegration.from_config(config, oauth_client)
        tree = drive.list("root", 3)
        stream, length = drive.download(file_id)
    """

    def __init__(self, service: Any, http: Optional[requests.Session] = None):
        """
        Args:
            service: Drive v3 API resource (googleapiclient)
            http: Session used for thumbnail retrieval
        """
        self.service = service
        self.http = http or requests.Session()

    @classmethod
    def from_config(
        cls,
        config: IntegrationConfig,
        oauth_client: GoogleOAuthClient,
        http: Optional[requests.Session] = None,
    ) -> "GoogleDriveIntegration":
        """
        Build a client from a registered integration.

        Args:
            config: Integration carrying the serialized OAuth token
            oauth_client: App client used to refresh the token
            http: Optional session for thumbnail requests

        Raises:
            IntegrationUnavailableError: If the stored token is missing or can't be decoded
        """
        if not config.access_token:
            raise IntegrationUnavailableError(f"Integration {config.id} has no access token")

        try:
            token = OAuthToken.from_json(config.access_token)
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            logger.error(f"Stored token of integration {config.id} is unreadable: {e!r}")
            raise IntegrationUnavailableError(
                f"Integration {config.id} has an unreadable access token, please reconnect it"
            ) from e

        # google-auth compares expiry against naive UTC
        expiry = None
        if token.expiry is not None:
            expiry = token.expiry.astimezone(timezone.utc).replace(tzinfo=None)

        credentials = Credentials(
            token=token.access_token,
            refresh_token=token.refresh_token or None,
            token_uri=oauth_client.token_url,
            client_id=oauth_client.client_id,
            client_secret=oauth_client.client_secret,
            scopes=list(oauth_client.scopes),
            expiry=expiry,
        )

        service = build('drive', 'v3', credentials=credentials, cache_discovery=False)
        return cls(service, http=http)

    # -------------------------------------------------------------------------
    # Listing
    # -------------------------------------------------------------------------

    def _list(self, query: str) -> List[RemoteEntry]:
        entries: List[RemoteEntry] = []
        page_token = None

        try:
            while True:
                results = self.service.files().list(
                    q=query,
                    fields=f'nextPageToken, files({GOOGLE_FILE_FIELDS})',
                    pageToken=page_token,
                    pageSize=PAGE_SIZE,
                ).execute()

                entries.extend(to_remote_entry(item) for item in results.get('files', []))

                page_token = results.get('nextPageToken')
                if not page_token:
                    break
        except DRIVE_ERRORS as e:
            raise UpstreamError(f"Error listing Drive files ({query}): {e}") from e

        return entries

    def list_folder(self, folder_id: str) -> List[RemoteEntry]:
        return self._list(f"'{folder_id}' in parents and trashed=false")

    def list_shared(self) -> List[RemoteEntry]:
        return self._list(SHARED_WITH_ME_QUERY)

    def folder_name(self, folder_id: str) -> str:
        """Display name of a folder, falling back to the last id segment."""
        try:
            folder = self.service.files().get(fileId=folder_id, fields='name').execute()
            return folder.get('name') or basename(folder_id)
        except DRIVE_ERRORS as e:
            logger.info(f"Unable to get name of folder {folder_id}: {e}")
            return basename(folder_id)

    def root_listing_id(self) -> str:
        return ROOT_FOLDER_ID

    def root_name(self) -> str:
        return GOOGLE_DRIVE_ROOT_NAME

    def list(self, folder_id: str, depth: int) -> IntegrationFolder:
        """
        List a folder tree.

        Args:
            folder_id: Drive folder id, or "root" for My Drive plus shared items
            depth: Subfolder levels to expand

        Returns:
            Folder tree

        Raises:
            UpstreamError: If any listing call fails
        """
        logger.info(f"[gdrive] query for: {folder_id} depth: {depth}")
        return RemoteDirectoryWalker(self).walk(folder_id, depth)

    # -------------------------------------------------------------------------
    # Files
    # -------------------------------------------------------------------------

    def get_metadata(self, file_id: str) -> IntegrationMetadata:
        """
        Get a single file's metadata, thumbnail included.

        Raises:
            UpstreamError: If the metadata or the thumbnail cannot be fetched
        """
        try:
            item = self.service.files().get(fileId=file_id, fields=GOOGLE_FILE_FIELDS).execute()
        except DRIVE_ERRORS as e:
            raise UpstreamError(f"Error getting metadata for {file_id}: {e}") from e

        name = item.get('name', '')
        mime_type = item.get('mimeType', '')
        metadata = IntegrationMetadata(
            id=file_id,
            name=name,
            size=int(item.get('size', 0)),
            source_type=mime_type,
            provided_type=provided_content_type(mime_type),
            extension=get_file_extension(name),
            changed=_parse_drive_time(item.get('modifiedTime') or item.get('createdTime')),
        )

        thumbnail_link = item.get('thumbnailLink')
        if thumbnail_link:
            metadata.thumbnail = self._fetch_thumbnail(thumbnail_link)

        return metadata

    def _fetch_thumbnail(self, url: str) -> bytes:
        try:
            with self.http.get(url, timeout=HTTP_TIMEOUT_SECONDS) as response:
                response.raise_for_status()
                return response.content
        except requests.RequestException as e:
            raise UpstreamError(f"unable to retrieve thumbnail: {e}") from e

    def download(self, file_id: str) -> Tuple[BinaryIO, int]:
        """
        Download a file's content.

        Native Docs, Sheets and Slides are exported as PDF; everything else
        is downloaded as stored.

        Returns:
            (stream, length); the caller closes the stream

        Raises:
            UpstreamError: If the file cannot be retrieved
        """
        try:
            item = self.service.files().get(fileId=file_id, fields='id, mimeType').execute()
        except DRIVE_ERRORS as e:
            raise UpstreamError(f"Error getting file {file_id}: {e}") from e

        if is_convertible(item.get('mimeType', '')):
            request = self.service.files().export_media(fileId=file_id, mimeType=EXPORT_MIME_TYPE)
        else:
            request = self.service.files().get_media(fileId=file_id)

        buffer = io.BytesIO()
        try:
            downloader = MediaIoBaseDownload(buffer, request)
            done = False
            while not done:
                _, done = downloader.next_chunk()
        except DRIVE_ERRORS as e:
            buffer.close()
            raise UpstreamError(f"Error downloading file {file_id}: {e}") from e

        length = buffer.tell()
        buffer.seek(0)
        logger.debug(f"Downloaded file {file_id}: {length} bytes")
        return buffer, length

    def upload(self, folder_id: str, name: str, content_type: str, stream: BinaryIO) -> str:
        """
        Upload a new file into a Drive folder.

        Args:
            folder_id: Parent folder id
            name: File name
            content_type: MIME type of the content
            stream: Readable, seekable content stream

        Returns:
            Id of the created file
        """
        media = MediaIoBaseUpload(
            stream,
            mimetype=content_type or 'application/octet-stream',
            resumable=True,
        )
        body = {'name': name, 'parents': [folder_id]}

        try:
            created = self.service.files().create(body=body, media_body=media, fields='id').execute()
        except DRIVE_ERRORS as e:
            raise UpstreamError(f"Error uploading file {name}: {e}") from e

        logger.info(f"Uploaded file: {name} (ID: {created['id']})")
        return created['id']
