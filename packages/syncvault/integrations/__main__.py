"""
SyncVault Integrations Function
===============================
Entry point for the cloud-drive integration endpoints.

Actions:
    redirect  start a Google Drive authorization (uid, name)
    complete  OAuth callback (uid, code, state)
    list      folder tree of an integration (uid, integration_id, folder_id, depth)
    metadata  single file metadata (uid, integration_id, file_id)

Version: 1.0.0-syncvault
"""

import json
import logging
import traceback
from typing import Any, Dict, Optional

from syncvault import (
    FileUserStore,
    ServiceContext,
    Settings,
    SHARED_VERSION,
    get_integration_metadata,
    list_integration_folder,
    mask_credentials,
    oauth_complete,
    oauth_redirect,
)

# Function version
VERSION = f"1.0.0-integrations-syncvault-{SHARED_VERSION}"

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

EXPECTED_FIELDS = [
    'action', 'uid', 'name',
    'code', 'state',
    'integration_id', 'folder_id', 'depth', 'file_id',
]

# Built once per container; pending OAuth states live here between requests
_settings = Settings.from_env()
_context = ServiceContext.build(_settings, FileUserStore(_settings.data_dir / "users"))


def _parse_event_data(event: Dict[str, Any]) -> Optional[Dict[str, Any]]:
    """Parse and extract data from various event formats"""

    # HTTP request format (web action: query parameters at top level)
    if '__ow_method' in event:
        return {f: event.get(f) for f in EXPECTED_FIELDS if f in event}

    # Body wrapper format
    if 'body' in event:
        body = event.get('body')
        if isinstance(body, str):
            try:
                return json.loads(body)
            except json.JSONDecodeError:
                return None
        if isinstance(body, dict):
            return body

    # Direct format (fields at top level)
    if 'action' in event:
        return event

    return None


def _bad_request(message: str) -> Dict[str, Any]:
    return {
        'statusCode': 400,
        'headers': {'Content-Type': 'application/json'},
        'body': json.dumps({'error': message, 'version': VERSION}),
    }


def handle(ctx: ServiceContext, data: Dict[str, Any]) -> Dict[str, Any]:
    """Dispatch one parsed request to its handler."""
    action = data.get('action')
    uid = data.get('uid')
    if not uid:
        return _bad_request('uid is required')

    if action == 'redirect':
        return oauth_redirect(ctx, uid, data.get('name') or "")

    if action == 'complete':
        return oauth_complete(ctx, uid, data.get('code') or "", data.get('state') or "")

    if action == 'list':
        if not data.get('integration_id'):
            return _bad_request('integration_id is required')
        depth = data.get('depth')
        try:
            depth = int(depth) if depth not in (None, '') else None
        except (TypeError, ValueError):
            return _bad_request(f'Invalid depth: {depth}')
        return list_integration_folder(
            ctx, uid, data['integration_id'], data.get('folder_id') or "root", depth
        )

    if action == 'metadata':
        if not data.get('integration_id') or not data.get('file_id'):
            return _bad_request('integration_id and file_id are required')
        return get_integration_metadata(ctx, uid, data['integration_id'], data['file_id'])

    return _bad_request(f'Unknown action: {action}')


def main(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    SyncVault Integrations - OAuth and listing endpoints for cloud drives.
    """
    try:
        print(f"=== SYNCVAULT INTEGRATIONS v{VERSION} ===")

        data = _parse_event_data(event)
        if not data or not isinstance(data, dict):
            return _bad_request('Invalid data format')

        logger.info(f"Request: {mask_credentials(data)}")
        return handle(_context, data)

    except Exception as e:
        logger.error(f"Integrations error: {e}\n{traceback.format_exc()}")
        return {
            'statusCode': 500,
            'headers': {'Content-Type': 'application/json'},
            'body': json.dumps({'error': str(e), 'version': VERSION}),
        }
