"""
Integration Handlers
====================
Framework-neutral request handlers for the integration endpoints. Each
returns a response dict: {'statusCode', 'headers', 'body'}.

Error mapping:
    IntegrationUnavailableError  406
    StateMismatchError           400
    ExchangeFailureError         500
    PersistenceFailureError      500
    unknown integration          404
    UpstreamError                502
"""

import json
import logging
from typing import Any, Dict, Optional

from .context import ServiceContext
from .models import IntegrationConfig
from ..config.constants import (
    DEFAULT_WALK_DEPTH,
    INTEGRATION_PROVIDER_GOOGLE_DRIVE,
    INTEGRATIONS_SUCCESS_PATH,
    ROOT_FOLDER_ID,
)
from ..errors import (
    ExchangeFailureError,
    IntegrationUnavailableError,
    PersistenceFailureError,
    StateMismatchError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

JSON_HEADERS = {'Content-Type': 'application/json'}


def _json_response(status_code: int, body: Dict[str, Any]) -> Dict[str, Any]:
    return {
        'statusCode': status_code,
        'headers': dict(JSON_HEADERS),
        'body': json.dumps(body),
    }


def _error(status_code: int, message: str) -> Dict[str, Any]:
    return _json_response(status_code, {'error': message})


def oauth_redirect(ctx: ServiceContext, uid: str, name: str = "") -> Dict[str, Any]:
    """Start a Drive authorization; the body carries the consent URL."""
    try:
        authorizer = ctx.authorizer
    except IntegrationUnavailableError as e:
        return _error(406, str(e))

    config = IntegrationConfig(provider=INTEGRATION_PROVIDER_GOOGLE_DRIVE, name=name)
    url = authorizer.begin(uid, config)
    return _json_response(200, {'redirect': url})


def oauth_complete(ctx: ServiceContext, uid: str, code: str, state: str) -> Dict[str, Any]:
    """OAuth callback: register the integration and send the browser on."""
    try:
        ctx.authorizer.complete(uid, code, state)
    except IntegrationUnavailableError as e:
        return _error(406, str(e))
    except StateMismatchError as e:
        return _error(400, str(e))
    except ExchangeFailureError as e:
        logger.error(f"Token exchange failed for user {uid}: {e}")
        return _json_response(500, {'errmsg': f"Failed to exchange token: {e}"})
    except PersistenceFailureError as e:
        return _json_response(500, {'errmsg': str(e)})

    return {
        'statusCode': 302,
        'headers': {'Location': INTEGRATIONS_SUCCESS_PATH},
        'body': '',
    }


def list_integration_folder(
    ctx: ServiceContext,
    uid: str,
    integration_id: str,
    folder_id: str = ROOT_FOLDER_ID,
    depth: Optional[int] = None,
) -> Dict[str, Any]:
    """List a folder tree of one of the user's integrations."""
    try:
        config = ctx.find_integration(uid, integration_id)
        drive = ctx.open_integration(config)
        folder = drive.list(folder_id or ROOT_FOLDER_ID, DEFAULT_WALK_DEPTH if depth is None else depth)
    except KeyError as e:
        return _error(404, e.args[0] if e.args else "Not found")
    except IntegrationUnavailableError as e:
        return _error(406, str(e))
    except UpstreamError as e:
        logger.error(f"Listing {folder_id} failed for user {uid}: {e}")
        return _error(502, str(e))

    return _json_response(200, folder.to_dict())


def get_integration_metadata(
    ctx: ServiceContext,
    uid: str,
    integration_id: str,
    file_id: str,
) -> Dict[str, Any]:
    """Metadata (thumbnail included) of a single remote file."""
    try:
        config = ctx.find_integration(uid, integration_id)
        drive = ctx.open_integration(config)
        metadata = drive.get_metadata(file_id)
    except KeyError as e:
        return _error(404, e.args[0] if e.args else "Not found")
    except IntegrationUnavailableError as e:
        return _error(406, str(e))
    except UpstreamError as e:
        logger.error(f"Metadata for {file_id} failed for user {uid}: {e}")
        return _error(502, str(e))

    return _json_response(200, metadata.to_dict())
