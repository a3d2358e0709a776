"""
API Gateway Lambda handler for the habit tracker.

This Lambda function serves the tracker front end. It renders the caller's
blocks with their row moods, toggles cells, publishes the emoji key and
reports health, with CORS support for browser clients.

The caller is identified by the Cognito identity id that API Gateway places
in ``requestContext.identity.cognitoIdentityId`` for IAM-authorized calls
made with guest credentials. Requests without it cannot read or change a
tracker.

Functions:
    lambda_handler: Main entry point for API Gateway events
    _handle_health_check: Handle GET /health endpoint
    _handle_emoji_key: Handle GET /emoji-key endpoint
    _handle_get_blocks: Handle GET /blocks endpoint
    _handle_toggle: Handle POST /blocks/{label}/toggle endpoint
    _create_response: Create standardized HTTP responses
    _handle_cors_preflight: Handle OPTIONS requests for CORS
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from urllib.parse import unquote

from ..config import TrackerConfig
from ..exceptions import (
    BlockNotLoadedError,
    DocumentStoreError,
    NotAuthenticatedError,
    UnknownBlockError,
)
from ..models.mood import emoji_key
from ..models.view import BlockView
from ..services.block_session import WriteFailure
from ..services.document_store import DocumentStore
from ..services.dynamodb_store import DynamoDBDocumentStore
from ..services.identity import StaticIdentityProvider
from ..services.tracker_service import TrackerService
from ..utils.log import configure_logging, log_event

logger = logging.getLogger(__name__)

API_VERSION = "1.0.0"


def lambda_handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:  # noqa: ARG001
    """
    Main Lambda handler for API Gateway events.

    Routes incoming HTTP requests to the handler for the method and resource.

    Args:
        event: API Gateway event containing HTTP request data
        context: AWS Lambda runtime context (unused but required)

    Returns:
        HTTP response dictionary with statusCode, headers, and body

    Event Structure:
        {
            "httpMethod": "GET|POST|OPTIONS",
            "resource": "/health|/emoji-key|/blocks|/blocks/{label}/toggle",
            "pathParameters": {"label": "Spending%20Awareness%20(X)"},
            "requestContext": {"identity": {"cognitoIdentityId": "us-east-1:..."}},
            "body": "{\"index\": 3}"
        }
    """
    try:
        config = TrackerConfig.from_env()
    except ValueError as e:
        _log_api_error("CONFIG_ERROR", str(e))
        return _create_error_response(
            TrackerConfig(), 500, "Service configuration invalid", str(e)
        )

    try:
        _log_api_request(event)

        http_method = event.get("httpMethod", "").upper()
        resource = event.get("resource", "")
        path_params = event.get("pathParameters") or {}

        if http_method == "OPTIONS":
            return _handle_cors_preflight(config)

        if resource == "/emoji-key" and http_method == "GET":
            return _handle_emoji_key(config)

        try:
            store = _create_store(config)
        except (ValueError, DocumentStoreError) as e:
            _log_api_error("STORE_INIT_ERROR", str(e))
            return _create_error_response(
                config, 500, "Service initialization failed", str(e)
            )

        user_id = _caller_identity(event)

        if resource == "/health" and http_method == "GET":
            return _handle_health_check(config, store, user_id)

        elif resource == "/blocks" and http_method == "GET":
            return _handle_get_blocks(config, store, user_id)

        elif resource == "/blocks/{label}/toggle" and http_method == "POST":
            return _handle_toggle(
                config, store, user_id, path_params.get("label"), event.get("body")
            )

        else:
            return _create_error_response(
                config,
                404,
                "Not Found",
                f"Resource {resource} with method {http_method} not found",
            )

    except Exception as e:
        _log_api_error("UNEXPECTED_ERROR", str(e))
        return _create_error_response(
            config, 500, "Internal Server Error", "Unexpected error occurred"
        )


def _create_store(config: TrackerConfig) -> DocumentStore:
    return DynamoDBDocumentStore(table_name=config.table_name, region=config.region)


def _caller_identity(event: Dict[str, Any]) -> Optional[str]:
    identity = (event.get("requestContext") or {}).get("identity") or {}
    return identity.get("cognitoIdentityId") or None


def _handle_health_check(
    config: TrackerConfig, store: DocumentStore, user_id: Optional[str]
) -> Dict[str, Any]:
    """
    Handle GET /health endpoint for service health monitoring.

    Response Body:
        {
            "status": "healthy|unhealthy",
            "tracker_id": "tana-financial-tracker-default-progress-tracker",
            "services": {"store": {"status": "healthy", ...}},
            "environment": "dev|staging|prod",
            "version": "1.0.0"
        }
    """
    service = TrackerService(store, StaticIdentityProvider(user_id), config=config)
    health_result = service.health_check()

    response_data = {
        **health_result,
        "environment": config.environment,
        "version": API_VERSION,
    }

    status_code = 200 if health_result["status"] != "unhealthy" else 503
    return _create_response(config, status_code, response_data)


def _handle_emoji_key(config: TrackerConfig) -> Dict[str, Any]:
    return _create_response(config, 200, {"emoji_key": emoji_key()})


def _handle_get_blocks(
    config: TrackerConfig, store: DocumentStore, user_id: Optional[str]
) -> Dict[str, Any]:
    """
    Handle GET /blocks endpoint returning every block of the caller's tracker.

    Response Body:
        {
            "tracker_id": "tana-financial-tracker-default-progress-tracker",
            "blocks": [
                {
                    "label": "Spending Awareness (X)",
                    "badge": "X: Track Daily Spending",
                    "color": "orange",
                    "rows": [{"prefix": "X", "tick_count": 7, "emoji": "😁", ...}]
                }
            ]
        }
    """
    if not user_id:
        return _create_error_response(
            config, 401, "Not Authenticated", "User not authenticated, cannot load progress."
        )

    with TrackerService(store, StaticIdentityProvider(user_id), config=config) as service:
        try:
            views = service.render()
        except BlockNotLoadedError as e:
            _log_api_error("BLOCKS_NOT_LOADED", str(e))
            return _create_error_response(config, 503, "Progress Unavailable", str(e))

    response_data = {
        "tracker_id": config.tracker_id,
        "blocks": _dump_views(views),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    return _create_response(config, 200, response_data)


def _handle_toggle(
    config: TrackerConfig,
    store: DocumentStore,
    user_id: Optional[str],
    label: Optional[str],
    body: Optional[str],
) -> Dict[str, Any]:
    """
    Handle POST /blocks/{label}/toggle endpoint.

    Advances one cell of a block and saves the block. If the save fails the
    toggled block is still returned with ``saved`` false and status 502. If
    the stored block cannot be read nothing is written and the status is 503.

    Request Body:
        {"index": 3}

    Response Body:
        {
            "block": {"label": "...", "rows": [...]},
            "index": 3,
            "status": "tick",
            "saved": true
        }
    """
    if not label:
        return _create_error_response(config, 400, "Missing Block Label", "Block label is required")

    label = unquote(label)

    if not body or body.strip() == "":
        return _create_error_response(config, 400, "Missing Request Body", "Request body is required")

    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        return _create_error_response(
            config, 400, "Invalid JSON", f"Request body is not valid JSON: {str(e)}"
        )

    index = data.get("index") if isinstance(data, dict) else None
    if not isinstance(index, int) or isinstance(index, bool):
        return _create_error_response(
            config, 400, "Invalid Cell Index", "Field 'index' must be an integer"
        )

    failures: List[WriteFailure] = []
    service = TrackerService(
        store,
        StaticIdentityProvider(user_id),
        config=config,
        on_write_failure=failures.append,
    )

    with service:
        try:
            block = service.toggle(label, index)
        except NotAuthenticatedError as e:
            return _create_error_response(config, 401, "Not Authenticated", str(e))
        except UnknownBlockError as e:
            return _create_error_response(config, 404, "Block Not Found", str(e))
        except BlockNotLoadedError as e:
            _log_api_error("BLOCKS_NOT_LOADED", str(e))
            return _create_error_response(config, 503, "Progress Unavailable", str(e))
        except IndexError as e:
            return _create_error_response(config, 400, "Invalid Cell Index", str(e))

        spec = service.session(label).spec
        view = BlockView.build(spec, block)

    saved = not failures
    response_data = {
        "block": view.model_dump(mode="json"),
        "index": index,
        "status": block.cells[index].value,
        "saved": saved,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

    if not saved:
        response_data["error"] = "Failed to save progress"
        response_data["details"] = str(failures[0].error)
        return _create_response(config, 502, response_data)

    return _create_response(config, 200, response_data)


def _dump_views(views: List[BlockView]) -> List[Dict[str, Any]]:
    return [view.model_dump(mode="json") for view in views]


def _handle_cors_preflight(config: TrackerConfig) -> Dict[str, Any]:
    return {"statusCode": 200, "headers": _get_cors_headers(config), "body": ""}


def _create_response(
    config: TrackerConfig, status_code: int, data: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Create a standardized HTTP response with CORS headers and a JSON body.

    Args:
        config: Tracker configuration, for the CORS origin
        status_code: HTTP status code
        data: Response data to serialize as JSON

    Returns:
        HTTP response dictionary
    """
    return {
        "statusCode": status_code,
        "headers": {**_get_cors_headers(config), "Content-Type": "application/json"},
        "body": json.dumps(data, indent=2, default=str, ensure_ascii=False),
    }


def _create_error_response(
    config: TrackerConfig, status_code: int, error: str, details: str = ""
) -> Dict[str, Any]:
    error_data = {
        "error": error,
        "details": details,
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "status_code": status_code,
    }

    return _create_response(config, status_code, error_data)


def _get_cors_headers(config: TrackerConfig) -> Dict[str, str]:
    return {
        "Access-Control-Allow-Origin": config.cors_origin,
        "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
        "Access-Control-Allow-Headers": "Content-Type,X-Amz-Date,Authorization,X-Api-Key,X-Amz-Security-Token",
        "Access-Control-Max-Age": "86400",  # 24 hours
    }


def _log_api_request(event: Dict[str, Any]) -> None:
    request_context = event.get("requestContext") or {}
    log_event(
        logger,
        "API_REQUEST",
        httpMethod=event.get("httpMethod"),
        resource=event.get("resource"),
        requestId=request_context.get("requestId"),
        sourceIp=(request_context.get("identity") or {}).get("sourceIp"),
    )


def _log_api_error(error_type: str, error_message: str) -> None:
    log_event(
        logger,
        "API_ERROR",
        level=logging.ERROR,
        errorType=error_type,
        errorMessage=error_message,
    )


# Configure logging on cold start
try:
    configure_logging(TrackerConfig.from_env().log_level)
except ValueError as e:
    configure_logging("INFO")
    _log_api_error("LOGGING_CONFIG_ERROR", str(e))
