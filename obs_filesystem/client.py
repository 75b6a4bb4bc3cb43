from __future__ import annotations
"""Creation of the boto3 client used to talk to an OBS endpoint."""
from typing import Any, Callable

import boto3
from botocore.client import Config

ADDRESSING_STYLES = ("virtual", "path", "auto")

# Extra ``put_object`` parameter turning the upload into an OBS append.
APPEND_POSITION_PARAM = "AppendPosition"
_APPEND_CONTEXT_KEY = "obs_append_position"


def endpoint_url(hostname: str, *, ssl: bool = True) -> str:
    host = hostname.strip().rstrip("/")
    if "://" in host:
        return host
    return f"{'https' if ssl else 'http'}://{host}"


def create_client(
    *,
    endpoint: str,
    access_key: str,
    secret_key: str,
    ssl: bool = True,
    addressing_style: str = "virtual",
    signature_version: str = "s3v4",
    client_factory: Callable[..., Any] | None = None,
):
    if addressing_style not in ADDRESSING_STYLES:
        raise ValueError(f"addressing_style must be one of {', '.join(ADDRESSING_STYLES)}")
    config = Config(
        signature_version=signature_version,
        s3={"addressing_style": addressing_style},
    )
    factory = client_factory or boto3.client
    client = factory(
        "s3",
        endpoint_url=endpoint_url(endpoint, ssl=ssl),
        aws_access_key_id=access_key,
        aws_secret_access_key=secret_key,
        config=config,
    )
    register_append_handlers(client)
    return client


def register_append_handlers(client) -> None:
    """Teach ``put_object`` to accept ``AppendPosition``.

    The position is moved out of the request parameters before validation and
    added to the signed URL as the ``append&position=N`` query.
    """
    events = client.meta.events
    events.register(
        "before-parameter-build.s3.PutObject",
        _pop_append_position,
        unique_id="obs-filesystem-append-position",
    )
    events.register(
        "before-sign.s3.PutObject",
        _add_append_query,
        unique_id="obs-filesystem-append-query",
    )


def _pop_append_position(params, context, **_kwargs) -> None:
    if APPEND_POSITION_PARAM in params:
        context[_APPEND_CONTEXT_KEY] = int(params.pop(APPEND_POSITION_PARAM))


def _add_append_query(request, **_kwargs) -> None:
    position = request.context.get(_APPEND_CONTEXT_KEY)
    if position is None:
        return
    separator = "&" if "?" in request.url else "?"
    request.url = f"{request.url}{separator}append&position={position}"
