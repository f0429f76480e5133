"""
Detection and removal of the backend's response envelope.

Most endpoints wrap their payload as ``{"status": ..., "message": ...,
"data": ...}``. Collaborators want the inner payload; authentication
endpoints are the exception and are returned untouched by the pipeline.
"""

from storefront_client.types import Envelope, Raw
from storefront_client.compat import Any, Mapping, Tuple, Union


DEFAULT_ENVELOPE_FIELDS = ("status", "data")


def classify(
    payload: Any, fields: Tuple[str, ...] = DEFAULT_ENVELOPE_FIELDS
) -> Union[Envelope, Raw]:
    """
    Tags a decoded body as an ``Envelope`` or as ``Raw``.

    A body is an envelope when it is a mapping holding every field in
    ``fields``; ``fields`` always includes ``data``, the payload field.
    Nothing else about its content is inspected.
    """
    if isinstance(payload, Mapping) and all(field in payload for field in fields):
        return Envelope(
            data=payload.get("data"),
            status=payload.get("status"),
            message=payload.get("message"),
        )
    return Raw(payload)


def unwrap(payload: Any, fields: Tuple[str, ...] = DEFAULT_ENVELOPE_FIELDS) -> Any:
    """
    Returns the envelope's inner payload, or ``payload`` itself if it is
    not an envelope.
    """
    tagged = classify(payload, fields)
    if isinstance(tagged, Envelope):
        return tagged.data
    return payload
