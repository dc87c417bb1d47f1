import base64
import binascii
import re
from dataclasses import dataclass

_DATA_URI_RE = re.compile(
    r"^data:(?P<mime>image/[A-Za-z0-9.+-]+)(?:;[^,;]+=[^,;]+)*;base64,(?P<data>.*)$",
    re.DOTALL,
)


@dataclass(frozen=True)
class DecodedImage:
    content_type: str
    data: bytes


def decode_image_data_uri(value: str) -> DecodedImage:
    """
    Decodes a base64 image data URI such as ``data:image/png;base64,iVBOR...``.

    Raises:
        ValueError: if the value is not a base64 image data URI or decodes to nothing
    """
    if not value:
        raise ValueError("Empty data URI")

    match = _DATA_URI_RE.match(value.strip())
    if match is None:
        raise ValueError("Not a base64 image data URI")

    try:
        data = base64.b64decode(match.group("data"), validate=True)
    except (binascii.Error, ValueError) as e:
        raise ValueError(f"Invalid base64 payload: {e}") from e

    if not data:
        raise ValueError("Data URI has an empty payload")

    return DecodedImage(content_type=match.group("mime").lower(), data=data)
