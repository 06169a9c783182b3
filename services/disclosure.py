"""
Decoding of SD-JWT combined-format presentations.

A presentation is ``<sd-jwt>~<disclosure>~...~<holder binding>``. Every
disclosure is a base64url (unpadded) encoded JSON array
``[salt, claim name, claim value]``.
"""
import base64
import binascii
import json
import re
from typing import Any

from pydantic import BaseModel

from services.errors import ParseError

SEPARATOR = "~"

_BASE64URL = re.compile(r"[A-Za-z0-9_-]*")


class Disclosure(BaseModel):
    salt: Any
    claim_name: str
    claim_value: Any


class CombinedPresentation(BaseModel):
    sd_jwt: str
    disclosures: list[str] = []
    holder_binding: str = ""


def split_presentation(raw: str) -> CombinedPresentation:
    parts = raw.strip().split(SEPARATOR)

    disclosures = parts[1:-1] if len(parts) > 2 else []
    holder_binding = parts[-1] if len(parts) > 1 else ""

    return CombinedPresentation(
        sd_jwt=parts[0], disclosures=disclosures, holder_binding=holder_binding
    )


def decode_disclosure(token: str, index: int) -> Disclosure:
    try:
        if not _BASE64URL.fullmatch(token):
            raise binascii.Error("invalid base64url character")
        decoded = base64.urlsafe_b64decode(token + "=" * (-len(token) % 4))
    except binascii.Error as e:
        raise ParseError("bad encoding", index) from e

    try:
        arr = json.loads(decoded)
    except ValueError as e:
        raise ParseError("malformed disclosure", index) from e

    if not isinstance(arr, list) or len(arr) != 3 or not isinstance(arr[1], str):
        raise ParseError("malformed disclosure", index)

    return Disclosure(salt=arr[0], claim_name=arr[1], claim_value=arr[2])


def decode(raw: str) -> list[Disclosure]:
    presentation = split_presentation(raw)
    return [
        decode_disclosure(token, i) for i, token in enumerate(presentation.disclosures)
    ]
