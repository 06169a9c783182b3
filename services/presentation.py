import base64
import binascii
import hashlib
import json
import logging
import math
import re
import struct
from decimal import Decimal

import bech32

from dtos.transaction import (
    AuthInfo,
    Event,
    EventAttribute,
    Fee,
    Transaction,
    Tx,
    TxBody,
    TxResponse,
)
from services import disclosure
from services.errors import EncodeError, ParseError

logger = logging.getLogger(__name__)

VP_TYPE = "/dchain.tx.v1.MsgVerifiablePresentation"
VP_MEMO = "Verifiable Presentation"
VALOPER_PREFIX = "cosmosvaloper"

# HTML-sensitive characters and line separators are escaped so hashes agree with other indexers
_JSON_ESCAPES = {
    "<": "\\u003c",
    ">": "\\u003e",
    "&": "\\u0026",
    "\u2028": "\\u2028",
    "\u2029": "\\u2029",
}

_SHORT_NEGATIVE_EXPONENT = re.compile(r"e-0(\d)$")


def format_number(value) -> str:
    """Formats a number the way the chain's JSON encoder prints a float64.

    Every disclosed number is a double on the chain side, so integers are
    rounded to the nearest double first. Magnitudes below 1e-6 or from 1e21
    up use exponent notation with a minimal negative exponent (``1e-7``,
    ``1e+21``), everything else is printed in plain decimal without a
    trailing ``.0``.
    """
    f = float(value)
    if math.isnan(f) or math.isinf(f):
        raise ValueError(f"unsupported number {value!r}")
    if f != 0 and (abs(f) < 1e-6 or abs(f) >= 1e21):
        return _SHORT_NEGATIVE_EXPONENT.sub(r"e-\1", repr(f))
    return format(Decimal(repr(f)).normalize(), "f")


def _encode(value, out):
    if value is None:
        out.append("null")
    elif value is True:
        out.append("true")
    elif value is False:
        out.append("false")
    elif isinstance(value, (int, float)):
        out.append(format_number(value))
    elif isinstance(value, str):
        out.append(json.dumps(value, ensure_ascii=False))
    elif isinstance(value, dict):
        out.append("{")
        for i, key in enumerate(sorted(value)):
            if not isinstance(key, str):
                raise TypeError(f"claim keys must be strings, got {key!r}")
            if i:
                out.append(",")
            out.append(json.dumps(key, ensure_ascii=False))
            out.append(":")
            _encode(value[key], out)
        out.append("}")
    elif isinstance(value, (list, tuple)):
        out.append("[")
        for i, item in enumerate(value):
            if i:
                out.append(",")
            _encode(item, out)
        out.append("]")
    else:
        raise TypeError(f"cannot encode {type(value).__name__}")


def canonical_json(value) -> bytes:
    out = []
    _encode(value, out)
    encoded = "".join(out)
    for char, escaped in _JSON_ESCAPES.items():
        encoded = encoded.replace(char, escaped)
    return encoded.encode("utf-8")


def presentation_hash(json_bytes: bytes, height: int) -> bytes:
    """SHA-256 over the claim bytes salted with the little-endian block height.

    The same presentation can be resubmitted in later blocks, the salt keeps
    the identifier unique per occurrence.
    """
    salt = struct.pack("<Q", height)
    return hashlib.sha256(json_bytes + salt).digest()


def valoper_address(hex_address: str, prefix: str = VALOPER_PREFIX) -> str:
    if not hex_address:
        raise ParseError("empty proposer address")
    try:
        raw = binascii.unhexlify(hex_address)
    except ValueError as e:
        raise ParseError(f"malformed proposer address {hex_address!r}") from e
    if len(raw) > 255:
        raise ParseError(f"proposer address too long: {len(raw)} bytes")
    return bech32.bech32_encode(prefix, bech32.convertbits(raw, 8, 5))


class PresentationTxSynthesizer:
    """Builds a transaction record out of a verifiable presentation block tx.

    The record is unsigned and carries no fee. Its hash is derived from the
    disclosed claims and the block height, see :func:`presentation_hash`.
    """

    def __init__(self, type_url=VP_TYPE, memo=VP_MEMO, valoper_prefix=VALOPER_PREFIX):
        self.type_url = type_url
        self.memo = memo
        self.valoper_prefix = valoper_prefix

    def claim_set(self, raw_tx: bytes) -> dict:
        # undecodable bytes outside the disclosures are tolerated, inside them
        # they fail the base64url check
        text = raw_tx.decode("utf-8", errors="surrogateescape")

        claims = {}
        for d in disclosure.decode(text):
            claims[d.claim_name] = d.claim_value
        claims["@type"] = self.type_url
        return claims

    def synthesize(self, raw_tx: bytes, block) -> Transaction:
        height = block.header.height

        claims = self.claim_set(raw_tx)
        try:
            json_bytes = canonical_json(claims)
        except (TypeError, ValueError, OverflowError) as e:
            raise EncodeError(f"failed to encode disclosed claims: {e}") from e

        txhash = presentation_hash(json_bytes, height).hex().upper()
        proposer = valoper_address(block.header.proposer_address, self.valoper_prefix)

        body = TxBody(
            messages=[{"@type": self.type_url, "bytes": claims}],
            memo=self.memo,
            timeout_height=height,
        )
        tx = Tx(
            body=body,
            auth_info=AuthInfo(signer_infos=[], fee=Fee()),
            signatures=[],
        )
        tx_response = TxResponse(
            height=height,
            txhash=txhash,
            gas_wanted=0,
            gas_used=0,
            tx={
                "@type": self.type_url,
                "value": base64.b64encode(json_bytes).decode("ascii"),
            },
            timestamp=block.header.time or "",
            events=[
                Event(
                    type="message",
                    attributes=[EventAttribute(key="proposer", value=proposer)],
                )
            ],
        )

        logger.debug(
            "synthesized presentation tx %s at height %d with %d claims",
            txhash,
            height,
            len(claims) - 1,
        )
        return Transaction(tx=tx, tx_response=tx_response)
