"""
SHA-256 verification of snapshot records.

Two digests are computed for every payload:

- raw digest: SHA-256 over the exact bytes served by the mirror
- canonical digest: SHA-256 over the record re-serialized in canonical form
  (sorted keys, no whitespace) with its self-embedded ``sha256`` field removed

The registry digest, when anchored, is authoritative and is compared against
the raw digest only. Older records carry their own digest in ``sha256`` and
are checked against either form.
"""
from __future__ import annotations

import hashlib
import json
import math
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any

from navproof.errors import FormatError

EMBEDDED_DIGEST_FIELD = "sha256"


class VerificationMode(str, Enum):
    NONE = "none"
    ON_CHAIN_BYTES = "on-chain-file-bytes"
    EMBEDDED_BYTES = "file-bytes"
    EMBEDDED_CANONICAL = "canonical-minus-sha256"


@dataclass(frozen=True)
class VerificationResult:
    ok: bool
    mode: VerificationMode
    raw_digest: str
    canonical_digest: str
    source_url: str | None
    expected_digest: str | None
    embedded_digest: str | None
    record: dict[str, Any]


def sha256_hex(content: bytes) -> str:
    return hashlib.sha256(content).hexdigest()


def normalize_digest(value: Any) -> str:
    """Lowercase hex without a 0x prefix. Accepts str or bytes (e.g. a bytes32)."""
    if value is None:
        return ""
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).hex()
    s = str(value).strip().lower()
    if s.startswith("0x"):
        s = s[2:]
    return s


def digests_equal(a: Any, b: Any) -> bool:
    na, nb = normalize_digest(a), normalize_digest(b)
    return bool(na) and na == nb


def is_zero_digest(value: Any) -> bool:
    """True for a missing digest or the all-zero "not yet anchored" bytes32."""
    s = normalize_digest(value)
    return not s or set(s) == {"0"}


# ---------------------------------------------------------------------------
# Canonical JSON
# ---------------------------------------------------------------------------

def _js_number(x: float) -> str:
    # Number formatting as the producer's JSON.stringify emits it:
    # shortest round-trip digits, exponent only below 1e-6 or from 1e21 up.
    if not math.isfinite(x):
        return "null"
    if x == 0:
        return "0"
    sign = "-" if x < 0 else ""
    _, digits, exp = Decimal(repr(abs(x))).as_tuple()
    s = "".join(str(d) for d in digits)
    n = len(s) + int(exp)
    s = s.rstrip("0") or "0"
    k = len(s)
    if k <= n <= 21:
        out = s + "0" * (n - k)
    elif 0 < n <= 21:
        out = s[:n] + "." + s[n:]
    elif -6 < n <= 0:
        out = "0." + "0" * (-n) + s
    else:
        e = n - 1
        mantissa = s if k == 1 else s[0] + "." + s[1:]
        out = f"{mantissa}e{'+' if e >= 0 else '-'}{abs(e)}"
    return sign + out


class _Literal(str):
    """Already-serialized punctuation queued between values."""


def _scalar_json(value: Any) -> str:
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        # JSON.stringify sees a double; integers past 2**53 lose precision there too.
        if abs(value) > 2**53:
            return _js_number(float(value))
        return str(value)
    if isinstance(value, float):
        return _js_number(value)
    if isinstance(value, str):
        return json.dumps(value, ensure_ascii=False)
    raise TypeError(f"Unsupported type for canonical JSON: {type(value).__name__}")


def canonical_json(value: Any) -> str:
    """
    Deterministic serialization: object keys sorted at every level, arrays kept
    in order, no insignificant whitespace, non-ASCII left unescaped.

    Walks the value with an explicit stack, so nesting depth is not bounded by
    the interpreter's recursion limit.
    """
    out: list[str] = []
    stack: list[Any] = [value]
    while stack:
        item = stack.pop()
        if isinstance(item, _Literal):
            out.append(item)
            continue
        if isinstance(item, dict):
            pending: list[Any] = [_Literal("{")]
            for i, k in enumerate(sorted(item, key=str)):
                if i:
                    pending.append(_Literal(","))
                pending.append(_Literal(json.dumps(str(k), ensure_ascii=False) + ":"))
                pending.append(item[k])
            pending.append(_Literal("}"))
            stack.extend(reversed(pending))
        elif isinstance(item, (list, tuple)):
            pending = [_Literal("[")]
            for i, v in enumerate(item):
                if i:
                    pending.append(_Literal(","))
                pending.append(v)
            pending.append(_Literal("]"))
            stack.extend(reversed(pending))
        else:
            out.append(_scalar_json(item))
    return "".join(out)


def canonical_digest(record: dict[str, Any]) -> str:
    stripped = {k: v for k, v in record.items() if k != EMBEDDED_DIGEST_FIELD}
    return sha256_hex(canonical_json(stripped).encode("utf-8"))


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------

def _reject_constant(name: str) -> Any:
    # NaN, Infinity and -Infinity are not JSON.
    raise FormatError(f"Snapshot is not valid JSON: bare {name} literal")


def parse_record(content: bytes) -> dict[str, Any]:
    try:
        text = content.decode("utf-8")
    except UnicodeDecodeError as e:
        raise FormatError(f"Snapshot is not valid UTF-8: {e}") from e
    if text.startswith("\ufeff"):
        text = text[1:]
    try:
        record = json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise FormatError(f"Snapshot is not valid JSON: {e}") from e
    except RecursionError as e:
        raise FormatError("Snapshot nesting is too deep to parse") from e
    if not isinstance(record, dict):
        raise FormatError(f"Snapshot must be a JSON object, got {type(record).__name__}")
    return record


def verify_snapshot_bytes(
    content: bytes,
    expected: str | bytes | None = None,
    *,
    source_url: str | None = None,
) -> VerificationResult:
    """
    Parse ``content`` and decide whether it matches a known digest.

    Decision order (first match wins):
    1. registry digest present -> ok iff raw digest matches (embedded digest ignored)
    2. embedded digest == raw digest
    3. embedded digest == canonical digest
    4. no match -> ok=False, mode NONE

    A mismatch is returned, never raised. Raises FormatError only if the
    payload cannot be parsed.
    """
    record = parse_record(content)
    raw = sha256_hex(content)
    canon = canonical_digest(record)

    exp = None if is_zero_digest(expected) else normalize_digest(expected)
    embedded_raw = record.get(EMBEDDED_DIGEST_FIELD)
    embedded = normalize_digest(embedded_raw) if isinstance(embedded_raw, str) and embedded_raw.strip() else None

    if exp:
        ok, mode = raw == exp, VerificationMode.ON_CHAIN_BYTES
    elif embedded and embedded == raw:
        ok, mode = True, VerificationMode.EMBEDDED_BYTES
    elif embedded and embedded == canon:
        ok, mode = True, VerificationMode.EMBEDDED_CANONICAL
    else:
        ok, mode = False, VerificationMode.NONE

    return VerificationResult(
        ok=ok,
        mode=mode,
        raw_digest=raw,
        canonical_digest=canon,
        source_url=source_url,
        expected_digest=exp,
        embedded_digest=embedded,
        record=record,
    )
