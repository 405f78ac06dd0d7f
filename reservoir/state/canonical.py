"""
Deterministic seed encoding and id derivation.

Pool, market, vault, share-class and authority ids are all

    "0x" + sha256(b"reservoir:" + label + b":v1\\x00" + seed_json)

where ``seed_json`` is the compact, key-sorted JSON array of the seeds.
Only values with a single JSON spelling are accepted as seeds (str, int,
bool, None, and lists/tuples/str-keyed dicts of those), so the same seeds
always name the same account.
"""

from __future__ import annotations

import hashlib
import json
from typing import Any

ID_VERSION = 1


def _check_seed(value: Any, path: str = "seed") -> None:
    if isinstance(value, float):
        raise TypeError(f"{path}: floats have no canonical encoding")
    if isinstance(value, str):
        if any(0xD800 <= ord(ch) <= 0xDFFF for ch in value):
            raise TypeError(f"{path}: lone surrogates cannot be encoded")
    elif isinstance(value, dict):
        for k, v in value.items():
            if not isinstance(k, str):
                raise TypeError(f"{path}: dict keys must be str")
            _check_seed(k, f"{path}.{k}")
            _check_seed(v, f"{path}.{k}")
    elif isinstance(value, (list, tuple)):
        for i, item in enumerate(value):
            _check_seed(item, f"{path}[{i}]")
    elif value is not None and not isinstance(value, int):
        raise TypeError(f"{path}: unsupported seed type {type(value).__name__}")


def canonical_json_bytes(value: Any) -> bytes:
    """Compact, key-sorted UTF-8 JSON; rejects floats and NaN."""
    _check_seed(value)
    return json.dumps(
        value, sort_keys=True, separators=(",", ":"), ensure_ascii=False, allow_nan=False
    ).encode("utf-8")


def domain_prefix(label: str, version: int = ID_VERSION) -> bytes:
    """``b"reservoir:<label>:v<version>\\x00"``; labels are non-empty ASCII without NUL."""
    if not isinstance(label, str) or not label or "\x00" in label or not label.isascii():
        raise ValueError(f"invalid id label: {label!r}")
    if not isinstance(version, int) or isinstance(version, bool) or version <= 0:
        raise ValueError(f"invalid id version: {version!r}")
    return f"reservoir:{label}:v{version}\x00".encode("ascii")


def derive_id(label: str, *seeds: Any) -> str:
    """Derive the 0x-prefixed hex id for `label` and `seeds`."""
    digest = hashlib.sha256(domain_prefix(label) + canonical_json_bytes(list(seeds)))
    return "0x" + digest.hexdigest()
