"""Stable fingerprint of a normalized configuration."""

import hashlib
import json
from typing import Any, Dict, Optional

from .catalog import PriceCatalog
from .normalizer import NormalizedConfiguration


def canonical_json(data: Any) -> str:
    """Key-sorted, whitespace-free JSON."""
    return json.dumps(data, sort_keys=True, separators=(",", ":"), allow_nan=False)


def configuration_digest(
    config: NormalizedConfiguration,
    catalog: Optional[PriceCatalog] = None,
) -> str:
    """
    SHA-256 hex digest of the normalized configuration.

    The catalog's prices are included when given, so the same input priced
    against different catalogs yields different digests.
    """
    payload: Dict[str, Any] = {"configuration": config.to_dict()}
    if catalog is not None:
        payload["catalog"] = catalog.fingerprint()
    return hashlib.sha256(canonical_json(payload).encode("utf-8")).hexdigest()
