"""Sello oficial del acta derivado de su contenido.

English:
    Official record seal derived from its content.
"""

import hashlib
import json
import logging
import string
from typing import Any, Dict

from .record import ElectoralRecord

logger = logging.getLogger(__name__)

SEAL_DOMAIN = b"escrutinio-record-seal-v1"


def _is_valid_hex_hash(value: str) -> bool:
    if len(value) != 64:
        return False
    hex_chars = set(string.hexdigits.lower())
    return all(char in hex_chars for char in value)


def record_canonical_payload(record: ElectoralRecord) -> Dict[str, Any]:
    """Contenido del acta que cubre el sello.

    English:
        Record content covered by the seal. Vote lines are sorted by
        candidate id so the payload does not depend on entry order.
    """
    return {
        "record_id": record.id,
        "record_number": record.record_number,
        "polling_station_id": record.polling_station.id,
        "total_registered_voters": record.total_registered_voters,
        "votes": [
            {
                "candidate_id": entry.candidate_id,
                "votes": entry.votes,
                "preferential_votes": entry.preferential_votes,
            }
            for entry in sorted(record.vote_records, key=lambda item: item.candidate_id)
        ],
        "blank_votes": record.blank_votes,
        "null_votes": record.null_votes,
        "total_effective_voters": record.total_effective_voters,
    }


def _build_seal_payload(canonical_json: str) -> bytes:
    canonical_bytes = canonical_json.encode("utf-8")
    parts = [
        SEAL_DOMAIN,
        b"payload",
        str(len(canonical_bytes)).encode("utf-8"),
        canonical_bytes,
    ]
    return b"|".join(parts)


def compute_seal(record: ElectoralRecord) -> str:
    """Calcula el sello SHA-256 del acta.

    Args:
        record (ElectoralRecord): Acta a sellar.

    Returns:
        str: Hash SHA-256 en hexadecimal.

    English:
        Computes the SHA-256 seal for a record.
    """
    canonical_json = json.dumps(
        record_canonical_payload(record),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(_build_seal_payload(canonical_json)).hexdigest()


def verify_seal(record: ElectoralRecord) -> bool:
    """Verifica que el sello coincida con el contenido del acta.

    Records sealed with an externally supplied token that is not a SHA-256
    digest cannot be verified and return ``False``.

    English:
        Check that the seal matches the record content.
    """
    if not record.is_finalized:
        return False
    seal = record.official_seal.strip().lower()
    if not _is_valid_hex_hash(seal):
        logger.warning("record_seal_not_verifiable record_id=%s", record.id)
        return False
    return seal == compute_seal(record)
