"""Deterministic bucket id derivation and credential hashing helpers."""

import hashlib

from common.constants import BUCKET_ID_LENGTH


def calculate_bucket_id(user: str, bucket_name: str) -> str:
    """
    Derive the bucket id the bridge assigns to a user's named bucket.

    Args:
        user: Owner of the bucket (bridge account email)
        bucket_name: Human-readable bucket name

    Returns:
        First 24 hex characters of SHA-256(user + bucket_name)
    """
    digest = hashlib.sha256((user + bucket_name).encode('utf-8')).hexdigest()
    return digest[:BUCKET_ID_LENGTH]


def hash_password(password: str) -> str:
    """
    Hash a bridge password the way the bridge expects it in basic auth.

    Args:
        password: Plain-text password

    Returns:
        Hexadecimal SHA-256 digest
    """
    return hashlib.sha256(password.encode('utf-8')).hexdigest()
