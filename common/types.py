"""Shared data type definitions (AccessToken, FarmerContact, Pointer)."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class AccessToken:
    """
    Short-lived credential authorizing retrieval of one file's pointers.
    """
    token: str
    bucket: str
    operation: str
    expires: Optional[str] = None


@dataclass(frozen=True)
class FarmerContact:
    """
    Network location of a storage node serving shards.
    """
    address: str
    port: int
    node_id: str


@dataclass(frozen=True)
class Pointer:
    """
    Where one shard of a file lives and how to fetch it.
    """
    index: int
    hash: str
    size: int
    token: str
    farmer: FarmerContact
    operation: str = "PULL"

    def shard_url(self, protocol: str) -> str:
        """Build the farmer URL serving this shard."""
        return f"{protocol}://{self.farmer.address}:{self.farmer.port}/shards/{self.hash}"
