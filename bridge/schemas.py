"""Pydantic schemas for bridge API response bodies."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from common.types import AccessToken, FarmerContact, Pointer


class TokenResponse(BaseModel):
    """Response model for token issuance."""
    model_config = ConfigDict(extra='ignore')

    token: str
    bucket: str
    operation: str
    expires: Optional[str] = None

    def to_access_token(self) -> AccessToken:
        return AccessToken(
            token=self.token,
            bucket=self.bucket,
            operation=self.operation,
            expires=self.expires
        )


class FarmerResponse(BaseModel):
    """Contact details of the farmer holding a shard."""
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    address: str
    port: int
    node_id: str = Field(alias='nodeID')


class PointerResponse(BaseModel):
    """One entry of the pointer list for a file."""
    model_config = ConfigDict(extra='ignore')

    index: int = 0
    hash: str
    size: int = Field(ge=0)
    token: str
    farmer: FarmerResponse
    operation: str = 'PULL'

    def to_pointer(self) -> Pointer:
        return Pointer(
            index=self.index,
            hash=self.hash,
            size=self.size,
            token=self.token,
            farmer=FarmerContact(
                address=self.farmer.address,
                port=self.farmer.port,
                node_id=self.farmer.node_id
            ),
            operation=self.operation
        )


class ErrorResponse(BaseModel):
    """Error body returned by the bridge."""
    model_config = ConfigDict(extra='ignore')

    error: Optional[str] = None
    detail: Optional[str] = None
    code: str = 'UNKNOWN'

    @property
    def message(self) -> str:
        return self.error or self.detail or 'Unknown error'
