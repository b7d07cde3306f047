"""
Data models for the did-credentials SDK.
"""
from enum import Enum
from typing import Dict, Any, Optional, List

from pydantic import AliasChoices, BaseModel, Field


class RequestType(str, Enum):
    """JWT ``type`` tags of the messages exchanged by the protocol"""
    DISCLOSURE_REQUEST = "shareReq"
    DISCLOSURE_RESPONSE = "shareResp"
    VERIFICATION_SIGNATURE_REQUEST = "verReq"
    TYPED_DATA_SIGNATURE_REQUEST = "typedDataSigReq"
    PERSONAL_SIGN_REQUEST = "personalSigReq"
    ETH_TX_REQUEST = "ethtx"


class AccountType(str, Enum):
    """Account models a disclosure request may ask the counterparty for"""
    GENERAL = "general"
    SEGREGATED = "segregated"
    KEYPAIR = "keypair"
    NONE = "none"


class NetworkEntry(BaseModel):
    """Connection details of an Ethereum network hosting a DID registry"""
    rpc_url: str = Field(..., validation_alias=AliasChoices("rpcUrl", "rpc_url", "rpc"))
    registry_address: str = Field(
        ...,
        validation_alias=AliasChoices("registryAddress", "registry_address", "registry", "didRegistry"),
    )
    name: Optional[str] = None

    class Config:
        frozen = True


class IssuerHint(BaseModel):
    """A candidate issuer able to satisfy a requested claim"""
    did: str
    url: Optional[str] = None


class ClaimSpec(BaseModel):
    """Per-claim request details"""
    essential: Optional[bool] = None
    reason: Optional[str] = None
    iss: Optional[List[IssuerHint]] = None


class DisclosureRequestParams(BaseModel):
    """
    Parameters recognized by a disclosure request.

    Anything else passed by the caller is ignored.
    """
    requested: Optional[List[str]] = None
    verified: Optional[List[str]] = None
    claims: Optional[Dict[str, Dict[str, Optional[ClaimSpec]]]] = None
    notifications: bool = False
    callback_url: Optional[str] = Field(None, alias="callbackUrl")
    network_id: Optional[str] = Field(None, alias="networkId")
    rpc_url: Optional[str] = Field(None, alias="rpcUrl")
    vc: Optional[List[str]] = None
    exp: Optional[int] = None
    account_type: Optional[str] = Field(None, alias="accountType")
    box_pub: Optional[str] = Field(None, alias="boxPub")

    class Config:
        populate_by_name = True
        extra = "ignore"


class DisclosureResponseParams(BaseModel):
    """Fields a disclosure response may carry"""
    own: Optional[Dict[str, Any]] = None
    req: Optional[str] = None
    verified: Optional[List[str]] = None
    nad: Optional[str] = None
    capabilities: Optional[List[str]] = None
    box_pub: Optional[str] = Field(None, alias="boxPub")

    class Config:
        populate_by_name = True
        extra = "ignore"


class Profile(BaseModel):
    """
    Normalized result of verifying a disclosure response.

    Self-asserted ``own`` claims are stored as extra fields next to the
    protocol fields.
    """
    did: str
    verified: Optional[List[Dict[str, Any]]] = None
    invalid: Optional[List[Any]] = None
    push_token: Optional[str] = Field(None, alias="pushToken")
    nad: Optional[str] = None
    box_pub: Optional[str] = Field(None, alias="boxPub")

    class Config:
        populate_by_name = True
        extra = "allow"
        frozen = True

    def to_dict(self) -> Dict[str, Any]:
        """Return the profile with wire (camelCase) field names"""
        return self.model_dump(by_alias=True, exclude_none=True)
