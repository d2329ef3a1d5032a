"""
Data models for the Crosstalk SDK.
"""
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field


class Coin(BaseModel):
    """An amount of a single native denomination"""
    denom: str
    amount: int = Field(ge=0)


class Config(BaseModel):
    """Prices charged by the name service, fixed at instantiation"""
    purchase_price: Optional[Coin] = None
    transfer_price: Optional[Coin] = None


class NameRecord(BaseModel):
    owner: str


class PendingRequests(BaseModel):
    """Remote request identifiers accepted by the gateway, in delivery order"""
    requests: List[int] = Field(default_factory=list)


class Env(BaseModel):
    """Execution environment of the current invocation"""
    contract_address: str
    chain_id: str = ""
    block_height: int = 0


class MessageInfo(BaseModel):
    """Caller of the current invocation and the funds it attached"""
    sender: str
    funds: List[Coin] = Field(default_factory=list)


class ConfigResponse(BaseModel):
    purchase_price: Optional[Coin] = None
    transfer_price: Optional[Coin] = None

    @classmethod
    def from_config(cls, config: Config) -> "ConfigResponse":
        return cls(purchase_price=config.purchase_price, transfer_price=config.transfer_price)


class ResolveRecordResponse(BaseModel):
    """Current owner a name resolves to, if any"""
    address: Optional[str] = None


class LoadStatesResponse(BaseModel):
    """Debug dump of every state slot"""
    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    name_resolver: List[Tuple[str, str]]
    request: bytes
    result: bytes
    nonce: int
    pending: List[int]
