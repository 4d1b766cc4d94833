from typing import List, Optional

from pydantic import BaseModel, Field


class DataIntegrityToolCall(BaseModel):
    """Arguments of one `data_integrity` tool call, exactly as emitted by the agent."""
    lookup: Optional[str] = Field(None, description="Token symbol to resolve, e.g. 'BONK'.")
    verify: Optional[str] = Field(None, description="User-supplied address to cross-reference, passed verbatim.")
    chain: str = Field(..., description="One of 'solana', 'ethereum', 'bitcoin', 'sui'.")


class TokenMatchModel(BaseModel):
    address: str
    name: str
    symbol: str


class LookupResponse(BaseModel):
    """Union of every lookup outcome; absent fields are dropped from the wire payload."""
    found: Optional[bool] = None
    isNative: Optional[bool] = None
    ambiguous: Optional[bool] = None
    address: Optional[str] = None
    name: Optional[str] = None
    symbol: Optional[str] = None
    chain: Optional[str] = None
    reason: Optional[str] = None
    matches: Optional[List[TokenMatchModel]] = None


class VerifyResponse(BaseModel):
    verified: bool
    name: Optional[str] = None
    symbol: Optional[str] = None
    chain: Optional[str] = None
    warning: Optional[str] = None
