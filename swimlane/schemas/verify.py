from typing import Optional
from pydantic import BaseModel


class VerifyTests(BaseModel):
    connection: bool = False
    read: bool = False
    write: bool = False


class VerifyResponse(BaseModel):
    """Result of the persistence backend health check"""
    status: str
    message: str
    tests: VerifyTests
    error: Optional[str] = None
