"""
Test Planner - Shared Schema Types
"""
from typing import Annotated

from pydantic import BaseModel, PlainSerializer

# Integer identity that leaves the API as a string so large values survive JSON clients
IdStr = Annotated[int, PlainSerializer(lambda value: str(value), return_type=str)]


class Pagination(BaseModel):
    """Page metadata for list endpoints."""
    total: int
    pages: int
    current: int
    per_page: int


class OffsetPagination(BaseModel):
    total: int
    offset: int
    limit: int
