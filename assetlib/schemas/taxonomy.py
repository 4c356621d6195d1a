"""
Pydantic schemas for the taxonomy endpoint (GET /configure).
"""

from pydantic import BaseModel


class CategoryResponse(BaseModel):
    id: int
    name: str
    icon: str
    type: int


class LicenseResponse(BaseModel):
    id: str
    name: str


class ConfigureResponse(BaseModel):
    """Categories of the requested type and the accepted licenses."""

    categories: list[CategoryResponse]
    licenses: list[LicenseResponse]
