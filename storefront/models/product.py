"""Catalog API models"""

from grama_common.models import CamelModel, Product


class ProductSearchResponse(CamelModel):
    """Response from product search"""
    products: list[Product]
    total: int
    limit: int
    offset: int
