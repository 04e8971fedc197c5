"""Grocery product catalog"""

from typing import Optional

from grama_common.models import Product, ProductCategory, ProductUnit, ProductVariant

# Sample catalog
PRODUCTS: list[Product] = [
    Product(
        id="prod-tomato",
        name="Farm Fresh Tomatoes",
        description="Ripe desi tomatoes sourced from Nashik farms.",
        unit=ProductUnit.KG,
        category=ProductCategory.FRUITS_VEGETABLES,
        base_price=48.0,
        variants=[
            ProductVariant(id="500g", name="500 g", size="500g", price=22.0, compare_at_price=24.0, sku="VEG-TOM-500", is_default=True),
            ProductVariant(id="1kg", name="1 kg", size="1kg", price=40.0, compare_at_price=48.0, sku="VEG-TOM-1000"),
        ],
    ),
    Product(
        id="prod-onion",
        name="Red Onions",
        description="Pungent red onions, ideal for everyday cooking.",
        unit=ProductUnit.KG,
        category=ProductCategory.FRUITS_VEGETABLES,
        base_price=45.0,
        variants=[
            ProductVariant(id="1kg", name="1 kg", size="1kg", price=38.0, sku="VEG-ONI-1000", is_default=True),
            ProductVariant(id="5kg", name="5 kg", size="5kg", price=180.0, compare_at_price=225.0, sku="VEG-ONI-5000"),
        ],
    ),
    Product(
        id="prod-banana",
        name="Robusta Bananas",
        description="Naturally ripened bananas, sold by the dozen.",
        unit=ProductUnit.PIECES,
        category=ProductCategory.FRUITS_VEGETABLES,
        base_price=60.0,
        variants=[
            ProductVariant(id="dozen", name="1 dozen", size="12 pcs", price=55.0, sku="FRU-BAN-12", is_default=True),
        ],
    ),
    Product(
        id="prod-milk",
        name="Toned Milk",
        description="Pasteurised toned milk, 3% fat.",
        brand="Amul",
        unit=ProductUnit.LITERS,
        category=ProductCategory.DAIRY,
        base_price=56.0,
        variants=[
            ProductVariant(id="500ml", name="500 ml", size="500ml", price=28.0, sku="DAI-MLK-500", is_default=True),
            ProductVariant(id="1l", name="1 L", size="1L", price=54.0, compare_at_price=56.0, sku="DAI-MLK-1000"),
        ],
    ),
    Product(
        id="prod-paneer",
        name="Fresh Paneer",
        description="Soft malai paneer made from full cream milk.",
        brand="Mother Dairy",
        unit=ProductUnit.GRAMS,
        category=ProductCategory.DAIRY,
        base_price=100.0,
        variants=[
            ProductVariant(id="200g", name="200 g", size="200g", price=90.0, compare_at_price=100.0, sku="DAI-PNR-200", is_default=True),
        ],
    ),
    Product(
        id="prod-atta",
        name="Whole Wheat Atta",
        description="Chakki-ground whole wheat flour.",
        brand="Aashirvaad",
        unit=ProductUnit.KG,
        category=ProductCategory.STAPLES,
        base_price=320.0,
        variants=[
            ProductVariant(id="5kg", name="5 kg", size="5kg", price=275.0, compare_at_price=320.0, sku="STP-ATA-5000", is_default=True),
            ProductVariant(id="10kg", name="10 kg", size="10kg", price=520.0, compare_at_price=640.0, sku="STP-ATA-10000"),
        ],
    ),
    Product(
        id="prod-rice",
        name="Basmati Rice",
        description="Aged long grain basmati rice.",
        brand="India Gate",
        unit=ProductUnit.KG,
        category=ProductCategory.STAPLES,
        base_price=150.0,
        variants=[
            ProductVariant(id="1kg", name="1 kg", size="1kg", price=135.0, compare_at_price=150.0, sku="STP-RIC-1000", is_default=True),
        ],
    ),
    Product(
        id="prod-namkeen",
        name="Aloo Bhujia",
        description="Crispy spiced potato noodles.",
        brand="Haldiram's",
        unit=ProductUnit.PACKETS,
        category=ProductCategory.SNACKS,
        base_price=55.0,
        variants=[
            ProductVariant(id="200g", name="200 g", size="200g", price=50.0, sku="SNK-BHU-200", is_default=True),
        ],
    ),
    Product(
        id="prod-tea",
        name="Assam Tea",
        description="Strong CTC leaf tea.",
        brand="Tata Tea",
        unit=ProductUnit.GRAMS,
        category=ProductCategory.BEVERAGES,
        base_price=290.0,
        variants=[
            ProductVariant(id="500g", name="500 g", size="500g", price=265.0, compare_at_price=290.0, sku="BEV-TEA-500", is_default=True),
        ],
    ),
    Product(
        id="prod-soap",
        name="Neem Bathing Soap",
        description="Pack of four herbal soaps.",
        brand="Margo",
        unit=ProductUnit.PIECES,
        category=ProductCategory.PERSONAL_CARE,
        base_price=160.0,
        in_stock=False,
        variants=[
            ProductVariant(id="4x100g", name="4 x 100 g", size="400g", price=140.0, sku="PRC-SOA-4", stock=0, is_default=True),
        ],
    ),
]


class ProductDatabase:
    """In-memory product catalog"""

    def __init__(self, products: Optional[list[Product]] = None):
        seed = PRODUCTS if products is None else products
        self.products: dict[str, Product] = {p.id: p for p in seed}

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID"""
        return self.products.get(product_id)

    def search_products(
        self,
        query: Optional[str] = None,
        category: Optional[ProductCategory] = None,
        in_stock_only: bool = True,
        limit: int = 20,
        offset: int = 0,
    ) -> tuple[list[Product], int]:
        """
        Search products with filters.

        Returns:
            Tuple of (matching products, total count)
        """
        results = list(self.products.values())

        if query:
            query_lower = query.lower()
            results = [
                p for p in results
                if query_lower in p.name.lower()
                or query_lower in p.description.lower()
                or (p.brand and query_lower in p.brand.lower())
            ]

        if category:
            results = [p for p in results if p.category == category]

        if in_stock_only:
            results = [p for p in results if p.in_stock and any(v.stock > 0 for v in p.variants)]

        total = len(results)
        return results[offset : offset + limit], total
