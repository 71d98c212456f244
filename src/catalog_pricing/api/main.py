from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel, Field
from typing import List, Optional
import logging

from catalog_pricing import __version__
from catalog_pricing.api.state import get_catalog, get_engine
from catalog_pricing.data.catalog_store import CatalogStore
from catalog_pricing.engine.models import CartLine, Product
from catalog_pricing.exceptions import CatalogPricingError, ProductNotFoundError
from catalog_pricing.logging_config import configure_logging
from catalog_pricing.pricing_engine import PricingEngine

logger = logging.getLogger(__name__)

configure_logging()

app = FastAPI(
    title="Catalog Pricing API",
    description="Customer group price resolution and cart line revalidation",
    version=__version__
)

# Enable CORS for frontend development
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


class CartLineIn(BaseModel):
    product_id: int
    quantity: int = Field(ge=1)
    base_price: float
    price: Optional[float] = None
    base_total: Optional[float] = None
    total: Optional[float] = None
    child_product_id: Optional[int] = None
    children_product_ids: List[int] = Field(default_factory=list)


class CartValidateRequest(BaseModel):
    customer_group_id: Optional[int] = None
    line: CartLineIn


class AddToCartRequest(BaseModel):
    customer_group_id: Optional[int] = None
    product_id: int
    quantity: int = 1
    parent_id: Optional[int] = None


class ProductUpdateRequest(BaseModel):
    sku: Optional[str] = None
    name: Optional[str] = None
    price: Optional[float] = None
    special_price: Optional[float] = None
    status: Optional[bool] = None
    weight: Optional[float] = None
    tax_category_id: Optional[int] = None
    mass_update: bool = False


def _product(catalog: CatalogStore, product_id: int) -> Product:
    try:
        return catalog.get_product(product_id)
    except ProductNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))


def _to_cart_line(catalog: CatalogStore, line: CartLineIn) -> CartLine:
    def child_line(product_id: int) -> CartLine:
        product = _product(catalog, product_id)
        return CartLine(product=product, quantity=line.quantity, base_price=product.price,
                        price=product.price, base_total=0.0, total=0.0)

    return CartLine(
        product=_product(catalog, line.product_id),
        quantity=line.quantity,
        base_price=line.base_price,
        price=line.price if line.price is not None else line.base_price,
        base_total=line.base_total if line.base_total is not None else line.base_price * line.quantity,
        total=line.total if line.total is not None else line.base_price * line.quantity,
        child=child_line(line.child_product_id) if line.child_product_id is not None else None,
        children=[child_line(pid) for pid in line.children_product_ids],
    )


@app.get("/")
async def root():
    return {"status": "online", "message": "Catalog Pricing API Active"}


@app.get("/products/{product_id}/prices")
async def get_product_prices(
    product_id: int,
    customer_group_id: Optional[int] = None,
    catalog: CatalogStore = Depends(get_catalog),
    engine: PricingEngine = Depends(get_engine),
):
    product = _product(catalog, product_id)
    with engine.scope(customer_group_id):
        facade = engine.price_for(product)
        return jsonable_encoder({
            "product_id": product.id,
            "sku": product.sku,
            "customer_group_id": facade.customer_group_id,
            "prices": facade.product_prices().to_dict(),
            "minimal_price": facade.minimal_price(),
            "regular_minimal_price": facade.regular_minimal_price(),
            "maximal_price": facade.maximal_price(),
            "regular_maximal_price": facade.regular_maximal_price(),
            "has_discount": facade.has_discount(),
            "offers": facade.offer_line_texts(),
        })


@app.get("/products/{product_id}/final-price")
async def get_final_price(
    product_id: int,
    quantity: Optional[int] = None,
    customer_group_id: Optional[int] = None,
    catalog: CatalogStore = Depends(get_catalog),
    engine: PricingEngine = Depends(get_engine),
):
    product = _product(catalog, product_id)
    with engine.scope(customer_group_id):
        price, trace = engine.final_price_with_trace(product, quantity)
        return jsonable_encoder({
            "product_id": product.id,
            "quantity": quantity,
            "final_price": price,
            "trace": trace,
        })


@app.put("/products/{product_id}")
async def update_product(
    product_id: int,
    req: ProductUpdateRequest,
    catalog: CatalogStore = Depends(get_catalog),
    engine: PricingEngine = Depends(get_engine),
):
    _product(catalog, product_id)
    data = req.model_dump(exclude_unset=True, exclude={"mass_update"})
    try:
        product = catalog.update_product(product_id, data, mass_update=req.mass_update)
    except CatalogPricingError as e:
        raise HTTPException(status_code=422, detail=str(e))
    engine.invalidate()

    return jsonable_encoder({
        "product_id": product.id,
        "sku": product.sku,
        "name": product.name,
        "price": product.price,
        "special_price": product.special_price,
        "status": product.status.value,
        "weight": product.weight,
        "tax_category_id": product.tax_category_id,
    })


@app.post("/cart/validate")
async def validate_cart_line(
    req: CartValidateRequest,
    catalog: CatalogStore = Depends(get_catalog),
    engine: PricingEngine = Depends(get_engine),
):
    line = _to_cart_line(catalog, req.line)
    with engine.scope(req.customer_group_id):
        try:
            result = engine.validate_cart_item(line)
        except CatalogPricingError as e:
            raise HTTPException(status_code=422, detail=str(e))

    return jsonable_encoder({
        "inactive": result.inactive,
        "price_changed": result.price_changed,
        "base_price": line.base_price,
        "price": line.price,
        "base_total": line.base_total,
        "total": line.total,
    })


@app.post("/cart/prepare")
async def prepare_cart_line(
    req: AddToCartRequest,
    catalog: CatalogStore = Depends(get_catalog),
    engine: PricingEngine = Depends(get_engine),
):
    product = _product(catalog, req.product_id)
    data = {"quantity": req.quantity, "product_id": req.product_id}
    if req.parent_id is not None:
        data["parent_id"] = req.parent_id

    with engine.scope(req.customer_group_id):
        if not engine.is_saleable(product):
            raise HTTPException(status_code=422, detail=f"Product {product.id} is not saleable")
        try:
            lines = engine.prepare_for_cart(product, data)
        except CatalogPricingError as e:
            raise HTTPException(status_code=422, detail=str(e))

    return jsonable_encoder({"lines": lines})
