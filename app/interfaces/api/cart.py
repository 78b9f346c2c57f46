"""Cart API routes: quote cart of the session in X-Cart-Session, and its export."""

from fastapi import APIRouter, Depends, Response

from app.application.services.cart_service import CartEngine
from app.application.services.inventory_service import InventoryStore
from app.application.services.quote_formatter import (
    build_share_link,
    generate_quote_number,
    quote_filename,
    render_quote_pdf,
)
from app.core.exceptions import BusinessRuleViolationException, EntityNotFoundException
from app.domain.pricing import CartScope
from app.domain.schemas.cart import (
    AddToCartRequest,
    CartView,
    QuoteRequest,
    RepriceRequest,
    ShareLinkResponse,
    UpdateQuantityRequest,
)
from app.interfaces.deps import get_cart, get_inventory

router = APIRouter(prefix="/api/cart", tags=["Cart"])


def _view(cart: CartEngine, scope: CartScope) -> CartView:
    return CartView(
        scope=scope,
        items=cart.lines(scope),
        total=cart.total(scope),
        cart_total=cart.cart_total,
    )


def _quote_lines(cart: CartEngine, scope: CartScope):
    lines = cart.lines(scope)
    if not lines:
        raise BusinessRuleViolationException(
            "El presupuesto está vacío",
            details={"scope": scope.value},
        )
    return lines


@router.get("", response_model=CartView)
def get_cart_view(scope: CartScope = CartScope.GENERAL, cart: CartEngine = Depends(get_cart)):
    return _view(cart, scope)


@router.delete("", response_model=CartView)
def clear_cart(scope: CartScope = CartScope.ALL, cart: CartEngine = Depends(get_cart)):
    cart.clear_cart(scope)
    return _view(cart, scope)


@router.post("/items", response_model=CartView)
def add_item(
    body: AddToCartRequest,
    cart: CartEngine = Depends(get_cart),
    inventory: InventoryStore = Depends(get_inventory),
):
    product = inventory.get(body.product_id)
    if product is None:
        raise EntityNotFoundException(
            f"Producto '{body.product_id}' no encontrado",
            details={"product_id": body.product_id},
        )
    cart.add_to_cart(product, body.quantity, body.list_id)
    return _view(cart, CartScope.for_tier(body.list_id))


@router.patch("/items/{product_id:path}", response_model=CartView)
def update_item(
    product_id: str,
    body: UpdateQuantityRequest,
    scope: CartScope = CartScope.GENERAL,
    cart: CartEngine = Depends(get_cart),
):
    cart.update_cart_quantity(product_id, body.quantity)
    return _view(cart, scope)


@router.delete("/items/{product_id:path}", response_model=CartView)
def remove_item(
    product_id: str,
    scope: CartScope = CartScope.GENERAL,
    cart: CartEngine = Depends(get_cart),
):
    cart.remove_from_cart(product_id)
    return _view(cart, scope)


@router.post("/reprice", response_model=CartView)
def reprice(body: RepriceRequest, cart: CartEngine = Depends(get_cart)):
    """Move lines to another price list (e.g. when the active list changes)."""
    cart.update_cart_prices(body.list_id, body.scope)
    return _view(cart, CartScope.for_tier(body.list_id))


@router.post("/quote/pdf")
def export_pdf(body: QuoteRequest, cart: CartEngine = Depends(get_cart)):
    lines = _quote_lines(cart, body.scope)
    quote_number = generate_quote_number()
    pdf = render_quote_pdf(
        lines,
        body.client_name,
        cart.total(body.scope),
        quote_number=quote_number,
    )
    filename = quote_filename(body.client_name, quote_number)
    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.post("/quote/share", response_model=ShareLinkResponse)
def export_share_link(body: QuoteRequest, cart: CartEngine = Depends(get_cart)):
    lines = _quote_lines(cart, body.scope)
    url, message = build_share_link(lines, cart.total(body.scope))
    return ShareLinkResponse(url=url, message=message)
