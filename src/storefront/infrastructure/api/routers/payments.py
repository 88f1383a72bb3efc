"""Payment endpoints: checkout initialization and verification."""

from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.responses import JSONResponse

from storefront.application.dto import CartItemSpec, CheckoutRequest
from storefront.application.initialize_payment import InitializePaymentHandler
from storefront.application.place_order import PlaceOrderHandler
from storefront.application.verify_payment import VerifyPaymentHandler
from storefront.domain.exceptions import (
    EntityNotFoundError,
    OrderCreationFailed,
    PaymentInitializationFailed,
    PaymentVerificationUnavailable,
    PersistenceError,
    ValidationError,
)
from storefront.infrastructure.api.dependencies import (
    get_initialize_payment_handler,
    get_place_order_handler,
    get_public_key,
    get_verify_payment_handler,
)
from storefront.infrastructure.api.schemas import CheckoutIn, InitializeOut, VerifyOut
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/payments", tags=["payments"])


def _to_request(payload: CheckoutIn) -> CheckoutRequest:
    return CheckoutRequest(
        email=payload.email,
        customer_name=payload.customer_name,
        shipping_address=payload.shipping_address,
        contact_number=payload.contact_number,
        amount=payload.amount,
        items=[
            CartItemSpec(
                product_id=item.id,
                quantity=item.quantity,
                name=item.name,
                price=item.price,
                min_quantity=item.min_quantity,
            )
            for item in payload.cart_items
        ],
    )


@router.post("/initialize", response_model=InitializeOut)
def initialize_payment(
    payload: CheckoutIn,
    place: PlaceOrderHandler = Depends(get_place_order_handler),
    initialize: InitializePaymentHandler = Depends(get_initialize_payment_handler),
    public_key: str = Depends(get_public_key),
):
    """
    Places a pending order from the cart, then opens a gateway transaction.
    The cart is only cleared client-side after a successful verify.
    """
    try:
        placed = place.handle(_to_request(payload))
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except EntityNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except (OrderCreationFailed, PersistenceError) as e:
        raise HTTPException(status_code=500, detail=str(e))

    try:
        init = initialize.handle(placed.order_id)
    except PaymentInitializationFailed as e:
        raise HTTPException(
            status_code=502,
            detail={"error": str(e), "orderId": e.order_id},
        )
    except PersistenceError as e:
        raise HTTPException(status_code=500, detail=str(e))

    return InitializeOut(
        authorization_url=init.authorization_url,
        access_code=init.access_code,
        reference=init.reference,
        order_id=init.order_id,
        public_key=public_key,
    )


def _verify_response(status_code: int, body: VerifyOut) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=body.model_dump(by_alias=True))


@router.get("/verify", response_model=VerifyOut)
def verify_payment(
    reference: str = Query(""),
    verify: VerifyPaymentHandler = Depends(get_verify_payment_handler),
):
    """
    Reconciles the gateway's verdict for ``reference`` into the order status.
    Safe to call any number of times, concurrently.
    """
    try:
        result = verify.handle(reference)
    except ValidationError as e:
        return _verify_response(400, VerifyOut(success=False, message=str(e), reference=reference))
    except EntityNotFoundError as e:
        return _verify_response(404, VerifyOut(success=False, message=str(e), reference=reference))
    except PaymentVerificationUnavailable as e:
        return _verify_response(503, VerifyOut(success=False, message=str(e), reference=reference))
    except PersistenceError as e:
        logger.error(f"Verification of {reference} hit a storage error: {e}")
        return _verify_response(
            500,
            VerifyOut(success=False, message="We couldn't record your payment, please try again", reference=reference),
        )

    body = VerifyOut(
        success=result.success,
        order_id=result.order_id,
        message=result.message,
        reference=result.reference,
        status=result.order_status,
    )
    return _verify_response(200 if result.success else 400, body)
