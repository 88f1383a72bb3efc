"""Application service: Place Order use case.

Turns a checkout submission into a durable ``pending`` order:

1. Validate the submission.
2. Re-read every product from the catalog; client prices are ignored.
3. Price the cart with the pricing engine.
4. Resolve the customer by email (create on first purchase, otherwise
   overwrite phone and address).
5. Persist order + items atomically.

No payment provider is contacted here; see InitializePaymentHandler.
"""

from __future__ import annotations

from storefront.application.dto import CartItemSpec, CheckoutRequest, PlacedOrderDTO
from storefront.domain.exceptions import (
    DuplicateEmailError,
    EmptyCartError,
    EntityNotFoundError,
    OrderCreationFailed,
    PersistenceError,
    ValidationError,
)
from storefront.domain.model.customer import Customer, normalize_email
from storefront.domain.model.order import Order, ensure_chargeable
from storefront.domain.repository.customer_repository import CustomerRepository
from storefront.domain.repository.order_repository import OrderRepository
from storefront.domain.repository.product_repository import ProductRepository
from storefront.domain.service.pricing import CartLine, price_cart
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class PlaceOrderHandler:

    def __init__(
        self,
        order_repo: OrderRepository,
        product_repo: ProductRepository,
        customer_repo: CustomerRepository,
    ) -> None:
        self._order_repo = order_repo
        self._product_repo = product_repo
        self._customer_repo = customer_repo

    def handle(self, request: CheckoutRequest) -> PlacedOrderDTO:
        self._validate(request)

        lines = [self._resolve_line(spec) for spec in request.items]
        breakdown = price_cart(lines)
        ensure_chargeable(breakdown.total)

        if request.amount is not None and request.amount != breakdown.total.amount:
            logger.warning(
                f"Client amount {request.amount} differs from computed total "
                f"{breakdown.total.amount} for {normalize_email(request.email)}"
            )

        customer = self._resolve_customer(request)
        order = Order.place(
            customer_id=customer.id,  # type: ignore[arg-type]
            shipping_address=request.shipping_address,
            breakdown=breakdown,
        )

        try:
            self._order_repo.add(order)
        except PersistenceError as exc:
            logger.error(f"Order creation for customer {customer.id} rolled back: {exc}")
            raise OrderCreationFailed("Could not create the order, please try again") from exc

        logger.info(
            f"Order {order.id} placed for customer {customer.id}: "
            f"{len(order.items)} line(s), total {order.total}"
        )
        return PlacedOrderDTO(
            order_id=order.id,  # type: ignore[arg-type]
            customer_id=customer.id,  # type: ignore[arg-type]
            email=customer.email,
            subtotal=str(order.subtotal),
            tax=str(order.tax),
            shipping=str(order.shipping),
            total=str(order.total),
            amount_minor_units=order.amount_minor_units,
        )

    # --- Steps ----------------------------------------------------------------

    @staticmethod
    def _validate(request: CheckoutRequest) -> None:
        if not request.email or not request.email.strip():
            raise ValidationError("Email is required")
        if not request.items:
            raise EmptyCartError("Cart is empty")
        if not request.shipping_address or not request.shipping_address.strip():
            raise ValidationError("Shipping address is required")
        if not request.contact_number or not request.contact_number.strip():
            raise ValidationError("Contact number is required")

    def _resolve_line(self, spec: CartItemSpec) -> CartLine:
        product = self._product_repo.get_by_id(spec.product_id)
        if product is None:
            raise EntityNotFoundError(f"Product not found: '{spec.product_id}'")

        if spec.price is not None and spec.price != product.unit_sale_price.amount:
            logger.warning(
                f"Cart price {spec.price} for product {product.id} ignored; "
                f"catalog price is {product.unit_sale_price.amount}"
            )
        return CartLine.for_product(product, spec.quantity)

    def _resolve_customer(self, request: CheckoutRequest) -> Customer:
        """Create-or-fetch keyed on the unique email constraint."""
        email = normalize_email(request.email)
        phone = request.contact_number.strip()
        address = request.shipping_address.strip()

        try:
            existing = self._customer_repo.get_by_email(email)
            if existing is None:
                customer = Customer.register(email, request.customer_name, phone, address)
                try:
                    self._customer_repo.add(customer)
                    logger.info(f"Customer {customer.id} created for {email}")
                    return customer
                except DuplicateEmailError:
                    # A concurrent checkout inserted the same email first.
                    logger.info(f"Customer {email} created concurrently, fetching")
                    existing = self._customer_repo.get_by_email(email)
                    if existing is None:
                        raise

            self._customer_repo.update_contact(existing.id, phone, address)  # type: ignore[arg-type]
        except PersistenceError as exc:
            raise OrderCreationFailed("Could not record customer details, please try again") from exc

        existing.phone = phone
        existing.address = address
        logger.info(f"Customer {existing.id} contact details updated")
        return existing
