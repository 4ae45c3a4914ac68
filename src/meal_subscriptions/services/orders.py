"""Order placement and status transitions."""

import logging
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol
from uuid import UUID, uuid4

from meal_subscriptions.domain.carts import CartCategory
from meal_subscriptions.domain.orders import (
    CustomerAccount,
    DeliveryStatus,
    Order,
    OrderInput,
    OrderPlacement,
    OrderQuery,
    OrderStatus,
    StatusField,
)
from meal_subscriptions.domain.pagination import Page, PageRequest, build_page
from meal_subscriptions.domain.results import (
    ErrorKind,
    Failure,
    Message,
    Ok,
    Result,
    system_failure,
)
from meal_subscriptions.services.apportionment import CustomizedCartRepository
from meal_subscriptions.services.cart_totals import CartAggregator, snapshot
from meal_subscriptions.services.carts import CartRepository
from meal_subscriptions.services.catalog import CatalogRepository
from meal_subscriptions.services.notifications import NotificationService

_logger = logging.getLogger(__name__)

MEAL_COUNT_MISSING = Message(
    en="{count} meal count doesn't exist in the database.",
    ar="عدد الوجبات {count} غير موجود في قاعدة البيانات",
)
PLAN_DURATION_MISSING = Message(
    en="{days} days plan duration doesn't exist in the database.",
    ar="مدة الخطة {days} أيام غير موجودة في قاعدة البيانات",
)
PROFILE_NOT_VERIFIED = Message(
    en="Your profile information is not updated or your profile may not be "
    "verified. You cannot order without updating the information and verifying "
    "the profile.",
    ar="معلومات ملفك الشخصي غير محدثة أو قد لا يكون ملفك الشخصي موثقًا. لا يمكنك "
    "الطلب دون تحديث المعلومات والتحقق من الملف الشخصي",
)
PHONE_REQUIRED = Message(
    en="Please provide a valid phone number in your profile to place an order.",
    ar="يرجى تقديم رقم هاتف صالح في ملفك الشخصي لتتمكن من الطلب",
)
EMPTY_CART = Message(
    en="You can't place an order because you don't have any items in your cart.",
    ar="لا يمكنك إتمام الطلب لأنك لا تملك أي عناصر في عربة التسوق",
)
ORDER_PLACED = Message(
    en="Your order placed successfully.", ar="تم تقديم طلبك بنجاح"
)
ORDER_ID_FOR_USER = Message(
    en="Your order-id is {order_id}", ar="رقم طلبك هو {order_id}"
)
NEW_ORDER_FOR_ADMIN = Message(en="A New Order Received", ar="تم استلام طلب جديد")
ORDER_ID_FOR_ADMIN = Message(
    en="Order ID: {order_id}", ar="رقم الطلب: {order_id}"
)
ORDER_PLACEMENT_FAILED = Message(
    en="Failed to place the order.", ar="فشل في تقديم الطلب"
)
ORDERS_RETRIEVAL_FAILED = Message(
    en="Failed to retrieve user orders.", ar="فشل في استرجاع طلبات المستخدم"
)
INVALID_STATUS_FIELD = Message(
    en="Invalid status field. Use order_status, delivery_status or paid_status.",
    ar="حقل الحالة غير صالح. استخدم order_status أو delivery_status أو paid_status",
)
ORDER_NOT_FOUND = Message(
    en="Order not found. Please provide a valid order ID.",
    ar="الطلب غير موجود. يرجى تقديم معرف طلب صالح",
)
INVALID_ORDER_STATUS = Message(
    en="Invalid status value. Please provide a valid status.",
    ar="قيمة الحالة غير صالحة. يرجى تقديم حالة صالحة",
)
ORDER_STATUS_FROZEN = Message(
    en="Order status cannot be changed for a shipped or delivered order.",
    ar="لا يمكن تغيير حالة الطلب لطلب تم شحنه أو تم تسليمه",
)
CANNOT_UNCONFIRM = Message(
    en="Cannot change order status to pending if it is already confirmed.",
    ar="لا يمكن تغيير حالة الطلب إلى معلَّق إذا تم تأكيده بالفعل",
)
ORDER_STATUS_FINAL = Message(
    en="Order status is already {status} and cannot be changed.",
    ar="حالة الطلب {status} بالفعل ولا يمكن تغييرها",
)
ORDER_STATUS_CHANGED = Message(
    en="Order status {status} now.", ar="حالة الطلب {status} الآن"
)
ORDER_STATUS_UPDATE_FAILED = Message(
    en="Failed to update order status. Please try again.",
    ar="فشل تحديث حالة الطلب. يرجى المحاولة مرة أخرى",
)
INVALID_DELIVERY_STATUS = Message(
    en="Invalid delivery status value. Please provide a valid status.",
    ar="قيمة حالة التسليم غير صالحة. يرجى تقديم حالة صالحة",
)
ORDER_NOT_CONFIRMED = Message(
    en="Delivery status cannot be changed if the order status is not confirmed.",
    ar="لا يمكن تغيير حالة التوصيل إذا لم يتم تأكيد حالة الطلب",
)
ALREADY_DELIVERED = Message(
    en="Delivery status can not be changed for an already delivered order.",
    ar="لا يمكن تغيير حالة التسليم لطلب تم تسليمه بالفعل",
)
CANNOT_REVERT_DELIVERY = Message(
    en="Cannot change delivery status to pending if it is already shipped or "
    "delivered.",
    ar="لا يمكن تغيير حالة التسليم إلى قيد الانتظار إذا كان قد تم شحنها أو "
    "تسليمها بالفعل",
)
DELIVERY_STATUS_UNCHANGED = Message(
    en="Delivery status is already {status}.", ar="حالة التسليم {status} بالفعل"
)
DELIVERY_STATUS_CHANGED = Message(
    en="Delivery status {status} now.", ar="حالة التسليم الآن {status}"
)
DELIVERY_STATUS_UPDATE_FAILED = Message(
    en="Failed to update delivery status. Please try again.",
    ar="فشل تحديث حالة التسليم. يرجى المحاولة مرة أخرى",
)
INVALID_PAYMENT_STATUS = Message(
    en="Invalid payment status value. Please provide a valid boolean value.",
    ar="قيمة حالة الدفع غير صالحة. يرجى تقديم قيمة بوليانية صالحة",
)
PAYMENT_ALREADY_FALSE = Message(
    en="Payment status is already false.", ar="حالة الدفع بالفعل false"
)
PAYMENT_FINAL = Message(
    en="Payment status cannot be changed for a delivered and paid order.",
    ar="لا يمكن تغيير حالة الدفع لطلب تم تسليمه ودفعه",
)
PAYMENT_CHANGED = Message(
    en="Payment status is paid now.", ar="تم دفع حالة الدفع الآن"
)
PAYMENT_UPDATE_FAILED = Message(
    en="Failed to update payment status. Please try again.",
    ar="فشل تحديث حالة الدفع. يرجى المحاولة مرة أخرى",
)

_DELIVERY_RANK = {
    DeliveryStatus.PENDING: 0,
    DeliveryStatus.SHIPPED: 1,
    DeliveryStatus.DELIVERED: 2,
}

_UPDATE_FAILED = {
    StatusField.ORDER_STATUS: ORDER_STATUS_UPDATE_FAILED,
    StatusField.DELIVERY_STATUS: DELIVERY_STATUS_UPDATE_FAILED,
    StatusField.PAID_STATUS: PAYMENT_UPDATE_FAILED,
}


class AccountRepository(Protocol):
    """Read access to customer accounts."""

    def get_account(self, user_id: UUID) -> CustomerAccount | None:
        """Return the account of a user, if present."""


class OrderRepository(Protocol):
    """Persistence interface for orders."""

    def create_order(self, order: Order) -> Order:
        """Persist a new order and return it."""

    def get_order(self, order_id: UUID) -> Order | None:
        """Return an order by id."""

    def update_status(
        self,
        order_id: UUID,
        field: StatusField,
        value: OrderStatus | DeliveryStatus | bool,
    ) -> None:
        """Set one status field of an order."""

    def list_orders(
        self, user_id: UUID | None, query: OrderQuery, offset: int, limit: int
    ) -> list[Order]:
        """Return orders newest first, optionally for one user."""

    def count_orders(self, user_id: UUID | None, query: OrderQuery) -> int:
        """Return the number of orders matching the filters."""


@dataclass(frozen=True)
class StatusChange:
    """Validated status transition ready to persist."""

    field: StatusField
    value: OrderStatus | DeliveryStatus | bool
    message: Message


@dataclass
class OrderService:
    """Checkout and the admin order state machine."""

    order_repository: OrderRepository
    account_repository: AccountRepository
    catalog_repository: CatalogRepository
    cart_repository: CartRepository
    customized_cart_repository: CustomizedCartRepository
    cart_aggregator: CartAggregator
    notification_service: NotificationService

    async def place_order(
        self, user_id: UUID, order_input: OrderInput
    ) -> Result[OrderPlacement]:
        """Snapshot the user's carts into a pending order and clear them."""
        try:
            rejection = self._check_preconditions(user_id, order_input)
            if rejection is not None:
                _logger.info(
                    "Order rejected",
                    extra={"user_id": str(user_id), "reason": rejection.message.en},
                )
                return rejection
            aggregate = self.cart_aggregator.compute(user_id)
            if aggregate.is_empty:
                return Failure(ErrorKind.BUSINESS_RULE, EMPTY_CART)
            order = self.order_repository.create_order(
                Order(
                    id=uuid4(),
                    user_id=user_id,
                    order_details=snapshot(aggregate),
                    delivery_address=order_input.delivery_address,
                    note_from_user=order_input.note_from_user,
                    payment_method=order_input.payment_method,
                    number_of_meals_per_day=order_input.number_of_meals_per_day,
                    plan_duration=order_input.plan_duration,
                    order_status=OrderStatus.PENDING,
                    delivery_status=DeliveryStatus.PENDING,
                    paid_status=False,
                    created_at=datetime.now(tz=UTC),
                )
            )
        except Exception:
            _logger.exception("Failed to place order", extra={"user_id": str(user_id)})
            return system_failure(ORDER_PLACEMENT_FAILED)

        await self.notification_service.notify_user(
            user_id, ORDER_PLACED, ORDER_ID_FOR_USER.format(order_id=order.id)
        )
        await self.notification_service.notify_admins(
            NEW_ORDER_FOR_ADMIN, ORDER_ID_FOR_ADMIN.format(order_id=order.id)
        )
        try:
            self.cart_repository.clear_cart(user_id, CartCategory.MAIN_MENU)
            self.cart_repository.clear_cart(user_id, CartCategory.OFFERS)
            self.customized_cart_repository.clear_customized_cart(user_id)
        except Exception:
            _logger.exception(
                "Order placed but carts were not cleared",
                extra={"user_id": str(user_id), "order_id": str(order.id)},
            )
        _logger.info(
            "Order placed", extra={"user_id": str(user_id), "order_id": str(order.id)}
        )
        return Ok(
            OrderPlacement(order_id=order.id, order_details=order.order_details),
            ORDER_PLACED,
        )

    async def transition_status(
        self, order_id: UUID, field: StatusField | str, value: object
    ) -> Result[Order]:
        """Apply one admin status change and notify the order owner."""
        try:
            status_field = StatusField(field)
        except ValueError:
            return Failure(ErrorKind.VALIDATION, INVALID_STATUS_FIELD)
        try:
            order = self.order_repository.get_order(order_id)
            if order is None:
                parsed = _parse_value(status_field, value)
                if isinstance(parsed, Failure):
                    return parsed
                return Failure(ErrorKind.NOT_FOUND, ORDER_NOT_FOUND)
            change = _plan_change(order, status_field, value)
            if isinstance(change, Failure):
                _logger.info(
                    "Order status change rejected",
                    extra={"order_id": str(order_id), "field": str(status_field)},
                )
                return change
            self.order_repository.update_status(order_id, change.field, change.value)
        except Exception:
            _logger.exception(
                "Failed to update order status",
                extra={"order_id": str(order_id), "field": str(status_field)},
            )
            return system_failure(_UPDATE_FAILED[status_field])

        await self.notification_service.notify_user(
            order.user_id, change.message, ORDER_ID_FOR_USER.format(order_id=order_id)
        )
        return Ok(replace(order, **{change.field.value: change.value}), change.message)

    def list_user_orders(
        self,
        user_id: UUID,
        page: PageRequest,
        query: OrderQuery | None = None,
    ) -> Result[Page[Order]]:
        """Return a page of the user's orders, newest first."""
        return self._list(user_id, page, query or OrderQuery())

    def list_orders(
        self, page: PageRequest, query: OrderQuery | None = None
    ) -> Result[Page[Order]]:
        """Return a page of all orders for admins, newest first."""
        return self._list(None, page, query or OrderQuery())

    def get_order(self, order_id: UUID) -> Result[Order]:
        """Return one order."""
        try:
            order = self.order_repository.get_order(order_id)
        except Exception:
            _logger.exception("Failed to load order", extra={"order_id": str(order_id)})
            return system_failure()
        if order is None:
            return Failure(ErrorKind.NOT_FOUND, ORDER_NOT_FOUND)
        return Ok(order)

    def _list(
        self, user_id: UUID | None, page: PageRequest, query: OrderQuery
    ) -> Result[Page[Order]]:
        try:
            orders = self.order_repository.list_orders(
                user_id, query, page.offset, page.per_page
            )
            total = self.order_repository.count_orders(user_id, query)
        except Exception:
            _logger.exception("Failed to list orders")
            return system_failure(ORDERS_RETRIEVAL_FAILED)
        return Ok(build_page(orders, total, page))

    def _check_preconditions(
        self, user_id: UUID, order_input: OrderInput
    ) -> Failure | None:
        meals_count = order_input.number_of_meals_per_day
        if meals_count is not None and not (
            self.catalog_repository.has_meals_per_day_option(meals_count)
        ):
            return Failure(
                ErrorKind.BUSINESS_RULE, MEAL_COUNT_MISSING.format(count=meals_count)
            )
        plan_duration = order_input.plan_duration
        if plan_duration is not None and not (
            self.catalog_repository.has_plan_duration_option(plan_duration)
        ):
            return Failure(
                ErrorKind.BUSINESS_RULE,
                PLAN_DURATION_MISSING.format(days=plan_duration),
            )
        account = self.account_repository.get_account(user_id)
        if account is None or not account.profile_verified:
            return Failure(ErrorKind.BUSINESS_RULE, PROFILE_NOT_VERIFIED)
        if not (account.phone or "").strip() or account.disabled_by_admin:
            return Failure(ErrorKind.BUSINESS_RULE, PHONE_REQUIRED)
        return None


def _parse_value(
    field: StatusField, value: object
) -> OrderStatus | DeliveryStatus | bool | Failure:
    if field is StatusField.PAID_STATUS:
        if isinstance(value, bool):
            return value
        return Failure(ErrorKind.VALIDATION, INVALID_PAYMENT_STATUS)
    if field is StatusField.ORDER_STATUS:
        try:
            return OrderStatus(value)
        except ValueError:
            return Failure(ErrorKind.VALIDATION, INVALID_ORDER_STATUS)
    try:
        return DeliveryStatus(value)
    except ValueError:
        return Failure(ErrorKind.VALIDATION, INVALID_DELIVERY_STATUS)


def _plan_change(
    order: Order, field: StatusField, value: object
) -> StatusChange | Failure:
    parsed = _parse_value(field, value)
    if isinstance(parsed, Failure):
        return parsed
    if field is StatusField.ORDER_STATUS:
        return _plan_order_status(order, OrderStatus(parsed))
    if field is StatusField.DELIVERY_STATUS:
        return _plan_delivery_status(order, DeliveryStatus(parsed))
    return _plan_payment(order, bool(parsed))


def _plan_order_status(order: Order, new: OrderStatus) -> StatusChange | Failure:
    if order.delivery_status in {DeliveryStatus.SHIPPED, DeliveryStatus.DELIVERED}:
        return Failure(ErrorKind.BUSINESS_RULE, ORDER_STATUS_FROZEN)
    if order.order_status is OrderStatus.CONFIRM and new is OrderStatus.PENDING:
        return Failure(ErrorKind.BUSINESS_RULE, CANNOT_UNCONFIRM)
    if order.order_status is not OrderStatus.PENDING or new is OrderStatus.PENDING:
        return Failure(
            ErrorKind.BUSINESS_RULE,
            ORDER_STATUS_FINAL.format(status=order.order_status.value),
        )
    return StatusChange(
        field=StatusField.ORDER_STATUS,
        value=new,
        message=ORDER_STATUS_CHANGED.format(status=new.value),
    )


def _plan_delivery_status(
    order: Order, new: DeliveryStatus
) -> StatusChange | Failure:
    current = order.delivery_status
    if order.order_status is not OrderStatus.CONFIRM:
        return Failure(ErrorKind.BUSINESS_RULE, ORDER_NOT_CONFIRMED)
    if current is DeliveryStatus.DELIVERED:
        return Failure(ErrorKind.BUSINESS_RULE, ALREADY_DELIVERED)
    if new is current:
        return Failure(
            ErrorKind.BUSINESS_RULE,
            DELIVERY_STATUS_UNCHANGED.format(status=current.value),
        )
    if _DELIVERY_RANK[new] < _DELIVERY_RANK[current]:
        return Failure(ErrorKind.BUSINESS_RULE, CANNOT_REVERT_DELIVERY)
    return StatusChange(
        field=StatusField.DELIVERY_STATUS,
        value=new,
        message=DELIVERY_STATUS_CHANGED.format(status=new.value),
    )


def _plan_payment(order: Order, new: bool) -> StatusChange | Failure:
    if order.paid_status:
        return Failure(ErrorKind.BUSINESS_RULE, PAYMENT_FINAL)
    if not new:
        return Failure(ErrorKind.BUSINESS_RULE, PAYMENT_ALREADY_FALSE)
    return StatusChange(
        field=StatusField.PAID_STATUS, value=True, message=PAYMENT_CHANGED
    )
