"""Tiered discount rules and their resolution."""

import logging
from dataclasses import dataclass, replace
from typing import Protocol
from uuid import UUID, uuid4

from meal_subscriptions.domain.discounts import (
    NO_DISCOUNT,
    DiscountCategory,
    DiscountQuote,
    DiscountRange,
    DiscountRule,
    RangeInput,
)
from meal_subscriptions.domain.results import (
    ErrorKind,
    Failure,
    Message,
    Ok,
    Result,
    system_failure,
)

_logger = logging.getLogger(__name__)

DISCOUNT_CREATED = Message(
    en="Discount created successfully.", ar="تم إنشاء التخفيض بنجاح"
)
RANGES_ADDED = Message(
    en="Discount ranges added successfully.", ar="تمت إضافة نطاقات التخفيض بنجاح"
)
RANGES_OVERLAP = Message(
    en="Provided ranges overlap with existing ranges in the category's ranges.",
    ar="النطاقات المقدمة تتداخل مع النطاقات الحالية في نطاقات الفئة",
)
INVALID_RANGE = Message(
    en="Each range needs a minimum not above its maximum and a percentage "
    "between 0 and 100.",
    ar="يجب أن يكون الحد الأدنى لكل نطاق أقل من أو يساوي الحد الأقصى وأن تكون "
    "النسبة بين 0 و 100",
)
NO_RANGES = Message(
    en="At least one range is required.", ar="مطلوب نطاق واحد على الأقل"
)
DISCOUNT_NOT_FOUND = Message(en="Discount not found.", ar="التخفيض غير موجود")
DISCOUNT_OR_RANGE_NOT_FOUND = Message(
    en="Discount or range not found.", ar="التخفيض أو النطاق غير موجود"
)
UPDATE_CONFLICT = Message(
    en="Updated data conflicts with existing ranges in other discounts.",
    ar="تعارضت البيانات المحدثة مع النطاقات الحالية في تخفيضات أخرى",
)
DISCOUNT_UPDATED = Message(
    en="Discount updated successfully.", ar="تم تحديث التخفيض بنجاح"
)
RANGE_NOT_FOUND = Message(
    en="Range not found in the discount.", ar="النطاق غير موجود في الخصم"
)
RANGE_DELETED = Message(en="Range deleted successfully.", ar="تم حذف النطاق بنجاح")


class DiscountRepository(Protocol):
    """Persistence interface for discount rules."""

    def get_by_category(self, category: DiscountCategory) -> DiscountRule | None:
        """Return the rule for a category, if present."""

    def get_by_id(self, discount_id: UUID) -> DiscountRule | None:
        """Return a rule by id."""

    def list_rules(self, category: DiscountCategory | None) -> list[DiscountRule]:
        """Return rules, optionally filtered by category."""

    def create_rule(self, rule: DiscountRule) -> DiscountRule:
        """Persist a new rule and return it."""

    def save_ranges(self, discount_id: UUID, ranges: list[DiscountRange]) -> None:
        """Replace the ranges stored on a rule."""


def resolve_discount(rule: DiscountRule | None, subtotal: float) -> DiscountQuote:
    """Return the discount of the best active range containing the subtotal."""
    if rule is None:
        return NO_DISCOUNT
    matching = [
        entry for entry in rule.ranges if entry.is_active and entry.contains(subtotal)
    ]
    if not matching:
        return NO_DISCOUNT
    percentage = max(entry.percentage for entry in matching)
    if percentage <= 0:
        return NO_DISCOUNT
    return DiscountQuote(amount=subtotal * percentage * 0.01, percentage=percentage)


def find_active_overlap(
    candidate: DiscountRange, others: list[DiscountRange]
) -> DiscountRange | None:
    """Return the first active range intersecting an active candidate."""
    if not candidate.is_active:
        return None
    for other in others:
        if other.id != candidate.id and other.is_active and candidate.overlaps(other):
            return other
    return None


@dataclass
class DiscountService:
    """Admin management and lookup of discount rules."""

    repository: DiscountRepository

    def quote(self, category: DiscountCategory, subtotal: float) -> DiscountQuote:
        """Return the discount for a subtotal; repository errors propagate."""
        return resolve_discount(self.repository.get_by_category(category), subtotal)

    def resolve(
        self, category: DiscountCategory, subtotal: float
    ) -> Result[DiscountQuote]:
        """Return the discount amount and percentage for a subtotal."""
        try:
            return Ok(self.quote(category, subtotal))
        except Exception:
            _logger.exception(
                "Failed to resolve discount", extra={"category": str(category)}
            )
            return system_failure()

    def create_ranges(
        self,
        category: DiscountCategory,
        ranges: list[RangeInput],
        created_by: UUID | None = None,
    ) -> Result[DiscountRule]:
        """Create the category rule or append ranges to it."""
        if not ranges:
            return Failure(ErrorKind.VALIDATION, NO_RANGES)
        if not all(_is_valid_range(entry) for entry in ranges):
            return Failure(ErrorKind.VALIDATION, INVALID_RANGE)
        new_ranges = [_to_range(entry) for entry in ranges]
        try:
            existing = self.repository.get_by_category(category)
            accepted: list[DiscountRange] = list(existing.ranges) if existing else []
            for candidate in new_ranges:
                if find_active_overlap(candidate, accepted) is not None:
                    _logger.info(
                        "Rejected overlapping discount range",
                        extra={"category": str(category)},
                    )
                    return Failure(ErrorKind.BUSINESS_RULE, RANGES_OVERLAP)
                accepted.append(candidate)
            if existing is None:
                rule = self.repository.create_rule(
                    DiscountRule(
                        id=uuid4(),
                        category=category,
                        ranges=accepted,
                        created_by=created_by,
                    )
                )
                return Ok(rule, DISCOUNT_CREATED)
            self.repository.save_ranges(existing.id, accepted)
        except Exception:
            _logger.exception(
                "Failed to create discount ranges", extra={"category": str(category)}
            )
            return system_failure()
        return Ok(replace(existing, ranges=accepted), RANGES_ADDED)

    def list_rules(
        self, category: DiscountCategory | None = None
    ) -> Result[list[DiscountRule]]:
        """Return rules with ranges ordered by their minimum."""
        try:
            rules = self.repository.list_rules(category)
        except Exception:
            _logger.exception("Failed to list discounts")
            return system_failure()
        return Ok([_sorted(rule) for rule in rules])

    def get_rule(self, discount_id: UUID) -> Result[DiscountRule]:
        """Return a rule by id."""
        try:
            rule = self.repository.get_by_id(discount_id)
        except Exception:
            _logger.exception(
                "Failed to load discount", extra={"discount_id": str(discount_id)}
            )
            return system_failure()
        if rule is None:
            return Failure(ErrorKind.NOT_FOUND, DISCOUNT_NOT_FOUND)
        return Ok(_sorted(rule))

    def update_range(
        self, discount_id: UUID, range_id: UUID, data: RangeInput
    ) -> Result[DiscountRange]:
        """Replace the values of one range."""
        if not _is_valid_range(data):
            return Failure(ErrorKind.VALIDATION, INVALID_RANGE)
        try:
            rule = self.repository.get_by_id(discount_id)
            if rule is None or not any(entry.id == range_id for entry in rule.ranges):
                return Failure(ErrorKind.NOT_FOUND, DISCOUNT_OR_RANGE_NOT_FOUND)
            updated = DiscountRange(
                id=range_id,
                min=data.min,
                max=data.max,
                percentage=data.percentage,
                is_active=data.is_active,
            )
            others = [entry for entry in rule.ranges if entry.id != range_id]
            if find_active_overlap(updated, others) is not None or any(
                entry.percentage == updated.percentage for entry in others
            ):
                _logger.info(
                    "Rejected conflicting discount update",
                    extra={"discount_id": str(discount_id)},
                )
                return Failure(ErrorKind.BUSINESS_RULE, UPDATE_CONFLICT)
            self.repository.save_ranges(
                discount_id,
                [updated if entry.id == range_id else entry for entry in rule.ranges],
            )
        except Exception:
            _logger.exception(
                "Failed to update discount range",
                extra={"discount_id": str(discount_id)},
            )
            return system_failure()
        return Ok(updated, DISCOUNT_UPDATED)

    def delete_range(self, discount_id: UUID, range_id: UUID) -> Result[None]:
        """Remove one range; the rule itself is kept."""
        try:
            rule = self.repository.get_by_id(discount_id)
            if rule is None:
                return Failure(ErrorKind.NOT_FOUND, DISCOUNT_NOT_FOUND)
            remaining = [entry for entry in rule.ranges if entry.id != range_id]
            if len(remaining) == len(rule.ranges):
                return Failure(ErrorKind.NOT_FOUND, RANGE_NOT_FOUND)
            self.repository.save_ranges(discount_id, remaining)
        except Exception:
            _logger.exception(
                "Failed to delete discount range",
                extra={"discount_id": str(discount_id)},
            )
            return system_failure()
        return Ok(None, RANGE_DELETED)


def _is_valid_range(entry: RangeInput) -> bool:
    return entry.min <= entry.max and 0 <= entry.percentage <= 100


def _to_range(entry: RangeInput) -> DiscountRange:
    return DiscountRange(
        id=uuid4(),
        min=entry.min,
        max=entry.max,
        percentage=entry.percentage,
        is_active=entry.is_active,
    )


def _sorted(rule: DiscountRule) -> DiscountRule:
    return replace(rule, ranges=sorted(rule.ranges, key=lambda entry: entry.min))
