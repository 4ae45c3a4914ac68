"""Customized meal intake and its admin configuration."""

import logging
import math
from dataclasses import dataclass, replace
from enum import StrEnum
from typing import Protocol
from uuid import UUID, uuid4

from meal_subscriptions.domain.pagination import Page, PageRequest, build_page
from meal_subscriptions.domain.profiles import (
    MAX_MEAL_DURATION_REPEAT,
    CustomizedMealConfig,
    CustomizedMealProfile,
    DietCategory,
    IntakeSummary,
)
from meal_subscriptions.domain.results import (
    ErrorKind,
    Failure,
    Message,
    Ok,
    Result,
    system_failure,
)
from meal_subscriptions.services.notifications import NotificationService

_logger = logging.getLogger(__name__)

PROFILE_NOT_FOUND = Message(
    en="Please submit your customized meal request first.",
    ar="يرجى إرسال طلب الوجبة المخصصة أولاً",
)
PROFILE_EXISTS = Message(
    en="User data already exist.", ar="بيانات المستخدم موجودة بالفعل"
)
CONFIG_NOT_FOUND = Message(
    en="No existing Customized Meal record found for update.",
    ar="لم يتم العثور على سجل وجبة مخصصة موجود للتحديث",
)
CONFIG_EXISTS = Message(
    en="Customized Meal record in this category already exists. "
    "You cannot create another one.",
    ar="السجل المخصص للوجبة موجود بالفعل. لا يمكنك إنشاء واحد آخر",
)
CONFIG_CREATED = Message(
    en="Admin created Customized Meal data successfully.",
    ar="تم إنشاء بيانات وجبة مخصصة بواسطة المسؤول بنجاح",
)
CONFIG_UPDATED = Message(
    en="Admin Customized Meal data updated successfully.",
    ar="قام المسؤول بتحديث بيانات الوجبة المخصصة بنجاح",
)
INVALID_CALORIES_DIVIDER = Message(
    en="Calories divider must be greater than zero.",
    ar="يجب أن يكون مقسم السعرات أكبر من صفر",
)
PROTEIN_EXCEEDS = Message(
    en="Minimize your protein amount. It exceeds the normal range.",
    ar="قلل من كمية البروتين. فإنه يتجاوز النطاق الطبيعي",
)
FAT_EXCEEDS = Message(
    en="Minimize your fat amount. It exceeds the normal range.",
    ar="قلل من كمية الدهون. فإنها تتجاوز النطاق الطبيعي",
)
CARBS_EXCEEDS = Message(
    en="Minimize your carbs amount. It exceeds the normal range.",
    ar="قلل من كمية الكربوهيدرات. فإنها تتجاوز النطاق الطبيعي",
)
INVALID_MACROS = Message(
    en="Protein, fat and carbs must be positive numbers.",
    ar="يجب أن تكون قيم البروتين والدهون والكربوهيدرات أرقامًا موجبة",
)
INTAKE_POSTED = Message(
    en="Your meal request posted successfully.",
    ar="تم نشر طلب الوجبة الخاص بك بنجاح",
)
INTAKE_SENT = Message(
    en="Your request has been sent to the admin successfully.",
    ar="تم إرسال طلبك إلى الإدارة بنجاح",
)
INTAKE_REQUEST_ID = Message(
    en="Your request ID is {profile_id}", ar="رقم طلبك هو {profile_id}"
)
NEW_INTAKE_FOR_ADMIN = Message(
    en="A new request for a customized meal has been received",
    ar="تم استلام طلب جديد لوجبة مخصصة",
)
NEW_INTAKE_ID_FOR_ADMIN = Message(
    en="User Inputs ID: {profile_id}", ar="رقم الطلب: {profile_id}"
)
MEAL_INPUT_NOT_FOUND = Message(
    en="No user meal input found with the provided ID.",
    ar="لم يتم العثور على بيانات وجبة المستخدم بالمعرف المقدم",
)
INVALID_MEAL_DURATION = Message(
    en="Meal duration repeat must be between 0 and 7.",
    ar="يجب أن يكون تكرار مدة الوجبة بين 0 و 7",
)
MEAL_DURATION_UPDATED = Message(
    en="Admin updated meal data successfully",
    ar="قام المسؤول بتحديث بيانات الوجبة بنجاح",
)
REQUEST_PROCESSED = Message(
    en="Your request has been processed by the admin.",
    ar="تم معالجة طلبك من قبل المشرف",
)
SELECT_MEALS_NOW = Message(
    en="Now you can select meals for your customized meal plan.",
    ar="يمكنك الآن اختيار الوجبات لخطتك المخصصة",
)
MEAL_INPUT_DELETED_FOR_USER = Message(
    en="Your meal input has been deleted.", ar="تم حذف بيانات وجبتك"
)
MEAL_INPUT_DELETED_DETAIL = Message(
    en="One of your meal inputs has been deleted.",
    ar="تم حذف إحدى بيانات وجباتك",
)
MEAL_INPUT_DELETED = Message(
    en="User meal input deleted successfully.",
    ar="تم حذف بيانات وجبة المستخدم بنجاح",
)
MEAL_INPUT_DELETE_FAILED = Message(
    en="An error occurred while deleting the user meal input.",
    ar="حدث خطأ أثناء حذف بيانات وجبة المستخدم",
)


class AmountStatus(StrEnum):
    """Position of a submitted amount relative to its admin bounds."""

    GOOD = "good"
    NOT_ENOUGH = "not enough"
    MORE_THAN_ENOUGH = "more than enough"


class CustomizedMealProfileRepository(Protocol):
    """Persistence interface for intake profiles and admin bounds."""

    def get_profile_by_user(self, user_id: UUID) -> CustomizedMealProfile | None:
        """Return the profile of a user, if present."""

    def get_profile(self, profile_id: UUID) -> CustomizedMealProfile | None:
        """Return a profile by id."""

    def create_profile(self, profile: CustomizedMealProfile) -> CustomizedMealProfile:
        """Persist a new profile and return it."""

    def update_meal_duration_repeat(self, profile_id: UUID, value: int) -> None:
        """Set how many distinct days the user customizes."""

    def delete_profile(self, profile_id: UUID) -> None:
        """Delete a profile."""

    def list_profiles(self, offset: int, limit: int) -> list[CustomizedMealProfile]:
        """Return a page of profiles."""

    def count_profiles(self) -> int:
        """Return the number of stored profiles."""

    def get_config(self, category: DietCategory) -> CustomizedMealConfig | None:
        """Return the admin bounds for a diet category."""

    def create_config(self, config: CustomizedMealConfig) -> CustomizedMealConfig:
        """Persist admin bounds for a category."""

    def update_config(self, config: CustomizedMealConfig) -> None:
        """Replace admin bounds for a category."""


@dataclass(frozen=True)
class IntakeInput:
    """Daily macro grams submitted by a user."""

    protein: float
    fat: float
    carbs: float
    category: DietCategory


@dataclass(frozen=True)
class ConfigInput:
    """Admin bounds for a diet category."""

    calories_divider: float
    minimum_protein: float
    maximum_protein: float
    minimum_fat: float
    maximum_fat: float
    minimum_carb: float
    maximum_carb: float
    minimum_calories: float
    maximum_calories: float


def amount_status(minimum: float, maximum: float, amount: float) -> AmountStatus:
    """Classify an amount against inclusive bounds."""
    if minimum <= amount <= maximum:
        return AmountStatus.GOOD
    if amount < minimum:
        return AmountStatus.NOT_ENOUGH
    return AmountStatus.MORE_THAN_ENOUGH


def calculate_calories(protein: float, fat: float, carbs: float) -> float:
    """Return kilocalories for macro grams."""
    return protein * 4 + carbs * 4 + fat * 9


def meals_per_day(calories: float, calories_divider: float) -> int:
    """Return the meal count for a calorie total, rounding halves up."""
    return math.floor(calories / calories_divider + 0.5)


@dataclass
class CustomizedMealProfileService:
    """Validates user intake and manages the admin side of it."""

    repository: CustomizedMealProfileRepository
    notification_service: NotificationService

    async def submit_intake(
        self, user_id: UUID, intake: IntakeInput
    ) -> Result[IntakeSummary]:
        """Validate macro targets, derive meals per day and store the profile."""
        if min(intake.protein, intake.fat, intake.carbs) <= 0:
            return Failure(ErrorKind.VALIDATION, INVALID_MACROS)
        try:
            if self.repository.get_profile_by_user(user_id) is not None:
                return Failure(ErrorKind.BUSINESS_RULE, PROFILE_EXISTS)
            config = self.repository.get_config(intake.category)
            if config is None:
                return Failure(ErrorKind.NOT_FOUND, CONFIG_NOT_FOUND)
            rejection = _check_bounds(config, intake)
            if rejection is not None:
                return Failure(ErrorKind.BUSINESS_RULE, rejection)
            calories = calculate_calories(intake.protein, intake.fat, intake.carbs)
            profile = self.repository.create_profile(
                CustomizedMealProfile(
                    id=uuid4(),
                    user_id=user_id,
                    protein=intake.protein,
                    fat=intake.fat,
                    carbs=intake.carbs,
                    category=intake.category,
                    calories=calories,
                    meal_per_day=meals_per_day(calories, config.calories_divider),
                )
            )
        except Exception:
            _logger.exception(
                "Failed to store customized meal intake",
                extra={"user_id": str(user_id)},
            )
            return system_failure()

        await self.notification_service.notify_user(
            user_id, INTAKE_SENT, INTAKE_REQUEST_ID.format(profile_id=profile.id)
        )
        await self.notification_service.notify_admins(
            NEW_INTAKE_FOR_ADMIN,
            NEW_INTAKE_ID_FOR_ADMIN.format(profile_id=profile.id),
        )
        return Ok(
            IntakeSummary(
                profile_id=profile.id,
                calories=profile.calories,
                meal_per_day=profile.meal_per_day,
            ),
            INTAKE_POSTED,
        )

    def get_profile(self, user_id: UUID) -> Result[CustomizedMealProfile]:
        """Return the intake profile of a user."""
        try:
            profile = self.repository.get_profile_by_user(user_id)
        except Exception:
            _logger.exception(
                "Failed to load customized meal profile",
                extra={"user_id": str(user_id)},
            )
            return system_failure()
        if profile is None:
            return Failure(ErrorKind.NOT_FOUND, PROFILE_NOT_FOUND)
        return Ok(profile)

    def list_profiles(
        self, request: PageRequest
    ) -> Result[Page[CustomizedMealProfile]]:
        """Return a page of intake profiles for admins."""
        try:
            profiles = self.repository.list_profiles(request.offset, request.per_page)
            total = self.repository.count_profiles()
        except Exception:
            _logger.exception("Failed to list customized meal profiles")
            return system_failure()
        return Ok(build_page(profiles, total, request))

    async def set_meal_duration_repeat(
        self, profile_id: UUID, value: int | None
    ) -> Result[CustomizedMealProfile]:
        """Set the number of distinct days a user customizes."""
        if value is None or not 0 <= value <= MAX_MEAL_DURATION_REPEAT:
            return Failure(ErrorKind.VALIDATION, INVALID_MEAL_DURATION)
        try:
            profile = self.repository.get_profile(profile_id)
            if profile is None:
                return Failure(ErrorKind.NOT_FOUND, MEAL_INPUT_NOT_FOUND)
            self.repository.update_meal_duration_repeat(profile_id, value)
        except Exception:
            _logger.exception(
                "Failed to update meal duration",
                extra={"profile_id": str(profile_id)},
            )
            return system_failure()
        await self.notification_service.notify_user(
            profile.user_id, REQUEST_PROCESSED, SELECT_MEALS_NOW
        )
        return Ok(replace(profile, meal_duration_repeat=value), MEAL_DURATION_UPDATED)

    async def delete_profile(self, profile_id: UUID) -> Result[None]:
        """Delete a profile so the user submits a new intake."""
        try:
            profile = self.repository.get_profile(profile_id)
            if profile is None:
                return Failure(ErrorKind.NOT_FOUND, MEAL_INPUT_NOT_FOUND)
            self.repository.delete_profile(profile_id)
        except Exception:
            _logger.exception(
                "Failed to delete customized meal profile",
                extra={"profile_id": str(profile_id)},
            )
            return system_failure(MEAL_INPUT_DELETE_FAILED)
        await self.notification_service.notify_user(
            profile.user_id, MEAL_INPUT_DELETED_FOR_USER, MEAL_INPUT_DELETED_DETAIL
        )
        return Ok(None, MEAL_INPUT_DELETED)

    def get_config(self, category: DietCategory) -> Result[CustomizedMealConfig]:
        """Return the admin bounds for a category."""
        try:
            config = self.repository.get_config(category)
        except Exception:
            _logger.exception(
                "Failed to load customized meal config",
                extra={"category": str(category)},
            )
            return system_failure()
        if config is None:
            return Failure(ErrorKind.NOT_FOUND, CONFIG_NOT_FOUND)
        return Ok(config)

    def create_config(
        self, category: DietCategory, data: ConfigInput
    ) -> Result[CustomizedMealConfig]:
        """Create the single bounds record of a category."""
        if data.calories_divider <= 0:
            return Failure(ErrorKind.VALIDATION, INVALID_CALORIES_DIVIDER)
        try:
            if self.repository.get_config(category) is not None:
                return Failure(ErrorKind.BUSINESS_RULE, CONFIG_EXISTS)
            config = self.repository.create_config(
                CustomizedMealConfig(id=uuid4(), category=category, **vars(data))
            )
        except Exception:
            _logger.exception(
                "Failed to create customized meal config",
                extra={"category": str(category)},
            )
            return system_failure()
        return Ok(config, CONFIG_CREATED)

    def update_config(
        self, category: DietCategory, data: ConfigInput
    ) -> Result[CustomizedMealConfig]:
        """Replace the bounds record of a category."""
        if data.calories_divider <= 0:
            return Failure(ErrorKind.VALIDATION, INVALID_CALORIES_DIVIDER)
        try:
            existing = self.repository.get_config(category)
            if existing is None:
                return Failure(ErrorKind.NOT_FOUND, CONFIG_NOT_FOUND)
            updated = CustomizedMealConfig(
                id=existing.id, category=category, **vars(data)
            )
            self.repository.update_config(updated)
        except Exception:
            _logger.exception(
                "Failed to update customized meal config",
                extra={"category": str(category)},
            )
            return system_failure()
        return Ok(updated, CONFIG_UPDATED)


def _check_bounds(
    config: CustomizedMealConfig, intake: IntakeInput
) -> Message | None:
    protein = amount_status(
        config.minimum_protein, config.maximum_protein, intake.protein
    )
    fat = amount_status(
        config.minimum_fat * intake.protein,
        config.maximum_fat * intake.protein,
        intake.fat,
    )
    carbs = amount_status(
        config.minimum_carb * intake.protein,
        config.maximum_carb * intake.protein,
        intake.carbs,
    )
    if protein is AmountStatus.MORE_THAN_ENOUGH:
        return PROTEIN_EXCEEDS
    if fat is AmountStatus.MORE_THAN_ENOUGH:
        return FAT_EXCEEDS
    if carbs is AmountStatus.MORE_THAN_ENOUGH:
        return CARBS_EXCEEDS
    return None
