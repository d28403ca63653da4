"""
Client-side form models.

Screens keep submit buttons disabled until ``is_submittable`` is true and
build the write payload with ``parse``, which turns pydantic validation
failures into the domain ValidationError. No partial submission is ever
sent to the backend.
"""

from __future__ import annotations

from typing import Any, ClassVar, Dict, List, Mapping, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from homeplate.domain.marketplace.meal import Meal
from homeplate.domain.shared.errors import ValidationError

TForm = TypeVar("TForm", bound="FormModel")

MAX_ORDER_QUANTITY = 10


def _present(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def _blank_to_none(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = v.strip()
    return v or None


class FormModel(BaseModel):
    """Base for form payloads."""

    model_config = ConfigDict(frozen=True, str_strip_whitespace=True, extra="ignore")

    REQUIRED: ClassVar[Tuple[str, ...]] = ()
    MESSAGE: ClassVar[str] = "Please check the highlighted fields"

    @classmethod
    def is_submittable(cls, values: Mapping[str, Any]) -> bool:
        """True when every required field has a non-blank value."""
        return all(_present(values.get(name)) for name in cls.REQUIRED)

    @classmethod
    def parse(cls: Type[TForm], values: Mapping[str, Any]) -> TForm:
        """
        Validate raw form values.

        Raises:
            ValidationError: A required field is missing or a value is invalid
        """
        missing = {name: "required" for name in cls.REQUIRED if not _present(values.get(name))}
        if missing:
            raise ValidationError(cls.MESSAGE, missing)
        try:
            return cls.model_validate(dict(values))
        except PydanticValidationError as exc:
            errors: Dict[str, str] = {}
            for error in exc.errors():
                field = ".".join(str(part) for part in error["loc"]) or "form"
                errors.setdefault(field, error["msg"])
            raise ValidationError(cls.MESSAGE, errors) from exc


class LoginForm(FormModel):
    REQUIRED: ClassVar[Tuple[str, ...]] = ("email", "password")
    MESSAGE: ClassVar[str] = "Please fill in all fields"

    email: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class MealForm(FormModel):
    """Create/edit a dish. Price must be strictly positive."""

    REQUIRED: ClassVar[Tuple[str, ...]] = ("title", "description", "price", "category")
    MESSAGE: ClassVar[str] = "Please fill in all required fields"

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., min_length=1)
    price: float = Field(..., gt=0)
    category: str = Field(..., min_length=1)
    image_url: Optional[str] = None
    available: bool = True
    spice_levels: List[str] = Field(default_factory=list)
    oil_options: List[str] = Field(default_factory=list)

    @field_validator("image_url")
    @classmethod
    def blank_image(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    @field_validator("spice_levels", "oil_options")
    @classmethod
    def clean_options(cls, v: List[str]) -> List[str]:
        return [option.strip() for option in v if option and option.strip()]

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump()


class OrderRequest(FormModel):
    """
    Order placement choices.

    Example:
        >>> OrderRequest.parse({"quantity": 2, "spice_level": "mild"}).quantity
        2
    """

    REQUIRED: ClassVar[Tuple[str, ...]] = ("quantity",)
    MESSAGE: ClassVar[str] = "Invalid order"

    quantity: int = Field(1, ge=1, le=MAX_ORDER_QUANTITY)
    spice_level: Optional[str] = None
    oil_preference: Optional[str] = None

    @field_validator("spice_level", "oil_preference")
    @classmethod
    def blank_choice(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    def check_against(self, meal: Meal) -> "OrderRequest":
        """Choices must come from the meal's own options."""
        errors: Dict[str, str] = {}
        if self.spice_level is not None and self.spice_level not in meal.spice_levels:
            errors["spice_level"] = f"'{self.spice_level}' is not offered for this dish"
        if self.oil_preference is not None and self.oil_preference not in meal.oil_options:
            errors["oil_preference"] = f"'{self.oil_preference}' is not offered for this dish"
        if errors:
            raise ValidationError(self.MESSAGE, errors)
        return self


class ReviewForm(FormModel):
    REQUIRED: ClassVar[Tuple[str, ...]] = ("rating",)
    MESSAGE: ClassVar[str] = "Please select a rating"

    rating: int = Field(..., ge=1, le=5)
    comment: Optional[str] = None

    @field_validator("comment")
    @classmethod
    def blank_comment(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)


class ChefProfileForm(FormModel):
    """Chef self-service profile fields."""

    bio: Optional[str] = Field(None, max_length=1000)
    kitchen_photo_url: Optional[str] = None
    hygiene_certificate: bool = False
    fssai_license: bool = False

    @field_validator("bio", "kitchen_photo_url")
    @classmethod
    def blank_text(cls, v: Optional[str]) -> Optional[str]:
        return _blank_to_none(v)

    def to_row(self) -> Dict[str, Any]:
        return self.model_dump()


class SpecialtyForm(FormModel):
    REQUIRED: ClassVar[Tuple[str, ...]] = ("specialty",)
    MESSAGE: ClassVar[str] = "Specialty cannot be empty"

    specialty: str = Field(..., min_length=1, max_length=80)


class DeliveryAssignmentForm(FormModel):
    REQUIRED: ClassVar[Tuple[str, ...]] = ("delivery_partner_id",)
    MESSAGE: ClassVar[str] = "Please enter a delivery partner"

    delivery_partner_id: str = Field(..., min_length=1)
