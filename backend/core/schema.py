"""Request payload models for the public intake forms.

Field names are snake_case in Python and camelCase on the wire. Unknown keys
are accepted and carried through ``model_dump`` so they are stored verbatim.
"""
from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

PHONE_PATTERN = r"^\+?[1-9]\d{0,15}$"


class Submission(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
        str_strip_whitespace=True,
    )

    @field_validator("email", mode="after", check_fields=False)
    @classmethod
    def _normalise_email(cls, value: str) -> str:
        return value.lower()

    def to_record(self) -> dict[str, Any]:
        """Dump using wire names, keeping pass-through fields."""

        return self.model_dump(by_alias=True)


class ContactSubmission(Submission):
    name: str = Field(min_length=2, max_length=100)
    email: EmailStr
    subject: str = Field(min_length=1, max_length=200)
    message: str = Field(min_length=1, max_length=5000)
    category: Literal["general", "technical", "compliance", "sales"] = "general"


class NewsletterSubscription(Submission):
    email: EmailStr
    name: str = ""


class BuyerInquiryRequest(Submission):
    company_name: str = Field(min_length=2, max_length=200)
    contact_person: str = Field(min_length=2, max_length=100)
    email: EmailStr
    phone: str = Field(pattern=PHONE_PATTERN)
    country: str = Field(min_length=1)
    product_category: Literal["petroleum", "metals", "diamonds", "industrial"]
    specific_product: str | None = None
    specific_products: list[str] | None = None
    product_categories: list[str] = Field(default_factory=list)
    quantity: str = Field(min_length=1)
    target_price: str | None = None
    delivery_location: str | None = None
    payment_terms: str | None = None
    additional_requirements: str | None = None
    urgency: str = "normal"
    nda_agreed: bool

    @field_validator("nda_agreed", mode="before")
    @classmethod
    def _require_nda(cls, value: Any) -> bool:
        if value is True or value == "true":
            return True
        raise ValueError("You must agree to the NDA")

    @model_validator(mode="after")
    def _require_product(self) -> "BuyerInquiryRequest":
        products = [item.strip() for item in self.specific_products or [] if item and item.strip()]
        if not products and not (self.specific_product and self.specific_product.strip()):
            raise ValueError("Specific product is required (single or multiple)")
        self.specific_products = products or None
        return self

    @property
    def product_label(self) -> str:
        if self.specific_products:
            return "; ".join(self.specific_products)
        return self.specific_product or ""


class SellerInquiryRequest(Submission):
    company_name: str = Field(min_length=1)
    contact_person: str = Field(min_length=1)
    email: EmailStr
    phone: str = Field(pattern=PHONE_PATTERN)
    product_description: str = Field(min_length=1)
    quantity_available: str = Field(min_length=1)
    certification: str | None = None
    specific_product: str | None = None

    @property
    def product_label(self) -> str:
        return self.specific_product or self.product_description


class MandateApplicationRequest(Submission):
    company_name: str = Field(min_length=1)
    contact_person: str = Field(min_length=1)
    email: EmailStr
    phone: str | None = None
    country: str | None = None
    experience: str | None = None
    network: str | None = None
    references: str | None = None
    additional_info: str | None = None


class DocumentAccessRequest(Submission):
    name: str = Field(min_length=1, max_length=100)
    email: EmailStr
    company: str | None = None


class SecurityEvent(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    type: str = "security_alert"
    message: str = ""
    url: str | None = None
    user_agent: str | None = None
    timestamp: str | None = None
    meta: dict[str, Any] = Field(default_factory=dict)

    @field_validator("message", mode="before")
    @classmethod
    def _truncate(cls, value: Any) -> str:
        return str(value or "")[:2000]
