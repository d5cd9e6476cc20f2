"""
Field rules for the checkout form.

Validation always collects every failing field of the requested scope so the
form can highlight them all at once. Scopes are independent: validating the
shipping fields never looks at the payment fields and vice versa.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Pattern

from storefront.models import SHIPPING_FIELDS, PAYMENT_FIELDS, CHECKOUT_FIELDS

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9_.+-]+@[a-zA-Z0-9-]+\.[a-zA-Z0-9-.]+")
ZIP_CODE_PATTERN = re.compile(r"\d{5}(-\d{4})?", re.ASCII)
CARD_NUMBER_PATTERN = re.compile(r"\d{16}", re.ASCII)
CARD_EXPIRY_PATTERN = re.compile(r"(0[1-9]|1[0-2])/\d{2}", re.ASCII)
CARD_CVV_PATTERN = re.compile(r"\d{3,4}", re.ASCII)


@dataclass(frozen=True)
class FieldRule:
    required_message: str
    pattern: Optional[Pattern] = None
    pattern_message: Optional[str] = None

    def check(self, value) -> Optional[str]:
        """Returns the error message for `value`, or None when it passes."""
        if value is None or value == "":
            return self.required_message
        if self.pattern is not None and not self.pattern.fullmatch(str(value)):
            return self.pattern_message
        return None


RULES: Dict[str, FieldRule] = {
    "name": FieldRule("Name is required"),
    "email": FieldRule("Email is required", EMAIL_PATTERN, "Enter a valid email"),
    "address": FieldRule("Address is required"),
    "city": FieldRule("City is required"),
    "zip_code": FieldRule("ZIP code is required", ZIP_CODE_PATTERN, "Enter a valid ZIP code"),
    "card_number": FieldRule("Card number is required", CARD_NUMBER_PATTERN, "Card number must be 16 digits"),
    "card_expiry": FieldRule("Expiration date is required", CARD_EXPIRY_PATTERN, "Format must be MM/YY"),
    "card_cvv": FieldRule("CVV is required", CARD_CVV_PATTERN, "CVV must be 3 or 4 digits"),
}


class Scope(Enum):
    SHIPPING = SHIPPING_FIELDS
    PAYMENT = PAYMENT_FIELDS
    CHECKOUT = CHECKOUT_FIELDS

    @property
    def fields(self):
        return self.value


@dataclass(frozen=True)
class ValidationResult:
    errors: Dict[str, str] = field(default_factory=dict)

    @property
    def valid(self) -> bool:
        return not self.errors


def validate(values: Mapping[str, str], scope: Scope) -> ValidationResult:
    """
    Checks every field of `scope` against its rule.

    Args:
        values: Field name to raw input. Missing names count as empty.
        scope: Which field set to check.

    Returns:
        A ValidationResult whose errors map each failing field to its message.
    """
    errors = {}
    for name in scope.fields:
        message = RULES[name].check(values.get(name))
        if message:
            errors[name] = message
    return ValidationResult(errors)


def validate_shipping(values: Mapping[str, str]) -> ValidationResult:
    return validate(values, Scope.SHIPPING)


def validate_payment(values: Mapping[str, str]) -> ValidationResult:
    return validate(values, Scope.PAYMENT)


def validate_checkout(values: Mapping[str, str]) -> ValidationResult:
    return validate(values, Scope.CHECKOUT)
