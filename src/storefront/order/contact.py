"""Checkout contact details and their validation.

``validate_contact`` reports every missing field first; format checks run
only once everything is present, so a shopper never sees a format error for
a field they left empty.
"""

import re
from collections.abc import Mapping

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from storefront.domain import storefront
from storefront.errors import CheckoutValidationError

CONTACT_FIELDS = ("customer_name", "customer_email", "customer_phone")

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
PHONE_PATTERN = re.compile(r"^\+?[\d\s\-().]+$")
PHONE_MIN_DIGITS = 10
PHONE_MAX_DIGITS = 15


@storefront.value_object
class EmailAddress:
    """An address of the form ``local@domain.tld`` with no whitespace."""

    address: String(required=True, max_length=254)

    @invariant.post
    def address_is_well_formed(self):
        if not EMAIL_PATTERN.match(self.address):
            raise ValidationError({"address": ["Invalid email address"]})


@storefront.value_object
class PhoneNumber:
    """Digits with optional spaces, hyphens, dots or parentheses and one leading +."""

    number: String(required=True, max_length=30)

    @invariant.post
    def number_is_well_formed(self):
        if not PHONE_PATTERN.match(self.number):
            raise ValidationError({"number": ["Phone number may only contain digits, spaces, - . ( ) and a leading +"]})

        digits = sum(ch.isdigit() for ch in self.number)
        if not PHONE_MIN_DIGITS <= digits <= PHONE_MAX_DIGITS:
            raise ValidationError(
                {"number": [f"Phone number must contain {PHONE_MIN_DIGITS} to {PHONE_MAX_DIGITS} digits"]}
            )


@storefront.value_object
class Contact:
    """Who to reach about an order. Always trimmed and well-formed."""

    customer_name: String(required=True, max_length=255)
    customer_email: String(required=True, max_length=254)
    customer_phone: String(required=True, max_length=30)

    @invariant.post
    def email_and_phone_are_well_formed(self):
        EmailAddress(address=self.customer_email)
        PhoneNumber(number=self.customer_phone)


def _format_errors(value_object_cls, **kwargs) -> list[str]:
    try:
        value_object_cls(**kwargs)
    except ValidationError as exc:
        return [message for messages in exc.messages.values() for message in messages]
    return []


def validate_contact(details: Mapping, shipping_address, missing_fields=()) -> Contact:
    """Build a ``Contact`` from raw checkout input, or raise ``CheckoutValidationError``.

    Missing fields (including any already found by the caller) are reported
    together before any format check runs.
    """
    values = {name: (details.get(name) or "").strip() for name in CONTACT_FIELDS}

    missing = list(missing_fields)
    missing += [name for name in CONTACT_FIELDS if not values[name]]
    if not (shipping_address or "").strip():
        missing.append("shipping_address")
    if missing:
        raise CheckoutValidationError("Missing required fields", missing_fields=missing)

    errors = {}
    email_errors = _format_errors(EmailAddress, address=values["customer_email"])
    if email_errors:
        errors["customer_email"] = email_errors
    phone_errors = _format_errors(PhoneNumber, number=values["customer_phone"])
    if phone_errors:
        errors["customer_phone"] = phone_errors
    if errors:
        raise CheckoutValidationError("Invalid contact details", errors=errors)

    try:
        return Contact(**values)
    except ValidationError as exc:
        raise CheckoutValidationError("Invalid contact details", errors=exc.messages) from exc
