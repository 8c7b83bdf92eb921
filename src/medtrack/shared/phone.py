"""PhoneNumber value object for SMS-capable patient numbers."""

import re

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from medtrack.domain import medtrack


@medtrack.value_object
class PhoneNumber:
    """Digits, spaces, hyphens, parentheses, and an optional leading +."""

    number = String(required=True, max_length=20)

    @invariant.post
    def validate_phone_format(self):
        number = self.number

        # Must contain at least one digit
        if not re.search(r"\d", number) or not re.match(r"^\+?[\d\s\-()]+$", number):
            raise ValidationError({"phone": [f"Invalid phone number: {number!r}"]})
