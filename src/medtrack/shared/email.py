"""EmailAddress value object for patient email addresses."""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import String

from medtrack.domain import medtrack

_FORBIDDEN_CHARS = (";", ",", "(", ")", '"', ":", "<", ">", "[", "]", "\\")


@medtrack.value_object
class EmailAddress:
    """A structurally valid email address.

    Exactly one @, non-empty local and dotted domain parts, no consecutive
    dots, no hyphen at either end of a domain label, and none of the
    characters that mail headers reserve.
    """

    address = String(required=True, max_length=254)

    @invariant.post
    def verify_email_address(self):
        email = self.address

        def reject():
            raise ValidationError({"email": [f"Invalid email address: {email!r}"]})

        if any(ch.isspace() for ch in email) or email.count("@") != 1:
            reject()

        local_part, domain_part = email.split("@", 1)

        if not local_part or local_part.startswith(".") or local_part.endswith("."):
            reject()

        if not domain_part or domain_part.startswith(".") or domain_part.endswith("."):
            reject()

        if "." not in domain_part or ".." in local_part or ".." in domain_part:
            reject()

        for label in domain_part.split("."):
            if label.startswith("-") or label.endswith("-"):
                reject()

        if any(ch in email for ch in _FORBIDDEN_CHARS):
            reject()
