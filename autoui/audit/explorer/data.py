"""Synthetic form data generation backed by Faker."""

import logging
from typing import Optional

from faker import Faker

logger = logging.getLogger(__name__)


class SyntheticDataGenerator:
    """Produces plausible values for form fields by semantic type."""

    def __init__(
        self,
        seed: Optional[int] = None,
        number_min: int = 1,
        number_max: int = 100,
        locale: str = "en_US"
    ):
        self.faker = Faker(locale)
        if seed is not None:
            self.faker.seed_instance(seed)
        self.number_min = number_min
        self.number_max = number_max

    def email(self) -> str:
        return self.faker.email()

    def password(self) -> str:
        return self.faker.password(length=14, special_chars=True, digits=True,
                                   upper_case=True, lower_case=True)

    def phone(self) -> str:
        return self.faker.phone_number()

    def number(self) -> str:
        return str(self.faker.random_int(min=self.number_min, max=self.number_max))

    def full_name(self) -> str:
        return self.faker.name()

    def street_address(self) -> str:
        return self.faker.street_address()

    def filler_text(self) -> str:
        return self.faker.sentence(nb_words=3)

    def value_for(
        self,
        input_type: Optional[str],
        placeholder: Optional[str] = None,
        name: Optional[str] = None
    ) -> str:
        """Pick a value for a field from its type, then placeholder/name hints.

        Args:
            input_type: The ``type`` attribute, ``None`` for textareas
            placeholder: The field placeholder, if any
            name: The field ``name`` attribute, if any

        Returns:
            Value to type into the field
        """
        kind = (input_type or "text").lower()

        if kind == "email":
            return self.email()
        if kind == "password":
            return self.password()
        if kind == "tel":
            return self.phone()
        if kind == "number":
            return self.number()

        hint = f"{placeholder or ''} {name or ''}".lower()
        if "email" in hint or "e-mail" in hint:
            return self.email()
        if "phone" in hint:
            return self.phone()
        if "address" in hint:
            return self.street_address()
        if "name" in hint:
            return self.full_name()
        return self.filler_text()
