"""Reference value: a pointer to another record."""

from .base import Value


class Reference(Value):
    variant = "reference"

    def __init__(self, class_name: str, object_id: str | None = None):
        super().__init__()
        self.class_name = class_name
        self.object_id = object_id

    @property
    def value(self) -> tuple[str, str | None]:
        return (self.class_name, self.object_id)

    def copy(self) -> "Reference":
        return Reference(self.class_name, self.object_id)

    def __hash__(self) -> int:
        return hash((self.variant, self.class_name, self.object_id))
