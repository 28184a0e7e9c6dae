"""Order identifier value object."""
from dataclasses import dataclass
from uuid import UUID, uuid4


@dataclass(frozen=True)
class OrderId:
    """
    Opaque order identifier.

    Orders are keyed by a random UUID rendered as its canonical
    36-character string, e.g. ``3f2b6c0e-8a2d-4d8e-9b43-1d2f6a7c9e10``.
    """
    value: str

    def __post_init__(self):
        if not self.value:
            raise ValueError("Order id cannot be empty")
        try:
            canonical = str(UUID(self.value))
        except ValueError:
            raise ValueError(f"Invalid order id: {self.value}") from None
        object.__setattr__(self, 'value', canonical)

    @classmethod
    def generate(cls) -> "OrderId":
        return cls(value=str(uuid4()))

    def __str__(self) -> str:
        return self.value
