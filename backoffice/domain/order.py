"""Order domain types and status enums."""
from __future__ import annotations

from dataclasses import dataclass


class OrderStatus:
    """Order lifecycle statuses stored in orders.status."""

    PENDING = "pending"
    PAYMENT_SENT = "payment_sent"
    PAID = "paid"
    SHIPPED = "shipped"
    CANCELLED = "cancelled"

    ALL = (PENDING, PAYMENT_SENT, PAID, SHIPPED, CANCELLED)

    @classmethod
    def normalize(cls, status: str | None) -> str:
        return str(status or "").strip().lower()

    @classmethod
    def is_valid(cls, status: str | None) -> bool:
        return cls.normalize(status) in cls.ALL


@dataclass(frozen=True, slots=True)
class StatusDisplay:
    label: str
    color: str
    step: int
    description: str


ORDER_STATUS_CONFIG: dict[str, StatusDisplay] = {
    OrderStatus.PENDING: StatusDisplay(
        "En attente", "#EF4444", 1, "Commande reçue, en attente de traitement"
    ),
    OrderStatus.PAYMENT_SENT: StatusDisplay(
        "Lien de paiement envoyé", "#F97316", 2, "Le lien de paiement a été envoyé par email"
    ),
    OrderStatus.PAID: StatusDisplay(
        "Paiement reçu", "#EAB308", 3, "Paiement confirmé, commande en préparation"
    ),
    OrderStatus.SHIPPED: StatusDisplay(
        "Commande expédiée", "#22C55E", 4, "Commande expédiée avec Mondial Relay"
    ),
    OrderStatus.CANCELLED: StatusDisplay("Annulée", "#6B7280", 0, "Commande annulée"),
}
