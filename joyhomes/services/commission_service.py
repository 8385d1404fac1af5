"""Commission calculation service.

BUSINESS RULES:
- Commission is a percentage of the booking's agreed price
- The rate comes from the property's project and is fixed at booking creation
- Projects without a rate (unset or zero) use the configured default (2%)
- Amounts are whole VND, rounded half-up
- Changing the agreed price recomputes the amount with the stored rate
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import TYPE_CHECKING

from joyhomes.config import settings

if TYPE_CHECKING:
    from joyhomes.models.inventory import Project


class CommissionService:
    """Service for calculating booking commissions."""

    def __init__(self, default_rate: Decimal | None = None) -> None:
        self.default_rate = Decimal(default_rate if default_rate is not None else settings.default_commission_rate)

    def get_commission_rate(self, project: "Project | None") -> Decimal:
        """Get the commission rate percentage for a project.

        Args:
            project: The property's project, if loaded

        Returns:
            Decimal: Commission rate as percentage (e.g., 2.50 for 2.5%)
        """
        rate = project.commission_rate if project is not None else None
        if not rate:
            return self.default_rate
        return Decimal(rate)

    def calculate_commission(self, agreed_price: int, rate: Decimal | float | int) -> int:
        """Calculate commission amount in whole VND.

        Args:
            agreed_price: Agreed sale price in VND
            rate: Commission rate as percentage

        Returns:
            int: Commission amount in VND
        """
        amount = Decimal(agreed_price) * Decimal(str(rate)) / Decimal("100")
        return int(amount.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


commission_service = CommissionService()
