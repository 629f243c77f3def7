from app.economy.rentals import RentalService
from app.economy.reporting import ReportingService
from app.economy.wallet import WalletService

__all__ = [
    "RentalService",
    "ReportingService",
    "WalletService",
]
