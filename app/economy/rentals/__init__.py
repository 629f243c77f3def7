from app.economy.rentals.service import RentalService

__all__ = ["RentalService"]
