from app.db.models.base import Base
from app.db.models.rental_plans import RentalPlan
from app.db.models.user_rentals import UserRental
from app.db.models.users import User
from app.db.models.video_jobs import VideoJob
from app.db.models.wallet_accounts import WalletAccount
from app.db.models.wallet_transactions import WalletTransaction

__all__ = [
    "Base",
    "RentalPlan",
    "User",
    "UserRental",
    "VideoJob",
    "WalletAccount",
    "WalletTransaction",
]
