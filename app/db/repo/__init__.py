from app.db.repo.rentals_repo import RentalsRepo
from app.db.repo.reporting_repo import ReportingRepo
from app.db.repo.users_repo import UsersRepo
from app.db.repo.video_jobs_repo import VideoJobsRepo
from app.db.repo.wallet_repo import WalletRepo

__all__ = [
    "RentalsRepo",
    "ReportingRepo",
    "UsersRepo",
    "VideoJobsRepo",
    "WalletRepo",
]
