from app.workers.tasks.rental_expiry import run_rental_expiry_sweep

__all__ = ["run_rental_expiry_sweep"]
