from app.economy.wallet.service import WalletService

__all__ = ["WalletService"]
