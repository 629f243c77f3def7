from app.economy.reporting.service import ReportingService

__all__ = ["ReportingService"]
