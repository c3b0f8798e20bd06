from checkin.services.check_in_service import CheckInService
from checkin.services.offline_export_service import OfflineExportService

__all__ = ["CheckInService", "OfflineExportService"]
