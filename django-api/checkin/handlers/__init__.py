from checkin.handlers.views import (
    CheckInByNameView,
    CheckInView,
    ConfirmOnSitePaymentView,
    FullTicketInfoView,
    ManualCheckInView,
    OfflineAttendeesView,
    OfflineIdentifiersView,
    RevertCheckInView,
    TicketStatusByNameView,
    TicketStatusView,
)

__all__ = [
    "CheckInByNameView",
    "CheckInView",
    "ConfirmOnSitePaymentView",
    "FullTicketInfoView",
    "ManualCheckInView",
    "OfflineAttendeesView",
    "OfflineIdentifiersView",
    "RevertCheckInView",
    "TicketStatusByNameView",
    "TicketStatusView",
]
