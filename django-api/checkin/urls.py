from django.urls import path

from checkin.handlers import (
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

urlpatterns = [
    path(
        "events/<int:event_id>/tickets/<str:ticket_uuid>/status",
        TicketStatusView.as_view(),
        name="ticket-status",
    ),
    path(
        "events/<int:event_id>/tickets/<str:ticket_uuid>/check-in",
        CheckInView.as_view(),
        name="ticket-check-in",
    ),
    path(
        "events/<int:event_id>/tickets/<str:ticket_uuid>/manual-check-in",
        ManualCheckInView.as_view(),
        name="ticket-manual-check-in",
    ),
    path(
        "events/<int:event_id>/tickets/<str:ticket_uuid>/revert-check-in",
        RevertCheckInView.as_view(),
        name="ticket-revert-check-in",
    ),
    path(
        "events/by-name/<str:short_name>/tickets/<str:ticket_uuid>/status",
        TicketStatusByNameView.as_view(),
        name="ticket-status-by-name",
    ),
    path(
        "events/by-name/<str:short_name>/tickets/<str:ticket_uuid>/check-in",
        CheckInByNameView.as_view(),
        name="ticket-check-in-by-name",
    ),
    path(
        "events/by-name/<str:short_name>/tickets/<str:ticket_uuid>/confirm-payment",
        ConfirmOnSitePaymentView.as_view(),
        name="ticket-confirm-payment",
    ),
    path(
        "events/<int:event_id>/offline/identifiers",
        OfflineIdentifiersView.as_view(),
        name="offline-identifiers",
    ),
    path(
        "events/<int:event_id>/offline/attendees",
        OfflineAttendeesView.as_view(),
        name="offline-attendees",
    ),
    path(
        "events/<int:event_id>/offline/full-info",
        FullTicketInfoView.as_view(),
        name="offline-full-info",
    ),
]
