"""ORM models. Importing this package registers every table on Base.metadata."""
from rsvp_app.models.user import Role, RoleName, User, user_roles  # noqa: F401
from rsvp_app.models.event import Event, EventStatus, EventType, EventVenue, RecurrencePattern  # noqa: F401
from rsvp_app.models.guest import (  # noqa: F401
    EventGuest, Gender, Guest, GuestGroup, InvitationMethod, guest_group_members,
)
from rsvp_app.models.rsvp import RSVP, RSVPPlusOne, RSVPStatus  # noqa: F401
from rsvp_app.models.notification import (  # noqa: F401
    Channel, DeliveryStatus, Notification, NotificationRecipient, NotificationStatus, NotificationTemplate,
)
from rsvp_app.models.audit_log import AuditLog, AuditLogImmutableError  # noqa: F401
from rsvp_app.models.setting import AppSetting  # noqa: F401
from rsvp_app.models.logistics import (  # noqa: F401
    LogisticsAssignment, LogisticsItem, LogisticsStatus, LogisticsType,
)
