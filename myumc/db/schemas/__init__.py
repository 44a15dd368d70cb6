"""
Domain-split Pydantic schemas.

Re-exports every request/response model so callers can
`from myumc.db import schemas`.
"""

from .users import (
    RegisterRequest,
    LoginRequest,
    ConfirmRegistrationRequest,
    ForgotPasswordRequest,
    ResetPasswordRequest,
    ChangePasswordRequest,
    RefreshTokenRequest,
    AuthResponse,
    UserProfileUpdate,
    UserProfile,
)
from .organizations import OrganizationBase, OrganizationCreate, OrganizationUpdate, Organization
from .members import (
    MembershipStatus,
    PaymentMethod,
    MemberBase,
    MemberCreate,
    MemberUpdate,
    Member,
    MemberDetail,
    GivingRecordCreate,
    GivingRecord,
    MembershipHistoryCreate,
    MembershipHistory,
)
from .content import (
    AnnouncementPriority,
    PRIORITY_RANK,
    ContentBase,
    ContentItem,
    SermonCreate,
    Sermon,
    BlogPostCreate,
    BlogPost,
    AnnouncementCreate,
    Announcement,
    CommentCreate,
    Comment,
    SermonRatingCreate,
    SermonRating,
    BlogPostLike,
    AnnouncementAcknowledgement,
)
from .events import (
    EventStatus,
    RecurrenceType,
    RegistrationStatus,
    ReminderType,
    EventBase,
    EventCreate,
    EventUpdate,
    Event,
    EventRegistrationCreate,
    EventRegistration,
    EventReminderCreate,
    EventReminder,
)
from .store import (
    OrderStatus,
    PaymentStatus,
    ProductVariantCreate,
    ProductVariant,
    ProductCreate,
    Product,
    CartItemAdd,
    CartItem,
    Cart,
    OrderCreate,
    OrderItem,
    Order,
    OrderStatusUpdate,
)
from .audits import AuditLogBase, AuditLogCreate, AuditLog
