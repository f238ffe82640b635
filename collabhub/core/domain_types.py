"""Domain Types — enums and identity types shared by every layer.

Invariants:
    - All valid states encoded as Enums — no raw string matching
    - ACTIVE_STATUSES and TERMINAL_STATUSES are disjoint and together cover RequestStatus

Design Decisions:
    - str Enums: serialize to JSON and compare against DB string columns directly
"""

from dataclasses import dataclass
from enum import Enum


# ─── Enums ───────────────────────────────────────────────────────

class RequestStatus(str, Enum):
    """Collaboration request lifecycle states — maps to DB `status` column."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"
    EXPIRED = "expired"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


ACTIVE_STATUSES = frozenset({RequestStatus.PENDING, RequestStatus.ACCEPTED})
TERMINAL_STATUSES = frozenset({
    RequestStatus.REJECTED, RequestStatus.EXPIRED,
    RequestStatus.COMPLETED, RequestStatus.CANCELLED,
})


class ActorRole(str, Enum):
    """Roles supplied by the identity collaborator."""
    BRAND = "brand"
    CREATOR = "creator"
    ADMIN = "admin"


@dataclass(frozen=True)
class AuthenticatedActor:
    """Actor as vouched for by the identity collaborator — trusted as given."""
    id: str
    role: ActorRole

    @property
    def is_admin(self) -> bool:
        return self.role == ActorRole.ADMIN


SYSTEM_ACTOR_ID = "system"


class CampaignType(str, Enum):
    SPONSORED_CONTENT = "sponsored_content"
    PRODUCT_REVIEW = "product_review"
    BRAND_AMBASSADOR = "brand_ambassador"
    EVENT_PROMOTION = "event_promotion"
    LIVE_STREAM = "live_stream"
    CONTENT_CREATION = "content_creation"
    LONG_TERM_PARTNERSHIP = "long_term_partnership"
    ONE_OFF = "one_off"


class Platform(str, Enum):
    INSTAGRAM = "instagram"
    YOUTUBE = "youtube"
    TIKTOK = "tiktok"
    LINKEDIN = "linkedin"
    TWITTER = "twitter"
    FACEBOOK = "facebook"


class ContentType(str, Enum):
    POSTS = "posts"
    STORIES = "stories"
    REELS = "reels"
    VIDEOS = "videos"
    LIVE_STREAMS = "live_streams"
    BLOG_POSTS = "blog_posts"


class SubjectType(str, Enum):
    """Profile kinds a ViewEvent can point at."""
    CREATOR = "creator"
    BRAND = "brand"


class ViewerType(str, Enum):
    CREATOR = "creator"
    BRAND = "brand"
    ADMIN = "admin"
    ANONYMOUS = "anonymous"


class InteractionFlag(str, Enum):
    """Boolean interaction markers carried by a ViewEvent — one DB column each."""
    PROFILE_CLICKED = "profile_clicked"
    CONTACT_CLICKED = "contact_clicked"
    PORTFOLIO_VIEWED = "portfolio_viewed"
    COLLABORATION_REQUESTED = "collaboration_requested"


class LifecycleEventType(str, Enum):
    """Logical events emitted to the notification collaborator."""
    REQUEST_CREATED = "RequestCreated"
    REQUEST_ACCEPTED = "RequestAccepted"
    REQUEST_REJECTED = "RequestRejected"
    REQUEST_CANCELLED = "RequestCancelled"
    REQUEST_COMPLETED = "RequestCompleted"
    REQUEST_EXPIRED = "RequestExpired"
    RESPONSE_RECEIVED = "ResponseReceived"


# Status reached by a transition → event announced for it
TRANSITION_EVENTS: dict[RequestStatus, LifecycleEventType] = {
    RequestStatus.ACCEPTED: LifecycleEventType.REQUEST_ACCEPTED,
    RequestStatus.REJECTED: LifecycleEventType.REQUEST_REJECTED,
    RequestStatus.CANCELLED: LifecycleEventType.REQUEST_CANCELLED,
    RequestStatus.COMPLETED: LifecycleEventType.REQUEST_COMPLETED,
    RequestStatus.EXPIRED: LifecycleEventType.REQUEST_EXPIRED,
}
