"""ViewEvent Schemas — body of the profile-view producer endpoint."""

from pydantic import BaseModel

from collabhub.core.domain_types import InteractionFlag, SubjectType


class ViewEventCreate(BaseModel):
    subject_type: SubjectType
    interactions: list[InteractionFlag] = [InteractionFlag.PROFILE_CLICKED]
