"""Profile edits."""

from dataclasses import dataclass

from nutriwise.domain.profile import Profile
from nutriwise.services.session import TrackerSession


@dataclass
class ProfileService:
    """Service for reading and editing the user profile."""

    session: TrackerSession

    def get_profile(self) -> Profile:
        """Return the current profile."""
        return self.session.profile

    def update_profile(self, changes: dict[str, object]) -> Profile:
        """Apply a partial edit; raises ValidationError for invalid values."""
        merged = {**self.session.profile.to_payload(), **changes}
        profile = Profile.model_validate(merged)
        self.session.set_profile(profile)
        return profile

    def reset_profile(self) -> Profile:
        """Restore the default profile."""
        profile = Profile()
        self.session.set_profile(profile)
        return profile
