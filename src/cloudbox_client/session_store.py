"""
Local login identity.

Only the identity an external sign-in produced is stored here (name, email,
avatar and token) so the client can greet the user between runs. Nothing in
it is sent to the CloudBox API.
"""

import json
import logging
from pathlib import Path
from typing import Optional, Union

from pydantic import BaseModel, ValidationError

from cloudbox_client.config import ClientSettings

logger = logging.getLogger(__name__)


class UserIdentity(BaseModel):
    name: str
    email: str
    avatar: Optional[str] = None
    token: Optional[str] = None


class SessionStore:
    def __init__(self, path: Union[str, Path]):
        self.path = Path(path).expanduser()

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "SessionStore":
        return cls(settings.state_path)

    def load(self) -> Optional[UserIdentity]:
        """Saved identity, or None when absent or unreadable."""
        if not self.path.exists():
            return None
        try:
            with open(self.path, "r") as f:
                return UserIdentity.model_validate(json.load(f))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"Ignoring unreadable session file {self.path}: {str(e)}")
            return None

    def login(self, identity: UserIdentity) -> UserIdentity:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(identity.model_dump(), f, indent=2)
        logger.info(f"Signed in as {identity.email}")
        return identity

    def logout(self) -> None:
        if self.path.exists():
            self.path.unlink()
            logger.info("Signed out")

    @property
    def user(self) -> Optional[UserIdentity]:
        return self.load()
