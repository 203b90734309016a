"""
Records owned by sibling services (portal: services, auth: users).

Only the fields this service reads are declared; anything else the sibling
returns is kept as-is.
"""

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

SERVICE_UNAVAILABLE_NAME = "Service unavailable"
UNKNOWN_SERVICE_NAME = "Unknown Service"


class ServiceSummary(BaseModel):
    """Owning-service reference attached to roles and permissions."""
    model_config = ConfigDict(extra="allow")

    id: str
    name: str

    @classmethod
    def unavailable(cls) -> "ServiceSummary":
        """Placeholder used when the directory call failed."""
        return cls(id="", name=SERVICE_UNAVAILABLE_NAME)

    @classmethod
    def unknown(cls) -> "ServiceSummary":
        """Placeholder for an id the directory did not return."""
        return cls(id="", name=UNKNOWN_SERVICE_NAME)


class Service(ServiceSummary):
    """
    Service record.

    is_visible=False hides the service from everyone. A visible service with
    is_visible_by_role=True is only shown to users holding one of its
    visible roles. A record without a visibility flag is hidden.

    The portal service sends camelCase keys (isVisible, isVisibleByRole).
    """
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    description: str | None = None
    base_url: str | None = Field(None, validation_alias=AliasChoices("base_url", "baseUrl"))
    display_name: str | None = Field(None, validation_alias=AliasChoices("display_name", "displayName"))
    is_visible: bool = Field(False, validation_alias=AliasChoices("is_visible", "isVisible"))
    is_visible_by_role: bool = Field(
        False, validation_alias=AliasChoices("is_visible_by_role", "isVisibleByRole")
    )


class User(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    email: str | None = None
    name: str | None = None
    nickname: str | None = None


class ServiceIdsPayload(BaseModel):
    service_ids: list[str] = Field(default_factory=list)


class UserIdsPayload(BaseModel):
    user_ids: list[str] = Field(default_factory=list)
