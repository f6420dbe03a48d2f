from typing import Any, Iterable, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from repejo_trigger.core.errors import RejectionReason
from repejo_trigger.schemas.events import EventType, NormalizedEvent


class RawRequest(BaseModel):
    """One inbound webhook as handed over by the transport layer.

    `body` is the unparsed request body. `parsed_body` is what the transport
    already decoded, if anything. At least one of them should be set.
    """

    model_config = ConfigDict(frozen=True)

    headers: dict[str, str] = Field(default_factory=dict)
    body: Optional[Union[bytes, str]] = None
    parsed_body: Optional[Any] = None

    def header(self, name: str) -> Optional[str]:
        name = name.lower()
        for key, value in self.headers.items():
            if key.lower() == name:
                return value
        return None


class ValidationConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    secret: Optional[SecretStr] = None
    require_signature: bool = True
    subscribed_events: frozenset[EventType] = frozenset()

    @property
    def signature_enabled(self) -> bool:
        return self.require_signature and bool(
            self.secret and self.secret.get_secret_value()
        )

    @classmethod
    def from_parameters(
        cls,
        events: Iterable[str] = (),
        webhook_secret: str = "",
        validate_signature: bool = True,
    ) -> "ValidationConfig":
        """Build a config from the trigger's user-facing parameters.

        Raises ValueError for event names outside the known set.
        """
        return cls(
            secret=SecretStr(webhook_secret or ""),
            require_signature=validate_signature,
            subscribed_events=frozenset(EventType(e) for e in events),
        )

    @classmethod
    def from_settings(cls, settings) -> "ValidationConfig":
        return cls.from_parameters(
            events=settings.subscribed_events,
            webhook_secret=settings.webhook_secret.get_secret_value(),
            validate_signature=settings.validate_signature,
        )


class Accepted(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: Literal[True] = True
    events: list[NormalizedEvent] = Field(default_factory=list)
    # Set when the signature was checked against a re-serialized body
    degraded_signature: bool = False

    @property
    def suppressed(self) -> bool:
        return not self.events


class Rejected(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: Literal[False] = False
    reason: RejectionReason
    message: str


ValidationOutcome = Union[Accepted, Rejected]
