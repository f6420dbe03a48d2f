import enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class EventType(str, enum.Enum):
    PAYER_CREATED = "payer.created"
    PAYER_UPDATED = "payer.updated"
    SUBSCRIPTION_CREATED = "subscription.created"
    SUBSCRIPTION_UPDATED = "subscription.updated"
    RECEIVABLE_CREATED = "receivable.created"
    RECEIVABLE_UPDATED = "receivable.updated"


class Payer(BaseModel):
    """A donor registered on the platform."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., pattern=r"^pay_", description="Payer ID (pay_...)")
    status: Literal[
        "active", "pending", "rejected", "terminated", "aborted", "checkout", "completed"
    ]
    name: Optional[str] = None
    mobile_number: Optional[int] = None
    email: Optional[str] = None
    address_street: Optional[str] = None
    address_zip: Optional[str] = None
    address_city: Optional[str] = None
    personal_identity_number: Optional[str] = None
    contact_consent: Optional[bool] = None
    external_id: Optional[str] = None


class Subscription(BaseModel):
    """A recurring donation."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., pattern=r"^sub_", description="Subscription ID (sub_...)")
    payer_id: str = Field(..., pattern=r"^pay_")
    amount: float
    receivable_date: str = Field(
        ..., description="Date string or 'last_bank_date'"
    )
    payment_method_type: Literal["swish_recurring", "autogiro_external"]
    status: Literal["active", "terminated"]
    reference: str
    source: Literal["repejo"]
    index_adjustment_consent: bool


class Receivable(BaseModel):
    """A single payment, one-off or drawn from a subscription."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., pattern=r"^rcv_", description="Receivable ID (rcv_...)")
    subscription: str = Field(..., pattern=r"^sub_")
    amount: float
    status: Literal["paid", "rejected", "insufficient_funds", "retry"]
    type: Literal["onetime", "recurring"]
    payment_method: Literal["swish_recurring"]
    receivable_date: str
    reference: str


# entity_type -> model used to check the shape of `data`
ENTITY_MODELS: dict[str, type[BaseModel]] = {
    "payer": Payer,
    "subscription": Subscription,
    "receivable": Receivable,
}


class WebhookEnvelope(BaseModel):
    sent_at: str = Field(..., description="ISO-8601 send time")
    event_type: EventType
    entity_type: str
    action: str
    data: dict[str, Any] = Field(..., description="Entity payload, kept as received")

    def entity(self) -> BaseModel:
        """Return `data` parsed into the model selected by `entity_type`."""
        return ENTITY_MODELS[self.entity_type].model_validate(self.data)


class NormalizedEvent(BaseModel):
    event_type: str
    sent_at: str
    data: Any
    entity_type: str
    action: str
