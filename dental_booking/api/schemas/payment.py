from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field


class CreatePaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    booking_id: int = Field(alias="bookingId")
    amount: Decimal = Field(gt=0)  # major units, e.g. pounds
    currency: str | None = Field(default=None, min_length=3, max_length=3)


class CreatePaymentResponse(BaseModel):
    client_secret: str | None = Field(serialization_alias="clientSecret")
    payment_intent_id: str = Field(serialization_alias="paymentIntentId")


class ConfirmPaymentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    booking_id: int = Field(alias="bookingId")
    payment_id: str = Field(alias="paymentId", min_length=1)


class ConfirmPaymentResponse(BaseModel):
    message: str
    booking_id: int = Field(serialization_alias="bookingId")
    payment_status: str = Field(serialization_alias="paymentStatus")
