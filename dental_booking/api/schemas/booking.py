import datetime as dt

from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator


class CreateBookingRequest(BaseModel):
    # Clients send camelCase names; snake_case is accepted too
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=255)  # dentist
    patient_name: str | None = Field(default=None, alias="patientName", max_length=255)
    email: EmailStr
    phone: str = Field(min_length=1, max_length=20)
    address: str | None = None
    date: dt.date
    time: dt.time

    @field_validator("name", "phone")
    @classmethod
    def strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


class CreateBookingResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    message: str = "Booking confirmed!"
    booking_id: int = Field(serialization_alias="bookingId")


class RescheduleRequest(BaseModel):
    # "date"/"time" are the documented keys; newDate/newTime are still sent by older clients
    date: dt.date = Field(validation_alias=AliasChoices("date", "newDate"))
    time: dt.time = Field(validation_alias=AliasChoices("time", "newTime"))


class MessageResponse(BaseModel):
    message: str


class ReleasedBlockedDatesResponse(BaseModel):
    message: str
    removed: int
