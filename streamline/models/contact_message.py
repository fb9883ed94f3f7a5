from pydantic import BaseModel, ConfigDict, Field

CONTACT_FIELD_LIMITS = {
    "name": 80,
    "email": 120,
    "message": 2000,
}


class ContactMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(..., min_length=1, max_length=80)
    # Shape is checked by the sanitizer, not EmailStr (kept deliberately loose)
    email: str = Field(..., min_length=1, max_length=120)
    message: str = Field(..., min_length=1, max_length=2000)
