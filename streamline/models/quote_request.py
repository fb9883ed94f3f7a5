from pydantic import BaseModel, ConfigDict, Field

# Per-field caps applied by the sanitizer before validation
QUOTE_FIELD_LIMITS = {
    "name": 80,
    "phone": 30,
    "pickup": 120,
    "destination": 120,
    "serviceType": 60,
}


class QuoteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field(..., min_length=1, max_length=80)
    phone: str = Field(..., min_length=1, max_length=30)
    pickup: str = Field(..., min_length=1, max_length=120)
    destination: str = Field(..., min_length=1, max_length=120)
    service_type: str = Field(..., alias="serviceType", min_length=1, max_length=60)
