from typing import Optional

from pydantic import BaseModel, ConfigDict


class OutboundEmail(BaseModel):
    model_config = ConfigDict(frozen=True)

    from_name: str
    from_address: str
    to: str
    subject: str
    html: str
    reply_to: Optional[str] = None
