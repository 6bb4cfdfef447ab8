# shopify_bridge/models/customer.py
from datetime import date
from pydantic import BaseModel, Field
from typing import Optional


# Модель для обновления профиля покупателя
class CustomerUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    dob: Optional[date] = None

    def profile_fields(self) -> dict:
        """Поля, которые уходят в PUT /customers/{id}.json (без dob)."""
        return self.model_dump(exclude_unset=True, exclude={'dob'})
