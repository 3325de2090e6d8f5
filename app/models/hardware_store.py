"""
Hardware store (distributor network) models.
"""
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional

from sqlmodel import Field, SQLModel


class HardwareStore(SQLModel, table=True):
    """Retail hardware store in the distributor network."""

    __tablename__ = "hardware_stores"

    id: Optional[int] = Field(default=None, primary_key=True)
    store_code: str = Field(max_length=64, unique=True, index=True)  # BULK_<ms>_<rand> for imported rows
    store_name: str = Field(max_length=255)
    address: str = Field(default="", max_length=500)
    city: str = Field(default="Unknown", max_length=100)
    province: str = Field(default="Unknown", max_length=100, index=True)
    contact_person: Optional[str] = Field(default=None, max_length=255)
    phone: Optional[str] = Field(default=None, max_length=50)
    email: Optional[str] = Field(default=None, max_length=255)
    credit_limit: Decimal = Field(default=Decimal("0.00"), max_digits=12, decimal_places=2)
    store_type: str = Field(default="hardware", max_length=50)
    is_active: bool = Field(default=True)
    import_session_id: Optional[str] = Field(default=None, max_length=64, index=True)
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
