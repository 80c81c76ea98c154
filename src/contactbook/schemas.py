from pydantic import BaseModel
from typing import Optional


class ContactBase(BaseModel):
    first: str = ""
    last: str = ""
    twitter: str = ""
    notes: str = ""
    favorite: bool = False
    avatar: str = ""


class Contact(ContactBase):
    id: int
    model_config = {"from_attributes": True}

    @property
    def display_name(self) -> str:
        return f"{self.first} {self.last}".strip() or "No Name"


class ContactUpdate(BaseModel):
    """Sparse set of new field values; `None` means "keep the stored value"."""

    first: Optional[str] = None
    last: Optional[str] = None
    twitter: Optional[str] = None
    notes: Optional[str] = None
    favorite: Optional[bool] = None
    avatar: Optional[str] = None

    def changes(self) -> dict:
        return self.model_dump(exclude_none=True)

    def apply_to(self, contact: Contact) -> Contact:
        """Return `contact` with every defined field replaced, the rest retained."""
        return contact.model_copy(update=self.changes())


class FavoriteUpdate(BaseModel):
    favorite: bool
