"""Pydantic schemas for Zoho Campaigns mailing lists, contacts and campaigns."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class MailingList(BaseModel):
    """A Zoho Campaigns mailing list as returned by getmailinglists."""

    model_config = ConfigDict(extra="allow")

    listkey: str
    listname: str = ""


class Contact(BaseModel):
    """A list subscriber, annotated with the list it was read from.

    Zoho returns subscriber fields either as display labels ("Contact Email")
    or as snake keys ("contact_email") depending on the list settings, so the
    raw map is kept and read through the accessor properties.
    """

    list_key: str
    list_name: str = ""
    fields: dict[str, Any] = Field(default_factory=dict)

    def _first(self, *keys: str) -> str:
        for key in keys:
            value = self.fields.get(key)
            if value not in (None, ""):
                return str(value)
        return ""

    @property
    def email(self) -> str:
        return self._first("Contact Email", "contact_email")

    @property
    def first_name(self) -> str:
        return self._first("First Name", "firstname")

    @property
    def last_name(self) -> str:
        return self._first("Last Name", "lastname")

    @property
    def phone(self) -> str:
        return self._first("Phone", "phone")

    @property
    def display_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


class ContactInfo(BaseModel):
    """Subscriber data sent to listsubscribe (add or update)."""

    email: str
    firstname: str | None = None
    lastname: str | None = None
    phone: str | None = None

    def to_zoho(self) -> dict[str, str]:
        """Serialize to the labelled keys the contactinfo parameter expects.

        Blank optional values are left out so an update never clears a field
        the caller did not provide.
        """
        info = {"Contact Email": self.email}
        if self.firstname:
            info["First Name"] = self.firstname
        if self.lastname:
            info["Last Name"] = self.lastname
        if self.phone:
            info["Phone"] = self.phone
        return info


class Campaign(BaseModel):
    """A campaign row from recentcampaigns."""

    model_config = ConfigDict(extra="allow")

    campaign_key: str = ""
    campaign_name: str = ""
    campaign_status: str = ""
    created_date_string: str = ""

    @property
    def is_draft(self) -> bool:
        """Only draft campaigns can be sent."""
        return self.campaign_status.lower() == "draft" and bool(self.campaign_key)


class CampaignCreate(BaseModel):
    """Parameters for createCampaign."""

    campaignname: str
    from_email: str
    subject: str
    listkey: str
    content_url: str | None = None  # Public HTML URL Zoho fetches; content can be added later in Zoho
