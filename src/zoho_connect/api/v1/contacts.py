"""Zoho Campaigns mailing lists and subscribers (contacts).

Adding and updating both go through listsubscribe, which upserts on the
contact email within a list.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field

from src.zoho_connect.api.deps import get_campaigns_client, require_connection
from src.zoho_connect.zoho.campaigns import CampaignsClient
from src.zoho_connect.zoho.schemas import Contact, ContactInfo, MailingList

router = APIRouter(
    prefix="/contacts",
    tags=["contacts"],
    dependencies=[Depends(require_connection)],
)


class ContactResponse(BaseModel):
    list_key: str
    list_name: str = ""
    email: str
    first_name: str = ""
    last_name: str = ""
    phone: str = ""
    fields: dict[str, Any] = Field(default_factory=dict)


class CreateContactRequest(BaseModel):
    list_key: str
    email: str
    firstname: str | None = None
    lastname: str | None = None
    phone: str | None = None


class UpdateContactRequest(BaseModel):
    firstname: str | None = None
    lastname: str | None = None
    phone: str | None = None


def _contact_to_response(contact: Contact) -> ContactResponse:
    return ContactResponse(
        list_key=contact.list_key,
        list_name=contact.list_name,
        email=contact.email,
        first_name=contact.first_name,
        last_name=contact.last_name,
        phone=contact.phone,
        fields=contact.fields,
    )


@router.get("/lists", response_model=list[MailingList])
async def list_mailing_lists(
    campaigns: CampaignsClient = Depends(get_campaigns_client),
) -> list[MailingList]:
    return await campaigns.get_mailing_lists()


@router.get("", response_model=list[ContactResponse])
async def list_contacts(
    campaigns: CampaignsClient = Depends(get_campaigns_client),
) -> list[ContactResponse]:
    """Every subscriber of every mailing list."""
    return [_contact_to_response(c) for c in await campaigns.get_all_contacts()]


@router.get("/{list_key}/{email}", response_model=ContactResponse)
async def get_contact(
    list_key: str,
    email: str,
    campaigns: CampaignsClient = Depends(get_campaigns_client),
) -> ContactResponse:
    return _contact_to_response(await campaigns.find_contact(list_key, email))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_contact(
    body: CreateContactRequest,
    campaigns: CampaignsClient = Depends(get_campaigns_client),
) -> dict[str, Any]:
    info = ContactInfo(
        email=body.email,
        firstname=body.firstname,
        lastname=body.lastname,
        phone=body.phone,
    )
    return await campaigns.add_contact(body.list_key, info)


@router.put("/{list_key}/{email}")
async def update_contact(
    list_key: str,
    email: str,
    body: UpdateContactRequest,
    campaigns: CampaignsClient = Depends(get_campaigns_client),
) -> dict[str, Any]:
    info = ContactInfo(
        email=email,
        firstname=body.firstname,
        lastname=body.lastname,
        phone=body.phone,
    )
    return await campaigns.add_contact(list_key, info)


@router.delete("/{list_key}/{email}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_contact(
    list_key: str,
    email: str,
    campaigns: CampaignsClient = Depends(get_campaigns_client),
) -> Response:
    await campaigns.delete_contact(list_key, email)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
