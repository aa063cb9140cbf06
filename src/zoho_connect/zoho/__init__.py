"""Zoho REST API clients.

- ZohoClient: authenticated GET/POST with a single refresh-and-repeat on a rejected token
- CrmClient: paginated CRM Accounts listing
- CampaignsClient: mailing lists, subscribers, campaigns
"""

from src.zoho_connect.zoho.campaigns import CampaignsClient
from src.zoho_connect.zoho.client import ZohoClient
from src.zoho_connect.zoho.crm import CrmClient
from src.zoho_connect.zoho.schemas import (
    Campaign,
    CampaignCreate,
    Contact,
    ContactInfo,
    MailingList,
)

__all__ = [
    "Campaign",
    "CampaignCreate",
    "CampaignsClient",
    "Contact",
    "ContactInfo",
    "CrmClient",
    "MailingList",
    "ZohoClient",
]
