"""Database models — re-exports all models.

Import from here:  from solarquote.models import User, QuotationRequest, ...
Or from submodules: from solarquote.models.auth import User
"""

from .base import Base  # noqa: F401

# Auth, Users & Profiles
from .auth import (  # noqa: F401
    ROLES,
    AdminProfile,
    CustomerProfile,
    User,
    UserSession,
    VendorProfile,
)

# Quotation Requests & Vendor Quotations
from .quotations import QuotationRequest, VendorQuotation  # noqa: F401

# Notifications
from .notifications import Notification  # noqa: F401
