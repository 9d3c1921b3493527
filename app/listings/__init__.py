"""
Listings application.

Holds the catalog item a conversation is scoped to. Catalog CRUD, search
and image handling live outside this backend; the chat subsystem only
needs a stable listing identity, its seller and whether it is still
available.

Usage:
    from listings.models import Listing
"""
