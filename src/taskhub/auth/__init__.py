"""Authentication and ownership scoping.

Users → email/password → bcrypt check → 30-day JWT.
Every protected request presents that JWT as a Bearer token; the
access guard turns it into a CurrentIdentity that handlers use to
scope their queries to the caller's own records.
"""
