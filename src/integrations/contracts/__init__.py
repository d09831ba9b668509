"""
Contracts (data models).

This folder defines the shapes exchanged with external commerce systems:
- catalog products and their variants
- cart lines and cart line changes
- results of cart mutations

Both mock and real clients return these contracts, so offer selection and the
widget never depend on raw GraphQL payloads.
"""
