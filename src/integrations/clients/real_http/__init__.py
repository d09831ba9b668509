"""
Real HTTP integration clients.

These clients talk to the commerce platform's storefront GraphQL API:
- catalog reads (collection products, generic product listing)
- cart mutations (adding a line)

Important:
- Must implement the same interfaces as the mock clients
- Must return data shaped according to src/integrations/contracts/*

Switching:
The selection of mock vs real clients happens in src/api/main.py only.
"""
