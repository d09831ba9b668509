"""
Mock integration clients.

These clients return realistic responses without calling the storefront API.
They are used when:
- no storefront endpoint / token is configured
- we want to exercise the upsell block end-to-end in tests or local runs

Important:
- Mock clients must follow the SAME interface as real HTTP clients.
- Mock clients return data shaped according to src/integrations/contracts/*

Switching to real:
When STOREFRONT_API_URL is set (or INTEGRATIONS_MODE=real), src/api/main.py
wires clients/real_http/* instead.
"""
