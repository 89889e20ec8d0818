"""
Order payload construction split by responsibility.
External callers import the builder from services.order_payload.
"""
