"""URL paths shared by the router and the middleware pipeline.

The raw-body stage and the Stripe webhook route must agree on the webhook
path, so both read it from here.
"""

API_PREFIX = "/api"

HEALTH_ROUTE = "/health"
STRIPE_WEBHOOK_ROUTE = "/webhook/stripe"

HEALTH_PATH = API_PREFIX + HEALTH_ROUTE
STRIPE_WEBHOOK_PATH = API_PREFIX + STRIPE_WEBHOOK_ROUTE
