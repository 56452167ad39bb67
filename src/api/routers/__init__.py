# This file marks the routers package for API route modules.
# It exists so import paths stay clear when registering route groups.
# Each catalog entity gets its own router module built from the shared entity router factory.
