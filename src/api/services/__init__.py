# This file marks the services package for entity descriptors, persistence, and DDL modules.
# It exists so routers can depend on the entity store instead of raw SQL.
# Store modules isolate transactional logic from transport concerns.
