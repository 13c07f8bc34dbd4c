"""
Recipes Service package.

Exposes CRUD over recipes with a read-through cache on the full listing:

- app.main: API surface for recipe CRUD and health.
- app.recipes: Recipe models, listing codec and the cache-aside service.
- app.cache: Redis-backed listing cache.
- app.persistence: PostgreSQL storage for recipes.

Guidelines:
- The service is stateless; rely on external cache/DB.
- Only the full listing is cached; every write invalidates it.
"""
