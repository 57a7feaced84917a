# Request dependencies: ``from app.deps.auth import require_principal``.
