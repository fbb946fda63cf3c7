"""Capability checks over decoded token claims.

The catalog has a single capability: admin. Admins may create, update and
delete products and suppliers, list suppliers, trigger supplier
notifications and see hidden (isAvailable = false) products. Everyone
else, including anonymous callers, gets read-only access to visible
products.
"""

ADMIN_ROLE = "admin"


def is_admin(claims: dict | None) -> bool:
    """True when the claims belong to a valid access token with role admin."""
    if not claims:
        return False
    return claims.get("type") == "access" and claims.get("role") == ADMIN_ROLE
