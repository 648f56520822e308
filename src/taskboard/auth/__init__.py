"""Authentication and authorization.

Learn: one authentication path and one authorization rule.
1. Users → email/password → opaque bearer token ("<id>|<secret>")
2. Every mutating call → ownership check in policy.authorize()

The token resolves to a CurrentIdentity, which is passed explicitly into
services and the guard. There is no ambient "current user".
"""
