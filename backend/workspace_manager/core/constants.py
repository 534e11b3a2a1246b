"""Names shared by the API and the client-side core."""

# Cookie holding the raw session token (set by POST /auth/login).
AUTH_COOKIE = "auth-token"
# Cookie holding the URL-encoded JSON of the signed-in user.
USER_COOKIE = "user"
