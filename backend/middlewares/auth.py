"""
Bearer-token authentication.

Tokens are verified against the Supabase Auth REST API; the verified user is
attached to ``flask.g.user`` for the duration of the request.
"""

import logging
from functools import wraps
from typing import Any, Dict, Optional

import requests
from flask import current_app, g, jsonify, request

logger = logging.getLogger(__name__)


class IdentityVerifier:
    """Looks up the user behind an access token."""

    def __init__(self, supabase_url: str, anon_key: str, timeout: int = 10):
        """
        Args:
            supabase_url: Project URL (e.g. https://xyz.supabase.co)
            anon_key: Public anon key sent as the ``apikey`` header
            timeout: Request timeout in seconds
        """
        self.supabase_url = supabase_url.rstrip('/')
        self.anon_key = anon_key
        self.timeout = timeout

    def verify(self, token: str) -> Optional[Dict[str, Any]]:
        """
        Verify an access token.

        Returns:
            The user object, or None when the token is rejected

        Raises:
            requests.RequestException: If the identity provider is unreachable
                or answers with a server error
        """
        response = requests.get(
            f"{self.supabase_url}/auth/v1/user",
            headers={
                "apikey": self.anon_key,
                "Authorization": f"Bearer {token}",
            },
            timeout=self.timeout,
        )
        if response.status_code in (400, 401, 403, 404):
            logger.warning(f"Auth error: token rejected ({response.status_code})")
            return None
        response.raise_for_status()

        user = response.json()
        return user if isinstance(user, dict) and user.get("id") else None


def bearer_token_required(f):
    """
    Decorator to require a valid ``Authorization: Bearer <token>`` header.
    Passes through when no IdentityVerifier is registered (auth disabled).
    """
    @wraps(f)
    def decorated_function(*args, **kwargs):
        verifier = current_app.extensions.get("identity_verifier")
        if verifier is None:
            return f(*args, **kwargs)

        auth_header = request.headers.get("Authorization")
        if not auth_header:
            return jsonify({"error": "No authorization header."}), 401

        parts = auth_header.split(" ")
        token = parts[1].strip() if len(parts) > 1 else ""
        if not token:
            return jsonify({"error": "Malformed authorization header."}), 401

        try:
            user = verifier.verify(token)
        except requests.RequestException as e:
            logger.error(f"❌ Critical auth error: {e}")
            return jsonify({"error": "Internal authentication error."}), 500

        if not user:
            return jsonify({"error": "Invalid token."}), 401

        g.user = user
        return f(*args, **kwargs)
    return decorated_function
