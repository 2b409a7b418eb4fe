"""
Travel Companion server.

Entrypoint: python app.py
"""

import logging
from typing import Optional

from flask import Flask, jsonify
from flask_cors import CORS
from werkzeug.middleware.proxy_fix import ProxyFix

from backend.middlewares import IdentityVerifier, SlidingWindowRateLimiter
from backend.routes import chat_bp, estimate_bp, init_chatbot
from config import Config
from travel_companion.streaming import BackgroundEventLoop, ResponseStreamer

logger = logging.getLogger(__name__)


def create_app(
    config: Optional[Config] = None,
    streamer: Optional[ResponseStreamer] = None,
    identity_verifier: Optional[IdentityVerifier] = None,
) -> Flask:
    """
    Create and configure the Flask application.

    Args:
        config: Application configuration (read from the environment if omitted)
        streamer: Pre-built ResponseStreamer; built from ``config`` if omitted
        identity_verifier: Token verifier; built from ``config`` if omitted
            and auth is active

    Returns:
        Configured Flask app

    Raises:
        ValueError: If the chatbot is enabled and required configuration is missing
    """
    config = config or Config.from_env()

    app = Flask(__name__)
    app.config["DEBUG"] = config.debug
    app.config["TRAVEL_COMPANION"] = config

    CORS(app, origins=config.allowed_origins)

    if config.trusted_proxy_count > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=config.trusted_proxy_count)

    app.extensions["rate_limiter"] = SlidingWindowRateLimiter(
        max_requests=config.rate_limit_max_requests,
        window_seconds=config.rate_limit_window_seconds,
    )

    if identity_verifier is None and config.auth_active:
        identity_verifier = IdentityVerifier(config.supabase_url, config.supabase_anon_key)
    if identity_verifier is not None:
        app.extensions["identity_verifier"] = identity_verifier
    else:
        logger.warning("⚠️ Bearer auth is disabled")

    if streamer is None and config.chatbot_enabled:
        from travel_companion.rag.rag_engine import initialize_rag_system

        streamer = initialize_rag_system(config)

    if streamer is not None:
        init_chatbot(app, streamer, BackgroundEventLoop())
    else:
        logger.warning("⚠️ Chatbot disabled. Chat routes will answer 503.")

    app.register_blueprint(chat_bp)
    app.register_blueprint(estimate_bp)

    @app.route('/')
    def home():
        return jsonify({"message": "Travel Companion server is running"}), 200

    return app


def main():
    config = Config.from_env()
    logging.basicConfig(level=config.log_level, format=Config.LOG_FORMAT)

    logger.info("⚙️  Travel Companion configuration:")
    for line in config.describe():
        logger.info(f"   {line}")

    try:
        app = create_app(config)
    except Exception:
        logger.exception("🔥 FAILED TO INITIALIZE SERVER 🔥")
        raise SystemExit(1)

    logger.info(f"✅ Travel Companion running at http://localhost:{config.port}")
    app.run(host="0.0.0.0", port=config.port, debug=config.debug, threaded=True)


if __name__ == "__main__":
    main()
