#!/usr/bin/env python3
"""
Entry point for the ranking service.

Usage:
    python run.py

Environment Variables:
    FLASK_ENV: development, production or testing (default: development)
    PORT: Port to run on (default: 5000)
    RANKED_GAMES: Games served, as name:owner_address pairs (e.g. chess:0x1,go:0x2)
    LOG_LEVEL: Logging level (default: INFO)
"""
import logging
import os


def run_service():
    """Run the ranking service."""
    from ranked.app import create_app

    app = create_app()

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s'
    )

    port = int(os.getenv('PORT', 5000))
    debug = os.getenv('FLASK_ENV', 'development') == 'development'

    logging.getLogger(__name__).info(f"Starting ranking service on port {port} for games: {', '.join(app.games) or 'none'}")
    app.run(host='0.0.0.0', port=port, debug=debug)


if __name__ == '__main__':
    run_service()
