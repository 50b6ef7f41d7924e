"""
Flask application factory and portal entry-point.
"""

import argparse
import os
import secrets
from datetime import timedelta

from flask import Flask
from flask_cors import CORS

from oralvis.api.client import PortalClient
from oralvis.config import (
    API_BASE_URL,
    MAX_UPLOAD_BYTES,
    PORTAL_HOST,
    PORTAL_PORT,
    portal_secret_key,
)
from oralvis.web.routes import register_routes


def create_app(client_factory=None, secret_key=None):
    """Build and return a configured portal. *client_factory* yields a PortalClient per request."""
    app = Flask(__name__)
    app.secret_key = secret_key or portal_secret_key()
    app.permanent_session_lifetime = timedelta(days=7)
    # Leave room for the form fields around a maximum-size image.
    app.config["MAX_CONTENT_LENGTH"] = MAX_UPLOAD_BYTES + 1024 * 1024
    CORS(app, supports_credentials=True)

    register_routes(app, client_factory or PortalClient)
    return app


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="OralVis scan portal")
    parser.add_argument("--host", default=PORTAL_HOST)
    parser.add_argument("--port", type=int, default=PORTAL_PORT)
    parser.add_argument("--new-secret", action="store_true",
                        help="print a fresh PORTAL_SECRET_KEY line for .env and exit")
    return parser.parse_args(argv)


def main(argv=None):
    """Run the development server."""
    args = parse_args(argv)
    if args.new_secret:
        print(f"PORTAL_SECRET_KEY={secrets.token_hex(32)}")
        return

    print("=" * 60)
    print("OralVis Scan Portal")
    print("=" * 60)

    app = create_app()
    debug = os.getenv("FLASK_ENV") == "development"

    print(f"\n[server] Starting portal on {args.host}:{args.port}")
    print(f"[server] Backend API: {API_BASE_URL}")
    print(f"[server] Debug mode: {debug}")
    print("\nRoutes:")
    print("  - GET/POST /login      POST /logout")
    print("  - GET      /dashboard")
    print("  - GET/POST /upload     (technician)")
    print("  - GET      /scans      /scans/<id>  /scans/<id>/pdf  (dentist)")
    print("\n" + "=" * 60)

    app.run(host=args.host, port=args.port, debug=debug)


if __name__ == "__main__":
    main()
