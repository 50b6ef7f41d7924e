"""
Flask route handlers for the portal.
"""

from datetime import datetime
from io import BytesIO

from flask import g, jsonify, redirect, request, send_file

from oralvis.config import LANDING_ROUTE, LOGIN_ROUTE, MAX_UPLOAD_BYTES, SCAN_REGIONS
from oralvis.errors import DraftInvalid, MissingFile, UploadError
from oralvis.gate import nav_items
from oralvis.models import ScanFile
from oralvis.scans import PDF_FAILED, ScanFeed, pdf_filename
from oralvis.upload import UploadPipeline
from oralvis.views import dashboard_view, scan_list_view, user_payload
from oralvis.web.auth import gated, load_portal_session


def register_routes(app, client_factory):
    """Register all portal routes on the Flask *app*."""

    @app.before_request
    def open_session():
        load_portal_session(client_factory)

    def load_feed(notices):
        feed = ScanFeed(g.portal_session.client, notify=notices.append)
        feed.refresh()
        return feed

    # ── Health ───────────────────────────────────────────────────────

    @app.route("/health", methods=["GET"])
    def health():
        return jsonify({"status": "healthy"}), 200

    # ── Auth ─────────────────────────────────────────────────────────

    @app.route("/login", methods=["GET", "POST"])
    @gated
    def login():
        if request.method == "GET":
            return jsonify({"authenticated": False, "fields": ["email", "password"]}), 200

        data = request.get_json(silent=True)
        if not isinstance(data, dict):
            data = request.form
        email = str(data.get("email") or "").strip()
        password = str(data.get("password") or "")
        if not email or not password:
            return jsonify({"success": False, "message": "Email and password are required"}), 400

        result = g.portal_session.login(email, password)
        if not result.success:
            return jsonify({"success": False, "message": result.message}), 401

        return jsonify({
            "success": True,
            "user": user_payload(g.portal_session),
            "redirect": LANDING_ROUTE,
        }), 200

    @app.route("/logout", methods=["POST"])
    def logout():
        g.portal_session.logout()
        return redirect(LOGIN_ROUTE)

    # ── Screens ──────────────────────────────────────────────────────

    @app.route("/", methods=["GET"])
    @gated
    def index():
        return redirect(LANDING_ROUTE)

    @app.route("/dashboard", methods=["GET"])
    @gated
    def dashboard():
        notices = []
        feed = load_feed(notices)
        now = datetime.now().astimezone()
        payload = dashboard_view(g.portal_session, feed.aggregator.view(now), now, request.path)
        payload["notices"] = notices
        return jsonify(payload), 200

    @app.route("/upload", methods=["GET", "POST"])
    @gated
    def upload():
        if request.method == "GET":
            return jsonify({
                "regions": list(SCAN_REGIONS),
                "maxFileBytes": MAX_UPLOAD_BYTES,
                "navigation": nav_items(g.portal_session, request.path),
            }), 200

        pipeline = UploadPipeline(g.portal_session.client)
        upload_file = request.files.get("scanImage")
        if upload_file is not None and upload_file.filename:
            scan_file = ScanFile(
                filename=upload_file.filename,
                content_type=upload_file.mimetype or "",
                data=upload_file.read(),
            )
            try:
                pipeline.select_file(scan_file)
            except UploadError as e:
                return jsonify({"success": False, "errors": {"scanImage": str(e)}}), 400

        form = request.form
        try:
            result = pipeline.submit(
                form.get("patientName", ""),
                form.get("patientId", ""),
                form.get("scanType", ""),
                form.get("region", ""),
            )
        except MissingFile as e:
            return jsonify({"success": False, "errors": {"scanImage": str(e)}}), 400
        except DraftInvalid as e:
            return jsonify({"success": False, "errors": e.as_dict()}), 400

        if not result.success:
            return jsonify({"success": False, "message": result.message}), 502
        return jsonify({
            "success": True,
            "message": result.message,
            "scan": result.scan,
            "redirect": LANDING_ROUTE,
        }), 201

    @app.route("/scans", methods=["GET"])
    @gated
    def scans():
        notices = []
        feed = load_feed(notices)
        payload = scan_list_view(
            feed.aggregator.records,
            request.args.get("search", ""),
            request.args.get("region", ""),
        )
        payload["notices"] = notices
        return jsonify(payload), 200

    @app.route("/scans/<scan_id>", methods=["GET"])
    @gated
    def scan_detail(scan_id):
        notices = []
        scan = load_feed(notices).aggregator.find(scan_id)
        if scan is None:
            return jsonify({"error": "Scan not found", "notices": notices}), 404
        return jsonify({"scan": scan.to_dict()}), 200

    @app.route("/scans/<scan_id>/pdf", methods=["GET"])
    @gated
    def scan_pdf(scan_id):
        notices = []
        feed = ScanFeed(g.portal_session.client, notify=notices.append)
        content = feed.fetch_pdf(scan_id)
        if content is None:
            return jsonify({"success": False, "message": PDF_FAILED}), 502
        return send_file(
            BytesIO(content),
            mimetype="application/pdf",
            as_attachment=True,
            download_name=pdf_filename(scan_id),
        )

    @app.route("/<path:unknown>", methods=["GET", "POST", "PUT", "PATCH", "DELETE"])
    @gated
    def unknown_path(unknown):
        return redirect(LANDING_ROUTE)

    # ── Error handlers ───────────────────────────────────────────────

    @app.errorhandler(404)
    def not_found(e):
        return jsonify({"error": "Endpoint not found", "message": str(e)}), 404

    @app.errorhandler(405)
    def method_not_allowed(e):
        return jsonify({"error": "Method not allowed", "message": str(e)}), 405

    @app.errorhandler(413)
    def too_large(e):
        return jsonify({"success": False, "errors": {"scanImage": "File size must be less than 10MB"}}), 413

    @app.errorhandler(500)
    def internal_error(e):
        return jsonify({"error": "Internal server error", "message": str(e)}), 500
