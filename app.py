#!/usr/bin/env python3
"""Flask web app for Résumé Triage: sessions, uploads, job polling, results and rankings."""

import os

import jsonschema
from flask import Flask, jsonify, request
from dotenv import load_dotenv

from screening.errors import RecordNotFound
from resume_triage.audit import audit_log, setup_app_logging
from resume_triage.runtime import ScreeningRuntime, build_context
from resume_triage.service import (
    MAX_DOCUMENT_BYTES,
    UnsupportedDocument,
    create_session,
    job_statuses,
    resume_result,
    session_rankings,
    submit_documents,
)

load_dotenv()

log = setup_app_logging()


def create_app(runtime: ScreeningRuntime | None = None) -> Flask:
    """Build the Flask app around a started screening runtime."""
    runtime = runtime or ScreeningRuntime(build_context())
    runtime.start()

    app = Flask(__name__)
    app.config["MAX_CONTENT_LENGTH"] = 10 * MAX_DOCUMENT_BYTES
    app.extensions["screening_runtime"] = runtime
    store = runtime.context.store

    @app.route("/api/sessions", methods=["POST"])
    def api_create_session():
        """Create a screening session from job requirements."""
        data = request.get_json(silent=True) or {}
        try:
            session = runtime.call(create_session(store, data))
        except jsonschema.ValidationError as e:
            return jsonify({"error": f"Invalid job requirements: {e.message}"}), 400
        except Exception as e:
            audit_log(action="create_session", status="error", error=str(e))
            log.exception("Session creation failed")
            return jsonify({"error": str(e)}), 500
        return jsonify(session), 201

    @app.route("/api/sessions/<session_id>/resumes", methods=["POST"])
    def api_submit_resumes(session_id):
        """Upload one or more résumés (multipart field `resumes`); returns job ids."""
        files = request.files.getlist("resumes")
        if not files or not any(f.filename for f in files):
            return jsonify({"error": "No file uploaded"}), 400

        uploads = [(f.filename, f.mimetype, f.read()) for f in files if f.filename]
        try:
            submitted = runtime.call(submit_documents(runtime.context, runtime.queue, session_id, uploads))
        except UnsupportedDocument as e:
            return jsonify({"error": str(e)}), 400
        except RecordNotFound as e:
            return jsonify({"error": str(e)}), 404
        except Exception as e:
            audit_log(action="submit_documents", status="error", session_id=session_id, error=str(e))
            log.exception("Resume submission failed")
            return jsonify({"error": str(e)}), 500
        return jsonify({"jobs": submitted}), 202

    @app.route("/api/jobs", methods=["GET"])
    def api_job_statuses():
        """Poll job statuses: /api/jobs?ids=a,b,c"""
        raw = request.args.get("ids", "")
        job_ids = [j.strip() for j in raw.split(",") if j.strip()]
        if not job_ids:
            return jsonify({"error": "ids query parameter is required"}), 400
        return jsonify(job_statuses(runtime.queue, job_ids))

    @app.route("/api/resumes/<resume_id>", methods=["GET"])
    def api_resume_result(resume_id):
        try:
            return jsonify(runtime.call(resume_result(store, resume_id)))
        except RecordNotFound as e:
            return jsonify({"error": str(e)}), 404

    @app.route("/api/sessions/<session_id>/rankings", methods=["GET"])
    def api_rankings(session_id):
        try:
            return jsonify(runtime.call(session_rankings(store, session_id)))
        except RecordNotFound as e:
            return jsonify({"error": str(e)}), 404
        except Exception as e:
            log.exception("Rankings retrieval failed")
            return jsonify({"error": str(e)}), 500

    return app


if __name__ == "__main__":
    provider = os.getenv("LLM_PROVIDER", "groq")
    log.info(
        "Résumé Triage starting on http://127.0.0.1:5000 | LLM_PROVIDER: %s | Logs: logs/app.log | Audit: logs/audit.log",
        provider,
    )
    create_app().run(port=5000, use_reloader=False)
