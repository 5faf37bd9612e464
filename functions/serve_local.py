#!/usr/bin/env python3
"""Local development server for the home assessment functions.

This server mimics the Firebase Functions emulator endpoints so the intake
wizard can be pointed at a local Python process.

Usage:
    cd functions
    source venv/bin/activate
    python serve_local.py

This will start a Flask server on port 5002 that handles:
- POST /homease-dev/us-central1/assess -> assess function
- POST /homease-dev/us-central1/assessment_report -> assessment_report function
- POST /homease-dev/us-central1/complete_assessment -> complete_assessment function

GET on any of them returns the endpoint documentation.
"""

import os

# Set environment for local development
os.environ.setdefault('FUNCTIONS_EMULATOR', 'true')
os.environ.setdefault('GCLOUD_PROJECT', 'homease-dev')

from flask import Flask, request, jsonify
from flask_cors import CORS

from config.settings import settings
from utils.pipeline_logger import configure_logging

# Import the main module after setting env vars
from main import (
    assess,
    assessment_report,
    complete_assessment,
)

configure_logging(settings.log_level)

app = Flask(__name__)
CORS(app)

PROJECT_PREFIX = f"/{os.environ['GCLOUD_PROJECT']}/us-central1"


class MockRequest:
    """Mock Firebase request object to wrap Flask request."""

    def __init__(self, flask_request):
        self._request = flask_request
        self._json_data = None
        self.method = flask_request.method
        self.headers = dict(flask_request.headers)

    def get_json(self, force=False):
        if self._json_data is None:
            self._json_data = self._request.get_json(force=force) or {}
        return self._json_data


def wrap_firebase_function(firebase_fn):
    """Wrap a Firebase function to work with Flask."""
    def wrapper():
        mock_req = MockRequest(request)
        response = firebase_fn(mock_req)
        # get_data() covers both JSON and binary (PDF) bodies
        return response.get_data(), response.status_code, dict(response.headers)
    return wrapper


@app.route(f'{PROJECT_PREFIX}/assess', methods=['GET', 'POST', 'OPTIONS'])
def handle_assess():
    return wrap_firebase_function(assess)()

@app.route(f'{PROJECT_PREFIX}/assessment_report', methods=['GET', 'POST', 'OPTIONS'])
def handle_assessment_report():
    return wrap_firebase_function(assessment_report)()

@app.route(f'{PROJECT_PREFIX}/complete_assessment', methods=['GET', 'POST', 'OPTIONS'])
def handle_complete_assessment():
    return wrap_firebase_function(complete_assessment)()


# Health check
@app.route('/health', methods=['GET'])
def health():
    return jsonify({'status': 'ok', 'service': 'homease-assessment-functions'})


if __name__ == '__main__':
    port = int(os.environ.get('PORT', 5002))
    print(f"""
╔════════════════════════════════════════════════════════════════╗
║  Home Assessment Functions - Local Development Server          ║
╠════════════════════════════════════════════════════════════════╣
║                                                                ║
║  Server running on: http://127.0.0.1:{port}                     ║
║                                                                ║
║  Endpoints:                                                    ║
║  • POST {PROJECT_PREFIX}/assess                   ║
║  • POST {PROJECT_PREFIX}/assessment_report        ║
║  • POST {PROJECT_PREFIX}/complete_assessment      ║
║  • GET  /health                                                ║
║                                                                ║
║  Requires OPENAI_API_KEY in the environment or functions/.env  ║
║                                                                ║
╚════════════════════════════════════════════════════════════════╝
""")
    app.run(host='127.0.0.1', port=port, debug=True, threaded=True)
