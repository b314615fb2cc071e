from flask import Flask, request, jsonify
from flask_cors import CORS
from cci_engine import CciProcessor
from cci_engine.errors import CciEngineError
import os
import logging

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)

app = Flask(__name__)

# Enable CORS for all routes (the ERP front end calls the API from another origin)
CORS(app)

# Initialize the processor
processor = CciProcessor()


@app.route("/api", methods=["GET"])
def api_info():
    """API information endpoint"""
    return jsonify({
        "status": "ok",
        "message": "CCI Financial Rules Engine API",
        "version": "1.0",
        "endpoints": {
            "calculate": "/calculate [POST]",
            "resolve_setting": "/resolve_setting [POST]",
            "health": "/health [GET]"
        }
    }), 200


@app.route("/health", methods=["GET"])
def health():
    """Health check for monitoring"""
    return jsonify({"status": "healthy"}), 200


@app.route("/calculate", methods=["POST"])
def calculate():
    """
    Run a contract snapshot through the CCI rules engine
    """
    return _handle(processor.process_from_dict, "calculation")


@app.route("/resolve_setting", methods=["POST"])
def resolve_setting():
    """
    Resolve the CCI setting version active on a date
    """
    return _handle(processor.resolve_from_dict, "setting resolution")


def _handle(operation, label):
    try:
        input_data = request.get_json(silent=True)

        if not input_data:
            return jsonify({
                "error": "No input data provided",
                "status": "failed"
            }), 400

        contract_date = input_data.get("contract", {}).get("contract_date", input_data.get("on_date", "Unknown"))
        logger.info(f"Processing {label} for date: {contract_date}")

        result = operation(input_data)

        logger.info(f"{label.capitalize()} completed for date: {contract_date}")

        return jsonify(result), 200

    except CciEngineError as e:
        # Named domain failures from the engine
        logger.error(f"Validation error ({e.code}): {str(e)}")
        return jsonify({
            "error": str(e),
            "code": e.code,
            "status": "validation_failed"
        }), 400

    except (ValueError, KeyError, TypeError) as e:
        # Missing fields, invalid types, unit mismatches
        logger.error(f"Validation error: {str(e)}")
        return jsonify({
            "error": str(e),
            "status": "validation_failed"
        }), 400

    except Exception as e:
        # Unexpected errors
        logger.error(f"Processing error: {str(e)}", exc_info=True)
        return jsonify({
            "error": "An unexpected error occurred during processing",
            "status": "failed"
        }), 500


if __name__ == "__main__":
    port = int(os.environ.get("PORT", 8080))
    app.run(host="0.0.0.0", port=port, debug=False)
