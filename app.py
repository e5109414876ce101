import logging
from flask import Flask, request, jsonify
from flask_cors import CORS

from receipt_log.config import load_settings, parse_flag, parse_sort_order
from receipt_log.reporter import ConvertOptions, ReceiptReporter

settings = load_settings()

# Configure logging
logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)


def read_conversion_request():
    """Pull the log text and report options out of the request.

    Accepts either a JSON body {"log": ..., "remove_duplicates": ...,
    "sort_by": ...} or the raw log as a text body.
    """
    data = request.get_json(silent=True)
    if data is None:
        log_text = request.get_data(as_text=True)
        data = {}
    else:
        log_text = data.get('log', '')

    if not isinstance(log_text, str) or not log_text.strip():
        raise ValueError("Missing 'log' field in request body")

    options = ConvertOptions(
        remove_duplicates=parse_flag(data.get('remove_duplicates', settings.remove_duplicates)),
        sort_by=parse_sort_order(str(data.get('sort_by', settings.sort_by.value))),
    )
    return log_text, options


@app.route('/convert-logs', methods=['POST'])
def convert_logs():
    """API endpoint to convert an app log into a CSV receipt report."""
    try:
        log_text, options = read_conversion_request()
    except ValueError as e:
        return jsonify({
            "is_success": False,
            "error": str(e)
        }), 400

    try:
        result = ReceiptReporter().convert_log_lines(log_text.splitlines(), options)
    except Exception as e:
        logger.exception("Failed to convert log")
        return jsonify({
            "is_success": False,
            "error": str(e)
        }), 500

    response = {
        "is_success": True,
        "data": {
            "csv": result.csv,
            **result.summary.to_dict(),
            "failed_records": [
                {"line_number": f.line_number, "reason": f.reason}
                for f in result.failures
            ]
        }
    }
    return jsonify(response), 200


@app.route('/health', methods=['GET'])
def health_check():
    """Health check endpoint."""
    return jsonify({"status": "healthy"}), 200


if __name__ == '__main__':
    app.run(host='0.0.0.0', port=settings.port, debug=settings.debug)
