from flask import Flask, request, jsonify
from flask_cors import CORS

from .compiler import compile_source

app = Flask(__name__)
app.config.update(
    MAX_CONTENT_LENGTH=256 * 1024,  # bytes of request body
    CORS_ORIGINS="*",
)
app.config.from_prefixed_env("MINITAC")
CORS(app)  # allow cross-origin requests from the editor front end


def empty_response(errors):
    return {
        "tokens": [],
        "lexicalErrors": [],
        "ast": None,
        "parseErrors": [],
        "symbolTable": None,
        "semanticErrors": [],
        "instructions": [],
        "errors": errors,
    }


@app.errorhandler(413)
def too_large(e):
    limit = app.config["MAX_CONTENT_LENGTH"]
    return jsonify(empty_response([f"Request body exceeds {limit} bytes"])), 413


@app.route("/health", methods=["GET"])
def health():
    return jsonify({"status": "ok"})


@app.route("/compile", methods=["POST"])
def compile_code():
    data = request.get_json(silent=True)
    code = data.get("code") if isinstance(data, dict) else None
    if not isinstance(code, str):
        return jsonify(empty_response(["Request body must be JSON with a string 'code' field"])), 400
    try:
        result = compile_source(code)
        response = result.to_dict()
        response["errors"] = [str(e) for e in result.errors]
        return jsonify(response)
    except Exception as e:
        app.logger.exception("compilation crashed")
        return jsonify(empty_response([f"Unexpected error: {str(e)}"])), 500


if __name__ == "__main__":
    app.run(debug=app.config.get("DEBUG", False))
