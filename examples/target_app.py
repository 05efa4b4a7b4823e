"""Tiny Flask store API to point `clientcheck run` at during local practice.

Accepts the API key from examples/acme_client.yaml and serves the same
products that file lists under test_data.
"""

from flask import Flask, request, jsonify

app = Flask(__name__)

API_KEY = "demo-key-123"

PRODUCTS = {
    1: {"id": 1, "name": "Wireless Mouse", "price": 24.99},
    2: {"id": 2, "name": "USB-C Hub", "price": 39.50},
}

def authorized():
    return request.headers.get("X-API-Key") == API_KEY

@app.route("/", methods=["GET"])
def health():
    if not authorized():
        return jsonify(error="missing or invalid API key"), 401
    return jsonify(status="ok")

@app.route("/products", methods=["GET"])
def list_products():
    if not authorized():
        return jsonify(error="missing or invalid API key"), 401
    return jsonify(list(PRODUCTS.values()))

@app.route("/products/<int:product_id>", methods=["GET"])
def get_product(product_id):
    if not authorized():
        return jsonify(error="missing or invalid API key"), 401
    product = PRODUCTS.get(product_id)
    if product is None:
        return jsonify(error="not found"), 404
    return jsonify(product)

if __name__ == "__main__":
    app.run(host="127.0.0.1", port=5000, debug=True)
