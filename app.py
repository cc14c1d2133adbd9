import os, time
from flask import Flask, request, jsonify

from montprime.errors import CapacityExceeded
from montprime.bigint import parse_hex
from montprime.primality import MR_ROUNDS
from prime_api import prime_bp
from prime_worker import check_prime_job

MAX_CHECK_LIMBS = int(os.getenv("PRIME_MAX_CHECK_LIMBS", "128"))
MAX_CHECK_ROUNDS = 64

app = Flask(__name__)
app.register_blueprint(prime_bp)

def _error(msg: str, code: int = 400):
    d = jsonify({"status": "error", "error": msg}); d.status_code = code
    return d

@app.post("/api/is_prime")
def is_prime_endpoint():
    t0 = time.time()
    data = request.get_json(force=True, silent=True) or {}
    try:
        n = parse_hex(str(data.get("n") or ""))
    except (ValueError, CapacityExceeded):
        return _error("n must be a hex string (no 0x prefix)")
    try:
        rounds = int(data.get("rounds", MR_ROUNDS))
        seed = data.get("seed")
        seed = int(seed) if seed is not None else None
    except (TypeError, ValueError):
        return _error("rounds and seed must be integers")
    if len(n) > MAX_CHECK_LIMBS:
        return _error(f"Max {MAX_CHECK_LIMBS * 16} bits for synchronous checks.")
    if not 1 <= rounds <= MAX_CHECK_ROUNDS:
        return _error(f"rounds must be in 1..{MAX_CHECK_ROUNDS}")

    res = check_prime_job(n, rounds=rounds, seed=seed)
    d = jsonify({"status": "ok", **res})
    d.headers["X-Compute-ms"] = str(int((time.time()-t0)*1000))
    return d

if __name__ == "__main__":
    app.run("127.0.0.1", 8082, debug=True)
