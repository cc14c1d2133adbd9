import os, time
from datetime import datetime
from flask import Blueprint, request, jsonify
from redis import Redis
from redis.exceptions import RedisError
from rq import Queue
from rq.command import send_stop_job_command
from rq.exceptions import InvalidJobOperation, NoSuchJobError
from rq.job import Job

from montprime.pipeline import DEFAULT_LIMBS
from montprime.primality import MR_ROUNDS

prime_bp = Blueprint("prime_bp", __name__)

# Redis / RQ
redis_url = os.getenv("REDIS_URL", "redis://localhost:6379/0")
redis_conn = Redis.from_url(redis_url)
prime_q = Queue("primes", connection=redis_conn, default_timeout=60*60*2)  # 2h

MAX_JOB_LIMBS = int(os.getenv("PRIME_MAX_JOB_LIMBS", "128"))
MAX_JOB_ROUNDS = int(os.getenv("PRIME_MAX_JOB_ROUNDS", "64"))
QUEUE_PREVIEW = 10

# ------------------ helpers ------------------
def _fetch(job_id: str) -> Job | None:
    try:
        return Job.fetch(job_id, connection=redis_conn)
    except NoSuchJobError:
        return None

def _waited(job: Job) -> float | None:
    enq: datetime | None = job.enqueued_at
    return max(0.0, time.time() - enq.timestamp()) if enq else None

def _job_view(job: Job) -> dict:
    meta = job.meta or {}
    view = {
        "job_id": job.id,
        "status": job.get_status(),
        "limbs": meta.get("limbs"),
        "rounds": meta.get("rounds"),
        "age_sec": _waited(job),
    }
    if job.is_finished:
        # generate_prime_job already returns a JSON-safe dict
        view["result"] = job.return_value()
    elif job.is_failed:
        lines = (job.exc_info or "").strip().splitlines()
        view["error"] = lines[-1] if lines else ""
    return view

def _client_ip() -> str:
    xff = request.headers.get("X-Forwarded-For", "")
    return xff.split(",")[0].strip() if xff else request.remote_addr

def ip_can_start(ip: str) -> bool:
    """One queued or running prime search per client IP."""
    for jid in list(prime_q.started_job_registry.get_job_ids()) + list(prime_q.get_job_ids()):
        job = _fetch(jid)
        if job is not None and (job.meta or {}).get("ip") == ip:
            return False
    return True

# ------------------ API ------------------
@prime_bp.get("/api/health")
def health():
    try:
        redis_ok = bool(redis_conn.ping())
        backlog = prime_q.count
    except RedisError as e:
        return jsonify({"ok": False, "redis": e.__class__.__name__, "time": int(time.time())}), 503
    return jsonify({"ok": redis_ok, "redis": "ok", "queue": {"name": prime_q.name, "size": backlog},
                    "time": int(time.time())})

@prime_bp.get("/api/queue")
def queue_info():
    ids = prime_q.get_job_ids()
    preview = []
    for jid in ids[:QUEUE_PREVIEW]:
        job = _fetch(jid)
        if job is not None:
            preview.append({"job_id": jid, "limbs": (job.meta or {}).get("limbs"), "age_sec": _waited(job)})
    return jsonify({"queue": prime_q.name, "size": len(ids), "head": preview})

@prime_bp.post("/api/prime/submit")
def prime_submit():
    data = request.get_json(silent=True) or {}
    try:
        limbs = int(data.get("limbs", DEFAULT_LIMBS))
        rounds = int(data.get("rounds", MR_ROUNDS))
        seed = data.get("seed")
        seed = int(seed) if seed is not None else None
    except (TypeError, ValueError):
        return jsonify({"error": "limbs, rounds and seed must be integers."}), 400
    if not 1 <= limbs <= MAX_JOB_LIMBS:
        return jsonify({"error": f"limbs must be in 1..{MAX_JOB_LIMBS} (16 bits each)."}), 400
    if not 1 <= rounds <= MAX_JOB_ROUNDS:
        return jsonify({"error": f"rounds must be in 1..{MAX_JOB_ROUNDS}."}), 400

    ip = _client_ip()
    if not ip_can_start(ip):
        return jsonify({"error": "One active prime search per IP. Wait for it or abort it."}), 429

    job = prime_q.enqueue("prime_worker.generate_prime_job", limbs, rounds, seed,
                          meta={"limbs": limbs, "rounds": rounds, "ip": ip, "submitted": time.time()})
    waiting = prime_q.get_job_ids()
    position = waiting.index(job.id) + 1 if job.id in waiting else 1
    body = {"job_id": job.id, "status": job.get_status(), "bits": limbs * 16, "queue_position": position}
    if limbs >= 96:
        body["note"] = "Searches of 96 limbs or more can take many minutes."
    return jsonify(body)

@prime_bp.get("/api/job/<job_id>")
def job_status(job_id):
    job = _fetch(job_id)
    if job is None:
        return jsonify({"error": "unknown job"}), 404
    return jsonify(_job_view(job))

@prime_bp.post("/api/job/<job_id>/abort")
def job_abort(job_id):
    job = _fetch(job_id)
    if job is None:
        return jsonify({"error": "unknown job"}), 404
    was = job.get_status()
    try:
        if was == "started":
            send_stop_job_command(redis_conn, job_id)
        else:
            job.cancel()
    except (InvalidJobOperation, RedisError) as e:
        return jsonify({"error": f"abort failed: {e.__class__.__name__}"}), 400
    return jsonify({"ok": True, "job_id": job_id, "was": was, "status": job.get_status()})
