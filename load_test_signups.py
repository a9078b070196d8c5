"""
Load test for Climb Club sign-ups.
Simulates a crowd of new members creating profiles and signing up for one
session at the same time. Some of them double-click, which shows up as
duplicate signups on the roster (nothing server-side prevents that).

    python load_test_signups.py <session_id>
"""

import asyncio
import random
import sys
import time
import aiohttp

# -----------------------------
# CONFIG: ADJUST IF NEEDED
# -----------------------------
BASE_URL = "http://127.0.0.1:5000"

# Simulated members (each gets its own cookie jar = its own anonymous user)
TOTAL_MEMBERS = 200

# How many run simultaneously
MAX_CONCURRENT = 50

# Chance a member fires the sign-up twice before the button disables
DOUBLE_SUBMIT_RATE = 0.1


# -----------------------------
# Load test functions
# -----------------------------
async def post(session, path, data=None):
    try:
        async with session.post(f"{BASE_URL}{path}", data=data or {}, allow_redirects=False) as resp:
            text = await resp.text()
            if resp.status >= 400:
                print(f"[ERROR {resp.status}] {path} :: {text[:200]}")
            return resp.status
    except Exception as e:
        print(f"[EXCEPTION] {e} :: {path}")
        return None


async def simulate_member(n, session_id):
    async with aiohttp.ClientSession() as session:
        # First visit signs the browser in anonymously
        async with session.get(f"{BASE_URL}/") as resp:
            await resp.text()

        profile = {
            "name": f"Load Climber {n}",
            "emplid": f"{10000000 + n}",
            "phone": "(555) 123-4567",
            "email": f"climber{n}@example.com",
            "citymail": f"climber{n}@citymail.cuny.edu",
            "address": "123 Main St, New York, NY 10001",
            "emergency_contact": "Jane Climber - (555) 123-4567",
            "waiver_checked": "on",
        }
        await post(session, "/profile", profile)

        path = f"/sessions/{session_id}/signup"
        if random.random() < DOUBLE_SUBMIT_RATE:
            statuses = await asyncio.gather(post(session, path), post(session, path))
            return list(statuses)
        return [await post(session, path)]


async def worker(name, task_queue, session_id, results):
    while True:
        item = await task_queue.get()
        if item is None:
            task_queue.task_done()
            break

        results.extend(await simulate_member(item, session_id))
        task_queue.task_done()


async def main(session_id):
    task_queue = asyncio.Queue()
    results = []

    for n in range(TOTAL_MEMBERS):
        await task_queue.put(n)

    # Add sentinel None tasks to close workers
    for _ in range(MAX_CONCURRENT):
        await task_queue.put(None)

    workers = [
        asyncio.create_task(worker(f"worker-{i}", task_queue, session_id, results))
        for i in range(MAX_CONCURRENT)
    ]

    print(f"Simulating {TOTAL_MEMBERS} members with concurrency {MAX_CONCURRENT}...")
    start = time.time()

    await task_queue.join()
    end = time.time()

    for w in workers:
        await w

    ok = sum(1 for s in results if s in (200, 302))
    print(f"Completed in {end - start:.2f} seconds")
    print(f"{ok}/{len(results)} sign-up requests succeeded (expect roster >= {TOTAL_MEMBERS} rows)")


if __name__ == "__main__":
    if len(sys.argv) != 2:
        print(__doc__, file=sys.stderr)
        sys.exit(2)
    asyncio.run(main(sys.argv[1]))
