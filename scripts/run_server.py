import os
import subprocess
import sys
import time

MAX_CRASHES = 20

host = os.getenv("HOST", "0.0.0.0")
port = os.getenv("PORT", "4000")
fail_count = 0
while True:
    try:
        result = subprocess.run(["uvicorn", "backend.main:app", "--host", host, "--port", port, "--proxy-headers"])
    except KeyboardInterrupt:
        sys.exit(0)
    if result.returncode == 0:
        break
    fail_count += 1
    if fail_count >= MAX_CRASHES:
        raise RuntimeError(f"Server crashed {MAX_CRASHES} times in a row, aborting.")
    print(f"[runner] server exited with code={result.returncode}, restarting...")
    time.sleep(1)
