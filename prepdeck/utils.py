import time
import uuid


def now_ms() -> int:
    return int(time.time() * 1000)


def create_id() -> str:
    return str(uuid.uuid4())
